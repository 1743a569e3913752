import sys
from pathlib import Path
from typing import Dict, Set, TextIO, Union

from .errors import InputFormatError
from .model import AllocationState


def serialize_placement(state: AllocationState) -> str:
    lines = [str(len(state.cached_videos))]
    for cache_id, videos in enumerate(state.cached_videos):
        lines.append(" ".join([str(cache_id)] + [str(v) for v in sorted(videos)]))
    return "\n".join(lines) + "\n"


def write_placement(state: AllocationState, dest: Union[str, Path, TextIO, None] = None):
    text = serialize_placement(state)
    if dest is None:
        sys.stdout.write(text)
    elif isinstance(dest, (str, Path)):
        with open(dest, 'w') as f:
            f.write(text)
    else:
        dest.write(text)


def parse_placement(text: str) -> Dict[int, Set[int]]:
    """cache id -> stored video ids, read back from serialize_placement output."""
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise InputFormatError("empty placement", 1)
    try:
        n = int(lines[0])
    except ValueError:
        raise InputFormatError("cache count is not an integer", 1) from None
    if len(lines) - 1 != n:
        raise InputFormatError(f"expected {n} cache lines, got {len(lines) - 1}")

    placement: Dict[int, Set[int]] = {}
    for line_no, line in enumerate(lines[1:], start=2):
        try:
            cache_id, *videos = [int(p) for p in line.split()]
        except ValueError:
            raise InputFormatError("non-integer value", line_no) from None
        if cache_id in placement:
            raise InputFormatError(f"cache {cache_id} listed twice", line_no)
        placement[cache_id] = set(videos)
    return placement
