import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import InputFormatError
from .model import DemandEntry, DemandModel, Endpoint, Video

logger = logging.getLogger(__name__)


def aggregate_requests(
    raw: Iterable[Tuple[int, int, int]],
    num_videos: Optional[int] = None,
    num_endpoints: Optional[int] = None,
) -> Tuple[DemandEntry, ...]:
    """
    Merge raw (video_id, endpoint_id, amount) triples into one DemandEntry
    per (video, endpoint) key, summing amounts.

    Entries come out in order of first appearance of their key; the set of
    keys and their totals do not depend on the input order.
    """
    totals: Dict[Tuple[int, int], int] = {}
    for video_id, endpoint_id, amount in raw:
        if num_videos is not None and not 0 <= video_id < num_videos:
            raise InputFormatError(f"video id {video_id} out of range")
        if num_endpoints is not None and not 0 <= endpoint_id < num_endpoints:
            raise InputFormatError(f"endpoint id {endpoint_id} out of range")
        key = (video_id, endpoint_id)
        totals[key] = totals.get(key, 0) + amount

    return tuple(DemandEntry(video_id=v, endpoint_id=e, amount=amount)
                 for (v, e), amount in totals.items())


class _LineReader:
    # numbered, whitespace-split lines; trailing blank lines are dropped

    def __init__(self, lines: Iterable[str]):
        rows = [line.rstrip('\r\n') for line in lines]
        while rows and not rows[-1].strip():
            rows.pop()
        self._rows = rows
        self._pos = 0

    @property
    def line_no(self) -> int:
        return self._pos

    def exhausted(self) -> bool:
        return self._pos >= len(self._rows)

    def ints(self, expected: Optional[int], what: str) -> List[int]:
        if self.exhausted():
            raise InputFormatError(f"unexpected end of input, expected {what}",
                                   self._pos + 1)
        self._pos += 1
        parts = self._rows[self._pos - 1].split()
        if expected is not None and len(parts) != expected:
            raise InputFormatError(
                f"expected {expected} values for {what}, got {len(parts)}", self._pos)
        try:
            values = [int(p) for p in parts]
        except ValueError:
            raise InputFormatError(f"non-integer value in {what}", self._pos) from None
        if any(v < 0 for v in values):
            raise InputFormatError(f"negative value in {what}", self._pos)
        return values


def parse_model(lines: Iterable[str]) -> DemandModel:
    reader = _LineReader(lines)

    num_videos, num_endpoints, num_requests, num_caches, cache_capacity = \
        reader.ints(5, "header")
    logger.debug("%d videos, %d endpoints, %d request descriptions, %d caches %dMB each",
                 num_videos, num_endpoints, num_requests, num_caches, cache_capacity)

    sizes = reader.ints(num_videos, "video sizes")
    if any(s == 0 for s in sizes):
        raise InputFormatError("video sizes must be positive", reader.line_no)
    videos = tuple(Video(size=s) for s in sizes)

    endpoints = []
    for endpoint_id in range(num_endpoints):
        latency, n_connections = reader.ints(2, f"endpoint {endpoint_id}")
        header_line = reader.line_no
        connections = []
        seen = set()
        for _ in range(n_connections):
            cache_id, link_latency = reader.ints(2, f"endpoint {endpoint_id} connection")
            if cache_id >= num_caches:
                raise InputFormatError(f"cache id {cache_id} out of range", reader.line_no)
            if cache_id in seen:
                raise InputFormatError(
                    f"endpoint {endpoint_id} lists cache {cache_id} twice", reader.line_no)
            seen.add(cache_id)
            connections.append((cache_id, link_latency))

        # stable: equal latencies keep their input order
        connections.sort(key=lambda c: c[1])
        endpoints.append(Endpoint(datacenter_latency=latency,
                                  cache_connections=tuple(connections)))
        logger.debug("endpoint %d (line %d): %dms datacenter latency, %d caches",
                     endpoint_id, header_line, latency, n_connections)

    raw = []
    for _ in range(num_requests):
        video_id, endpoint_id, amount = reader.ints(3, "request description")
        if video_id >= num_videos:
            raise InputFormatError(f"video id {video_id} out of range", reader.line_no)
        if endpoint_id >= num_endpoints:
            raise InputFormatError(f"endpoint id {endpoint_id} out of range", reader.line_no)
        raw.append((video_id, endpoint_id, amount))

    if not reader.exhausted():
        raise InputFormatError(
            f"more than {num_requests} request descriptions", reader.line_no + 1)

    requests = aggregate_requests(raw, num_videos, num_endpoints)
    logger.debug("%d request descriptions merged into %d demand entries",
                 len(raw), len(requests))

    return DemandModel(
        videos=videos,
        endpoints=tuple(endpoints),
        num_caches=num_caches,
        cache_capacity=cache_capacity,
        requests=requests,
    )


def load_model(path: Union[str, Path]) -> DemandModel:
    with open(path, 'rb') as f:
        data = f.read()
    try:
        text = data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InputFormatError(
            "input is not valid text", data.count(b"\n", 0, e.start) + 1) from None
    model = parse_model(text.splitlines())
    logger.info("loaded %s: %r", path, model)
    return model
