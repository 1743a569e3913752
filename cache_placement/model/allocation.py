from dataclasses import dataclass
from typing import FrozenSet, List, Set, Tuple

from ..errors import AllocationError, CapacityError
from .demand import DemandModel


@dataclass(frozen=True)
class AllocationSnapshot:
    """read-only view of an AllocationState, handed to scoring workers."""
    cached_videos: Tuple[FrozenSet[int], ...]
    cache_usage: Tuple[int, ...]
    cache_capacity: int

    def is_stored(self, cache_id: int, video_id: int) -> bool:
        return video_id in self.cached_videos[cache_id]

    def remaining(self, cache_id: int) -> int:
        return self.cache_capacity - self.cache_usage[cache_id]


class AllocationState:
    """
    Which videos are stored on which cache, plus per-cache usage.

    usage[c] always equals the summed size of the videos stored in c and
    never exceeds the cache capacity. Stored sets only grow.
    """

    def __init__(self, model: DemandModel):
        self.model = model
        self.capacity = model.cache_capacity
        self.cached_videos: List[Set[int]] = [set() for _ in range(model.num_caches)]
        self.cache_usage: List[int] = [0] * model.num_caches

    def _check_ids(self, cache_id: int, video_id: int):
        if not 0 <= cache_id < self.model.num_caches:
            raise AllocationError(f"unknown cache {cache_id}")
        if not 0 <= video_id < self.model.num_videos:
            raise AllocationError(f"unknown video {video_id}")

    def is_stored(self, cache_id: int, video_id: int) -> bool:
        return video_id in self.cached_videos[cache_id]

    def remaining(self, cache_id: int) -> int:
        return self.capacity - self.cache_usage[cache_id]

    def fits(self, cache_id: int, video_id: int) -> bool:
        return self.remaining(cache_id) >= self.model.video_size(video_id)

    def is_admissible(self, cache_id: int, video_id: int) -> bool:
        return not self.is_stored(cache_id, video_id) and self.fits(cache_id, video_id)

    def is_serving(self, endpoint_id: int, video_id: int) -> bool:
        endpoint = self.model.endpoints[endpoint_id]
        return any(video_id in self.cached_videos[cid]
                   for cid, _ in endpoint.cache_connections)

    def insert(self, cache_id: int, video_id: int) -> bool:
        self._check_ids(cache_id, video_id)
        if self.is_stored(cache_id, video_id):
            return False

        size = self.model.video_size(video_id)
        if size > self.remaining(cache_id):
            raise CapacityError(cache_id, video_id, size, self.remaining(cache_id))

        self.cached_videos[cache_id].add(video_id)
        self.cache_usage[cache_id] += size
        return True

    def snapshot(self) -> AllocationSnapshot:
        return AllocationSnapshot(
            cached_videos=tuple(frozenset(s) for s in self.cached_videos),
            cache_usage=tuple(self.cache_usage),
            cache_capacity=self.capacity,
        )

    def copy(self) -> 'AllocationState':
        other = AllocationState(self.model)
        other.cached_videos = [set(s) for s in self.cached_videos]
        other.cache_usage = list(self.cache_usage)
        return other

    def placements(self) -> List[Tuple[int, int]]:
        return [(cid, vid)
                for cid, videos in enumerate(self.cached_videos)
                for vid in sorted(videos)]

    @property
    def used_capacity(self) -> int:
        return sum(self.cache_usage)

    def fill_ratio(self, cache_id: int) -> float:
        if self.capacity == 0:
            return 1.0
        return self.cache_usage[cache_id] / self.capacity

    def __len__(self) -> int:
        return sum(len(s) for s in self.cached_videos)

    def __repr__(self) -> str:
        return (f"AllocationState(caches={len(self.cached_videos)}, "
                f"placements={len(self)}, "
                f"used={self.used_capacity}/{self.model.total_capacity})")
