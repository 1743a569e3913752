from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Video:
    size: int


@dataclass(frozen=True)
class Endpoint:
    datacenter_latency: int
    # (cache_id, link_latency), ascending by link latency
    cache_connections: Tuple[Tuple[int, int], ...] = ()

    def link_latency(self, cache_id: int) -> int:
        for cid, latency in self.cache_connections:
            if cid == cache_id:
                return latency
        raise KeyError(cache_id)


@dataclass(frozen=True)
class DemandEntry:
    video_id: int
    endpoint_id: int
    amount: int


@dataclass(frozen=True)
class DemandModel:
    """
    Immutable problem description: videos, endpoints, a number of caches
    sharing one capacity, and deduplicated demand.

    Built once by the loader and shared read-only by every optimizer worker.
    """
    videos: Tuple[Video, ...]
    endpoints: Tuple[Endpoint, ...]
    num_caches: int
    cache_capacity: int
    requests: Tuple[DemandEntry, ...]

    @property
    def num_videos(self) -> int:
        return len(self.videos)

    @property
    def num_endpoints(self) -> int:
        return len(self.endpoints)

    @property
    def total_capacity(self) -> int:
        return self.num_caches * self.cache_capacity

    @property
    def total_requests(self) -> int:
        return sum(r.amount for r in self.requests)

    def video_size(self, video_id: int) -> int:
        return self.videos[video_id].size

    def is_cacheable(self, video_id: int) -> bool:
        # a video bigger than a whole cache can never be placed anywhere
        return self.videos[video_id].size <= self.cache_capacity

    def __repr__(self) -> str:
        return (f"DemandModel(videos={self.num_videos}, "
                f"endpoints={self.num_endpoints}, "
                f"requests={len(self.requests)}, "
                f"caches={self.num_caches}x{self.cache_capacity})")
