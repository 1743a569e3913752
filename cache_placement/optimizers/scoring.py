from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from ..model import AllocationSnapshot, AllocationState, DemandEntry, DemandModel
from .pool import WorkerPool

StateView = Union[AllocationState, AllocationSnapshot]


@dataclass(frozen=True)
class Candidate:
    cache_id: int
    video_id: int
    benefit: float


def latency_benefit(datacenter_latency: int, link_latency: int, amount: int,
                    size: Optional[int] = None) -> float:
    # raw saving, or saving per unit of storage when size is given
    saved = (datacenter_latency - link_latency) * amount
    if size is None:
        return saved
    return saved / size


def is_served(model: DemandModel, state: StateView, entry: DemandEntry) -> bool:
    endpoint = model.endpoints[entry.endpoint_id]
    return any(state.is_stored(cid, entry.video_id)
               for cid, _ in endpoint.cache_connections)


def score_request(model: DemandModel, entry: DemandEntry,
                  state: Optional[StateView] = None,
                  normalize: bool = False) -> List[Candidate]:
    """
    Candidates for placing entry's video on each cache its endpoint reaches.

    Nothing is produced for uncacheable videos, for endpoints already served
    by a cache holding the video, or for links no faster than the datacenter.
    """
    if not model.is_cacheable(entry.video_id):
        return []
    if state is not None and is_served(model, state, entry):
        return []

    endpoint = model.endpoints[entry.endpoint_id]
    size = model.video_size(entry.video_id) if normalize else None
    candidates = []
    for cache_id, link_latency in endpoint.cache_connections:
        if link_latency >= endpoint.datacenter_latency:
            continue
        benefit = latency_benefit(endpoint.datacenter_latency, link_latency,
                                  entry.amount, size)
        candidates.append(Candidate(cache_id, entry.video_id, benefit))
    return candidates


def aggregate_candidates(model: DemandModel, normalize: bool = True,
                         pool: Optional[WorkerPool] = None,
                         state: Optional[StateView] = None) -> List[Candidate]:
    """
    Score every demand entry and sum benefits per (cache, video).

    Each chunk of requests accumulates into its own dict; shards are merged
    in chunk order afterwards. Result is sorted by total benefit, highest
    first, with equal totals kept in first-seen order.
    """
    pool = pool or WorkerPool(workers=1)
    requests = model.requests

    def accumulate(chunk: range) -> Dict[Tuple[int, int], float]:
        shard: Dict[Tuple[int, int], float] = {}
        for i in chunk:
            for c in score_request(model, requests[i], state, normalize):
                key = (c.cache_id, c.video_id)
                shard[key] = shard.get(key, 0) + c.benefit
        return shard

    totals: Dict[Tuple[int, int], float] = {}
    for shard in pool.map_chunks(accumulate, len(requests)):
        for key, benefit in shard.items():
            totals[key] = totals.get(key, 0) + benefit

    ranked = [Candidate(cache_id, video_id, benefit)
              for (cache_id, video_id), benefit in totals.items()]
    ranked.sort(key=lambda c: c.benefit, reverse=True)
    return ranked
