from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from .model import AllocationState, DemandEntry, DemandModel


@dataclass(frozen=True)
class PlanScore:
    sum_latency_saved: int
    sum_requests: int
    # floor(saved / requests * 1000), 0 without any requests
    score: int

    @property
    def average_saving(self) -> float:
        if self.sum_requests == 0:
            return 0.0
        return self.sum_latency_saved / self.sum_requests


def serving_latency(model: DemandModel, state: AllocationState,
                    entry: DemandEntry) -> int:
    """latency of the fastest cache holding the video, else the datacenter."""
    endpoint = model.endpoints[entry.endpoint_id]
    for cache_id, link_latency in endpoint.cache_connections:
        if state.is_stored(cache_id, entry.video_id):
            return min(link_latency, endpoint.datacenter_latency)
    return endpoint.datacenter_latency


def evaluate(model: DemandModel, state: AllocationState) -> PlanScore:
    sum_latency_saved = 0
    sum_requests = 0

    for entry in model.requests:
        endpoint = model.endpoints[entry.endpoint_id]
        sum_requests += entry.amount
        latency = serving_latency(model, state, entry)
        sum_latency_saved += (endpoint.datacenter_latency - latency) * entry.amount

    if sum_requests == 0:
        score = 0
    else:
        score = sum_latency_saved * 1000 // sum_requests

    return PlanScore(sum_latency_saved=sum_latency_saved,
                     sum_requests=sum_requests,
                     score=score)


def cache_summary(model: DemandModel, state: AllocationState) -> pd.DataFrame:
    rows = []
    for cache_id, videos in enumerate(state.cached_videos):
        rows.append({
            'cache_id': cache_id,
            'videos': len(videos),
            'used': state.cache_usage[cache_id],
            'capacity': model.cache_capacity,
            'fill_ratio': state.fill_ratio(cache_id),
        })
    return pd.DataFrame(rows, columns=['cache_id', 'videos', 'used', 'capacity', 'fill_ratio'])


def endpoint_summary(model: DemandModel, state: AllocationState,
                     endpoint_ids: Optional[List[int]] = None) -> pd.DataFrame:
    """request-weighted average latency per endpoint, before and after placement."""
    n = model.num_endpoints
    endpoint_idx = np.array([r.endpoint_id for r in model.requests], dtype=np.int64)
    amounts = np.array([r.amount for r in model.requests], dtype=np.float64)
    latencies = np.array([serving_latency(model, state, r) for r in model.requests],
                         dtype=np.float64)
    dc = np.array([e.datacenter_latency for e in model.endpoints], dtype=np.float64)

    requests = np.bincount(endpoint_idx, weights=amounts, minlength=n)
    weighted = np.bincount(endpoint_idx, weights=amounts * latencies, minlength=n)
    avg_latency = np.divide(weighted, requests, out=dc.copy(), where=requests > 0)

    df = pd.DataFrame({
        'endpoint_id': np.arange(n),
        'requests': requests.astype(np.int64),
        'datacenter_latency': dc,
        'avg_latency': avg_latency,
    })
    df['saving'] = df['datacenter_latency'] - df['avg_latency']
    if endpoint_ids is not None:
        df = df[df['endpoint_id'].isin(endpoint_ids)].reset_index(drop=True)
    return df
