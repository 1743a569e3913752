import heapq
import logging
import time
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import AllocationError
from ..model import AllocationState, DemandModel
from .pool import WorkerPool
from .scoring import Candidate, aggregate_candidates, score_request

logger = logging.getLogger(__name__)


class OptimizerStatus(Enum):
    RUNNING = 'running'
    TERMINATED = 'terminated'


class SelectionStrategy(ABC):
    """
    Picks the next placement for the greedy loop.

    select() must only return candidates that are admissible against the
    state it is given; the optimizer checks again before inserting.
    """

    def __init__(self):
        self.name = "base"

    def prepare(self, model: DemandModel, state: AllocationState, pool: WorkerPool):
        pass

    def select(self, model: DemandModel, state: AllocationState,
               pool: WorkerPool) -> Optional[Candidate]:
        raise NotImplementedError

    def placed(self, model: DemandModel, candidate: Candidate):
        pass


class BasicStrategy(SelectionStrategy):
    # recompute-each-step: full scan for the single best raw-latency
    # candidate against the current state

    def __init__(self):
        super().__init__()
        self.name = "basic"

    def select(self, model: DemandModel, state: AllocationState,
               pool: WorkerPool) -> Optional[Candidate]:
        snapshot = state.snapshot()
        requests = model.requests

        def best_in(chunk: range) -> Optional[Candidate]:
            best = None
            for i in chunk:
                size = model.video_size(requests[i].video_id)
                for c in score_request(model, requests[i], snapshot, normalize=False):
                    if snapshot.remaining(c.cache_id) < size:
                        continue
                    if best is None or c.benefit > best.benefit:
                        best = c
            return best

        return pool.max_reduce(best_in, len(requests), key=lambda c: c.benefit)


class AdvancedStrategy(SelectionStrategy):
    """
    Score-once: rank (cache, video) pairs by aggregated per-unit-size
    benefit before the first insertion, then walk the ranking.

    Scores are never refreshed, so a pair keeps credit for demand that an
    earlier placement already serves. That approximation is what makes the
    one-time scoring cheap; RescoringStrategy trades it back for accuracy.
    """

    def __init__(self):
        super().__init__()
        self.name = "advanced"
        self.ranked: List[Candidate] = []
        self._cursor = 0

    def prepare(self, model: DemandModel, state: AllocationState, pool: WorkerPool):
        self.ranked = aggregate_candidates(model, normalize=True, pool=pool)
        self._cursor = 0
        logger.debug("ranked %d (cache, video) candidates", len(self.ranked))

    def select(self, model: DemandModel, state: AllocationState,
               pool: WorkerPool) -> Optional[Candidate]:
        ranked = self.ranked

        def admissible(i: int) -> bool:
            return state.is_admissible(ranked[i].cache_id, ranked[i].video_id)

        # anything before the cursor is stored or no longer fits, and
        # neither can be undone
        idx = pool.find_first(admissible, len(ranked), start=self._cursor)
        if idx is None:
            self._cursor = len(ranked)
            return None
        self._cursor = idx + 1
        return ranked[idx]


class RescoringStrategy(SelectionStrategy):
    """
    Per-unit-size greedy with lazily refreshed marginal benefits.

    A pair's benefit only counts latency still to be saved given the
    placements made so far. Benefits can only shrink as placements are
    added, so a max-heap of possibly stale values is enough: the top entry
    is recomputed and accepted when it still beats the next one.
    """

    def __init__(self):
        super().__init__()
        self.name = "rescoring"
        self._contributions: Dict[Tuple[int, int], List[Tuple[int, int]]] = {}
        self._current: List[int] = []
        self._heap: List[Tuple[float, int, Tuple[int, int]]] = []

    def prepare(self, model: DemandModel, state: AllocationState, pool: WorkerPool):
        requests = model.requests

        def collect(chunk: range) -> Dict[Tuple[int, int], List[Tuple[int, int]]]:
            shard: Dict[Tuple[int, int], List[Tuple[int, int]]] = {}
            for i in chunk:
                endpoint = model.endpoints[requests[i].endpoint_id]
                for c in score_request(model, requests[i], normalize=False):
                    shard.setdefault((c.cache_id, c.video_id), []).append(
                        (i, endpoint.link_latency(c.cache_id)))
            return shard

        contributions: Dict[Tuple[int, int], List[Tuple[int, int]]] = {}
        for shard in pool.map_chunks(collect, len(requests)):
            for key, items in shard.items():
                contributions.setdefault(key, []).extend(items)
        self._contributions = contributions

        # latency each entry currently gets, given what is already placed
        self._current = []
        for entry in requests:
            endpoint = model.endpoints[entry.endpoint_id]
            latency = endpoint.datacenter_latency
            for cid, link in endpoint.cache_connections:
                if state.is_stored(cid, entry.video_id):
                    latency = min(latency, link)
                    break
            self._current.append(latency)

        self._heap = []
        for order, key in enumerate(contributions):
            gain = self._gain(model, key)
            if gain > 0:
                self._heap.append((-gain, order, key))
        heapq.heapify(self._heap)

    def _gain(self, model: DemandModel, key: Tuple[int, int]) -> float:
        requests = model.requests
        saved = 0
        for i, link in self._contributions[key]:
            if link < self._current[i]:
                saved += (self._current[i] - link) * requests[i].amount
        return saved / model.video_size(key[1])

    def select(self, model: DemandModel, state: AllocationState,
               pool: WorkerPool) -> Optional[Candidate]:
        heap = self._heap
        while heap:
            _, order, key = heapq.heappop(heap)
            cache_id, video_id = key
            if not state.is_admissible(cache_id, video_id):
                continue
            gain = self._gain(model, key)
            if gain <= 0:
                continue
            if heap and gain < -heap[0][0]:
                heapq.heappush(heap, (-gain, order, key))
                continue
            return Candidate(cache_id, video_id, gain)
        return None

    def placed(self, model: DemandModel, candidate: Candidate):
        for i, link in self._contributions.get((candidate.cache_id, candidate.video_id), ()):
            if link < self._current[i]:
                self._current[i] = link


STRATEGIES: Dict[str, type] = {
    'basic': BasicStrategy,
    'advanced': AdvancedStrategy,
    'rescoring': RescoringStrategy,
}


def get_strategy(name: str) -> SelectionStrategy:
    name = name.lower()
    if name not in STRATEGIES:
        raise ValueError(f"unknown strategy '{name}'. available: {list(STRATEGIES.keys())}")
    return STRATEGIES[name]()


@dataclass
class OptimizationResult:
    state: AllocationState
    strategy: str
    iterations: int
    elapsed: float
    # False when max_iterations stopped the run before candidates ran out
    exhausted: bool
    status: OptimizerStatus = OptimizerStatus.TERMINATED


class GreedyOptimizer:
    """
    Greedy placement loop shared by every selection strategy.

    Each iteration asks the strategy for one candidate (workers only read
    the state during that scan), re-checks admissibility and inserts it on
    this thread. The loop ends when the strategy has nothing left or after
    max_iterations insertions. No placement is ever undone.
    """

    def __init__(
        self,
        model: DemandModel,
        strategy='advanced',
        pool: Optional[WorkerPool] = None,
        max_iterations: Optional[int] = None,
        progress: Optional[Callable[[int], None]] = None,
    ):
        if isinstance(strategy, str):
            strategy = get_strategy(strategy)
        self.model = model
        self.strategy: SelectionStrategy = strategy
        self.pool = pool or WorkerPool(workers=1)
        self.max_iterations = max_iterations
        self.progress = progress
        self.status = OptimizerStatus.TERMINATED
        self.iterations = 0

    def step(self, state: AllocationState) -> Optional[Candidate]:
        candidate = self.strategy.select(self.model, state, self.pool)
        if candidate is None:
            return None

        if not state.is_admissible(candidate.cache_id, candidate.video_id):
            raise AllocationError(
                f"{self.strategy.name} selected inadmissible placement "
                f"(cache {candidate.cache_id}, video {candidate.video_id})"
            )
        state.insert(candidate.cache_id, candidate.video_id)
        self.strategy.placed(self.model, candidate)
        self.iterations += 1

        if self.progress is not None:
            self.progress(self.model.video_size(candidate.video_id))
        return candidate

    def run(self, state: Optional[AllocationState] = None) -> OptimizationResult:
        if state is None:
            state = AllocationState(self.model)

        logger.info("running %s strategy on %r", self.strategy.name, self.model)
        start = time.time()
        self.status = OptimizerStatus.RUNNING
        self.iterations = 0
        self.strategy.prepare(self.model, state, self.pool)

        exhausted = False
        while self.max_iterations is None or self.iterations < self.max_iterations:
            if self.step(state) is None:
                exhausted = True
                break

        self.status = OptimizerStatus.TERMINATED
        elapsed = time.time() - start
        logger.info("%s placed %d videos (%d/%d used) in %.2fs",
                    self.strategy.name, self.iterations, state.used_capacity,
                    self.model.total_capacity, elapsed)

        return OptimizationResult(
            state=state,
            strategy=self.strategy.name,
            iterations=self.iterations,
            elapsed=elapsed,
            exhausted=exhausted,
        )


def optimize(model: DemandModel, strategy: str = 'advanced', workers: int = 1,
             chunk_size: int = 1024, **kwargs) -> OptimizationResult:
    with WorkerPool(workers=workers, chunk_size=chunk_size) as pool:
        return GreedyOptimizer(model, strategy, pool=pool, **kwargs).run()
