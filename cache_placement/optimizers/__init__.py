from .pool import WorkerPool
from .scoring import Candidate, score_request, aggregate_candidates
from .greedy import (
    SelectionStrategy,
    BasicStrategy,
    AdvancedStrategy,
    RescoringStrategy,
    GreedyOptimizer,
    OptimizationResult,
    OptimizerStatus,
    STRATEGIES,
    get_strategy,
    optimize,
)


__all__ = [
    'WorkerPool',
    'Candidate',
    'score_request',
    'aggregate_candidates',
    'SelectionStrategy',
    'BasicStrategy',
    'AdvancedStrategy',
    'RescoringStrategy',
    'GreedyOptimizer',
    'OptimizationResult',
    'OptimizerStatus',
    'STRATEGIES',
    'get_strategy',
    'optimize',
]
