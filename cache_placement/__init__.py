from .errors import PlacementError, InputFormatError, AllocationError, CapacityError
from .model import Video, Endpoint, DemandEntry, DemandModel, AllocationState
from .data_loader import aggregate_requests, parse_model, load_model
from .optimizers import GreedyOptimizer, WorkerPool, get_strategy, optimize
from .evaluation import PlanScore, evaluate
from .output import serialize_placement, write_placement, parse_placement
from .config import PlacementConfig, load_config


__all__ = [
    'PlacementError',
    'InputFormatError',
    'AllocationError',
    'CapacityError',
    'Video',
    'Endpoint',
    'DemandEntry',
    'DemandModel',
    'AllocationState',
    'aggregate_requests',
    'parse_model',
    'load_model',
    'GreedyOptimizer',
    'WorkerPool',
    'get_strategy',
    'optimize',
    'PlanScore',
    'evaluate',
    'serialize_placement',
    'write_placement',
    'parse_placement',
    'PlacementConfig',
    'load_config',
]
