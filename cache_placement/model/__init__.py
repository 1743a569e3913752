from .demand import Video, Endpoint, DemandEntry, DemandModel
from .allocation import AllocationState, AllocationSnapshot


__all__ = [
    'Video',
    'Endpoint',
    'DemandEntry',
    'DemandModel',
    'AllocationState',
    'AllocationSnapshot',
]
