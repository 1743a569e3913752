class PlacementError(Exception):
    pass


class InputFormatError(PlacementError, ValueError):
    """raised by the loader for anything that is not a valid problem description."""

    def __init__(self, message: str, line_no: int = None):
        self.line_no = line_no
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)


class AllocationError(PlacementError):
    pass


class CapacityError(AllocationError):
    def __init__(self, cache_id: int, video_id: int, size: int, remaining: int):
        self.cache_id = cache_id
        self.video_id = video_id
        self.size = size
        self.remaining = remaining
        super().__init__(
            f"video {video_id} ({size}) does not fit in cache {cache_id} "
            f"({remaining} remaining)"
        )
