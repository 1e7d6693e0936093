# Resampling error taxonomy


class ResamplingError(Exception):
    """Base class for partition table errors."""
    pass


class EmptyDatasetError(ResamplingError, ValueError):
    """Raised when a dataset with zero rows is handed to the adapter."""
    pass


class ShapeMismatch(ResamplingError, ValueError):
    """Raised when a partitioning function returns the wrong structure."""
    pass


class PartitionIndexError(ShapeMismatch):
    """Raised when a partition references a row that is not in the dataset."""
    pass


class OverlapError(ShapeMismatch):
    """Raised when train/test rows intersect and disjoint pairs were required."""
    pass
