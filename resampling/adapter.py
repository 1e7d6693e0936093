# Resampler adapter
# Normalizes the output of any partitioning function into one partition table shape

from collections.abc import Mapping

import numpy as np
import pandas as pd

from .errors import EmptyDatasetError, ShapeMismatch, PartitionIndexError, OverlapError

REQUIRED_COLUMNS = ['train', 'test']
TABLE_COLUMNS = ['id', 'train', 'test']


def make_partition_table(dataset, partitioner, options=None, require_disjoint=False):
    """
    Build a partition table from an arbitrary partitioning strategy.

    Args:
        dataset: DataFrame to partition (must have at least one row)
        partitioner: callable invoked as ``partitioner(dataset, **options)``,
            or an object exposing ``partition(dataset, options)``
        options: mapping of keyword options forwarded to the partitioner
        require_disjoint: reject pairs whose train/test rows intersect

    Returns:
        DataFrame with exactly the columns ``id``, ``train``, ``test``.
        ``train``/``test`` hold integer arrays of row positions.

    Raises:
        EmptyDatasetError: dataset has zero rows
        ShapeMismatch: partitioner output lacks the train/test columns
        PartitionIndexError: a row position is outside the dataset
        OverlapError: overlapping pair while require_disjoint is set
    """
    if dataset is None or len(dataset) == 0:
        raise EmptyDatasetError("Cannot partition an empty dataset (0 rows)")

    options = dict(options or {})

    if hasattr(partitioner, 'partition'):
        raw = partitioner.partition(dataset, options)
    elif callable(partitioner):
        raw = partitioner(dataset, **options)
    else:
        raise TypeError(f"Partitioner must be callable or implement partition(), got {type(partitioner).__name__}")

    train_col, test_col = _extract_columns(raw)
    if len(train_col) != len(test_col):
        raise ShapeMismatch(f"train/test columns differ in length: {len(train_col)} vs {len(test_col)}")
    if len(train_col) == 0:
        raise ShapeMismatch("Partitioning function returned no partition pairs")

    n_rows = len(dataset)
    train = [_as_rows(v, n_rows, 'train', i) for i, v in enumerate(train_col)]
    test = [_as_rows(v, n_rows, 'test', i) for i, v in enumerate(test_col)]

    if require_disjoint:
        for i, (tr, te) in enumerate(zip(train, test)):
            overlap = np.intersect1d(tr, te)
            if overlap.size:
                raise OverlapError(f"Pair {i}: train/test rows overlap ({overlap.size} shared rows)")

    return pd.DataFrame({
        'id': np.arange(len(train), dtype=int),
        'train': object_column(train),
        'test': object_column(test),
    }, columns=TABLE_COLUMNS)


def _extract_columns(raw):
    """Pull the train/test columns out of a frame, a column mapping or a list of records."""
    if isinstance(raw, pd.DataFrame):
        missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
        if missing:
            raise ShapeMismatch(f"Partitioner output missing columns {missing}. Got: {list(raw.columns)}")
        return list(raw['train']), list(raw['test'])

    if isinstance(raw, Mapping):
        missing = [c for c in REQUIRED_COLUMNS if c not in raw]
        if missing:
            raise ShapeMismatch(f"Partitioner output missing columns {missing}. Got: {list(raw.keys())}")
        try:
            return list(raw['train']), list(raw['test'])
        except TypeError as exc:
            raise ShapeMismatch(f"train/test must each hold one row sequence per pair: {exc}") from exc

    if isinstance(raw, (list, tuple)) and all(isinstance(r, Mapping) for r in raw):
        for i, record in enumerate(raw):
            missing = [c for c in REQUIRED_COLUMNS if c not in record]
            if missing:
                raise ShapeMismatch(f"Partition record {i} missing columns {missing}")
        return [r['train'] for r in raw], [r['test'] for r in raw]

    raise ShapeMismatch(
        f"Partitioner must return a table with {REQUIRED_COLUMNS} columns, got {type(raw).__name__}"
    )


def _as_rows(values, n_rows, column, pair_id):
    try:
        rows = np.asarray(values)
    except (TypeError, ValueError) as exc:
        raise ShapeMismatch(f"Pair {pair_id}: '{column}' is not a flat sequence of row positions: {exc}") from exc
    if rows.ndim != 1:
        raise PartitionIndexError(f"Pair {pair_id}: '{column}' must be a 1-D sequence of row positions")

    if rows.size == 0:
        return rows.astype(int)

    if not np.issubdtype(rows.dtype, np.integer):
        raise PartitionIndexError(f"Pair {pair_id}: '{column}' holds non-integer row positions ({rows.dtype})")

    if rows.min() < 0 or rows.max() >= n_rows:
        raise PartitionIndexError(
            f"Pair {pair_id}: '{column}' references rows outside [0, {n_rows}) "
            f"(min={rows.min()}, max={rows.max()})"
        )

    return rows.astype(int)


def object_column(arrays):
    # Equal-length arrays would otherwise be stacked into a 2-D block
    col = np.empty(len(arrays), dtype=object)
    for i, arr in enumerate(arrays):
        col[i] = arr
    return col


def training(dataset, pair):
    """Rows of ``dataset`` used for fitting in one partition table row."""
    return dataset.iloc[pair['train']]


def testing(dataset, pair):
    """Rows of ``dataset`` held out for assessment in one partition table row."""
    return dataset.iloc[pair['test']]


# Not a test function for pytest collection
testing.__test__ = False
