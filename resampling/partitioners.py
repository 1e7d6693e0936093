# Partitioning strategies
# Each strategy returns a frame with 'train'/'test' columns of row positions

from typing import Any, Callable, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.model_selection import (
    KFold, StratifiedKFold, RepeatedKFold, RepeatedStratifiedKFold,
    ShuffleSplit, StratifiedShuffleSplit
)

from .adapter import object_column

# Numeric strata with more unique values than this are binned into quartiles
STRATA_MAX_UNIQUE = 10
STRATA_BINS = 4


class Partitioner:
    """
    Resampling strategy interface.

    Subclasses implement ``partition(dataset, options)`` and return anything
    the adapter can read as a table with 'train' and 'test' columns.
    """

    name = None

    def partition(self, dataset: pd.DataFrame, options: Optional[Dict[str, Any]]):
        raise NotImplementedError


class FunctionPartitioner(Partitioner):
    """Partitioner backed by a plain function called as ``func(dataset, **options)``."""

    def __init__(self, func: Callable, name: Optional[str] = None):
        self.func = func
        self.name = name or func.__name__

    def partition(self, dataset, options):
        return self.func(dataset, **dict(options or {}))

    def __repr__(self):
        return f"FunctionPartitioner({self.name})"


def _strata_values(dataset, strata):
    """Resolve a strata column to class labels usable by stratified splitters."""
    if strata is None:
        return None
    if strata not in dataset.columns:
        raise ValueError(f"Strata column '{strata}' not found in dataset. Available: {list(dataset.columns)}")

    values = dataset[strata]
    if pd.api.types.is_numeric_dtype(values) and values.nunique() > STRATA_MAX_UNIQUE:
        # Continuous outcome: stratify on quartiles
        values = pd.qcut(values, q=STRATA_BINS, labels=False, duplicates='drop')
    return np.asarray(values)


def _pairs_frame(pairs, **extra):
    data = {
        'train': object_column([tr for tr, _ in pairs]),
        'test': object_column([te for _, te in pairs]),
    }
    data.update(extra)
    return pd.DataFrame(data)


def vfold_cv(dataset, v=10, repeats=1, strata=None, seed=None):
    """
    V-fold cross-validation.

    Rows are shuffled and split into ``v`` folds; each fold is the test set
    once. With ``repeats`` > 1 the whole procedure is repeated with fresh
    shuffles, giving ``v * repeats`` pairs.
    """
    groups = _strata_values(dataset, strata)
    placeholder = np.zeros((len(dataset), 1))

    if groups is None:
        if repeats > 1:
            cv = RepeatedKFold(n_splits=v, n_repeats=repeats, random_state=seed)
        else:
            cv = KFold(n_splits=v, shuffle=True, random_state=seed)
    else:
        if repeats > 1:
            cv = RepeatedStratifiedKFold(n_splits=v, n_repeats=repeats, random_state=seed)
        else:
            cv = StratifiedKFold(n_splits=v, shuffle=True, random_state=seed)

    pairs = list(cv.split(placeholder, groups))
    index = np.arange(len(pairs))
    return _pairs_frame(pairs, repeat=index // v + 1, fold=index % v + 1)


def mc_cv(dataset, prop=0.75, times=25, strata=None, seed=None):
    """
    Monte-Carlo cross-validation.

    Draws ``times`` independent random splits, each putting a ``prop``
    share of rows into the training set.
    """
    groups = _strata_values(dataset, strata)
    placeholder = np.zeros((len(dataset), 1))

    if groups is None:
        cv = ShuffleSplit(n_splits=times, train_size=prop, random_state=seed)
    else:
        cv = StratifiedShuffleSplit(n_splits=times, train_size=prop, random_state=seed)

    return _pairs_frame(list(cv.split(placeholder, groups)))


def bootstraps(dataset, times=25, strata=None, seed=None):
    """
    Bootstrap resampling.

    Each training set has as many rows as the dataset, drawn with
    replacement (within each stratum when ``strata`` is given). The test set
    is the out-of-bag rows, which may be empty for very small datasets.
    """
    groups = _strata_values(dataset, strata)
    rng = np.random.default_rng(seed)
    n = len(dataset)
    rows = np.arange(n)

    pairs = []
    for _ in range(times):
        if groups is None:
            train = rng.integers(0, n, size=n)
        else:
            train = np.concatenate([
                rng.choice(rows[groups == g], size=int((groups == g).sum()), replace=True)
                for g in np.unique(groups)
            ])
        test = np.setdiff1d(rows, train)
        pairs.append((np.sort(train), test))

    return _pairs_frame(pairs)


def validation_split(dataset, prop=0.75, strata=None, seed=None):
    """Single random train/test split."""
    return mc_cv(dataset, prop=prop, times=1, strata=strata, seed=seed)


# Held-out test set before resampling; same mechanics as a validation split
initial_split = validation_split


PARTITIONERS = {
    'vfold': FunctionPartitioner(vfold_cv, 'vfold'),
    'mc': FunctionPartitioner(mc_cv, 'mc'),
    'bootstrap': FunctionPartitioner(bootstraps, 'bootstrap'),
    'validation': FunctionPartitioner(validation_split, 'validation'),
}


def get_partitioner(name):
    """Look up a registered partitioning strategy by name."""
    if name not in PARTITIONERS:
        raise ValueError(f"Unknown resampling strategy: '{name}'. Supported: {list(PARTITIONERS)}")
    return PARTITIONERS[name]
