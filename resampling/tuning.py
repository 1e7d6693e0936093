# Hyperparameter grid search over resamples

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.model_selection import ParameterGrid

from .cv import fit_resamples, summarize_metrics, compute_metrics, LOWER_IS_BETTER

# Decision tree search space: cost complexity, tree depth, minimum node size
DECISION_TREE_PARAM_RANGES = {
    'ccp_alpha': {'range': [1e-10, 1e-1], 'scale': 'log10'},
    'max_depth': {'range': [1, 15], 'type': 'int'},
    'min_samples_split': {'range': [2, 40], 'type': 'int'},
}

RESULT_KEYS = ['config', 'id', 'metric', 'estimate']


def _native(value):
    # numpy scalars -> python scalars so estimators' param validation accepts them;
    # a missing group key is the None candidate
    if isinstance(value, float) and np.isnan(value):
        return None
    return value.item() if isinstance(value, np.generic) else value


def param_values(param_range, levels):
    """Evenly spaced candidate values for one parameter range."""
    if 'values' in param_range:
        return list(param_range['values'])

    low, high = param_range['range']
    if param_range.get('scale') == 'log10':
        values = np.logspace(np.log10(low), np.log10(high), levels)
    else:
        values = np.linspace(low, high, levels)

    if param_range.get('type') == 'int':
        return [int(v) for v in np.unique(np.round(values).astype(int))]
    return [float(v) for v in values]


def regular_grid(param_ranges=None, levels=3):
    """
    Regular grid of candidate hyperparameters.

    Args:
        param_ranges: dict param name -> {'range': [low, high], 'scale': 'log10'?,
            'type': 'int'?} or {'values': [...]}. Defaults to the decision tree space.
        levels: values per parameter, an int or a dict param name -> int

    Returns:
        DataFrame with one column per parameter and one row per combination
    """
    param_ranges = param_ranges or DECISION_TREE_PARAM_RANGES
    space = {}
    for name, param_range in param_ranges.items():
        n = levels.get(name, 3) if isinstance(levels, dict) else levels
        if n < 1:
            raise ValueError(f"levels for '{name}' must be >= 1, got {n}")
        space[name] = param_values(param_range, n)

    records = list(ParameterGrid(space))
    grid = pd.DataFrame(records, columns=list(space))
    for name, values in space.items():
        # Keep None candidates (e.g. unlimited max_depth) from turning into NaN
        if any(v is None for v in values):
            grid[name] = pd.Series([r[name] for r in records], dtype=object)
    return grid


def finalize_model(model, params):
    """Unfitted copy of ``model`` with ``params`` applied."""
    return clone(model).set_params(**{k: _native(v) for k, v in params.items()})


def tune_grid(model, X, y, table, grid, target_type, metrics=None):
    """
    Evaluate every grid candidate on every pair of the partition table.

    Returns:
        Long DataFrame with columns config, <params...>, id, metric, estimate
    """
    params = list(grid.columns)
    print(f"Tuning {len(grid)} candidates x {len(table)} resamples ({target_type})...")

    frames = []
    for config_id, candidate in enumerate(grid.to_dict('records')):
        estimator = finalize_model(model, candidate)
        fold = fit_resamples(estimator, X, y, table, target_type, metrics, verbose=False)
        fold.insert(0, 'config', config_id)
        for name in params:
            fold[name] = _native(candidate[name])
        frames.append(fold)

    results = pd.concat(frames, ignore_index=True)
    return results[['config'] + params + ['id', 'metric', 'estimate']]


def _param_columns(results):
    return [c for c in results.columns if c not in RESULT_KEYS]


def collect_metrics(results):
    """Mean, standard error and count per candidate and metric."""
    return summarize_metrics(results, by=['config'] + _param_columns(results))


def show_best(results, metric, n=5):
    """Top ``n`` candidates for ``metric``, best first."""
    summary = collect_metrics(results)
    summary = summary[summary['metric'] == metric]
    if summary.empty:
        raise ValueError(f"Metric '{metric}' not found in tuning results. Available: {results['metric'].unique().tolist()}")

    ascending = metric in LOWER_IS_BETTER
    return summary.sort_values('mean', ascending=ascending, kind='mergesort').head(n).reset_index(drop=True)


def select_best(results, metric):
    """Parameter dict of the best candidate for ``metric``."""
    best = show_best(results, metric, n=1)
    return {name: _native(best[name].iloc[0]) for name in _param_columns(results)}


def last_fit(model, X, y, split_table, target_type, metrics=None):
    """
    Fit on the training rows of the first pair and score its test rows.

    Returns:
        (fitted model, DataFrame with columns metric, estimate)
    """
    pair = split_table.iloc[0]
    fitted = clone(model)
    fitted.fit(X.iloc[pair['train']], y.iloc[pair['train']])

    scores = compute_metrics(fitted, X.iloc[pair['test']], y.iloc[pair['test']], target_type, metrics)
    return fitted, pd.DataFrame({'metric': list(scores), 'estimate': list(scores.values())})
