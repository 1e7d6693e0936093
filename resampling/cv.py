# Resampled model evaluation
# Fits one model clone per partition pair and scores the held-out rows

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.metrics import (
    mean_absolute_error, mean_squared_error, r2_score,
    f1_score, accuracy_score, roc_auc_score
)
from scipy.stats import spearmanr

REGRESSION_METRICS = ['rmse', 'mae', 'r2', 'spearman']
CLASSIFICATION_METRICS = ['accuracy', 'macro_f1', 'roc_auc']

# Metrics where a smaller estimate is better
LOWER_IS_BETTER = ['rmse', 'mae']


def default_metrics(target_type):
    if target_type == 'regression':
        return list(REGRESSION_METRICS)
    if target_type == 'classification':
        return list(CLASSIFICATION_METRICS)
    raise ValueError(f"Unknown target_type '{target_type}'. Allowed: ['regression', 'classification']")


def _roc_auc(fitted, X_test, y_test):
    """ROC AUC on held-out rows; NaN when a class is missing from either side."""
    if not hasattr(fitted, 'predict_proba'):
        return np.nan

    classes = fitted.classes_
    present = np.unique(y_test)
    if len(classes) < 2 or len(present) < 2:
        return np.nan

    proba = fitted.predict_proba(X_test)
    if len(classes) == 2:
        return roc_auc_score(np.asarray(y_test) == classes[1], proba[:, 1])

    # One-vs-rest needs every training class among the test labels
    if set(present) != set(classes):
        return np.nan
    return roc_auc_score(y_test, proba, multi_class='ovr', labels=classes)


def compute_metrics(fitted, X_test, y_test, target_type, metrics=None):
    """
    Score a fitted model on held-out rows.

    Returns dict metric name -> float. Empty test sets give NaN for every
    metric.
    """
    metrics = metrics or default_metrics(target_type)

    if len(y_test) == 0:
        return {name: np.nan for name in metrics}

    y_pred = fitted.predict(X_test)
    scores = {}

    for name in metrics:
        if name == 'rmse':
            scores[name] = float(np.sqrt(mean_squared_error(y_test, y_pred)))
        elif name == 'mae':
            scores[name] = float(mean_absolute_error(y_test, y_pred))
        elif name == 'r2':
            scores[name] = float(r2_score(y_test, y_pred)) if len(y_test) > 1 else np.nan
        elif name == 'spearman':
            # Handle constant arrays for Spearman correlation
            if np.std(y_test) > 1e-8 and np.std(y_pred) > 1e-8:
                scores[name] = float(spearmanr(y_test, y_pred)[0])
            else:
                scores[name] = 0.0
        elif name == 'accuracy':
            scores[name] = float(accuracy_score(y_test, y_pred))
        elif name == 'macro_f1':
            scores[name] = float(f1_score(y_test, y_pred, average='macro', zero_division=0))
        elif name == 'roc_auc':
            scores[name] = float(_roc_auc(fitted, X_test, y_test))
        else:
            raise ValueError(f"Unknown metric '{name}'. Supported: {REGRESSION_METRICS + CLASSIFICATION_METRICS}")

    return scores


def fit_resamples(model, X, y, table, target_type, metrics=None, verbose=True):
    """
    Evaluate a model over every pair of a partition table.

    Args:
        model: unfitted scikit-learn estimator (cloned per pair)
        X: DataFrame of features
        y: Series of target values
        table: partition table from ``make_partition_table``
        target_type: 'regression' or 'classification'
        metrics: optional list of metric names
        verbose: print a progress line

    Returns:
        Long DataFrame with columns id, metric, estimate
    """
    metrics = metrics or default_metrics(target_type)
    if verbose:
        print(f"Fitting {len(table)} resamples ({target_type})...")

    records = []
    for pair in table.itertuples(index=False):
        X_train, X_test = X.iloc[pair.train], X.iloc[pair.test]
        y_train, y_test = y.iloc[pair.train], y.iloc[pair.test]

        fitted = clone(model)
        fitted.fit(X_train, y_train)

        scores = compute_metrics(fitted, X_test, y_test, target_type, metrics)
        for name in metrics:
            records.append({'id': pair.id, 'metric': name, 'estimate': scores[name]})

    return pd.DataFrame(records, columns=['id', 'metric', 'estimate'])


def summarize_metrics(fold_metrics, by=None):
    """
    Average per-pair estimates.

    Returns one row per metric (and per ``by`` group) with mean, std_err
    and n, where n counts the non-NaN estimates.
    """
    keys = list(by or []) + ['metric']
    grouped = fold_metrics.groupby(keys, sort=False, dropna=False)['estimate']
    summary = grouped.agg(mean='mean', std='std', n='count').reset_index()
    summary['std_err'] = summary['std'] / np.sqrt(summary['n'])
    return summary[keys + ['mean', 'std_err', 'n']]


def metrics_to_dict(fold_metrics):
    """
    Reshape fold metrics into the {metric: {mean, std, all}} layout used in
    metrics.json.
    """
    out = {}
    for name, group in fold_metrics.groupby('metric', sort=False):
        values = group['estimate'].to_numpy(dtype=float)
        out[name] = {
            'mean': float(np.nanmean(values)) if np.isfinite(values).any() else None,
            'std': float(np.nanstd(values)) if np.isfinite(values).any() else None,
            'all': [None if np.isnan(v) else float(v) for v in values],
        }
    return out
