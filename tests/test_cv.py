import pytest
import numpy as np
from sklearn.exceptions import NotFittedError
from sklearn.utils.validation import check_is_fitted

from resampling.adapter import make_partition_table
from resampling.cv import (
    fit_resamples, summarize_metrics, compute_metrics, metrics_to_dict,
    CLASSIFICATION_METRICS, REGRESSION_METRICS
)
from resampling.data import preprocess_data
from resampling.models import build_model
from resampling.partitioners import vfold_cv, mc_cv, bootstraps


def test_fit_resamples_classification_long_format(tiny_df, base_classification_config):
    X, y = preprocess_data(tiny_df, base_classification_config)
    table = make_partition_table(tiny_df, vfold_cv, {"v": 4, "strata": "outcome", "seed": 0})
    model = build_model(base_classification_config)

    res = fit_resamples(model, X, y, table, "classification")
    assert list(res.columns) == ["id", "metric", "estimate"]
    assert len(res) == len(table) * len(CLASSIFICATION_METRICS)
    assert set(res["metric"]) == set(CLASSIFICATION_METRICS)
    acc = res[res["metric"] == "accuracy"]["estimate"]
    assert ((acc >= 0) & (acc <= 1)).all()


def test_fit_resamples_regression(tiny_df, base_regression_config):
    X, y = preprocess_data(tiny_df, base_regression_config)
    table = make_partition_table(tiny_df, mc_cv, {"times": 3, "seed": 0})
    model = build_model(base_regression_config)

    res = fit_resamples(model, X, y, table, "regression")
    assert set(res["metric"]) == set(REGRESSION_METRICS)
    assert (res[res["metric"] == "mae"]["estimate"] >= 0).all()


def test_same_downstream_step_consumes_any_strategy(tiny_df, base_classification_config):
    X, y = preprocess_data(tiny_df, base_classification_config)
    model = build_model(base_classification_config)
    for fn, opts in [(vfold_cv, {"v": 4, "seed": 0}), (mc_cv, {"times": 2, "seed": 0}),
                     (bootstraps, {"times": 2, "seed": 0})]:
        table = make_partition_table(tiny_df, fn, opts)
        res = fit_resamples(model, X, y, table, "classification", ["accuracy"])
        assert res["id"].tolist() == table["id"].tolist()


def test_model_is_cloned_not_fitted(tiny_df, base_classification_config):
    X, y = preprocess_data(tiny_df, base_classification_config)
    table = make_partition_table(tiny_df, vfold_cv, {"v": 4, "seed": 0})
    model = build_model(base_classification_config)
    fit_resamples(model, X, y, table, "classification")
    with pytest.raises(NotFittedError):
        check_is_fitted(model)


def test_roc_auc_nan_when_test_has_one_class(tiny_df, base_classification_config):
    X, y = preprocess_data(tiny_df, base_classification_config)
    zeros = np.flatnonzero(y.to_numpy() == 0)
    ones = np.flatnonzero(y.to_numpy() == 1)

    def _one_class_test(dataset):
        return {"train": [np.concatenate([zeros[:8], ones])], "test": [zeros[8:]]}

    table = make_partition_table(tiny_df, _one_class_test)
    res = fit_resamples(build_model(base_classification_config), X, y, table, "classification")
    auc = res[res["metric"] == "roc_auc"]["estimate"].iloc[0]
    assert np.isnan(auc)


def test_empty_test_rows_give_nan_and_are_not_counted(tiny_df, base_regression_config):
    X, y = preprocess_data(tiny_df, base_regression_config)
    rows = np.arange(len(tiny_df))

    def _one_empty(dataset):
        return {"train": [rows[:24], rows], "test": [rows[24:], np.array([], dtype=int)]}

    table = make_partition_table(tiny_df, _one_empty)
    res = fit_resamples(build_model(base_regression_config), X, y, table, "regression", ["rmse"])
    assert np.isnan(res["estimate"].iloc[1])

    summary = summarize_metrics(res)
    assert summary["n"].iloc[0] == 1

    as_dict = metrics_to_dict(res)
    assert as_dict["rmse"]["all"][1] is None


def test_summarize_metrics(tiny_df, base_classification_config):
    X, y = preprocess_data(tiny_df, base_classification_config)
    table = make_partition_table(tiny_df, vfold_cv, {"v": 4, "strata": "outcome", "seed": 0})
    res = fit_resamples(build_model(base_classification_config), X, y, table, "classification")

    summary = summarize_metrics(res)
    assert list(summary.columns) == ["metric", "mean", "std_err", "n"]
    assert summary["metric"].tolist() == CLASSIFICATION_METRICS
    acc = res[res["metric"] == "accuracy"]["estimate"]
    row = summary[summary["metric"] == "accuracy"].iloc[0]
    assert row["n"] == 4
    assert abs(row["mean"] - acc.mean()) < 1e-12
    assert abs(row["std_err"] - acc.std() / 2.0) < 1e-12


def test_compute_metrics_unknown_metric(tiny_df, base_regression_config):
    X, y = preprocess_data(tiny_df, base_regression_config)
    model = build_model(base_regression_config).fit(X, y)
    with pytest.raises(ValueError, match="Unknown metric"):
        compute_metrics(model, X, y, "regression", ["mape"])


def test_spearman_zero_for_constant_predictions(tiny_df, base_regression_config):
    from sklearn.dummy import DummyRegressor
    X, y = preprocess_data(tiny_df, base_regression_config)
    model = DummyRegressor().fit(X, y)
    scores = compute_metrics(model, X, y, "regression", ["spearman"])
    assert scores["spearman"] == 0.0
