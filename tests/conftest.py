import pytest
import pandas as pd
import numpy as np


@pytest.fixture(scope="session")
def seed():
    return 42


@pytest.fixture
def tiny_df(seed):
    """
    Small deterministic dataframe with 32 rows.
    Includes:
      - outcome (balanced binary classification target, 16/16)
      - response (continuous regression target)
      - batch (bookkeeping column that must never enter features)
      - numeric features x1..x3
    """
    rng = np.random.default_rng(seed)
    n = 32

    outcome = rng.permutation(np.tile([0, 1], n // 2))
    df = pd.DataFrame({
        "x1": rng.normal(loc=0.0, scale=1.0, size=n) + outcome,
        "x2": rng.integers(0, 5, size=n),
        "x3": rng.uniform(0.0, 1.0, size=n),
        "outcome": outcome,
    })
    df["response"] = 2.0 * df["x1"] - df["x3"] + rng.normal(scale=0.1, size=n)
    df["batch"] = np.arange(n) % 3

    return df


@pytest.fixture
def empty_df(tiny_df):
    return tiny_df.iloc[0:0]


@pytest.fixture
def base_classification_config(tmp_path, seed):
    """
    Minimal config for a decision tree classifier evaluated with 4-fold CV.
    """
    cfg = {
        "experiment": {
            "name": "pytest_classification",
            "seed": seed,
            "output_dir": str(tmp_path / "runs")
        },
        "data": {
            "dataset_path": "DUMMY.csv",
            "target_column": "outcome",
            "target_type": "classification"
        },
        "preprocessing": {
            "columns_to_drop": [],
            "ignored_columns": ["batch", "response"]
        },
        "resampling": {
            "strategy": "vfold",
            "options": {"v": 4, "strata": "outcome"}
        },
        "model": {
            "type": "decision_tree",
            "params": {
                "decision_tree": {"max_depth": 3}
            }
        },
        "metrics": {"save_plots": False}
    }
    return cfg


@pytest.fixture
def base_regression_config(tmp_path, seed):
    cfg = {
        "experiment": {
            "name": "pytest_regression",
            "seed": seed,
            "output_dir": str(tmp_path / "runs")
        },
        "data": {
            "dataset_path": "DUMMY.csv",
            "target_column": "response",
            "target_type": "regression"
        },
        "preprocessing": {
            "columns_to_drop": ["outcome"],
            "ignored_columns": ["batch"]
        },
        "resampling": {
            "strategy": "mc",
            "options": {"prop": 0.75, "times": 5}
        },
        "model": {
            "type": "decision_tree_reg",
            "params": {
                "decision_tree_reg": {"max_depth": 4}
            }
        },
        "metrics": {"save_plots": False}
    }
    return cfg


@pytest.fixture
def base_tuning_config(base_classification_config):
    import copy
    cfg = copy.deepcopy(base_classification_config)
    cfg["experiment"]["name"] = "pytest_tuning"
    cfg["split"] = {"prop": 0.75, "strata": "outcome"}
    cfg["resampling"] = {"strategy": "vfold", "options": {"v": 3, "strata": "outcome"}}
    cfg["model"]["params"] = {"decision_tree": {}}
    cfg["tuning"] = {
        "levels": 2,
        "metric": "accuracy",
        "params": {
            "ccp_alpha": {"range": [1.0e-4, 1.0e-1], "scale": "log10"},
            "max_depth": {"range": [1, 3], "type": "int"},
        }
    }
    return cfg


@pytest.fixture
def leave_block_out():
    """
    Conforming partitioning function that holds out contiguous blocks.
    Returns a list of records, one per block.
    """
    def _partition(dataset, blocks=5):
        rows = np.arange(len(dataset))
        return [
            {"train": np.setdiff1d(rows, block), "test": block}
            for block in np.array_split(rows, blocks)
        ]
    return _partition


@pytest.fixture
def patch_dataset_loader(monkeypatch, tiny_df):
    """
    Monkeypatch load_dataset so runners don't hit disk.
    """
    def _fake_load_dataset(config, dataset_path=None):
        return tiny_df.copy(), "test_dataset.csv"

    monkeypatch.setattr("resampling.data.load_dataset", _fake_load_dataset)
    monkeypatch.setattr("runners.run_resamples.load_dataset", _fake_load_dataset)
    return _fake_load_dataset


@pytest.fixture
def freeze_time(monkeypatch):
    """
    Make run_dir deterministic by freezing datetime.now().
    """
    import datetime as dt

    class _FixedDT:
        @staticmethod
        def now():
            return dt.datetime(2026, 1, 4, 12, 34, 56)

    monkeypatch.setattr("resampling.io.datetime", _FixedDT)
    return _FixedDT


@pytest.fixture
def write_yaml(tmp_path):
    import yaml
    def _write(cfg, name="temp.yaml"):
        p = tmp_path / name
        with open(p, "w") as f:
            yaml.safe_dump(cfg, f, default_flow_style=False)
        return str(p)
    return _write
