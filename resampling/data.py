# Data loading and preprocessing utilities

import os

import numpy as np
import pandas as pd
from sklearn import datasets

BUILTIN_LOADERS = {
    'iris': datasets.load_iris,
    'wine': datasets.load_wine,
    'breast_cancer': datasets.load_breast_cancer,
    'diabetes': datasets.load_diabetes,
}


def load_dataset(config, dataset_path=None):
    """
    Load dataset from a CSV path or a scikit-learn bundled dataset.

    Returns:
        df: DataFrame with features and target
        path: CSV path, or 'builtin:<name>'
    """
    path = dataset_path or config['data'].get('dataset_path')

    if path is None:
        name = config['data'].get('builtin')
        if name is None:
            raise ValueError("No dataset given: set data.dataset_path, data.builtin or pass --dataset")
        if name not in BUILTIN_LOADERS:
            raise ValueError(f"Unknown builtin dataset '{name}'. Available: {list(BUILTIN_LOADERS)}")

        print(f"Loading builtin dataset: {name}")
        df = BUILTIN_LOADERS[name](as_frame=True).frame
        return df, f"builtin:{name}"

    if not os.path.exists(path):
        raise FileNotFoundError(f"Dataset file not found: {path}")

    print(f"Loading dataset: {path}")
    df = pd.read_csv(path)

    return df, path


def preprocess_data(df, config):
    """
    Preprocess dataset: extract features and target.

    Returns:
        X: DataFrame of features
        y: Series of target values
    """
    target = config['data']['target_column']
    preprocessing = config.get('preprocessing') or {}

    # Drop auxiliary columns
    cols_to_drop = preprocessing.get('columns_to_drop', []) or []
    df = df.drop(columns=[c for c in cols_to_drop if c in df.columns])

    # Verify target exists
    if target not in df.columns:
        raise ValueError(f"Target column '{target}' not found in dataset. Available: {list(df.columns)}")

    # Ignored columns stay in the frame but are not used as features
    ignored = preprocessing.get('ignored_columns', []) or []
    ignored = [c for c in ignored if c in df.columns and c != target]

    feature_cols = [c for c in df.columns if c != target and c not in ignored]

    X = df[feature_cols].reset_index(drop=True)
    y = df[target].reset_index(drop=True)

    if ignored:
        print(f"IGNORED columns (not used in training): {ignored}")

    return X, y


def validate_data_integrity(X, y):
    """
    Validate data integrity before resampling.

    Checks:
    - At least one row
    - No NaN/infinite values
    - Numeric feature columns only
    """
    errors = []

    if len(X) == 0:
        errors.append("Dataset has no rows")

    # Check for NaN in features
    nan_cols = X.columns[X.isnull().any()].tolist()
    if nan_cols:
        errors.append(f"NaN values found in features: {nan_cols}")

    # Check for NaN in target
    if y.isnull().any():
        errors.append(f"NaN values found in target ({y.name}): {y.isnull().sum()} missing")

    non_numeric = X.columns.difference(X.select_dtypes(include=[np.number]).columns).tolist()
    if non_numeric:
        errors.append(f"Non-numeric feature columns (drop or ignore them): {non_numeric}")

    # Check for infinite values in features
    numeric_cols = X.select_dtypes(include=[np.number]).columns
    for col in numeric_cols:
        if not np.isfinite(X[col]).all():
            errors.append(f"Infinite values found in feature: {col}")

    # Check for infinite values in target (if numeric)
    if np.issubdtype(y.dtype, np.number):
        if not np.isfinite(y).all():
            errors.append(f"Infinite values found in target: {y.name}")

    if errors:
        raise ValueError("Data integrity check failed:\n  - " + "\n  - ".join(errors))

    return True
