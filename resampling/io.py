# I/O utilities for resampling runs
# Config loading, result saving, run directory management

import os
import json
import hashlib
from datetime import datetime

import yaml
import numpy as np
import pandas as pd


def load_config(config_path):
    """Load YAML configuration file."""
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Config file is empty or invalid: {config_path}")

    return config


def config_hash(config):
    """Generate deterministic hash of config for run naming."""
    config_str = json.dumps(config, sort_keys=True)
    return hashlib.md5(config_str.encode()).hexdigest()[:8]


def dataset_hash(df):
    """Generate hash of dataset content for fingerprinting."""
    # Hash based on shape and sample of data
    content = f"{df.shape}_{df.columns.tolist()}_{df.head(10).to_json()}_{df.tail(10).to_json()}"
    return hashlib.md5(content.encode()).hexdigest()[:12]


def create_run_dir(config, output_dir=None):
    """Create unique run directory for experiment outputs."""
    output_dir = output_dir or config['experiment'].get('output_dir', 'runs')
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    cfg_hash = config_hash(config)
    run_name = f"{config['experiment']['name']}_{timestamp}_{cfg_hash}"
    run_dir = os.path.join(output_dir, run_name)
    os.makedirs(run_dir, exist_ok=True)
    return run_dir


def frame_records(frame):
    """DataFrame -> list of records with NaN as null."""
    records = frame.to_dict('records')
    return [
        {k: (None if isinstance(v, float) and np.isnan(v) else (v.item() if isinstance(v, np.generic) else v))
         for k, v in record.items()}
        for record in records
    ]


def save_partitions(run_dir, table, name='partitions.json'):
    """Save partition ids and train/test sizes (not the row positions themselves)."""
    summary = [
        {
            'id': int(pair.id),
            'n_train': int(len(pair.train)),
            'n_test': int(len(pair.test)),
            'n_train_unique': int(len(np.unique(pair.train))),
        }
        for pair in table.itertuples(index=False)
    ]
    with open(os.path.join(run_dir, name), 'w') as f:
        json.dump(summary, f, indent=2)
    return summary


def save_results(run_dir, config, cv_results, model, X, y, extra=None):
    """
    Save run artifacts to run directory.

    Args:
        run_dir: output directory from ``create_run_dir``
        config: validated config dict
        cv_results: {metric: {mean, std, all}} from ``metrics_to_dict``
        model: estimator to persist (fitted on X, y here when unfitted)
        X, y: full training data for the persisted model
        extra: optional dict merged into metrics.json
    """
    import joblib
    from sklearn.utils.validation import check_is_fitted
    from sklearn.exceptions import NotFittedError

    # Save config
    with open(os.path.join(run_dir, 'config.yaml'), 'w') as f:
        yaml.dump(config, f, default_flow_style=False)

    results_json = {
        'experiment_name': config['experiment']['name'],
        'seed': config['experiment']['seed'],
        'model_type': config['model']['type'],
        'target_column': config['data']['target_column'],
        'target_type': config['data']['target_type'],
        'resampling': config['resampling'],
        'cv_results': cv_results,
    }
    if extra:
        results_json.update(extra)

    with open(os.path.join(run_dir, 'metrics.json'), 'w') as f:
        json.dump(results_json, f, indent=2)

    # Final model on all rows unless already fitted (e.g. by last_fit)
    try:
        check_is_fitted(model)
    except NotFittedError:
        model.fit(X, y)
    model_path = os.path.join(run_dir, 'model.joblib')
    joblib.dump(model, model_path)
    print(f"Model saved to: {model_path}")

    if config.get('metrics', {}).get('save_plots', True):
        _save_cv_plot(run_dir, config, cv_results)

    print(f"Results saved to: {run_dir}")
    return run_dir


def _save_cv_plot(run_dir, config, cv_results):
    """Save per-resample score distribution plot."""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    metric_names = [k for k in cv_results.keys() if isinstance(cv_results[k], dict) and 'all' in cv_results[k]]
    fig, axes = plt.subplots(2, 2, figsize=(12, 10))
    axes = axes.flatten()

    for i, metric in enumerate(metric_names[:4]):
        ax = axes[i]
        scores = [s for s in cv_results[metric]['all'] if s is not None]
        ax.hist(scores, bins=20, edgecolor='black', alpha=0.7)
        if cv_results[metric]['mean'] is not None:
            ax.axvline(cv_results[metric]['mean'], color='red', linestyle='--',
                       label=f"Mean: {cv_results[metric]['mean']:.4f}")
            ax.legend()
        ax.set_title(f"{metric.upper()} Distribution")
        ax.set_xlabel(metric)
        ax.set_ylabel("Frequency")

    plt.suptitle(f"{config['model']['type']} - {config['data']['target_column']}", fontsize=14)
    plt.tight_layout()
    plt.savefig(os.path.join(run_dir, 'cv_distribution.png'), dpi=150)
    plt.close()


def save_tuning_results(run_dir, config, tuning_summary, best_params, metric):
    """Save per-candidate tuning summary and, optionally, a metric-vs-parameter plot."""
    tuning_summary.to_csv(os.path.join(run_dir, 'tuning_metrics.csv'), index=False)

    with open(os.path.join(run_dir, 'best_params.json'), 'w') as f:
        json.dump({'metric': metric, 'params': best_params}, f, indent=2)

    if config.get('metrics', {}).get('save_plots', True):
        _save_tuning_plot(run_dir, tuning_summary, best_params, metric)

    return frame_records(tuning_summary)


def _save_tuning_plot(run_dir, tuning_summary, best_params, metric):
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    params = list(best_params)
    summary = tuning_summary[tuning_summary['metric'] == metric]

    fig, axes = plt.subplots(1, len(params), figsize=(5 * len(params), 4), squeeze=False)
    for ax, param in zip(axes[0], params):
        means = summary.groupby(param, sort=False, dropna=False)['mean'].mean()
        if pd.api.types.is_numeric_dtype(means.index):
            means = means.sort_index()
            ax.plot(means.index, means.values, marker='o')
            if param == 'ccp_alpha':
                ax.set_xscale('log')
        else:
            # None or mixed candidates, one tick per value
            positions = np.arange(len(means))
            ax.plot(positions, means.values, marker='o')
            ax.set_xticks(positions)
            ax.set_xticklabels(['None' if pd.isna(v) else str(v) for v in means.index])
        ax.set_xlabel(param)
        ax.set_ylabel(metric)

    plt.suptitle(f"Grid search: mean {metric} by parameter", fontsize=12)
    plt.tight_layout()
    plt.savefig(os.path.join(run_dir, 'tuning_metrics.png'), dpi=150)
    plt.close()


def save_data_profile(run_dir, df, X, y, dataset_path):
    """Save dataset fingerprint/profile for reproducibility tracking."""
    numeric_target = pd.api.types.is_numeric_dtype(y)
    profile = {
        'dataset_path': str(dataset_path) if dataset_path else None,
        'dataset_hash': dataset_hash(df),
        'total_rows': len(df),
        'total_columns': len(df.columns),
        'feature_count': len(X.columns),
        'features_used': list(X.columns),
        'target_column': y.name,
        'target_stats': {
            'mean': float(y.mean()) if numeric_target else None,
            'std': float(y.std()) if numeric_target else None,
            'unique_values': int(y.nunique()),
            'value_counts': {str(k): int(v) for k, v in y.value_counts().items()} if y.nunique() <= 10 else None
        },
        'missing_values': int(X.isnull().sum().sum()),
        'timestamp': datetime.now().isoformat()
    }

    with open(os.path.join(run_dir, 'data_profile.json'), 'w') as f:
        json.dump(profile, f, indent=2)

    return profile
