# Grid search runner
# Initial split -> resamples of the training rows -> regular grid -> last fit

import argparse
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from resampling.config_schema import validate_tuning_config, ConfigValidationError
from resampling.io import (
    load_config, save_results, create_run_dir, save_data_profile, save_partitions,
    save_tuning_results, frame_records
)
from resampling.models import build_model
from resampling.adapter import make_partition_table
from resampling.partitioners import get_partitioner, initial_split
from resampling.cv import default_metrics, metrics_to_dict
from resampling.tuning import (
    DECISION_TREE_PARAM_RANGES, regular_grid, tune_grid, collect_metrics, show_best,
    select_best, finalize_model, last_fit
)
from runners.run_resamples import set_seeds, resampling_options, prepare_data


def run_tuning(config_path, dataset_path=None, output_dir=None):
    """
    Tune model hyperparameters over resamples of a training split, then
    refit the best candidate and score it once on the held-out test split.

    Args:
        config_path: Path to YAML config file
        dataset_path: Optional path to dataset CSV (overrides config)
        output_dir: Optional output directory (overrides config)

    Returns:
        run_dir: Path to experiment output directory
    """
    config = load_config(config_path)

    if output_dir:
        config['experiment']['output_dir'] = output_dir
    if dataset_path:
        config['data']['dataset_path'] = dataset_path

    try:
        validate_tuning_config(config)
    except ConfigValidationError as e:
        print(f"\nCONFIG ERROR:\n{e}")
        raise

    seed = config['experiment']['seed']
    set_seeds(seed)

    target_type = config['data']['target_type']
    tuning = config['tuning'] or {}
    metric_names = (config.get('metrics') or {}).get('names') or default_metrics(target_type)
    metric = tuning.get('metric') or metric_names[0]
    if metric not in metric_names:
        metric_names = metric_names + [metric]

    print("=" * 60)
    print("HYPERPARAMETER GRID SEARCH")
    print("=" * 60)
    print(f"Experiment: {config['experiment']['name']}")
    print(f"Target: {config['data']['target_column']} ({target_type})")
    print(f"Model: {config['model']['type']}")
    print(f"Selection metric: {metric}")
    print(f"Seed: {seed}")
    print("=" * 60)

    df, X, y, model_frame, actual_path = prepare_data(config, dataset_path)

    # Held-out test rows are never seen during tuning
    split_cfg = config.get('split') or {}
    split = make_partition_table(
        model_frame,
        initial_split,
        {'prop': split_cfg.get('prop', 0.75), 'strata': split_cfg.get('strata'), 'seed': seed},
        require_disjoint=True,
    )
    train_rows = split.iloc[0]['train']
    train_frame = model_frame.iloc[train_rows].reset_index(drop=True)
    X_train, y_train = X.iloc[train_rows].reset_index(drop=True), y.iloc[train_rows].reset_index(drop=True)
    print(f"\nTraining rows: {len(train_rows)} | Test rows: {len(split.iloc[0]['test'])}")

    table = make_partition_table(
        train_frame,
        get_partitioner(config['resampling']['strategy']),
        resampling_options(config),
        require_disjoint=config['resampling'].get('require_disjoint', False),
    )

    grid = regular_grid(tuning.get('params') or DECISION_TREE_PARAM_RANGES, tuning.get('levels', 3))
    model = build_model(config)

    results = tune_grid(model, X_train, y_train, table, grid, target_type, metric_names)

    print("\n" + "=" * 60)
    print(f"TOP CANDIDATES ({metric})")
    print("=" * 60)
    print(show_best(results, metric, n=5).to_string(index=False))

    best_params = select_best(results, metric)
    print(f"\nBest parameters: {best_params}")

    final_model = finalize_model(model, best_params)
    fitted, test_metrics = last_fit(final_model, X, y, split, target_type, metric_names)

    print("\n" + "=" * 60)
    print("HELD-OUT TEST METRICS")
    print("=" * 60)
    for row in test_metrics.itertuples(index=False):
        print(f"{row.metric:10s} {row.estimate:.4f}")

    best_id = show_best(results, metric, n=1)['config'].iloc[0]
    best_config = results[results['config'] == best_id]

    run_dir = create_run_dir(config)
    save_data_profile(run_dir, df, X, y, actual_path)
    save_partitions(run_dir, table)
    save_tuning_results(run_dir, config, collect_metrics(results), best_params, metric)
    save_results(
        run_dir, config, metrics_to_dict(best_config), fitted, X_train, y_train,
        extra={
            'best_params': best_params,
            'selection_metric': metric,
            'n_candidates': int(len(grid)),
            'test_metrics': frame_records(test_metrics),
        }
    )

    print("\n" + "=" * 60)
    print("Grid search complete!")
    print("=" * 60)

    return run_dir


def main():
    parser = argparse.ArgumentParser(
        description='Grid search model hyperparameters over cross-validation resamples'
    )
    parser.add_argument('--config', '-c', type=str, default='configs/tuning_decision_tree.yaml',
                        help='Path to config YAML file')
    parser.add_argument('--dataset', '-d', type=str, default=None,
                        help='Path to dataset CSV (overrides config)')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Output directory (overrides config)')
    args = parser.parse_args()

    run_tuning(args.config, args.dataset, args.output)


if __name__ == "__main__":
    main()
