# Resampling package
# Pluggable partitioning strategies, a uniform partition table, and the
# fitting/tuning steps that consume it

from .errors import ResamplingError, EmptyDatasetError, ShapeMismatch, PartitionIndexError, OverlapError
from .adapter import make_partition_table, training, testing
from .partitioners import (
    Partitioner, FunctionPartitioner, PARTITIONERS, get_partitioner,
    vfold_cv, mc_cv, bootstraps, validation_split, initial_split
)
from .cv import fit_resamples, summarize_metrics, compute_metrics
from .tuning import (
    regular_grid, tune_grid, collect_metrics, show_best, select_best,
    finalize_model, last_fit, DECISION_TREE_PARAM_RANGES
)
from .config_schema import validate_config, ConfigValidationError
from .io import load_config, save_results, create_run_dir, save_data_profile
from .data import load_dataset, preprocess_data, validate_data_integrity
from .models import build_model, SUPPORTED_MODELS

__all__ = [
    'ResamplingError',
    'EmptyDatasetError',
    'ShapeMismatch',
    'PartitionIndexError',
    'OverlapError',
    'make_partition_table',
    'training',
    'testing',
    'Partitioner',
    'FunctionPartitioner',
    'PARTITIONERS',
    'get_partitioner',
    'vfold_cv',
    'mc_cv',
    'bootstraps',
    'validation_split',
    'initial_split',
    'fit_resamples',
    'summarize_metrics',
    'compute_metrics',
    'regular_grid',
    'tune_grid',
    'collect_metrics',
    'show_best',
    'select_best',
    'finalize_model',
    'last_fit',
    'DECISION_TREE_PARAM_RANGES',
    'validate_config',
    'ConfigValidationError',
    'load_config',
    'save_results',
    'create_run_dir',
    'save_data_profile',
    'load_dataset',
    'preprocess_data',
    'validate_data_integrity',
    'build_model',
    'SUPPORTED_MODELS',
]
