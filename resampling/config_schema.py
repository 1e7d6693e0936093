# Config schema validation
# Validates config structure, types, and allowed values

from .cv import REGRESSION_METRICS, CLASSIFICATION_METRICS
from .data import BUILTIN_LOADERS
from .models import SUPPORTED_MODELS
from .partitioners import PARTITIONERS

REQUIRED_KEYS = {
    'experiment': ['name', 'seed'],
    'data': ['target_column', 'target_type'],
    'model': ['type'],
    'preprocessing': [],
    'resampling': ['strategy'],
}

ALLOWED_TARGET_TYPES = ['regression', 'classification']

ALLOWED_STRATEGIES = list(PARTITIONERS)

ALLOWED_METRICS = {
    'regression': REGRESSION_METRICS,
    'classification': CLASSIFICATION_METRICS,
}

BUILTIN_DATASETS = list(BUILTIN_LOADERS)


class ConfigValidationError(Exception):
    """Raised when config validation fails."""
    pass


def validate_config(config, mode='resamples'):
    """
    Validate experiment configuration.

    Args:
        config: dict - Configuration dictionary
        mode: str - 'resamples' or 'tuning'

    Raises:
        ConfigValidationError if validation fails
    """
    errors = []

    # Check required top-level keys
    for section, required_keys in REQUIRED_KEYS.items():
        if section not in config or config[section] is None:
            errors.append(f"Missing required section: '{section}'")
            continue

        for key in required_keys:
            if key not in config[section]:
                errors.append(f"Missing required key: '{section}.{key}'")

    if mode == 'tuning' and 'tuning' not in config:
        errors.append("Missing required section: 'tuning'")

    if errors:
        raise ConfigValidationError("Config validation failed:\n  - " + "\n  - ".join(errors))

    # Validate data source
    data = config['data']
    if not data.get('dataset_path') and not data.get('builtin'):
        errors.append("data.dataset_path or data.builtin must be set")
    if data.get('builtin') and data['builtin'] not in BUILTIN_DATASETS:
        errors.append(f"Invalid builtin dataset '{data['builtin']}'. Allowed: {BUILTIN_DATASETS}")

    target_type = data.get('target_type')
    if target_type not in ALLOWED_TARGET_TYPES:
        errors.append(f"Invalid target_type '{target_type}'. Allowed: {ALLOWED_TARGET_TYPES}")

    # Validate model type against the target type
    model_type = config['model'].get('type')
    all_models = SUPPORTED_MODELS['regression'] + SUPPORTED_MODELS['classification']
    if model_type not in all_models:
        errors.append(f"Invalid model type '{model_type}'. Allowed: {all_models}")
    elif target_type in ALLOWED_TARGET_TYPES and model_type not in SUPPORTED_MODELS[target_type]:
        errors.append(f"Model type '{model_type}' does not support {target_type}. Allowed: {SUPPORTED_MODELS[target_type]}")

    # Validate resampling strategy
    resampling = config['resampling']
    strategy = resampling.get('strategy')
    if strategy not in ALLOWED_STRATEGIES:
        errors.append(f"Invalid resampling strategy '{strategy}'. Allowed: {ALLOWED_STRATEGIES}")

    options = resampling.get('options') or {}
    if not isinstance(options, dict):
        errors.append("resampling.options must be a mapping")
        options = {}
    for key in ('v', 'times', 'repeats'):
        if key in options and (not isinstance(options[key], int) or options[key] < 1):
            errors.append(f"resampling.options.{key} must be a positive integer")
    if 'v' in options and isinstance(options['v'], int) and options['v'] < 2:
        errors.append("resampling.options.v must be >= 2")
    if 'prop' in options:
        errors.extend(_check_prop(options['prop'], 'resampling.options.prop'))

    # Validate initial split
    split = config.get('split') or {}
    if 'prop' in split:
        errors.extend(_check_prop(split['prop'], 'split.prop'))

    # Validate metrics
    allowed_metrics = ALLOWED_METRICS.get(target_type, [])
    for name in (config.get('metrics') or {}).get('names', []) or []:
        if name not in allowed_metrics:
            errors.append(f"Invalid metric '{name}' for {target_type}. Allowed: {allowed_metrics}")

    # Tuning-specific validation
    if mode == 'tuning':
        tuning = config['tuning'] or {}
        levels = tuning.get('levels', 3)
        if not isinstance(levels, int) or levels < 1:
            errors.append("tuning.levels must be an integer >= 1")
        metric = tuning.get('metric')
        if metric is not None and metric not in allowed_metrics:
            errors.append(f"Invalid tuning metric '{metric}' for {target_type}. Allowed: {allowed_metrics}")
        if not tuning.get('params') and not str(model_type).startswith('decision_tree'):
            errors.append("tuning.params is required for models other than decision trees")
        for name, param_range in (tuning.get('params') or {}).items():
            if not isinstance(param_range, dict) or ('range' not in param_range and 'values' not in param_range):
                errors.append(f"tuning.params.{name} needs 'range' or 'values'")
            elif 'range' in param_range and (not isinstance(param_range['range'], list) or len(param_range['range']) != 2):
                errors.append(f"tuning.params.{name}.range must be [low, high]")

    # Validate types
    if not isinstance(config['experiment'].get('seed'), int):
        errors.append("experiment.seed must be an integer")

    if errors:
        raise ConfigValidationError("Config validation failed:\n  - " + "\n  - ".join(errors))

    return True


def _check_prop(prop, key):
    if not isinstance(prop, (int, float)) or not 0 < prop < 1:
        return [f"{key} must be between 0 and 1 (exclusive)"]
    return []


def validate_resamples_config(config):
    """Validate config specifically for resampled model evaluation."""
    return validate_config(config, mode='resamples')


def validate_tuning_config(config):
    """Validate config specifically for grid search runs."""
    return validate_config(config, mode='tuning')
