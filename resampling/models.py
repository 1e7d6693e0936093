# Model building utilities

from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor
from sklearn.linear_model import LogisticRegression, Ridge
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor


SUPPORTED_MODELS = {
    'regression': ['decision_tree_reg', 'random_forest_reg', 'ridge'],
    'classification': ['decision_tree', 'random_forest', 'logistic_regression']
}

# Models that support random_state parameter
MODELS_WITH_RANDOM_STATE = [
    'decision_tree', 'decision_tree_reg', 'random_forest', 'random_forest_reg',
    'logistic_regression'
]

# Models that are deterministic (no random_state needed)
DETERMINISTIC_MODELS = ['ridge']


def build_model(config):
    """
    Build and return an unfitted model instance based on config.

    Params come from ``model.params.<type>``. Tree-based models get
    ``random_state`` from ``experiment.seed`` so splits on tied features are
    reproducible.
    """
    model_type = config['model']['type']
    params = (config['model'].get('params') or {}).get(model_type, {}) or {}
    seed = config['experiment']['seed']

    # Classification models
    if model_type == 'decision_tree':
        return DecisionTreeClassifier(random_state=seed, **params)

    elif model_type == 'random_forest':
        return RandomForestClassifier(random_state=seed, **params)

    elif model_type == 'logistic_regression':
        return LogisticRegression(random_state=seed, **params)

    # Regression models
    elif model_type == 'decision_tree_reg':
        return DecisionTreeRegressor(random_state=seed, **params)

    elif model_type == 'random_forest_reg':
        return RandomForestRegressor(random_state=seed, **params)

    elif model_type == 'ridge':
        # Ridge is deterministic, no random_state
        return Ridge(**params)

    else:
        raise ValueError(
            f"Unknown model type: '{model_type}'. "
            f"Supported: {SUPPORTED_MODELS}"
        )


def get_model_info(model_type):
    """Get information about a model type."""
    info = {
        'type': model_type,
        'supports_random_state': model_type in MODELS_WITH_RANDOM_STATE,
        'is_deterministic': model_type in DETERMINISTIC_MODELS,
        'task_type': 'regression' if model_type in SUPPORTED_MODELS['regression'] else 'classification'
    }
    return info
