# Runners package
# Command-line entry points for resampled evaluation and grid search

from . import run_resamples
from . import run_tuning

__all__ = [
    'run_resamples',
    'run_tuning',
]
