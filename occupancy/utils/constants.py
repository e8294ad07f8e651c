"""
Constants and Thresholds

Centralized location for default levels and thresholds.
These can be overridden by config.yaml values.
"""

import yaml
from pathlib import Path


def _load_config() -> dict:
    """Load configuration from config.yaml."""
    config_path = Path(__file__).parent.parent.parent / "configs" / "config.yaml"
    if config_path.exists():
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    return {}


def get_threshold(key: str, default: float) -> float:
    """
    Get a threshold value from config or use default.

    Args:
        key: The threshold key (e.g., 'min_sites')
        default: Default value if not found in config

    Returns:
        The threshold value
    """
    config = _load_config()
    thresholds = config.get('thresholds', {}) or {}
    return thresholds.get(key, default)


# Interval construction
def DEFAULT_CONFIDENCE_LEVEL() -> float:
    """Two-sided confidence level for Wald intervals."""
    config = _load_config()
    intervals = config.get('intervals', {}) or {}
    return float(intervals.get('confidence_level', 0.95))


# Data requirements
def MIN_SITES() -> int:
    """Minimum number of surveyed sites for a detection history."""
    return int(get_threshold('min_sites', 2))


def MIN_SURVEYS() -> int:
    """Minimum number of repeat surveys per site."""
    return int(get_threshold('min_surveys', 2))


# Prediction curves
def PREDICTION_GRID_POINTS() -> int:
    """Number of covariate values in a prediction curve."""
    return int(get_threshold('prediction_grid_points', 100))
