"""Utility modules for logging, configuration, and errors."""

from occupancy.utils.exceptions import (
    OccupancyError,
    InvalidInputError,
    DataLoadError,
    DataValidationError,
    InsufficientDataError,
    ModelFittingError,
    ConfigurationError,
)

__all__ = [
    'OccupancyError',
    'InvalidInputError',
    'DataLoadError',
    'DataValidationError',
    'InsufficientDataError',
    'ModelFittingError',
    'ConfigurationError',
]
