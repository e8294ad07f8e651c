"""
Custom Exceptions for Occupancy Intervals

Provides specific exception types for better error handling and debugging.
"""


class OccupancyError(Exception):
    """Base exception for all occupancy package errors."""
    pass


class InvalidInputError(OccupancyError, ValueError):
    """Malformed arguments to an interval computation."""
    def __init__(self, argument: str, reason: str):
        self.argument = argument
        self.reason = reason
        super().__init__(f"Invalid {argument}: {reason}")


class DataLoadError(OccupancyError):
    """Error loading or parsing data files."""
    def __init__(self, filepath: str, reason: str):
        self.filepath = filepath
        self.reason = reason
        super().__init__(f"Failed to load {filepath}: {reason}")


class DataValidationError(OccupancyError):
    """Error validating data integrity."""
    def __init__(self, issues: list):
        self.issues = issues
        super().__init__(f"Data validation failed: {', '.join(issues[:3])}")


class InsufficientDataError(OccupancyError):
    """Not enough data for analysis."""
    def __init__(self, required: int, available: int, data_type: str = "sites"):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient data: need {required} {data_type}, have {available}"
        )


class ModelFittingError(OccupancyError):
    """Error raised by the external engine while fitting or predicting."""
    def __init__(self, model: str, reason: str):
        self.model = model
        self.reason = reason
        super().__init__(f"Failed to fit {model}: {reason}")


class ConfigurationError(OccupancyError):
    """Error in configuration."""
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Configuration error for '{key}': {reason}")
