"""Detection-history loading and validation."""

from occupancy.data.loader import (
    DetectionData,
    load_detection_history,
    summarize,
    validate_detection_history,
)

__all__ = [
    "DetectionData",
    "load_detection_history",
    "summarize",
    "validate_detection_history",
]
