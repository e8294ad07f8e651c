"""Interval construction and engine-facing estimation modules."""

from occupancy.estimation.intervals import (
    ParameterEstimate,
    collect,
    compute_interval,
    critical_value,
    estimates_to_frame,
)
from occupancy.estimation.engine import (
    CandidateModel,
    EstimateRequest,
    OccupancyEngine,
)
from occupancy.estimation.model_comparison import ModelComparison

__all__ = [
    "ParameterEstimate",
    "collect",
    "compute_interval",
    "critical_value",
    "estimates_to_frame",
    "CandidateModel",
    "EstimateRequest",
    "OccupancyEngine",
    "ModelComparison",
]
