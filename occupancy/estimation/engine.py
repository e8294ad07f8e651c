"""
Occupancy Engine Interface

The statistical work (maximum-likelihood fitting, AIC tables, dredging,
back-transformation with delta-method standard errors, prediction) lives
in an external engine. This module describes the calls the package makes
on it and the small records passed across that boundary.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple, runtime_checkable

import pandas as pd

from occupancy.data.loader import DetectionData


SUBMODELS = ('state', 'det')


@dataclass(frozen=True)
class CandidateModel:
    """One detection/occupancy formula pair to fit."""
    name: str
    detection: str = '~1'
    occupancy: str = '~1'

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> 'CandidateModel':
        """Build from a config entry with name/detection/occupancy keys."""
        return cls(
            name=str(entry['name']),
            detection=str(entry.get('detection', '~1')),
            occupancy=str(entry.get('occupancy', '~1')),
        )


@dataclass(frozen=True)
class EstimateRequest:
    """
    A quantity to back-transform from a fitted model.

    ``coefficients`` selects a linear combination of the submodel's
    coefficients, e.g. (1, 0) for the intercept and (1, 1) for the
    intercept plus one unit of the first covariate. None asks for the
    submodel's intercept-only back-transform.
    """
    name: str
    model: str
    submodel: str = 'state'
    coefficients: Optional[Tuple[float, ...]] = None

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> 'EstimateRequest':
        coefficients = entry.get('coefficients')
        return cls(
            name=str(entry['name']),
            model=str(entry['model']),
            submodel=str(entry.get('submodel', 'state')),
            coefficients=tuple(float(c) for c in coefficients) if coefficients is not None else None,
        )


@runtime_checkable
class OccupancyEngine(Protocol):
    """Calls the package makes on an external occupancy-model library."""

    def fit(self, data: DetectionData, detection_formula: str, occupancy_formula: str) -> Any:
        """Fit a single-season occupancy model and return the fitted object."""
        ...

    def model_selection(self, fits: Dict[str, Any]) -> pd.DataFrame:
        """Return a table with at least model, n_params and aic columns."""
        ...

    def dredge(self, fit: Any) -> pd.DataFrame:
        """Fit every covariate subset of ``fit`` and return its AIC table."""
        ...

    def back_transform(
        self,
        fit: Any,
        submodel: str,
        coefficients: Optional[Sequence[float]] = None
    ) -> Tuple[float, float]:
        """Return (estimate, se) on the probability scale."""
        ...

    def predict(self, fit: Any, submodel: str, newdata: pd.DataFrame) -> pd.DataFrame:
        """Return a frame with estimate and se columns, one row per newdata row."""
        ...
