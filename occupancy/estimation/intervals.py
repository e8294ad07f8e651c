"""
Wald Interval Module

Builds symmetric confidence intervals from a point estimate and its
standard error, as returned by an occupancy engine after back-transforming
a linear combination of coefficients.

Intervals are not clipped to [0, 1]; for estimates near the boundary the
Wald interval can extend past the natural range of a probability.
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Sequence, Union

import pandas as pd
from scipy import stats

from occupancy.utils.exceptions import InvalidInputError


ESTIMATE_COLUMNS = ['parameter', 'estimate', 'se', 'lower', 'upper']


@dataclass(frozen=True)
class ParameterEstimate:
    """A named point estimate with its Wald confidence interval."""
    name: str
    estimate: float
    se: float
    lower: float
    upper: float
    confidence_level: float = 0.95

    def width(self) -> float:
        """Distance between the interval bounds."""
        return self.upper - self.lower

    def to_dict(self) -> Dict[str, float]:
        """Row representation used by report tables."""
        row = asdict(self)
        row['parameter'] = row.pop('name')
        return row


def critical_value(confidence_level: float = 0.95) -> float:
    """
    Two-sided standard normal critical value.

    Args:
        confidence_level: Coverage in the open interval (0, 1)

    Returns:
        z such that P(-z < Z < z) = confidence_level (1.959964 for 0.95)

    Raises:
        InvalidInputError: If confidence_level is outside (0, 1)
    """
    if not (0.0 < confidence_level < 1.0):
        raise InvalidInputError(
            'confidence_level',
            f"must lie strictly between 0 and 1, got {confidence_level}"
        )
    return float(stats.norm.ppf(1.0 - (1.0 - confidence_level) / 2.0))


def compute_interval(
    estimate: float,
    se: float,
    confidence_level: float = 0.95,
    name: str = ''
) -> ParameterEstimate:
    """
    Compute a Wald confidence interval around a point estimate.

    The caller decides the scale: pass a back-transformed probability
    and its delta-method standard error, or a link-scale coefficient.

    Args:
        estimate: Point estimate
        se: Standard error of the estimate, non-negative
        confidence_level: Two-sided coverage in (0, 1)
        name: Label for the estimate (e.g. 'Occupancy_1')

    Returns:
        ParameterEstimate with lower = estimate - z*se and
        upper = estimate + z*se

    Raises:
        InvalidInputError: On a negative or non-finite standard error,
            an out-of-range confidence level, or an empty name
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError('name', "a non-empty label is required")
    if not math.isfinite(estimate):
        raise InvalidInputError('estimate', f"must be finite, got {estimate}")
    if not math.isfinite(se) or se < 0:
        raise InvalidInputError('se', f"must be a finite value >= 0, got {se}")

    z = critical_value(confidence_level)
    margin = z * se

    return ParameterEstimate(
        name=name,
        estimate=float(estimate),
        se=float(se),
        lower=float(estimate - margin),
        upper=float(estimate + margin),
        confidence_level=float(confidence_level),
    )


def collect(
    *estimates: Union[ParameterEstimate, Iterable[ParameterEstimate]]
) -> List[ParameterEstimate]:
    """
    Concatenate estimates in the order given.

    Accepts individual estimates and sequences of estimates, flattening
    one level. Names are not deduplicated and nothing is sorted.

    Returns:
        New list of ParameterEstimate; empty when given nothing
    """
    collected: List[ParameterEstimate] = []
    for item in estimates:
        if isinstance(item, ParameterEstimate):
            collected.append(item)
            continue
        for est in item:
            if not isinstance(est, ParameterEstimate):
                raise InvalidInputError(
                    'estimates',
                    f"expected ParameterEstimate, got {type(est).__name__}"
                )
            collected.append(est)
    return collected


def estimates_to_frame(estimates: Sequence[ParameterEstimate]) -> pd.DataFrame:
    """Tabulate estimates with one row per parameter, keeping order."""
    rows = [est.to_dict() for est in estimates]
    df = pd.DataFrame(rows, columns=ESTIMATE_COLUMNS + ['confidence_level'])
    return df
