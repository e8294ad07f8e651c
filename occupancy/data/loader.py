"""
Detection History Loader

Reads a site-by-survey table and splits it into the three parts an
occupancy engine expects:
1. Detection history - one 0/1 column per survey occasion
2. Site covariates - constant across surveys (slope, aspect, landcover)
3. Survey covariates - one column per occasion (date, temperature, rain)

Columns can be selected by name or by 1-based position; a two-integer
tuple ``(2, 5)`` selects positions 2 through 5 inclusive.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from occupancy.utils.constants import MIN_SITES, MIN_SURVEYS
from occupancy.utils.exceptions import DataLoadError, DataValidationError, InsufficientDataError
from occupancy.utils.logger import get_logger


ColumnSelector = Union[Tuple[int, int], Sequence[Union[int, str]]]


@dataclass
class DetectionData:
    """Detection history with site and survey covariates."""
    detections: pd.DataFrame
    site_covs: pd.DataFrame = field(default_factory=pd.DataFrame)
    obs_covs: Dict[str, pd.DataFrame] = field(default_factory=dict)

    @property
    def n_sites(self) -> int:
        return len(self.detections)

    @property
    def n_surveys(self) -> int:
        return self.detections.shape[1]

    def site_covariate_names(self) -> List[str]:
        return [str(c) for c in self.site_covs.columns]

    def survey_covariate_names(self) -> List[str]:
        return list(self.obs_covs.keys())


def select_columns(df: pd.DataFrame, selector: ColumnSelector) -> pd.DataFrame:
    """
    Select columns by name, 1-based position, or inclusive position range.

    Raises:
        DataValidationError: If a name or position is not in the table
    """
    columns = list(df.columns)

    if isinstance(selector, tuple) and len(selector) == 2 and all(
        isinstance(v, (int, np.integer)) for v in selector
    ):
        start, stop = int(selector[0]), int(selector[1])
        positions = list(range(start, stop + 1))
    else:
        positions = []
        for item in selector:
            if isinstance(item, str):
                if item not in columns:
                    raise DataValidationError([f"Column '{item}' not found"])
                positions.append(columns.index(item) + 1)
            else:
                positions.append(int(item))

    bad = [p for p in positions if p < 1 or p > len(columns)]
    if bad:
        raise DataValidationError(
            [f"Column position {p} outside 1..{len(columns)}" for p in bad]
        )

    return df.iloc[:, [p - 1 for p in positions]].reset_index(drop=True)


def validate_detection_history(detections: pd.DataFrame) -> Tuple[bool, List[str]]:
    """
    Check that a detection history is usable.

    Args:
        detections: Sites x surveys table

    Returns:
        Tuple of (is_valid, list_of_issues)
    """
    issues: List[str] = []

    if detections.empty:
        issues.append("Detection history is empty")
        return False, issues

    values = detections.apply(pd.to_numeric, errors='coerce')
    coerced = int((values.isna() & detections.notna()).sum().sum())
    if coerced > 0:
        issues.append(f"Found {coerced} non-numeric detection values")

    observed = values.to_numpy(dtype=float).ravel()
    observed = observed[~np.isnan(observed)]
    non_binary = int((~np.isin(observed, [0.0, 1.0])).sum())
    if non_binary > 0:
        issues.append(f"Found {non_binary} detection values other than 0/1")

    unsurveyed = int(values.isna().all(axis=1).sum())
    if unsurveyed > 0:
        issues.append(f"Found {unsurveyed} sites with no surveys")

    return len(issues) == 0, issues


def load_detection_history(
    filepath: Union[str, Path],
    detection_cols: ColumnSelector,
    site_cov_cols: Optional[ColumnSelector] = None,
    obs_cov_cols: Optional[Dict[str, ColumnSelector]] = None
) -> DetectionData:
    """
    Load a detection-history CSV.

    Args:
        filepath: Path to CSV with one row per site
        detection_cols: Survey-occasion detection columns
        site_cov_cols: Site covariate columns
        obs_cov_cols: ``{covariate_name: columns}``, one column per survey

    Returns:
        DetectionData

    Raises:
        DataLoadError: If the file is missing or unreadable
        DataValidationError: If detections are not 0/1 or covariates
            do not line up with the surveys
        InsufficientDataError: If there are too few sites or surveys
    """
    logger = get_logger(__name__)
    filepath = Path(filepath)

    if not filepath.exists():
        raise DataLoadError(str(filepath), "File not found")

    try:
        raw = pd.read_csv(filepath)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataLoadError(str(filepath), str(exc)) from exc

    logger.info(f"Loaded {len(raw)} rows from {filepath}")

    detections = select_columns(raw, detection_cols)
    is_valid, issues = validate_detection_history(detections)
    for issue in issues:
        logger.warning(issue)
    if not is_valid:
        raise DataValidationError(issues)
    detections = detections.apply(pd.to_numeric).astype(float)

    if len(detections) < MIN_SITES():
        raise InsufficientDataError(required=MIN_SITES(), available=len(detections), data_type="sites")
    if detections.shape[1] < MIN_SURVEYS():
        raise InsufficientDataError(
            required=MIN_SURVEYS(), available=detections.shape[1], data_type="surveys"
        )

    site_covs = select_columns(raw, site_cov_cols) if site_cov_cols is not None else pd.DataFrame(
        index=detections.index
    )

    obs_covs: Dict[str, pd.DataFrame] = {}
    for name, selector in (obs_cov_cols or {}).items():
        cov = select_columns(raw, selector)
        if cov.shape[1] != detections.shape[1]:
            raise DataValidationError([
                f"Survey covariate '{name}' has {cov.shape[1]} columns, "
                f"expected {detections.shape[1]}"
            ])
        obs_covs[name] = cov

    return DetectionData(detections=detections, site_covs=site_covs, obs_covs=obs_covs)


def summarize(data: DetectionData) -> Dict[str, Any]:
    """
    Describe a detection history before fitting.

    Naive occupancy is the share of surveyed sites with at least one
    detection; it ignores imperfect detection.
    """
    surveyed = data.detections.notna().any(axis=1)
    detected = (data.detections == 1).any(axis=1)
    n_surveyed = int(surveyed.sum())

    return {
        'n_sites': data.n_sites,
        'n_surveys': data.n_surveys,
        'sites_detected': int(detected.sum()),
        'naive_occupancy': float(detected.sum() / n_surveyed) if n_surveyed > 0 else 0.0,
        'missing_surveys': int(data.detections.isna().sum().sum()),
        'site_covariates': data.site_covariate_names(),
        'survey_covariates': data.survey_covariate_names(),
    }
