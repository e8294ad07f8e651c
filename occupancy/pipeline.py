"""
Occupancy Analysis Pipeline

Runs a single-season occupancy workflow against an injected engine:
1. Load the detection history and its covariates
2. Fit candidate detection/occupancy models
3. Rank them by AIC
4. Back-transform quantities of interest and build Wald intervals
5. Save tables and figures
"""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from occupancy.data.loader import DetectionData, load_detection_history, summarize
from occupancy.estimation.engine import SUBMODELS, CandidateModel, EstimateRequest, OccupancyEngine
from occupancy.estimation.intervals import (
    ParameterEstimate,
    collect,
    compute_interval,
    estimates_to_frame,
)
from occupancy.estimation.model_comparison import ModelComparison
from occupancy.utils.config_manager import ConfigManager
from occupancy.utils.constants import DEFAULT_CONFIDENCE_LEVEL, PREDICTION_GRID_POINTS
from occupancy.utils.exceptions import ConfigurationError, ModelFittingError
from occupancy.utils.logger import get_logger
from occupancy.visualization.plots import EstimateVisualizer


class OccupancyAnalysis:
    """Orchestrates fitting, ranking, and interval reporting."""

    def __init__(
        self,
        engine: OccupancyEngine,
        config_path: Optional[str] = None,
        output_dir: str = 'results',
        confidence_level: Optional[float] = None
    ):
        """
        Initialize the analysis.

        Args:
            engine: External occupancy-model engine
            config_path: Optional YAML configuration file
            output_dir: Directory for tables and figures
            confidence_level: Overrides intervals.confidence_level
        """
        self.engine = engine
        self.config = ConfigManager()
        if config_path:
            self.config.load(config_path)

        if confidence_level is None:
            confidence_level = float(
                self.config.get('intervals.confidence_level', DEFAULT_CONFIDENCE_LEVEL())
            )
        self.confidence_level = confidence_level

        self.output_dir = Path(output_dir)
        self.logger = get_logger(__name__)
        self.comparison = ModelComparison(engine)

        self.data: Optional[DetectionData] = None
        self.fits: Dict[str, Any] = {}
        self.selection: Optional[pd.DataFrame] = None
        self.estimates: List[ParameterEstimate] = []

    def load_data(self, filepath: Optional[str] = None) -> DetectionData:
        """Load the detection history named in config (or ``filepath``)."""
        path = filepath or self.config.require('data.path')
        self.data = load_detection_history(
            path,
            detection_cols=self.config.require('data.detection_cols'),
            site_cov_cols=self.config.get('data.site_cov_cols'),
            obs_cov_cols=self.config.get('data.obs_cov_cols'),
        )

        summary = summarize(self.data)
        self.logger.info(
            f"Detection history: {summary['n_sites']} sites x {summary['n_surveys']} surveys, "
            f"{summary['sites_detected']} with detections "
            f"(naive occupancy {summary['naive_occupancy']:.3f})"
        )
        return self.data

    def fit_models(self, candidates: Optional[Sequence[CandidateModel]] = None) -> Dict[str, Any]:
        """
        Fit each candidate model through the engine.

        Args:
            candidates: Models to fit; defaults to the ``models`` config list

        Returns:
            ``{model_name: fitted_model}`` in candidate order
        """
        if self.data is None:
            self.load_data()

        if candidates is None:
            candidates = [CandidateModel.from_dict(entry) for entry in self.config.get('models', [])]
        if not candidates:
            raise ConfigurationError('models', "no candidate models to fit")

        for candidate in candidates:
            self.logger.info(
                f"Fitting {candidate.name}: detection {candidate.detection}, "
                f"occupancy {candidate.occupancy}"
            )
            try:
                self.fits[candidate.name] = self.engine.fit(
                    self.data, candidate.detection, candidate.occupancy
                )
            except Exception as exc:
                raise ModelFittingError(candidate.name, str(exc)) from exc

        return self.fits

    def rank_models(self) -> pd.DataFrame:
        """AIC table of the fitted models."""
        if not self.fits:
            self.fit_models()
        self.selection = self.comparison.compare(self.fits)
        return self.selection

    def dredge(self, model: str) -> pd.DataFrame:
        """Dredge covariate subsets of a fitted model."""
        return self.comparison.dredge(self._get_fit(model), name=model)

    def estimate(self, request: EstimateRequest) -> ParameterEstimate:
        """Back-transform one quantity and wrap it in a Wald interval."""
        if request.submodel not in SUBMODELS:
            raise ConfigurationError(
                f"estimates.{request.name}.submodel",
                f"expected one of {SUBMODELS}, got '{request.submodel}'"
            )

        fit = self._get_fit(request.model)
        try:
            value, se = self.engine.back_transform(fit, request.submodel, request.coefficients)
        except Exception as exc:
            raise ModelFittingError(request.model, f"back-transform failed: {exc}") from exc

        return compute_interval(value, se, self.confidence_level, request.name)

    def extract_estimates(self, requests: Optional[Sequence[EstimateRequest]] = None) -> List[ParameterEstimate]:
        """
        Build intervals for each requested quantity, in request order.

        Args:
            requests: Quantities to report; defaults to the ``estimates``
                config list

        Returns:
            Collected ParameterEstimate list
        """
        if requests is None:
            requests = [EstimateRequest.from_dict(entry) for entry in self.config.get('estimates', [])]

        self.estimates = collect([self.estimate(request) for request in requests])

        for est in self.estimates:
            self.logger.info(
                f"  {est.name} = {est.estimate:.3f} "
                f"{est.confidence_level:.0%} CI [{est.lower:.3f}, {est.upper:.3f}]"
            )
        return self.estimates

    def predict_curve(
        self,
        model: str,
        covariate: str,
        submodel: str = 'state',
        values: Optional[Sequence[float]] = None
    ) -> pd.DataFrame:
        """
        Predicted probability across a range of covariate values.

        Args:
            model: Name of a fitted model
            covariate: Covariate to vary
            submodel: 'state' for occupancy, 'det' for detection
            values: Covariate values; defaults to an even grid over the
                observed site-covariate range

        Returns:
            DataFrame with the covariate column and estimate, se, lower,
            upper, confidence_level columns
        """
        fit = self._get_fit(model)

        if values is None:
            if self.data is None or covariate not in self.data.site_covs.columns:
                raise ConfigurationError(
                    'prediction.covariate',
                    f"no observed values for '{covariate}'; pass values explicitly"
                )
            observed = self.data.site_covs[covariate].astype(float)
            values = np.linspace(observed.min(), observed.max(), PREDICTION_GRID_POINTS())

        newdata = pd.DataFrame({covariate: np.asarray(values, dtype=float)})
        try:
            predicted = self.engine.predict(fit, submodel, newdata)
        except Exception as exc:
            raise ModelFittingError(model, f"prediction failed: {exc}") from exc

        missing = {'estimate', 'se'} - set(predicted.columns)
        if missing:
            raise ModelFittingError(model, f"prediction lacks columns {sorted(missing)}")
        if len(predicted) != len(newdata):
            raise ModelFittingError(
                model,
                f"prediction returned {len(predicted)} rows for {len(newdata)} covariate values"
            )

        intervals = [
            compute_interval(float(row['estimate']), float(row['se']), self.confidence_level, f"{covariate}={x:g}")
            for x, (_, row) in zip(newdata[covariate], predicted.iterrows())
        ]

        curve = estimates_to_frame(intervals).drop(columns=['parameter'])
        curve.insert(0, covariate, newdata[covariate].values)
        return curve

    def run(self, make_plots: bool = True) -> Dict[str, Any]:
        """
        Run the full workflow from config and save outputs.

        Returns:
            Dict with ``selection``, ``estimates``, and optionally ``curve``
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.load_data()
        self.fit_models()
        selection = self.rank_models()
        selection.to_csv(self.output_dir / 'model_selection.csv', index=False)

        estimates = self.extract_estimates()
        table = estimates_to_frame(estimates)
        table.to_csv(self.output_dir / 'estimates.csv', index=False)
        self.logger.info(f"Saved {len(table)} estimates to {self.output_dir / 'estimates.csv'}")

        results: Dict[str, Any] = {'selection': selection, 'estimates': estimates}

        prediction = self.config.get('prediction')
        if prediction:
            model = prediction.get('model') or self.comparison.select_best_model(selection)
            curve = self.predict_curve(
                model,
                prediction['covariate'],
                submodel=prediction.get('submodel', 'state'),
                values=prediction.get('values'),
            )
            curve.to_csv(self.output_dir / 'prediction.csv', index=False)
            results['curve'] = curve

        if make_plots:
            visualizer = EstimateVisualizer(output_dir=str(self.output_dir / 'figures'))
            fig = visualizer.plot_estimates(
                estimates, save_path=str(visualizer.output_dir / 'estimates.png')
            )
            plt.close(fig)
            if 'curve' in results:
                fig = visualizer.plot_prediction(
                    results['curve'],
                    prediction['covariate'],
                    save_path=str(visualizer.output_dir / 'prediction.png')
                )
                plt.close(fig)

        return results

    def _get_fit(self, model: str) -> Any:
        if model not in self.fits:
            raise ConfigurationError(model, f"model has not been fitted; fitted: {list(self.fits)}")
        return self.fits[model]
