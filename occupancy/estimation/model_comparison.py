"""
Model Comparison Framework

Rank fitted occupancy models by information criterion. The engine
computes AIC and the dredge table; this module checks what comes back,
orders it, and reports the best model.
"""

import pandas as pd
from typing import Any, Dict

from occupancy.estimation.engine import OccupancyEngine
from occupancy.utils.exceptions import ModelFittingError
from occupancy.utils.logger import get_logger


class ModelComparison:
    """Compare occupancy models using the engine's information criteria."""

    REQUIRED_COLUMNS = ('model', 'n_params', 'aic')

    def __init__(self, engine: OccupancyEngine) -> None:
        self.engine = engine
        self.logger = get_logger(__name__)

    def compare(self, fits: Dict[str, Any]) -> pd.DataFrame:
        """
        Build the model-selection table for a set of fitted models.

        Args:
            fits: ``{model_name: fitted_model, ...}``.

        Returns:
            DataFrame sorted by AIC with one row per model and a
            ``delta_aic`` column.
        """
        if not fits:
            return pd.DataFrame(columns=list(self.REQUIRED_COLUMNS) + ['delta_aic'])

        try:
            table = self.engine.model_selection(fits)
        except Exception as exc:
            raise ModelFittingError('model selection', str(exc)) from exc

        table = self._order(table, source='model selection')
        self.logger.info(f"Ranked {len(table)} models; best: {self.select_best_model(table)}")
        for _, row in table.iterrows():
            self.logger.debug(
                f"  {row['model']}: AIC={row['aic']:.2f}, "
                f"dAIC={row['delta_aic']:.2f}, k={row['n_params']}"
            )
        return table

    def dredge(self, fit: Any, name: str = 'global') -> pd.DataFrame:
        """
        Exhaustive covariate-subset search around a global model.

        Args:
            fit: Fitted global model.
            name: Label used in log and error messages.

        Returns:
            DataFrame sorted by AIC with a ``delta_aic`` column.
        """
        self.logger.info(f"Dredging covariate subsets of {name}...")
        try:
            table = self.engine.dredge(fit)
        except Exception as exc:
            raise ModelFittingError(name, f"dredge failed: {exc}") from exc
        return self._order(table, source=f"dredge of {name}")

    def select_best_model(self, comparison_df: pd.DataFrame, criterion: str = 'aic') -> str:
        """
        Return the name of the model with the lowest information criterion.

        Args:
            comparison_df: Output of :meth:`compare` or :meth:`dredge`.
            criterion: Column to minimise.

        Returns:
            Model name string, ``''`` for an empty table.
        """
        if comparison_df.empty:
            return ''
        return str(comparison_df.sort_values(criterion).iloc[0]['model'])

    def _order(self, table: pd.DataFrame, source: str) -> pd.DataFrame:
        missing = [c for c in self.REQUIRED_COLUMNS if c not in table.columns]
        if missing:
            raise ModelFittingError(source, f"engine table lacks columns {missing}")

        result = table.sort_values('aic').reset_index(drop=True)
        if 'delta_aic' not in result.columns:
            result['delta_aic'] = result['aic'] - result['aic'].min()
        return result
