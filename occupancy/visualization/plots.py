"""
Visualization Module

Figures for occupancy results:
1. Detection and occupancy estimates with confidence-interval error bars
2. Predicted probability across a covariate with a confidence ribbon
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from pathlib import Path
from typing import Optional, Sequence

from occupancy.estimation.intervals import ParameterEstimate
from occupancy.utils.logger import get_logger


# Black-and-white report style
plt.rcParams.update({
    'font.size': 12,
    'axes.labelsize': 14,
    'axes.titlesize': 16,
    'xtick.labelsize': 11,
    'ytick.labelsize': 11,
    'figure.dpi': 150,
    'savefig.dpi': 300,
    'savefig.bbox': 'tight',
    'lines.linewidth': 2,
})

ESTIMATE_COLOR = '#222222'
RIBBON_COLOR = '#2E86AB'
CAP_WIDTH = 0.2


class EstimateVisualizer:
    """Plots for back-transformed occupancy and detection estimates."""

    def __init__(self, output_dir: str = "figures"):
        """
        Initialize visualizer.

        Args:
            output_dir: Directory to save figures
        """
        self.output_dir = Path(output_dir)
        self.logger = get_logger(__name__)

        self.output_dir.mkdir(parents=True, exist_ok=True)

    def plot_estimates(
        self,
        estimates: Sequence[ParameterEstimate],
        title: str = "Probability of Detection and Occupancy",
        ylabel: str = "Probability",
        save_path: Optional[str] = None
    ) -> Figure:
        """
        Plot point estimates with confidence-interval error bars.

        Parameters appear on the x-axis in the order given.

        Args:
            estimates: Collected ParameterEstimate values
            title: Plot title
            ylabel: Y-axis label
            save_path: Path to save figure

        Returns:
            matplotlib Figure
        """
        fig, ax = plt.subplots(figsize=(8, 6))

        names = [est.name for est in estimates]
        values = np.array([est.estimate for est in estimates], dtype=float)
        errors = np.array(
            [[est.estimate - est.lower, est.upper - est.estimate] for est in estimates],
            dtype=float
        ).reshape(-1, 2).T

        x_pos = np.arange(len(names))
        container = None
        if len(names) > 0:
            container = ax.errorbar(
                x_pos, values, yerr=errors, fmt='o', color=ESTIMATE_COLOR,
                markersize=6, capsize=5, elinewidth=1.5, capthick=1.5
            )
            ax.set_xlim(-0.5, len(names) - 0.5)

        ax.set_xticks(x_pos)
        ax.set_xticklabels(names)
        ax.set_xlabel('Parameter', labelpad=10)
        ax.set_ylabel(ylabel, labelpad=10)
        ax.set_title(title)
        ax.grid(True, alpha=0.3)

        plt.tight_layout()

        if container is not None:
            # Caps span CAP_WIDTH x-units; marker sizes are in points
            axes_width_pt = ax.get_position().width * fig.get_figwidth() * 72
            cap_pt = CAP_WIDTH * axes_width_pt / len(names)
            for cap in container[1]:
                cap.set_markersize(cap_pt)

        if save_path:
            fig.savefig(save_path)
            self.logger.info(f"Saved estimate plot to {save_path}")

        return fig

    def plot_prediction(
        self,
        curve: pd.DataFrame,
        covariate: str,
        title: str = "Predicted Occupancy",
        ylabel: str = "Probability",
        save_path: Optional[str] = None
    ) -> Figure:
        """
        Plot a prediction line with its confidence ribbon.

        Args:
            curve: DataFrame with the covariate column and estimate,
                lower, upper columns
            covariate: Name of the x-axis column
            title: Plot title
            ylabel: Y-axis label
            save_path: Path to save figure

        Returns:
            matplotlib Figure
        """
        fig, ax = plt.subplots(figsize=(10, 6))

        level = 0.95
        if 'confidence_level' in curve.columns and len(curve) > 0:
            level = float(curve['confidence_level'].iloc[0])

        x = np.asarray(curve[covariate].values, dtype=float)
        ax.fill_between(
            x,
            np.asarray(curve['lower'].values, dtype=float),
            np.asarray(curve['upper'].values, dtype=float),
            color=RIBBON_COLOR, alpha=0.25, label=f'{level:.0%} CI'
        )
        ax.plot(x, np.asarray(curve['estimate'].values, dtype=float),
                color=ESTIMATE_COLOR, label='Estimate')

        ax.set_xlabel(covariate, labelpad=10)
        ax.set_ylabel(ylabel, labelpad=10)
        ax.set_title(title)
        ax.legend(loc='best')
        ax.grid(True, alpha=0.3)

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path)
            self.logger.info(f"Saved prediction plot to {save_path}")

        return fig
