"""Visualization modules for creating plots and figures."""

from occupancy.visualization.plots import EstimateVisualizer

__all__ = [
    "EstimateVisualizer",
]
