"""
Occupancy Intervals: Single-Season Occupancy Reporting

This package wraps an external occupancy-model engine, turns its
back-transformed estimates into Wald confidence intervals, and plots
detection and occupancy probabilities for teaching.
"""

__version__ = "1.0.0"
__author__ = "FWCE 409 Teaching Team"
