#!/usr/bin/env python
"""
Occupancy Intervals Command Line

Builds Wald confidence intervals from estimates exported by an occupancy
engine and plots them.

Usage:
    python -m occupancy.main --estimates data/estimates.csv
    python -m occupancy.main --estimates data/estimates.csv --confidence-level 0.9
    python -m occupancy.main --estimates data/estimates.csv --output-dir results --no-plot
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd
import yaml

from occupancy.estimation.intervals import (
    ParameterEstimate,
    collect,
    compute_interval,
    estimates_to_frame,
)
from occupancy.utils.config_manager import ConfigManager
from occupancy.utils.constants import DEFAULT_CONFIDENCE_LEVEL
from occupancy.utils.exceptions import DataLoadError, DataValidationError, OccupancyError
from occupancy.utils.logger import configure_logging, get_logger
from occupancy.visualization.plots import EstimateVisualizer


REQUIRED_COLUMNS = ('parameter', 'estimate', 'se')


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Occupancy Intervals: Wald intervals for occupancy and detection estimates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Intervals and plot from an exported estimate table
    python -m occupancy.main --estimates data/estimates.csv

    # 90% intervals, table only
    python -m occupancy.main --estimates data/estimates.csv --confidence-level 0.9 --no-plot
        """
    )

    parser.add_argument(
        '--estimates', '-e',
        type=str,
        required=True,
        help='CSV with parameter, estimate and se columns'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='Path to configuration file'
    )

    parser.add_argument(
        '--confidence-level',
        type=float,
        default=None,
        help='Two-sided confidence level in (0, 1); defaults to config or 0.95'
    )

    parser.add_argument(
        '--output-dir', '-o',
        type=str,
        default=None,
        help='Directory for the interval table and figure; defaults to config or results'
    )

    parser.add_argument(
        '--no-plot',
        action='store_true',
        help='Skip the estimate figure'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write DEBUG logs to this file; overrides logging.file in config'
    )

    return parser.parse_args(argv)


def read_estimate_table(filepath: str) -> pd.DataFrame:
    """
    Read an exported estimate table.

    Raises:
        DataLoadError: If the file is missing or unreadable
        DataValidationError: If required columns are absent or an
            estimate or se cell is not a number
    """
    path = Path(filepath)
    if not path.exists():
        raise DataLoadError(str(path), "File not found")

    try:
        table = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataLoadError(str(path), str(exc)) from exc

    missing = [c for c in REQUIRED_COLUMNS if c not in table.columns]
    if missing:
        raise DataValidationError([f"Missing required column: {c}" for c in missing])

    issues = []
    for col in ('estimate', 'se'):
        numeric = pd.to_numeric(table[col], errors='coerce')
        bad_rows = table.index[numeric.isna() & table[col].notna()]
        if len(bad_rows) > 0:
            issues.append(f"Non-numeric {col} in rows {[int(i) + 2 for i in bad_rows]}")
        table[col] = numeric
    if issues:
        raise DataValidationError(issues)

    return table


def intervals_from_table(table: pd.DataFrame, confidence_level: float = 0.95) -> List[ParameterEstimate]:
    """
    One interval per table row, in row order.

    A blank parameter cell is an empty name, and a blank or non-numeric
    estimate or se is a non-finite value; both raise InvalidInputError.
    """
    estimates = []
    for _, row in table.iterrows():
        name = '' if pd.isna(row['parameter']) else str(row['parameter'])
        estimates.append(
            compute_interval(
                float(pd.to_numeric(row['estimate'], errors='coerce')),
                float(pd.to_numeric(row['se'], errors='coerce')),
                confidence_level,
                name,
            )
        )
    return collect(estimates)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config = ConfigManager()
    try:
        if args.config:
            config.load(args.config)
        if args.log_file:
            config.set('logging.file', args.log_file)
        configure_logging(config, verbose=args.verbose)
    except (FileNotFoundError, yaml.YAMLError, OccupancyError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    logger = get_logger(__name__)

    confidence_level = args.confidence_level
    if confidence_level is None:
        confidence_level = float(config.get('intervals.confidence_level', DEFAULT_CONFIDENCE_LEVEL()))

    output_dir = Path(args.output_dir or config.get('output.dir', 'results'))

    logger.info(f"Estimates: {args.estimates}")
    logger.info(f"Confidence level: {confidence_level}")
    logger.info(f"Output directory: {output_dir}")

    try:
        table = read_estimate_table(args.estimates)
        estimates = intervals_from_table(table, confidence_level)
    except OccupancyError as exc:
        logger.error(str(exc))
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)

    result = estimates_to_frame(estimates)
    result.to_csv(output_dir / 'intervals.csv', index=False)
    logger.info(f"Saved {len(result)} intervals to {output_dir / 'intervals.csv'}")

    for est in estimates:
        logger.info(f"  {est.name}: {est.estimate:.3f} [{est.lower:.3f}, {est.upper:.3f}]")

    if not args.no_plot:
        visualizer = EstimateVisualizer(output_dir=str(output_dir / 'figures'))
        fig = visualizer.plot_estimates(
            estimates, save_path=str(visualizer.output_dir / 'estimates.png')
        )
        plt.close(fig)

    logger.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
