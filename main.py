#!/usr/bin/env python
"""
cipherstats: performance analytics for cipher executions

This script orchestrates all functionality:
- report: refresh analytics and write JSON, text and CSV reports
- compare: compare two algorithms head to head
- summary: print statistics and insights to the console

Examples:
    # Write reports for a metrics export
    python main.py report --input metrics.json --output ./analytics_outputs

    # Include predictions and use a YAML config
    python main.py report --input metrics.csv --config analytics.yaml --predictions

    # Compare two algorithms
    python main.py compare --input metrics.json Caesar Vigenere

    # Quick console summary
    python main.py summary --input metrics.json --verbose
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from cipherstats.core.utils import setup_logging, get_logger
from cipherstats.analysis import AnalyticsConfig, AnalyticsEngine, ReportGenerator
from cipherstats.analysis.errors import AnalyticsError


def get_base_args():
    """Get argument parser with common arguments."""
    parser = argparse.ArgumentParser(add_help=False)

    parser.add_argument('--input', '-i', type=str, required=True,
                        help='Metric record file (.json or .csv)')
    parser.add_argument('--config', type=str, default=None,
                        help='YAML analytics config file')
    parser.add_argument('--min_data_points', type=int, default=None,
                        help='Minimum records before trends and insights are computed')
    parser.add_argument('--log_file', type=str, default=None,
                        help='Also write logs to this file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')

    return parser


def build_engine(args) -> AnalyticsEngine:
    """Load config and records, then refresh once."""
    config = AnalyticsConfig.load(args.config) if args.config else AnalyticsConfig()

    overrides = {}
    if args.min_data_points is not None:
        overrides['min_data_points'] = args.min_data_points
    if getattr(args, 'predictions', False):
        overrides['enable_predictions'] = True
    if overrides:
        config = config.updated(overrides)

    engine = AnalyticsEngine.from_file(args.input, config)
    engine.refresh()
    return engine


def run_report(args, logger) -> int:
    """Refresh analytics and write every report file."""
    engine = build_engine(args)

    report = engine.generate_report(period=args.period)
    if report is None:
        logger.error(f"Report generation failed: {engine.error}")
        return 1

    generator = ReportGenerator(Path(args.output))
    paths = generator.generate_all_reports(report)

    print(f"\nReport for {report.summary.total_operations:,} operations "
          f"across {report.summary.algorithms} algorithms")
    for path in paths:
        print(f"  {path}")
    return 0


def run_compare(args, logger) -> int:
    """Compare two algorithms and print the result."""
    engine = build_engine(args)

    result = engine.compare_algorithms(args.algorithm1, args.algorithm2)
    if result is None:
        logger.error(f"Comparison failed: {engine.error}")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print("\n" + "=" * 60)
    print(f"{result.algorithm1} vs {result.algorithm2}")
    print("=" * 60)
    for name, metric in result.metrics.items():
        values = ", ".join(f"{algo}={value:.2f}" for algo, value in metric.values.items())
        print(f"  {name:<12} {values}  winner: {metric.winner}")
    print(f"\n{result.analysis}")
    if result.significance is not None:
        sig = result.significance
        print(f"Welch t-test: t={sig.t_statistic:.3f}, p={sig.p_value:.3f} ({sig.label})")
    return 0


def run_summary(args, logger) -> int:
    """Print aggregated statistics and insights."""
    engine = build_engine(args)

    print("\n" + "=" * 60)
    print(f"{len(engine.records):,} records, {len(engine.aggregated_stats)} algorithms")
    print("=" * 60)
    for name, stat in engine.aggregated_stats.items():
        print(f"  {name:<20} n={stat.count:<6} avg={stat.avg_time:8.2f} ms  "
              f"p95={stat.p95:8.2f} ms")

    if engine.trends:
        print("\nTrends:")
        for trend in engine.trends:
            print(f"  {trend.period:<6} {trend.trend} ({trend.change:+.2f}%)")

    if engine.insights:
        print("\nInsights:")
        for insight in engine.insights:
            print(f"  [{insight.type}] {insight.message}")
    elif not engine.has_enough_data:
        print(f"\nNot enough data for insights (need {engine.config.min_data_points} records)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Performance analytics for cipher executions',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    report_parser = subparsers.add_parser(
        'report',
        help='Write analytics reports',
        parents=[get_base_args()],
    )
    report_parser.add_argument('--output', '-o', type=str, default='analytics_outputs',
                               help='Directory for report files')
    report_parser.add_argument('--period', type=str, default='all',
                               help='Period label stored in the report')
    report_parser.add_argument('--predictions', action='store_true',
                               help='Include next-execution predictions')

    compare_parser = subparsers.add_parser(
        'compare',
        help='Compare two algorithms',
        parents=[get_base_args()],
    )
    compare_parser.add_argument('algorithm1', type=str, help='First algorithm name')
    compare_parser.add_argument('algorithm2', type=str, help='Second algorithm name')
    compare_parser.add_argument('--json', action='store_true',
                                help='Print the comparison as JSON')

    subparsers.add_parser(
        'summary',
        help='Print statistics and insights',
        parents=[get_base_args()],
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(log_level="DEBUG" if args.verbose else "INFO", log_file=args.log_file)
    logger = get_logger(__name__)
    logger.debug(f"Command: {args.command}, input: {args.input}")

    commands = {
        'report': run_report,
        'compare': run_compare,
        'summary': run_summary,
    }
    try:
        return commands[args.command](args, logger)
    except (FileNotFoundError, AnalyticsError) as e:
        logger.error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
