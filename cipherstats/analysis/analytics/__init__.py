"""Analytics components: statistics, aggregation, trends, insights and predictions."""

from .statistics import mean, median, std_dev, percentile, coefficient_of_variation
from .aggregator import aggregate_by_algorithm, summarize_times
from .time_buckets import aggregate_by_time_period
from .trends import analyze_trends, fit_trend
from .insights import InsightEngine, generate_insights, find_fastest
from .predictions import generate_predictions
from .comparison import compare_algorithms

__all__ = [
    "mean",
    "median",
    "std_dev",
    "percentile",
    "coefficient_of_variation",
    "aggregate_by_algorithm",
    "summarize_times",
    "aggregate_by_time_period",
    "analyze_trends",
    "fit_trend",
    "InsightEngine",
    "generate_insights",
    "find_fastest",
    "generate_predictions",
    "compare_algorithms",
]
