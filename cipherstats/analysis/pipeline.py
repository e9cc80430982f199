"""Pure refresh pipeline: records and config in, a new AnalyticsState out."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from cipherstats.core.utils import get_logger
from .analytics import aggregate_by_algorithm, analyze_trends, generate_predictions
from .analytics.insights import InsightEngine
from .config import AnalyticsConfig
from .data_structures import AggregatedStat, AnalyticsState, Insight, MetricRecord, Prediction, TrendResult
from .reports import utc_timestamp


logger = get_logger(__name__)

ErrorReporter = Callable[[str, BaseException], Any]


def run_step(
    description: str,
    func: Callable[[], Any],
    fallback: Any,
    report_error: Optional[ErrorReporter] = None,
) -> Tuple[Any, Optional[Exception]]:
    """Run one derivation step, turning an exception into ``(fallback, error)``.

    Args:
        description: Step name used in the error message ("analyze trends")
        func: Zero-argument callable computing the step
        fallback: Value returned when the step fails
        report_error: Called with ``(message, error)`` on failure

    Returns:
        Tuple of (value, error or None)
    """
    try:
        return func(), None
    except Exception as e:
        message = f"Failed to {description}:"
        if report_error is not None:
            report_error(message, e)
        else:
            logger.error(f"{message} {e}")
        return fallback, e


def derive_stats(records: Sequence[MetricRecord], config: AnalyticsConfig) -> Dict[str, AggregatedStat]:
    return aggregate_by_algorithm(records)


def derive_trends(records: Sequence[MetricRecord], config: AnalyticsConfig) -> List[TrendResult]:
    if not config.enable_trends:
        return []
    return analyze_trends(records, config.min_data_points, config.thresholds)


def derive_insights(
    records: Sequence[MetricRecord],
    stats: Dict[str, AggregatedStat],
    trends: Sequence[TrendResult],
    config: AnalyticsConfig,
) -> List[Insight]:
    if not config.enable_insights:
        return []
    engine = InsightEngine(config.min_data_points, config.thresholds, config.on_insight)
    return engine.generate(stats, trends, len(records))


def derive_predictions(
    records: Sequence[MetricRecord],
    stats: Dict[str, AggregatedStat],
    config: AnalyticsConfig,
) -> Dict[str, Prediction]:
    if not config.enable_predictions:
        return {}
    return generate_predictions(records, stats, config.min_data_points, config.thresholds)


def refresh_state(
    records: Sequence[MetricRecord],
    config: AnalyticsConfig,
    previous: Optional[AnalyticsState] = None,
    report_error: Optional[ErrorReporter] = None,
) -> AnalyticsState:
    """Recompute statistics, trends, insights and predictions.

    Each step runs independently: a failing step keeps the value from
    ``previous``, records its exception as the state's ``error`` and does
    not stop later steps, which use the freshest values available. The
    cached report is carried over unchanged.

    Args:
        records: Metric records, newest first
        config: Analytics configuration
        previous: State to fall back on for failed steps
        report_error: Error callback, called once per failed step

    Returns:
        New AnalyticsState
    """
    previous = previous or AnalyticsState()
    errors: List[Exception] = []

    def attempt(description, func, fallback):
        value, error = run_step(description, func, fallback, report_error)
        if error is not None:
            errors.append(error)
        return value

    stats = attempt("aggregate statistics", lambda: derive_stats(records, config), previous.aggregated_stats)
    trends = attempt("analyze trends", lambda: derive_trends(records, config), previous.trends)
    insights = attempt(
        "generate insights", lambda: derive_insights(records, stats, trends, config), previous.insights
    )
    predictions = attempt(
        "generate predictions", lambda: derive_predictions(records, stats, config), previous.predictions
    )

    logger.debug(
        f"Refreshed analytics: {len(records)} records, {len(stats)} algorithms, "
        f"{len(trends)} trends, {len(insights)} insights, {len(predictions)} predictions"
    )
    return AnalyticsState(
        aggregated_stats=stats,
        trends=trends,
        insights=insights,
        predictions=predictions,
        report=previous.report,
        error=errors[-1] if errors else None,
        last_update=utc_timestamp(),
    )
