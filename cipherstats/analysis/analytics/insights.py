"""Heuristic insights derived from aggregated stats and trends."""

from typing import Callable, Dict, List, Optional, Sequence

from cipherstats.core.utils import get_logger
from ..config import InsightThresholds
from ..data_structures import AggregatedStat, Insight, TrendResult
from .statistics import coefficient_of_variation, mean


def find_fastest(stats: Dict[str, AggregatedStat]) -> Optional[str]:
    """Algorithm with the lowest average time.

    Ties resolve to the algorithm encountered first in ``stats`` iteration
    order (first-seen order for aggregator output).
    """
    fastest = None
    for algorithm, stat in stats.items():
        if fastest is None or stat.avg_time < stats[fastest].avg_time:
            fastest = algorithm
    return fastest


class InsightEngine:
    """Applies the fixed heuristic set, in order:

    1. best performance (success)
    2. high variability (warning)
    3. low usage (info)
    4. performance degradation (warning)
    5. optimization opportunity (info)
    """

    def __init__(
        self,
        min_data_points: int = 5,
        thresholds: Optional[InsightThresholds] = None,
        on_insight: Optional[Callable[[Insight], object]] = None,
    ):
        self.logger = get_logger(__name__)
        self.min_data_points = min_data_points
        self.thresholds = thresholds or InsightThresholds()
        self.on_insight = on_insight

    def generate(
        self,
        stats: Dict[str, AggregatedStat],
        trends: Sequence[TrendResult],
        total_operations: int,
    ) -> List[Insight]:
        """Run every heuristic.

        Args:
            stats: Aggregated statistics by algorithm
            trends: Current trend results
            total_operations: Number of records the stats were built from

        Returns:
            Insights in heuristic order; empty below ``min_data_points`` records
        """
        if total_operations < self.min_data_points:
            return []

        insights: List[Insight] = []
        insights.extend(self._best_performance(stats))
        insights.extend(self._high_variability(stats))
        insights.extend(self._low_usage(stats, total_operations))
        insights.extend(self._performance_degradation(trends))
        insights.extend(self._optimization_opportunities(stats))

        self.logger.debug(f"Generated {len(insights)} insights")
        if self.on_insight is not None:
            for insight in insights:
                self.on_insight(insight)
        return insights

    def _best_performance(self, stats: Dict[str, AggregatedStat]) -> List[Insight]:
        fastest = find_fastest(stats)
        if fastest is None:
            return []

        stat = stats[fastest]
        return [Insight(
            type="success",
            title="Best Performance",
            message=f"{fastest} has the best average performance at {stat.avg_time:.2f}ms",
            data={"algorithm": fastest, **stat.to_dict()},
        )]

    def _high_variability(self, stats: Dict[str, AggregatedStat]) -> List[Insight]:
        insights = []
        for algorithm, stat in stats.items():
            cv = coefficient_of_variation(stat.std_dev, stat.avg_time)
            if cv > self.thresholds.variability_cv_pct:
                insights.append(Insight(
                    type="warning",
                    title="High Variability",
                    message=f"{algorithm} shows high performance variability (CV: {cv:.1f}%)",
                    data={"algorithm": algorithm, "cv": cv, "std_dev": stat.std_dev, "avg_time": stat.avg_time},
                ))
        return insights

    def _low_usage(self, stats: Dict[str, AggregatedStat], total_operations: int) -> List[Insight]:
        insights = []
        for algorithm, stat in stats.items():
            usage = stat.count / total_operations * 100
            if usage < self.thresholds.low_usage_pct and stat.count > self.thresholds.low_usage_min_count:
                insights.append(Insight(
                    type="info",
                    title="Low Usage",
                    message=f"{algorithm} is rarely used ({usage:.1f}% of operations)",
                    data={"algorithm": algorithm, "usage": usage, "count": stat.count,
                          "total_operations": total_operations},
                ))
        return insights

    def _performance_degradation(self, trends: Sequence[TrendResult]) -> List[Insight]:
        insights = []
        for trend in trends:
            if trend.trend == "increasing" and trend.change > self.thresholds.degradation_change_pct:
                insights.append(Insight(
                    type="warning",
                    title="Performance Degradation",
                    message=f"Performance is degrading over {trend.period} ({trend.change:.1f}% increase)",
                    data=trend.to_dict(),
                ))
        return insights

    def _optimization_opportunities(self, stats: Dict[str, AggregatedStat]) -> List[Insight]:
        overall_avg = mean([stat.avg_time for stat in stats.values()])
        insights = []
        for algorithm, stat in stats.items():
            if (stat.avg_time > overall_avg * self.thresholds.optimization_factor
                    and stat.count > self.min_data_points):
                slower_pct = (stat.avg_time / overall_avg - 1) * 100
                insights.append(Insight(
                    type="info",
                    title="Optimization Opportunity",
                    message=f"{algorithm} is {slower_pct:.0f}% slower than average",
                    data={"algorithm": algorithm, "avg_time": stat.avg_time, "overall_avg": overall_avg},
                ))
        return insights


def generate_insights(
    stats: Dict[str, AggregatedStat],
    trends: Sequence[TrendResult],
    total_operations: int,
    min_data_points: int = 5,
    thresholds: Optional[InsightThresholds] = None,
) -> List[Insight]:
    """Functional wrapper around ``InsightEngine.generate``."""
    return InsightEngine(min_data_points, thresholds).generate(stats, trends, total_operations)
