"""Pairwise comparison of two algorithms."""

import math
from typing import Dict, Optional

from ..data_structures import AggregatedStat, ComparisonResult, MetricComparison, SignificanceTest
from ..errors import AlgorithmNotFoundError


def significance_label(p_value: float) -> str:
    return '**' if p_value < 0.01 else '*' if p_value < 0.05 else 'n.s.'


def welch_test(stat1: AggregatedStat, stat2: AggregatedStat) -> Optional[SignificanceTest]:
    """Welch t-test computed from the two summaries.

    Returns None when either sample has fewer than two values or neither
    sample varies, since the test is undefined there.
    """
    if stat1.count < 2 or stat2.count < 2:
        return None
    if stat1.std_dev == 0 and stat2.std_dev == 0:
        return None

    from scipy import stats
    # Stored std devs are population values; the test expects sample ones
    std1 = stat1.std_dev * math.sqrt(stat1.count / (stat1.count - 1))
    std2 = stat2.std_dev * math.sqrt(stat2.count / (stat2.count - 1))
    t_stat, p_value = stats.ttest_ind_from_stats(
        stat1.avg_time, std1, stat1.count,
        stat2.avg_time, std2, stat2.count,
        equal_var=False,
    )
    return SignificanceTest(
        t_statistic=float(t_stat),
        p_value=float(p_value),
        label=significance_label(float(p_value)),
    )


def compare_algorithms(stats: Dict[str, AggregatedStat], name1: str, name2: str) -> ComparisonResult:
    """Compare two algorithms on average time, consistency and usage.

    Lower average time and lower std dev win; higher count wins usage. All
    comparisons are strict, so ties go to ``name2``. The overall winner is
    the average-time winner.

    Raises:
        AlgorithmNotFoundError: If either name has no aggregated statistics
    """
    missing = [name for name in (name1, name2) if name not in stats]
    if missing:
        raise AlgorithmNotFoundError(missing)

    stat1, stat2 = stats[name1], stats[name2]
    metrics = {
        "avg_time": MetricComparison(
            values={name1: stat1.avg_time, name2: stat2.avg_time},
            winner=name1 if stat1.avg_time < stat2.avg_time else name2,
            difference=round(abs(stat1.avg_time - stat2.avg_time), 2),
        ),
        "consistency": MetricComparison(
            values={name1: stat1.std_dev, name2: stat2.std_dev},
            winner=name1 if stat1.std_dev < stat2.std_dev else name2,
            difference=round(abs(stat1.std_dev - stat2.std_dev), 2),
        ),
        "usage": MetricComparison(
            values={name1: stat1.count, name2: stat2.count},
            winner=name1 if stat1.count > stat2.count else name2,
        ),
    }

    winner = metrics["avg_time"].winner
    loser = name2 if winner == name1 else name1
    slower = max(stat1.avg_time, stat2.avg_time)
    improvement = 0.0 if slower == 0 else (slower - min(stat1.avg_time, stat2.avg_time)) / slower * 100

    return ComparisonResult(
        algorithm1=name1,
        algorithm2=name2,
        metrics=metrics,
        winner=winner,
        analysis=f"{winner} performs {improvement:.1f}% better on average than {loser}",
        significance=welch_test(stat1, stat2),
    )
