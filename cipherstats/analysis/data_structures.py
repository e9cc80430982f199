"""Data structures for metric records and derived analytics."""

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import InvalidRecordError


PERIODS = ("hour", "day", "week", "month")
TREND_PERIODS = ("day", "week", "month")
TREND_DIRECTIONS = ("increasing", "decreasing", "stable")
INSIGHT_TYPES = ("success", "warning", "info", "danger")

# Serialized (host) key -> attribute name
_RECORD_FIELDS = {
    "algorithm": "algorithm",
    "timestamp": "timestamp",
    "executionTime": "execution_time",
    "inputSize": "input_size",
    "outputSize": "output_size",
    "throughput": "throughput",
    "efficiency": "efficiency",
    "memoryUsed": "memory_used",
}


def parse_execution_time(value: Any) -> Optional[float]:
    """Parse an execution time (ms) into a float.

    Returns None for values that are not finite numbers, so callers can
    exclude them instead of letting NaN leak into every statistic.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


@dataclass(frozen=True)
class MetricRecord:
    """One timed execution of a cipher algorithm."""

    algorithm: str
    timestamp: str
    execution_time: str
    input_size: int = 0
    output_size: int = 0
    throughput: str = "0.00"
    efficiency: str = "0.00"
    memory_used: str = "N/A"

    @property
    def execution_ms(self) -> Optional[float]:
        return parse_execution_time(self.execution_time)

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in _RECORD_FIELDS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricRecord":
        """Build a record from camelCase (host) or snake_case keys."""
        if not isinstance(data, dict):
            raise InvalidRecordError(f"Metric record must be a mapping, got {type(data).__name__}")

        values = {}
        for key, attr in _RECORD_FIELDS.items():
            if key in data:
                values[attr] = data[key]
            elif attr in data:
                values[attr] = data[attr]

        for required in ("algorithm", "timestamp", "execution_time"):
            if required not in values:
                raise InvalidRecordError(f"Metric record is missing '{required}'")
        if not isinstance(values["algorithm"], str):
            raise InvalidRecordError("Metric record 'algorithm' must be a string")

        values["timestamp"] = str(values["timestamp"])
        values["execution_time"] = str(values["execution_time"])
        for attr in ("input_size", "output_size"):
            if attr in values:
                try:
                    values[attr] = int(values[attr])
                except (TypeError, ValueError) as e:
                    raise InvalidRecordError(f"Metric record '{attr}' must be an integer: {e}")
        for attr in ("throughput", "efficiency", "memory_used"):
            if attr in values:
                values[attr] = str(values[attr])

        return cls(**values)


@dataclass
class AggregatedStat:
    """Summary statistics of one algorithm's execution times."""

    count: int
    total_time: float
    avg_time: float
    min_time: float
    max_time: float
    std_dev: float
    median: float
    p25: float
    p75: float
    p95: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "total_time": self.total_time,
            "avg_time": self.avg_time,
            "min_time": self.min_time,
            "max_time": self.max_time,
            "std_dev": self.std_dev,
            "median": self.median,
            "p25": self.p25,
            "p75": self.p75,
            "p95": self.p95,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregatedStat":
        return cls(**{key: data[key] for key in cls.__dataclass_fields__})


@dataclass
class TimeBucket:
    """Records grouped into one time window."""

    date: str
    count: int
    avg_time: float
    total_time: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "count": self.count,
            "avg_time": self.avg_time,
            "total_time": self.total_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeBucket":
        return cls(
            date=data["date"],
            count=data["count"],
            avg_time=data["avg_time"],
            total_time=data["total_time"],
        )


@dataclass
class TrendResult:
    """Linear trend fitted over the buckets of one period."""

    period: str
    data: List[TimeBucket]
    trend: str
    change: float
    slope: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "data": [bucket.to_dict() for bucket in self.data],
            "trend": self.trend,
            "change": self.change,
            "slope": self.slope,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrendResult":
        return cls(
            period=data["period"],
            data=[TimeBucket.from_dict(b) for b in data["data"]],
            trend=data["trend"],
            change=data["change"],
            slope=data["slope"],
        )


@dataclass
class Insight:
    """Human-readable observation produced by one heuristic."""

    type: str
    title: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Insight":
        return cls(
            type=data["type"],
            title=data["title"],
            message=data["message"],
            data=dict(data.get("data") or {}),
        )


@dataclass
class Prediction:
    """Moving-average forecast of an algorithm's next execution time."""

    next_execution_time: float
    confidence: str  # percent, one decimal place
    based_on: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "next_execution_time": self.next_execution_time,
            "confidence": self.confidence,
            "based_on": self.based_on,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Prediction":
        return cls(
            next_execution_time=data["next_execution_time"],
            confidence=data["confidence"],
            based_on=data["based_on"],
        )


@dataclass
class MetricComparison:
    """Head-to-head result for one metric."""

    values: Dict[str, float]
    winner: str
    difference: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"values": dict(self.values), "winner": self.winner}
        if self.difference is not None:
            result["difference"] = self.difference
        return result


@dataclass
class SignificanceTest:
    """Welch t-test between two algorithms' execution times."""

    t_statistic: float
    p_value: float
    label: str  # '**', '*' or 'n.s.'

    def to_dict(self) -> Dict[str, Any]:
        return {
            "t_statistic": self.t_statistic,
            "p_value": self.p_value,
            "label": self.label,
        }


@dataclass
class ComparisonResult:
    """Pairwise comparison of two algorithms."""

    algorithm1: str
    algorithm2: str
    metrics: Dict[str, MetricComparison]
    winner: str
    analysis: str
    significance: Optional[SignificanceTest] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm1": self.algorithm1,
            "algorithm2": self.algorithm2,
            "metrics": {name: m.to_dict() for name, m in self.metrics.items()},
            "winner": self.winner,
            "analysis": self.analysis,
            "significance": self.significance.to_dict() if self.significance else None,
        }


@dataclass
class ReportSummary:
    """Summary block of a report."""

    total_operations: int
    algorithms: int
    period: str
    date_range: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_operations": self.total_operations,
            "algorithms": self.algorithms,
            "period": self.period,
            "date_range": dict(self.date_range) if self.date_range else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportSummary":
        date_range = data.get("date_range")
        return cls(
            total_operations=data["total_operations"],
            algorithms=data["algorithms"],
            period=data["period"],
            date_range=dict(date_range) if date_range else None,
        )


@dataclass
class Report:
    """Composed analytics artifact for one refresh."""

    generated_at: str
    period: str
    summary: ReportSummary
    algorithms: Dict[str, AggregatedStat]
    trends: List[TrendResult] = field(default_factory=list)
    insights: List[Insight] = field(default_factory=list)
    predictions: Optional[Dict[str, Prediction]] = None
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "generated_at": self.generated_at,
            "period": self.period,
            "summary": self.summary.to_dict(),
            "algorithms": {name: s.to_dict() for name, s in self.algorithms.items()},
            "trends": [t.to_dict() for t in self.trends],
            "insights": [i.to_dict() for i in self.insights],
            "predictions": (
                {name: p.to_dict() for name, p in self.predictions.items()}
                if self.predictions is not None else None
            ),
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Report":
        predictions = data.get("predictions")
        return cls(
            generated_at=data["generated_at"],
            period=data["period"],
            summary=ReportSummary.from_dict(data["summary"]),
            algorithms={name: AggregatedStat.from_dict(s) for name, s in data["algorithms"].items()},
            trends=[TrendResult.from_dict(t) for t in data.get("trends", [])],
            insights=[Insight.from_dict(i) for i in data.get("insights", [])],
            predictions=(
                {name: Prediction.from_dict(p) for name, p in predictions.items()}
                if predictions is not None else None
            ),
            recommendations=list(data.get("recommendations", [])),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "Report":
        return cls.from_dict(json.loads(text))


@dataclass(frozen=True)
class AnalyticsState:
    """Snapshot of every derived value held by the engine.

    A new instance is published on each update; fields are never assigned in
    place, so a reader holding a reference always sees a consistent set.
    """

    aggregated_stats: Dict[str, AggregatedStat] = field(default_factory=dict)
    trends: List[TrendResult] = field(default_factory=list)
    insights: List[Insight] = field(default_factory=list)
    predictions: Dict[str, Prediction] = field(default_factory=dict)
    report: Optional[Report] = None
    error: Optional[BaseException] = None
    last_update: Optional[str] = None
