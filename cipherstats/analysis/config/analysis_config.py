"""Configuration for the analytics engine and its heuristic thresholds."""

from dataclasses import dataclass, field, fields, asdict, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..errors import ConfigurationError


# Host option names (camelCase) accepted alongside the snake_case field names
OPTION_ALIASES = {
    "autoRefresh": "auto_refresh",
    "refreshInterval": "refresh_interval",
    "enableTrends": "enable_trends",
    "enableInsights": "enable_insights",
    "enablePredictions": "enable_predictions",
    "minDataPoints": "min_data_points",
    "onInsight": "on_insight",
    "onError": "on_error",
    "historyLimit": "history_limit",
}

CALLBACK_FIELDS = ("on_insight", "on_error")


@dataclass(frozen=True)
class InsightThresholds:
    """Named thresholds used by trend classification and insight heuristics.

    Comparisons are strict: a value exactly at a threshold does not fire.
    """

    trend_change_pct: float = 5.0          # |change| above this is a trend
    variability_cv_pct: float = 50.0       # CV above this is "high variability"
    low_usage_pct: float = 5.0             # usage share below this is "low usage"
    low_usage_min_count: int = 2           # ...but only with more records than this
    degradation_change_pct: float = 10.0   # increasing trend above this is degradation
    optimization_factor: float = 1.5       # avg above overall_avg * factor is slow
    prediction_data_factor: int = 2        # predictions need min_data_points * factor records

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"Threshold {f.name} must be numeric, got {value!r}")
        if self.optimization_factor <= 0:
            raise ConfigurationError("optimization_factor must be positive")
        if self.prediction_data_factor < 1:
            raise ConfigurationError("prediction_data_factor must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InsightThresholds":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown threshold(s): {sorted(unknown)}")
        return cls(**dict(data))


@dataclass(frozen=True)
class AnalyticsConfig:
    """Options controlling which derivations run and how often."""

    auto_refresh: bool = False
    refresh_interval: int = 60000  # milliseconds
    enable_trends: bool = True
    enable_insights: bool = True
    enable_predictions: bool = False
    min_data_points: int = 5
    history_limit: int = 100
    thresholds: InsightThresholds = field(default_factory=InsightThresholds)

    # Callbacks are not serialized
    on_insight: Optional[Callable[..., Any]] = None
    on_error: Optional[Callable[..., Any]] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_flags()
        self._validate_numbers()
        self._validate_callbacks()

    def _validate_flags(self) -> None:
        for name in ("auto_refresh", "enable_trends", "enable_insights", "enable_predictions"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a boolean")

    def _validate_numbers(self) -> None:
        for name in ("refresh_interval", "min_data_points", "history_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if self.refresh_interval <= 0:
            raise ConfigurationError(f"refresh_interval {self.refresh_interval} must be positive")
        if self.min_data_points < 1:
            raise ConfigurationError(f"min_data_points {self.min_data_points} must be at least 1")
        if self.history_limit < 1:
            raise ConfigurationError(f"history_limit {self.history_limit} must be at least 1")
        if not isinstance(self.thresholds, InsightThresholds):
            raise ConfigurationError("thresholds must be an InsightThresholds instance")

    def _validate_callbacks(self) -> None:
        for name in CALLBACK_FIELDS:
            callback = getattr(self, name)
            if callback is not None and not callable(callback):
                raise ConfigurationError(f"{name} must be callable")

    @property
    def min_prediction_records(self) -> int:
        return self.min_data_points * self.thresholds.prediction_data_factor

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> "AnalyticsConfig":
        """Create config from a mapping of camelCase or snake_case options."""
        return cls().updated(config_dict)

    @classmethod
    def split_unknown(cls, options: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
        """Separate recognized options from unknown keys."""
        known = {f.name for f in fields(cls)}
        valid: Dict[str, Any] = {}
        unknown: List[str] = []
        for key, value in options.items():
            if OPTION_ALIASES.get(key, key) in known:
                valid[key] = value
            else:
                unknown.append(key)
        return valid, unknown

    def updated(self, options: Mapping[str, Any]) -> "AnalyticsConfig":
        """Return a copy with ``options`` applied on top of this config.

        Raises:
            ConfigurationError: If options is not a mapping, names an unknown
                option or carries an invalid value
        """
        if not isinstance(options, Mapping):
            raise ConfigurationError(f"Options must be a mapping, got {type(options).__name__}")

        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in options.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown option: {key}")
            if name == "thresholds" and isinstance(value, Mapping):
                value = InsightThresholds.from_dict({**self.thresholds.to_dict(), **value})
            changes[name] = value

        try:
            return replace(self, **changes)
        except TypeError as e:
            raise ConfigurationError(str(e))

    def to_dict(self) -> Dict[str, Any]:
        """Convert serializable options to a dictionary."""
        return {
            "auto_refresh": self.auto_refresh,
            "refresh_interval": self.refresh_interval,
            "enable_trends": self.enable_trends,
            "enable_insights": self.enable_insights,
            "enable_predictions": self.enable_predictions,
            "min_data_points": self.min_data_points,
            "history_limit": self.history_limit,
            "thresholds": self.thresholds.to_dict(),
        }

    def save(self, path: Union[str, Path]) -> None:
        """Save config to YAML file."""
        import yaml
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "AnalyticsConfig":
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            config_dict = yaml.safe_load(f) or {}
        return cls.from_dict(config_dict)
