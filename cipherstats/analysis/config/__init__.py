"""Analytics configuration."""

from .analysis_config import AnalyticsConfig, InsightThresholds, OPTION_ALIASES

__all__ = ["AnalyticsConfig", "InsightThresholds", "OPTION_ALIASES"]
