"""
Tests for analytics configuration.
"""

import pytest

from cipherstats.analysis.config import AnalyticsConfig, InsightThresholds
from cipherstats.analysis.errors import ConfigurationError


class TestAnalyticsConfig:

    def test_defaults(self):
        config = AnalyticsConfig()
        assert config.auto_refresh is False
        assert config.refresh_interval == 60000
        assert config.enable_trends is True
        assert config.enable_insights is True
        assert config.enable_predictions is False
        assert config.min_data_points == 5
        assert config.history_limit == 100
        assert config.on_insight is None
        assert config.min_prediction_records == 10

    def test_camel_case_options(self):
        config = AnalyticsConfig.from_dict({"enablePredictions": True, "minDataPoints": 3, "refreshInterval": 500})
        assert config.enable_predictions is True
        assert config.min_data_points == 3
        assert config.refresh_interval == 500

    def test_updated_keeps_other_values(self):
        config = AnalyticsConfig(min_data_points=8).updated({"enable_trends": False})
        assert config.min_data_points == 8
        assert config.enable_trends is False

    def test_threshold_mapping_is_merged(self):
        config = AnalyticsConfig().updated({"thresholds": {"variability_cv_pct": 30}})
        assert config.thresholds.variability_cv_pct == 30
        assert config.thresholds.trend_change_pct == 5.0

    @pytest.mark.parametrize("options", [
        {"unknown": 1},
        {"refreshInterval": 0},
        {"min_data_points": 0},
        {"min_data_points": "5"},
        {"enable_trends": "yes"},
        {"on_error": "not callable"},
        {"thresholds": {"bogus": 1}},
        ["auto_refresh"],
    ])
    def test_invalid_options(self, options):
        with pytest.raises(ConfigurationError):
            AnalyticsConfig().updated(options)

    def test_split_unknown(self):
        valid, unknown = AnalyticsConfig.split_unknown({"minDataPoints": 3, "onInsigt": print, "history_limit": 10})
        assert valid == {"minDataPoints": 3, "history_limit": 10}
        assert unknown == ["onInsigt"]

    def test_yaml_round_trip(self, tmp_path):
        path = tmp_path / "analytics.yaml"
        config = AnalyticsConfig(
            enable_predictions=True,
            min_data_points=3,
            thresholds=InsightThresholds(low_usage_pct=2.5),
            on_insight=print,
        )
        config.save(path)
        loaded = AnalyticsConfig.load(path)

        assert loaded.to_dict() == config.to_dict()
        assert loaded.on_insight is None


class TestInsightThresholds:

    def test_rejects_non_numeric(self):
        with pytest.raises(ConfigurationError):
            InsightThresholds(trend_change_pct="5")

    def test_prediction_factor(self):
        config = AnalyticsConfig(min_data_points=4, thresholds=InsightThresholds(prediction_data_factor=3))
        assert config.min_prediction_records == 12
