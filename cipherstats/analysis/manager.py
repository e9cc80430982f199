"""Analytics engine that owns the record set and the published analytics state."""

import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from cipherstats.core.utils import get_logger, RefreshScheduler
from .analytics import aggregate_by_algorithm, aggregate_by_time_period, compare_algorithms
from .config import AnalyticsConfig
from .data import RecordLoader, coerce_records
from .data_structures import (
    PERIODS,
    AggregatedStat,
    AnalyticsState,
    ComparisonResult,
    Insight,
    MetricRecord,
    Prediction,
    Report,
    TimeBucket,
    TrendResult,
)
from .errors import ConfigurationError, InvalidRecordError
from .pipeline import (
    derive_insights,
    derive_predictions,
    derive_stats,
    derive_trends,
    refresh_state,
    run_step,
)
from .reports import build_report

EXPORT_FORMATS = ("json", "csv")


class AnalyticsEngine:
    """Derives analytics from metric records and publishes them as one state.

    Every derived value lives in a frozen ``AnalyticsState``; updates build a
    new state and swap it in under a lock, so readers always see a complete
    snapshot. ``refresh()`` is not reentrant: a call made while a refresh is
    running is coalesced into a single follow-up run.

    Errors never propagate out of the public methods. They are passed to the
    configured ``on_error(message, error)`` callback (by default the module
    logger) and stored as the state's ``error``.
    """

    def __init__(
        self,
        records: Optional[Sequence[Any]] = None,
        options: Optional[Union[AnalyticsConfig, Mapping[str, Any]]] = None,
    ):
        """
        Initialize analytics engine.

        Args:
            records: Metric records (``MetricRecord`` or dicts), newest first
            options: ``AnalyticsConfig`` or a mapping of camelCase/snake_case options
        """
        self.logger = get_logger(__name__)
        self.loader = RecordLoader()

        self._lock = threading.RLock()
        self._config = AnalyticsConfig()
        self._records: Tuple[MetricRecord, ...] = ()
        self._state = AnalyticsState()
        self._busy = False
        self._pending = False
        self._reports_running = 0
        self._refresh_thread: Optional[int] = None
        self._scheduler: Optional[RefreshScheduler] = None

        if options is not None:
            self.configure(options)
        if records is not None:
            self.set_records(records)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        config: Optional[Union[AnalyticsConfig, Mapping[str, Any]]] = None,
    ) -> "AnalyticsEngine":
        """Create an engine from a JSON or CSV record file.

        Raises:
            FileNotFoundError: If the file does not exist
            InvalidRecordError: If the file cannot be parsed
        """
        return cls(RecordLoader().load(path), config)

    # ---- configuration ----

    @property
    def config(self) -> AnalyticsConfig:
        return self._config

    def configure(self, options: Union[AnalyticsConfig, Mapping[str, Any]]) -> AnalyticsConfig:
        """Apply options on top of the current configuration.

        Unknown keys are reported and skipped; the remaining options are
        applied. An invalid value is reported and the previous configuration
        is kept. Turning ``auto_refresh`` on starts the refresh scheduler;
        turning it off stops it.
        """
        unknown: List[str] = []
        try:
            if isinstance(options, AnalyticsConfig):
                config = options
            else:
                if isinstance(options, Mapping):
                    options, unknown = AnalyticsConfig.split_unknown(options)
                config = self._config.updated(options)
        except ConfigurationError as e:
            self._report_error("Invalid analytics options:", e)
            return self._config

        with self._lock:
            self._config = config
        if unknown:
            self._report_error("Ignored analytics options:", ConfigurationError(f"Unknown option(s): {unknown}"))
        self._sync_scheduler()
        return config

    def start_auto_refresh(self) -> None:
        self.configure({"auto_refresh": True})

    def stop_auto_refresh(self) -> None:
        self.configure({"auto_refresh": False})

    def _sync_scheduler(self) -> None:
        config = self._config
        scheduler = self._scheduler

        if not config.auto_refresh:
            if scheduler is not None:
                scheduler.stop()
                self._scheduler = None
            return

        if scheduler is not None and scheduler.interval_ms != config.refresh_interval:
            scheduler.stop()
            scheduler = None
        if scheduler is None:
            scheduler = RefreshScheduler(self.refresh, config.refresh_interval)
            self._scheduler = scheduler
        scheduler.start()

    @property
    def is_auto_refreshing(self) -> bool:
        return self._scheduler is not None and self._scheduler.is_running

    # ---- records ----

    @property
    def records(self) -> Tuple[MetricRecord, ...]:
        return self._records

    def set_records(self, records: Sequence[Any]) -> int:
        """Replace the record set.

        A value that is not a sequence is reported and leaves an empty record
        set; malformed items are skipped and reported.

        Returns:
            Number of records kept
        """
        try:
            valid, errors = coerce_records(records)
        except InvalidRecordError as e:
            self._report_error("Invalid metric records:", e)
            valid, errors = [], []

        if errors:
            self._report_error(
                f"Skipped {len(errors)} malformed metric record(s):",
                InvalidRecordError("; ".join(errors)),
            )

        with self._lock:
            self._records = tuple(valid)
        return len(valid)

    def add_record(self, record: Union[MetricRecord, Mapping[str, Any]]) -> Optional[MetricRecord]:
        """Prepend one record, keeping at most ``history_limit`` records."""
        try:
            if not isinstance(record, MetricRecord):
                record = MetricRecord.from_dict(record)
        except InvalidRecordError as e:
            self._report_error("Invalid metric record:", e)
            return None

        with self._lock:
            self._records = ((record,) + self._records)[: self._config.history_limit]
        return record

    def clear_algorithm_data(self, algorithm: str) -> int:
        """Drop every record of ``algorithm`` and refresh.

        Returns:
            Number of records removed
        """
        with self._lock:
            kept = tuple(r for r in self._records if r.algorithm != algorithm)
            removed = len(self._records) - len(kept)
            self._records = kept

        self.logger.info(f"Removed {removed} record(s) of {algorithm}")
        self.refresh()
        return removed

    def export_records(self, format: str = "json") -> Optional[str]:
        """Serialize the record set as JSON or CSV text."""
        if format not in EXPORT_FORMATS:
            self._report_error("Failed to export records:", ValueError(f"format must be one of {EXPORT_FORMATS}"))
            return None

        records = self._records
        if format == "csv":
            return self.loader.to_csv_string(records)
        return self.loader.to_json_string(records)

    def import_records(self, data: str, format: str = "json") -> bool:
        """Replace the record set with records parsed from ``data``.

        At most ``history_limit`` records are kept.

        Returns:
            True when the data was imported
        """
        if not isinstance(data, str):
            self._report_error("Failed to import records:", InvalidRecordError("data must be a string"))
            return False
        if format not in EXPORT_FORMATS:
            self._report_error("Failed to import records:", ValueError(f"format must be one of {EXPORT_FORMATS}"))
            return False

        try:
            if format == "csv":
                records = self.loader.from_csv_string(data)
            else:
                records = self.loader.from_json_string(data)
        except InvalidRecordError as e:
            self._report_error("Failed to import records:", e)
            return False

        with self._lock:
            self._records = tuple(records[: self._config.history_limit])
        self.logger.info(f"Imported {len(self._records)} metric records")
        return True

    # ---- state ----

    @property
    def state(self) -> AnalyticsState:
        return self._state

    @property
    def aggregated_stats(self) -> Dict[str, AggregatedStat]:
        return self._state.aggregated_stats

    @property
    def trends(self) -> List[TrendResult]:
        return self._state.trends

    @property
    def insights(self) -> List[Insight]:
        return self._state.insights

    @property
    def predictions(self) -> Dict[str, Prediction]:
        return self._state.predictions

    @property
    def report(self) -> Optional[Report]:
        return self._state.report

    @property
    def error(self) -> Optional[BaseException]:
        return self._state.error

    @property
    def last_update(self) -> Optional[str]:
        return self._state.last_update

    @property
    def is_analyzing(self) -> bool:
        return self._busy or self._reports_running > 0

    @property
    def has_enough_data(self) -> bool:
        return len(self._records) >= self._config.min_data_points

    @property
    def top_performers(self) -> List[Tuple[str, AggregatedStat]]:
        """The three fastest algorithms by average time."""
        return self.get_top_algorithms(3)

    @property
    def worst_performers(self) -> List[Tuple[str, AggregatedStat]]:
        """The three slowest algorithms by average time."""
        ranked = sorted(self._state.aggregated_stats.items(), key=lambda item: item[1].avg_time, reverse=True)
        return ranked[:3]

    def _publish(self, **changes: Any) -> AnalyticsState:
        with self._lock:
            self._state = replace(self._state, **changes)
            return self._state

    def _report_error(self, message: str, error: BaseException) -> None:
        self._publish(error=error)
        on_error = self._config.on_error
        if on_error is not None:
            on_error(message, error)
        else:
            self.logger.error(f"{message} {error}")

    # ---- pipeline ----

    def refresh(self) -> AnalyticsState:
        """Run the full pipeline and publish the resulting state.

        A call from another thread while a refresh is running schedules one
        follow-up run; a call made from inside the running refresh (for
        example by an ``on_insight`` callback) is ignored.

        Returns:
            The published state (the current one when the call was coalesced
            into a refresh already running)
        """
        with self._lock:
            if self._busy:
                # Nested calls from a callback of the running refresh are dropped
                if self._refresh_thread != threading.get_ident():
                    self._pending = True
                return self._state
            self._busy = True
            self._refresh_thread = threading.get_ident()

        try:
            while True:
                with self._lock:
                    self._pending = False
                    records, config, previous = self._records, self._config, self._state

                state = refresh_state(records, config, previous, self._step_error_reporter(config))

                with self._lock:
                    self._state = self._merge_concurrent(state, previous)
                    state = self._state
                    if not self._pending:
                        self._busy = False
                        return state
        except BaseException:
            with self._lock:
                self._busy = False
                self._pending = False
            raise

    def _merge_concurrent(self, state: AnalyticsState, previous: AnalyticsState) -> AnalyticsState:
        """Keep what other writers published while ``state`` was being computed.

        The report is never rebuilt by a refresh, and an error reported since
        the snapshot survives a refresh that had none of its own.
        """
        current = self._state
        changes: Dict[str, Any] = {"report": current.report}
        if state.error is None and current.error is not previous.error:
            changes["error"] = current.error
        return replace(state, **changes)

    def _step_error_reporter(self, config: AnalyticsConfig):
        def report(message: str, error: BaseException) -> None:
            if config.on_error is not None:
                config.on_error(message, error)
            else:
                self.logger.error(f"{message} {error}")
        return report

    def _run(self, description: str, func, fallback):
        value, error = run_step(description, func, fallback, self._step_error_reporter(self._config))
        if error is not None:
            self._publish(error=error)
        return value, error

    def aggregate_by_algorithm(self) -> Dict[str, AggregatedStat]:
        records, config = self._records, self._config
        stats, error = self._run("aggregate statistics", lambda: derive_stats(records, config), None)
        if error is not None:
            return self._state.aggregated_stats
        return self._publish(aggregated_stats=stats).aggregated_stats

    def aggregate_by_time_period(self, period: str = "day") -> List[TimeBucket]:
        """Bucket the records by ``period``; an unknown period falls back to day."""
        if period not in PERIODS:
            self._report_error("Invalid period:", ValueError(f"Unknown period '{period}', using 'day'"))
            period = "day"

        records = self._records
        buckets, _ = self._run("aggregate by time period", lambda: aggregate_by_time_period(records, period), [])
        return buckets

    def analyze_trends(self) -> List[TrendResult]:
        records, config = self._records, self._config
        trends, error = self._run("analyze trends", lambda: derive_trends(records, config), None)
        if error is not None:
            return self._state.trends
        return self._publish(trends=trends).trends

    def generate_insights(self) -> List[Insight]:
        records, config, state = self._records, self._config, self._state
        insights, error = self._run(
            "generate insights",
            lambda: derive_insights(records, state.aggregated_stats, state.trends, config),
            None,
        )
        if error is not None:
            return self._state.insights
        return self._publish(insights=insights).insights

    def generate_predictions(self) -> Dict[str, Prediction]:
        records, config, state = self._records, self._config, self._state
        predictions, error = self._run(
            "generate predictions",
            lambda: derive_predictions(records, state.aggregated_stats, config),
            None,
        )
        if error is not None:
            return self._state.predictions
        return self._publish(predictions=predictions).predictions

    def compare_algorithms(self, name1: str, name2: str) -> Optional[ComparisonResult]:
        """Compare two algorithms; None when either is unknown."""
        stats = self._state.aggregated_stats
        result, _ = self._run("compare algorithms", lambda: compare_algorithms(stats, name1, name2), None)
        return result

    def generate_report(self, period: str = "all") -> Optional[Report]:
        """Build a report from the current state and cache it."""
        with self._lock:
            self._reports_running += 1
        try:
            records, config, state = self._records, self._config, self._state
            report, _ = self._run(
                "generate report",
                lambda: build_report(
                    records,
                    state.aggregated_stats,
                    state.trends,
                    state.insights,
                    state.predictions,
                    period=period,
                    include_predictions=config.enable_predictions,
                ),
                None,
            )
            if report is not None:
                self._publish(report=report)
            return report
        finally:
            with self._lock:
                self._reports_running -= 1

    # ---- queries ----

    def get_algorithm_stats(self, algorithm: str) -> Optional[AggregatedStat]:
        """Statistics of one algorithm computed from the current records."""
        records = [r for r in self._records if r.algorithm == algorithm]
        stats, _ = self._run("get algorithm stats", lambda: aggregate_by_algorithm(records), {})
        return stats.get(algorithm)

    def get_time_range_stats(
        self,
        start: Union[datetime, str],
        end: Union[datetime, str],
    ) -> Optional[Dict[str, Any]]:
        """Records with a timestamp in ``[start, end]`` and their statistics.

        Naive datetimes are taken as UTC.

        Returns:
            Dictionary with count, records, algorithms (first-seen order) and
            per-algorithm stats; None when the bounds are not valid datetimes
        """
        try:
            lower = _to_utc(start)
            upper = _to_utc(end)
        except (TypeError, ValueError) as e:
            self._report_error("Failed to get time range stats:", e)
            return None

        records = self._records
        stamps = pd.to_datetime(pd.Series([r.timestamp for r in records], dtype=object),
                                errors="coerce", utc=True, format="ISO8601")
        in_range = [r for r, ts in zip(records, stamps) if not pd.isna(ts) and lower <= ts <= upper]

        return {
            "count": len(in_range),
            "records": in_range,
            "algorithms": list(dict.fromkeys(r.algorithm for r in in_range)),
            "stats": aggregate_by_algorithm(in_range),
        }

    def get_top_algorithms(self, limit: int = 5) -> List[Tuple[str, AggregatedStat]]:
        """Fastest algorithms by average time; ties keep first-seen order."""
        ranked = sorted(self._state.aggregated_stats.items(), key=lambda item: item[1].avg_time)
        return ranked[:limit]

    def get_most_used_algorithms(self, limit: int = 5) -> List[Tuple[str, int]]:
        """Algorithms with the most records; ties keep first-seen order."""
        ranked = sorted(
            ((name, stat.count) for name, stat in self._state.aggregated_stats.items()),
            key=lambda item: item[1],
            reverse=True,
        )
        return ranked[:limit]


def _to_utc(value: Union[datetime, str]) -> pd.Timestamp:
    if not isinstance(value, (datetime, str)):
        raise TypeError(f"Expected a datetime or ISO string, got {type(value).__name__}")
    ts = pd.Timestamp(value)
    if ts is pd.NaT:
        raise ValueError(f"Invalid datetime: {value!r}")
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
