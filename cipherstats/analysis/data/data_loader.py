"""Loading, saving and tabulating metric records."""

import io
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

import pandas as pd

from cipherstats.core.utils import get_logger, FileManager
from ..data_structures import MetricRecord, parse_execution_time
from ..errors import InvalidRecordError


logger = get_logger(__name__)

# CSV header -> serialized record key
CSV_COLUMNS = {
    "Algorithm": "algorithm",
    "Timestamp": "timestamp",
    "Execution Time (ms)": "executionTime",
    "Input Size": "inputSize",
    "Output Size": "outputSize",
    "Throughput (chars/s)": "throughput",
    "Memory Used (KB)": "memoryUsed",
    "Efficiency": "efficiency",
}

FRAME_COLUMNS = ["algorithm", "timestamp", "execution_ms", "input_size", "output_size"]


def coerce_records(records: Iterable[Any]) -> Tuple[List[MetricRecord], List[str]]:
    """Convert mappings or records into ``MetricRecord`` instances.

    Args:
        records: Sequence of ``MetricRecord`` or dict items

    Returns:
        Tuple of (valid records in input order, error messages for skipped items)

    Raises:
        InvalidRecordError: If ``records`` is not a sequence
    """
    if isinstance(records, (str, bytes, dict)) or not isinstance(records, Sequence):
        raise InvalidRecordError(
            f"Metric records must be a sequence, got {type(records).__name__}"
        )

    valid: List[MetricRecord] = []
    errors: List[str] = []
    for index, item in enumerate(records):
        if isinstance(item, MetricRecord):
            valid.append(item)
            continue
        try:
            valid.append(MetricRecord.from_dict(item))
        except InvalidRecordError as e:
            errors.append(f"record {index}: {e}")

    if errors:
        logger.warning(f"Skipped {len(errors)} malformed metric record(s)")
    return valid, errors


def records_to_frame(records: Sequence[MetricRecord]) -> pd.DataFrame:
    """Tabulate records, one row per record in input order.

    ``execution_ms`` holds the parsed execution time, NaN where the value is
    not a finite number.
    """
    rows = [
        {
            "algorithm": r.algorithm,
            "timestamp": r.timestamp,
            "execution_ms": parse_execution_time(r.execution_time),
            "input_size": r.input_size,
            "output_size": r.output_size,
        }
        for r in records
    ]
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    frame["execution_ms"] = frame["execution_ms"].astype(float)
    return frame


class RecordLoader:
    """Reads and writes metric records as JSON or CSV."""

    def __init__(self):
        """Initialize record loader."""
        self.logger = get_logger(__name__)
        self.file_manager = FileManager()

    # ---- strings ----

    def to_json_string(self, records: Sequence[MetricRecord]) -> str:
        return json.dumps([r.to_dict() for r in records], indent=2)

    def from_json_string(self, data: str) -> List[MetricRecord]:
        """Parse a JSON array of records.

        Raises:
            InvalidRecordError: If the payload is not a JSON array
        """
        try:
            parsed = json.loads(data)
        except ValueError as e:
            raise InvalidRecordError(f"Invalid JSON: {e}")
        if not isinstance(parsed, list):
            raise InvalidRecordError("JSON payload must be an array of records")
        records, _ = coerce_records(parsed)
        return records

    def to_csv_string(self, records: Sequence[MetricRecord]) -> str:
        rows = [r.to_dict() for r in records]
        df = pd.DataFrame(rows, columns=list(CSV_COLUMNS.values()))
        df.columns = list(CSV_COLUMNS.keys())
        return df.to_csv(index=False)

    def from_csv_string(self, data: str) -> List[MetricRecord]:
        """Parse CSV text written by ``to_csv_string``.

        Raises:
            InvalidRecordError: If required columns are missing
        """
        try:
            df = pd.read_csv(io.StringIO(data), dtype=str, keep_default_na=False)
        except (ValueError, pd.errors.ParserError) as e:
            raise InvalidRecordError(f"Invalid CSV: {e}")

        missing = [col for col in ("Algorithm", "Timestamp", "Execution Time (ms)") if col not in df.columns]
        if missing:
            raise InvalidRecordError(f"CSV is missing column(s): {missing}")

        df = df.rename(columns=CSV_COLUMNS)
        records, _ = coerce_records(df.to_dict(orient="records"))
        return records

    # ---- files ----

    def load(self, path: Union[str, Path]) -> List[MetricRecord]:
        """Load records from a ``.json`` or ``.csv`` file.

        Raises:
            FileNotFoundError: If the file does not exist
            InvalidRecordError: If the content cannot be parsed
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Record file not found: {path}")

        if path.suffix.lower() == ".csv":
            records = self.from_csv_string(path.read_text())
        else:
            result = self.file_manager.read_json_file(path)
            if not result.success:
                raise InvalidRecordError(result.error_message)
            if not isinstance(result.data, list):
                raise InvalidRecordError(f"{path} must contain a JSON array of records")
            records, _ = coerce_records(result.data)

        self.logger.info(f"Loaded {len(records)} metric records from {path}")
        return records

    def save(self, records: Sequence[MetricRecord], path: Union[str, Path]) -> Path:
        """Save records to ``.json`` or ``.csv`` depending on the suffix."""
        path = Path(path)
        if path.suffix.lower() == ".csv":
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.to_csv_string(records))
            self.logger.info(f"Wrote {len(records)} metric records to {path}")
            return path

        result = self.file_manager.write_json_file([r.to_dict() for r in records], path)
        if not result.success:
            raise OSError(result.error_message)
        return path

    def validate_records(self, records: Sequence[MetricRecord]) -> Dict[str, Any]:
        """Check records for values the analytics will skip.

        Returns:
            Dictionary with validation results and statistics
        """
        validation_results = {
            "valid": True,
            "issues": [],
            "statistics": {"records": len(records)},
        }

        frame = records_to_frame(records)
        bad_times = int(frame["execution_ms"].isna().sum())
        bad_stamps = int(pd.to_datetime(frame["timestamp"], errors="coerce", utc=True, format="ISO8601").isna().sum())

        if frame.empty:
            validation_results["issues"].append("no records")
        if bad_times:
            validation_results["issues"].append(f"{bad_times} record(s) with non-numeric execution time")
        if bad_stamps:
            validation_results["issues"].append(f"{bad_stamps} record(s) with unparseable timestamp")

        validation_results["valid"] = not validation_results["issues"]
        validation_results["statistics"]["algorithms"] = int(frame["algorithm"].nunique())

        for issue in validation_results["issues"]:
            self.logger.warning(f"Validation issue: {issue}")

        return validation_results
