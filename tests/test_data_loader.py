"""
Tests for record parsing, loading and saving.
"""

import json
import math

import pytest

from cipherstats.analysis.data import RecordLoader, coerce_records, records_to_frame
from cipherstats.analysis.data_structures import MetricRecord
from cipherstats.analysis.errors import InvalidRecordError


class TestMetricRecord:

    def test_from_camel_case(self):
        record = MetricRecord.from_dict({
            "algorithm": "Caesar",
            "timestamp": "2024-01-15T10:00:00.000Z",
            "executionTime": "1.25",
            "inputSize": 11,
            "outputSize": "11",
            "throughput": "8800.00",
            "efficiency": "99.00",
            "memoryUsed": "N/A",
        })
        assert record.execution_ms == 1.25
        assert record.output_size == 11
        assert record.to_dict()["executionTime"] == "1.25"

    def test_from_snake_case(self):
        record = MetricRecord.from_dict({"algorithm": "DES", "timestamp": "t", "execution_time": 4})
        assert record.execution_time == "4"
        assert record.input_size == 0

    @pytest.mark.parametrize("data", [
        {"timestamp": "t", "executionTime": "1"},
        {"algorithm": 5, "timestamp": "t", "executionTime": "1"},
        {"algorithm": "A", "timestamp": "t", "executionTime": "1", "inputSize": "big"},
        ["algorithm", "A"],
    ])
    def test_invalid(self, data):
        with pytest.raises(InvalidRecordError):
            MetricRecord.from_dict(data)


class TestCoerceRecords:

    def test_skips_malformed_items(self, record):
        valid, errors = coerce_records([record("A", 1), {"algorithm": "B"}, {"algorithm": "C", "timestamp": "t",
                                                                              "executionTime": "2"}])
        assert [r.algorithm for r in valid] == ["A", "C"]
        assert len(errors) == 1
        assert errors[0].startswith("record 1:")

    @pytest.mark.parametrize("records", ["abc", {"algorithm": "A"}, 42, None])
    def test_rejects_non_sequences(self, records):
        with pytest.raises(InvalidRecordError):
            coerce_records(records)

    def test_frame_marks_bad_times_as_nan(self, record):
        frame = records_to_frame([record("A", 2), record("A", "oops")])
        assert frame["execution_ms"].iloc[0] == 2.0
        assert math.isnan(frame["execution_ms"].iloc[1])


class TestRecordLoader:

    @pytest.fixture
    def loader(self):
        return RecordLoader()

    def test_json_string_round_trip(self, loader, sample_records):
        assert loader.from_json_string(loader.to_json_string(sample_records)) == sample_records

    def test_csv_string_round_trip(self, loader, sample_records):
        text = loader.to_csv_string(sample_records)
        assert text.splitlines()[0].startswith("Algorithm,Timestamp,Execution Time (ms)")
        assert loader.from_csv_string(text) == sample_records

    def test_invalid_json(self, loader):
        with pytest.raises(InvalidRecordError):
            loader.from_json_string("{not json")
        with pytest.raises(InvalidRecordError):
            loader.from_json_string(json.dumps({"algorithm": "A"}))

    def test_csv_missing_columns(self, loader):
        with pytest.raises(InvalidRecordError):
            loader.from_csv_string("Algorithm,Timestamp\nA,t\n")

    @pytest.mark.parametrize("name", ["records.json", "records.csv"])
    def test_save_and_load(self, loader, sample_records, tmp_path, name):
        path = loader.save(sample_records, tmp_path / "out" / name)
        assert loader.load(path) == sample_records

    def test_load_missing_file(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.load(tmp_path / "missing.json")

    def test_load_non_array(self, loader, tmp_path):
        path = tmp_path / "records.json"
        path.write_text('{"records": []}')
        with pytest.raises(InvalidRecordError):
            loader.load(path)

    def test_validate_records(self, loader, record):
        result = loader.validate_records([record("A", 1), record("A", "x", timestamp="yesterday")])
        assert result["valid"] is False
        assert len(result["issues"]) == 2
        assert result["statistics"] == {"records": 2, "algorithms": 1}

    def test_validate_clean_records(self, loader, sample_records):
        assert loader.validate_records(sample_records)["valid"] is True
