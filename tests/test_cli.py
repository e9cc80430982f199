"""
Tests for the command-line entry point.
"""

import json
import logging

import pytest

import main as cli
from cipherstats.analysis.data import RecordLoader


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def metrics_file(tmp_path, sample_records):
    return RecordLoader().save(sample_records, tmp_path / "metrics.json")


class TestMain:

    def test_report(self, metrics_file, tmp_path, capsys):
        output = tmp_path / "reports"
        assert cli.main(["report", "--input", str(metrics_file), "--output", str(output), "--predictions"]) == 0

        report = json.loads((output / "analytics_report.json").read_text())
        assert report["summary"]["total_operations"] == 12
        assert set(report["predictions"]) == {"Caesar", "DES"}
        assert (output / "AnalyticsSummary.txt").exists()
        assert (output / "algorithm_stats.csv").exists()
        assert "12 operations" in capsys.readouterr().out

    def test_compare_json(self, metrics_file, capsys):
        assert cli.main(["compare", "--input", str(metrics_file), "Caesar", "DES", "--json"]) == 0
        out = capsys.readouterr().out
        # Log lines share stdout; the JSON document is printed last
        result = json.loads(out[out.index("{\n"):])
        assert result["winner"] == "Caesar"
        assert result["metrics"]["usage"]["winner"] == "DES"

    def test_compare_unknown_algorithm(self, metrics_file):
        assert cli.main(["compare", "--input", str(metrics_file), "Caesar", "Enigma"]) == 1

    def test_summary(self, metrics_file, capsys):
        assert cli.main(["summary", "--input", str(metrics_file), "--min_data_points", "3"]) == 0
        out = capsys.readouterr().out
        assert "12 records, 2 algorithms" in out
        assert "Caesar has the best average performance" in out

    def test_missing_input(self, tmp_path):
        assert cli.main(["summary", "--input", str(tmp_path / "missing.json")]) == 1

    def test_no_command(self, capsys):
        assert cli.main([]) == 0
        assert "report" in capsys.readouterr().out
