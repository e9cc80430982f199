"""Shared fixtures for cipherstats tests."""

import pytest

from cipherstats.analysis.data_structures import AggregatedStat, MetricRecord


def make_record(algorithm, execution_time, timestamp="2024-01-15T10:00:00.000Z", input_size=100):
    return MetricRecord(
        algorithm=algorithm,
        timestamp=timestamp,
        execution_time=str(execution_time),
        input_size=input_size,
        output_size=input_size,
    )


def make_stat(count, avg_time, std_dev=0.0):
    return AggregatedStat(
        count=count,
        total_time=avg_time * count,
        avg_time=avg_time,
        min_time=avg_time - std_dev,
        max_time=avg_time + std_dev,
        std_dev=std_dev,
        median=avg_time,
        p25=avg_time,
        p75=avg_time,
        p95=avg_time,
    )


@pytest.fixture
def record():
    return make_record


@pytest.fixture
def stat():
    return make_stat


@pytest.fixture
def ab_records():
    return [make_record("A", 10), make_record("A", 20), make_record("B", 5)]


@pytest.fixture
def sample_records():
    """Twelve records over three days, newest first.

    Caesar stays near 2 ms; DES grows from ~11 ms to ~31 ms.
    """
    rows = [
        ("2024-01-17T12:00:00.000Z", "Caesar", 2.0),
        ("2024-01-17T11:00:00.000Z", "Caesar", 2.2),
        ("2024-01-17T10:00:00.000Z", "DES", 30.0),
        ("2024-01-17T09:00:00.000Z", "DES", 32.0),
        ("2024-01-16T12:00:00.000Z", "Caesar", 2.1),
        ("2024-01-16T11:00:00.000Z", "Caesar", 1.9),
        ("2024-01-16T10:00:00.000Z", "DES", 20.0),
        ("2024-01-16T09:00:00.000Z", "DES", 22.0),
        ("2024-01-15T12:00:00.000Z", "Caesar", 2.0),
        ("2024-01-15T11:00:00.000Z", "Caesar", 2.0),
        ("2024-01-15T10:00:00.000Z", "DES", 10.0),
        ("2024-01-15T09:00:00.000Z", "DES", 12.0),
    ]
    return [make_record(algo, ms, timestamp=ts) for ts, algo, ms in rows]
