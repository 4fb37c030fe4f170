"""
Prometheus metrics collection for upifinder

Counters are updated by the scanner while it walks the archive; gauges hold
the figures of the last report produced by the CLI.
"""
import os
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
)
from typing import Optional


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# SCAN METRICS
# =======================

# Entries visited, by container kind
files_visited_total = Counter(
    name="upifinder_files_visited_total",
    documentation="Total number of archive entries visited",
    labelnames=["kind"],  # kind: plain, tar, zip, list
    registry=REGISTRY,
)

# Decode outcomes
records_decoded_total = Counter(
    name="upifinder_records_decoded_total",
    documentation="Total number of entries handed to the decoder",
    labelnames=["status"],  # status: accepted, rejected, failed
    registry=REGISTRY,
)

# Roots traversed
roots_scanned_total = Counter(
    name="upifinder_roots_scanned_total",
    documentation="Total number of archive roots traversed",
    labelnames=["status"],  # status: success, missing, failure
    registry=REGISTRY,
)

# Scan duration
scan_duration_seconds = Histogram(
    name="upifinder_scan_duration_seconds",
    documentation="Time spent scanning the archive and consuming its records",
    labelnames=["command"],
    buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0, 900.0],
    registry=REGISTRY,
)

# =======================
# REPORT METRICS
# =======================

partitions_reported = Gauge(
    name="upifinder_partitions_reported",
    documentation="Number of partitions in the last report",
    labelnames=["command"],
    registry=REGISTRY,
)

gaps_reported = Gauge(
    name="upifinder_gaps_reported",
    documentation="Number of gaps in the last check report",
    registry=REGISTRY,
)

missing_files = Gauge(
    name="upifinder_missing_files",
    documentation="Number of missing sequence numbers in the last report",
    labelnames=["command"],
    registry=REGISTRY,
)

corrupted_files = Gauge(
    name="upifinder_corrupted_files",
    documentation="Number of invalid records in the last walk report",
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Lazy import: the exposition server is only needed when requested
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    if labels:
        gauge.labels(**labels).set(value)
    else:
        gauge.set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    histogram.labels(**labels).observe(value)


# =======================
# REPORT HELPERS
# =======================

def record_walk_report(
    partitions: int, invalid: int, missing: int, duration_seconds: float, command: str = "walk"
) -> None:
    """
    Record the figures of a walk/inspect report.

    Args:
        partitions: Number of partitions reported
        invalid: Total invalid records
        missing: Total missing sequence numbers
        duration_seconds: Scan duration in seconds
        command: walk or inspect
    """
    set_gauge(partitions_reported, partitions, command=command)
    set_gauge(corrupted_files, invalid)
    set_gauge(missing_files, missing, command=command)
    observe_histogram(scan_duration_seconds, duration_seconds, command=command)


def record_check_report(partitions: int, gaps: int, missing: int, duration_seconds: float) -> None:
    """
    Record the figures of a check report.

    Args:
        partitions: Number of partitions with open gaps
        gaps: Number of gaps reported
        missing: Total missing sequence numbers
        duration_seconds: Scan duration in seconds
    """
    set_gauge(partitions_reported, partitions, command="check")
    set_gauge(gaps_reported, gaps)
    set_gauge(missing_files, missing, command="check")
    observe_histogram(scan_duration_seconds, duration_seconds, command="check")
