"""
Prometheus metrics for movie-etl-pipeline

Counters and histograms live in a private registry so tests and
multiple pipelines in one process do not collide with the default one.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    write_to_textfile,
)


REGISTRY = CollectorRegistry()


# =======================
# PIPELINE METRICS
# =======================

pipeline_runs_total = Counter(
    name="pipeline_runs_total",
    documentation="Total number of pipeline runs",
    labelnames=["source_id", "status"],  # status: succeeded, failed
    registry=REGISTRY,
)

stage_duration_seconds = Histogram(
    name="pipeline_stage_duration_seconds",
    documentation="Time spent in each pipeline stage in seconds",
    labelnames=["source_id", "stage"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

stage_failures_total = Counter(
    name="pipeline_stage_failures_total",
    documentation="Total number of runs stopped by a stage failure",
    labelnames=["source_id", "stage", "error_type"],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

records_processed_total = Counter(
    name="pipeline_records_processed_total",
    documentation="Total number of records seen by the pipeline",
    labelnames=["source_id", "status"],  # status: parsed, clean, dropped, loaded
    registry=REGISTRY,
)

# =======================
# WAREHOUSE METRICS
# =======================

store_errors_total = Counter(
    name="pipeline_store_errors_total",
    documentation="Total number of failed store operations",
    labelnames=["operation"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def write_metrics_file(path: str) -> None:
    """Write all metrics to a file for the node_exporter textfile collector"""
    write_to_textfile(path, REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    histogram.labels(**labels).observe(value)


def record_run_summary(
    source_id: str,
    status: str,
    parsed: int,
    clean: int,
    dropped: int,
    loaded: int,
) -> None:
    """
    Record the counts of a finished pipeline run

    Args:
        source_id: Label identifying the input
        status: "succeeded" or "failed"
        parsed: Rows read from the source
        clean: Rows that survived cleaning
        dropped: Rows dropped for a missing primary_id
        loaded: Rows upserted
    """
    increment_counter(pipeline_runs_total, source_id=source_id, status=status)
    for label, value in (
        ("parsed", parsed),
        ("clean", clean),
        ("dropped", dropped),
        ("loaded", loaded),
    ):
        if value:
            increment_counter(records_processed_total, value, source_id=source_id, status=label)
