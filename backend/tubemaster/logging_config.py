import logging
import time
from contextlib import contextmanager
from typing import Dict, Union

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

log = logging.getLogger("tubemaster")

# Process-wide counters exposed on /metrics. Not persisted.
MetricValue = Union[int, float]
_metrics: Dict[str, MetricValue] = {}


def configure_logging(level: str) -> None:
    """Apply the configured level to the tubemaster logger."""
    log.setLevel(level.upper())


def inc_metric(name: str, amount: int = 1) -> None:
    _metrics[name] = int(_metrics.get(name, 0)) + amount


def get_metrics_snapshot() -> Dict[str, MetricValue]:
    return dict(_metrics)


def reset_metrics() -> None:
    _metrics.clear()


@contextmanager
def measure(name: str):
    """Log how long the block took and keep the last duration and a call count."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        log.debug("%s took %.1fms", name, elapsed_ms)
        _metrics[f"time_ms_last_{name}"] = round(elapsed_ms, 1)
        inc_metric(f"calls_{name}")
