import logging
import re
import threading
from typing import Any, Dict, Tuple

from prometheus_client import CollectorRegistry, Counter, Histogram, REGISTRY

logger = logging.getLogger("api.metrics")

LATENCY_BUCKETS_MS = (5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000)

_NAME_RE = re.compile(r"[^a-zA-Z0-9_:]")
_LOCK = threading.Lock()
_registry: CollectorRegistry = REGISTRY
# Per-registry metric objects; a registry rejects a second metric with the same name.
_CACHES: Dict[int, Tuple[dict, dict]] = {}


def _caches() -> Tuple[dict, dict]:
    return _CACHES.setdefault(id(_registry), ({}, {}))


def _metric_name(name: str) -> str:
    return _NAME_RE.sub("_", str(name).strip())


def _label_values(labelnames: Tuple[str, ...], labels: Dict[str, Any]) -> Dict[str, str]:
    return {key: "" if labels[key] is None else str(labels[key]) for key in labelnames}


def _get_counter(name: str, labelnames: Tuple[str, ...]) -> Counter | None:
    with _LOCK:
        counters, _ = _caches()
        entry = counters.get(name)
        if entry is None:
            counter = Counter(name, f"{name} counter", labelnames=labelnames, registry=_registry)
            counters[name] = (counter, labelnames)
            return counter
    counter, known = entry
    if known != labelnames:
        logger.warning("metrics_label_mismatch metric=%s expected=%s got=%s", name, known, labelnames)
        return None
    return counter


def _get_histogram(name: str, labelnames: Tuple[str, ...]) -> Histogram | None:
    with _LOCK:
        _, histograms = _caches()
        entry = histograms.get(name)
        if entry is None:
            histogram = Histogram(
                name,
                f"{name} in milliseconds",
                labelnames=labelnames,
                buckets=LATENCY_BUCKETS_MS,
                registry=_registry,
            )
            histograms[name] = (histogram, labelnames)
            return histogram
    histogram, known = entry
    if known != labelnames:
        logger.warning("metrics_label_mismatch metric=%s expected=%s got=%s", name, known, labelnames)
        return None
    return histogram


def incr(name: str, amount: float = 1, **labels: Any) -> None:
    metric = _metric_name(name)
    labelnames = tuple(sorted(labels))
    counter = _get_counter(metric, labelnames)
    if counter is None:
        return
    if labelnames:
        counter.labels(**_label_values(labelnames, labels)).inc(amount)
    else:
        counter.inc(amount)


def observe_ms(name: str, value_ms: float, **labels: Any) -> None:
    metric = _metric_name(name)
    labelnames = tuple(sorted(labels))
    histogram = _get_histogram(metric, labelnames)
    if histogram is None:
        return
    value = max(0.0, float(value_ms))
    if labelnames:
        histogram.labels(**_label_values(labelnames, labels)).observe(value)
    else:
        histogram.observe(value)


def get_registry() -> CollectorRegistry:
    return _registry


# Tests swap in a private registry so counters start from zero.
def use_registry(registry: CollectorRegistry) -> None:
    global _registry
    with _LOCK:
        _registry = registry
