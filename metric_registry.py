"""
metric_registry.py - Persistent metric handles for scraped status values

Handles are created lazily the first time a status name is observed and are
reused for the lifetime of the process. Nothing here is locked; the
collector serializes every access.
"""
from typing import Callable, Dict, Iterator, List, Optional

from prometheus_client.core import CounterMetricFamily, UnknownMetricFamily


class StatusMetric:
    """Untyped metric handle for a single generic status name"""

    def __init__(self, name: str, full_name: str, documentation: str = ""):
        self.name = name
        self.full_name = full_name
        self.documentation = documentation or f"Generic metric from SHOW GLOBAL STATUS: {name}"
        self.value: Optional[float] = None

    def set(self, value: float):
        self.value = float(value)

    def describe(self) -> UnknownMetricFamily:
        return UnknownMetricFamily(self.full_name, self.documentation)

    def collect(self) -> UnknownMetricFamily:
        family = UnknownMetricFamily(self.full_name, self.documentation)
        if self.value is not None:
            family.add_metric([], self.value)
        return family

    def __repr__(self) -> str:
        return f"StatusMetric({self.full_name!r}, value={self.value!r})"


class LabeledCounter:
    """
    Counter family whose per-label values are set from absolute readings.

    MySQL already reports cumulative totals, so each scrape overwrites the
    sample for a label instead of incrementing it.
    """

    def __init__(self, name: str, documentation: str, label_name: str, namespace: str = ""):
        self.name = f"{namespace}_{name}" if namespace else name
        self.documentation = documentation
        self.label_name = label_name
        self._values: Dict[str, float] = {}

    def set(self, label_value: str, value: float):
        self._values[label_value] = float(value)

    def get(self, label_value: str) -> Optional[float]:
        return self._values.get(label_value)

    def labels(self) -> List[str]:
        return list(self._values)

    def describe(self) -> CounterMetricFamily:
        return CounterMetricFamily(self.name, self.documentation, labels=[self.label_name])

    def collect(self) -> CounterMetricFamily:
        family = CounterMetricFamily(self.name, self.documentation, labels=[self.label_name])
        for label_value, value in self._values.items():
            family.add_metric([label_value], value)
        return family


class MetricRegistry:
    """
    Grow-only mapping from generic status names to metric handles.

    Example:
        registry = MetricRegistry(namespace="mysql")
        handle = registry.get_or_create("threads_connected")
        registry.set(handle, 5)
        assert registry.get_or_create("threads_connected") is handle
    """

    def __init__(self, namespace: str = "mysql"):
        self.namespace = namespace
        self._metrics: Dict[str, StatusMetric] = {}

    def get_or_create(self, name: str) -> StatusMetric:
        """Return the handle registered under name, creating it on first use"""
        handle = self._metrics.get(name)
        if handle is None:
            full_name = f"{self.namespace}_{name}" if self.namespace else name
            handle = StatusMetric(name, full_name)
            self._metrics[name] = handle
        return handle

    def set(self, handle: StatusMetric, value: float):
        handle.set(value)

    def for_each(self, visitor: Callable[[StatusMetric], None]):
        for handle in list(self._metrics.values()):
            visitor(handle)

    def names(self) -> List[str]:
        return list(self._metrics)

    def __iter__(self) -> Iterator[StatusMetric]:
        return iter(list(self._metrics.values()))

    def __contains__(self, name: str) -> bool:
        return name in self._metrics

    def __len__(self) -> int:
        return len(self._metrics)
