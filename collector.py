"""
collector.py - MySQL status collector for prometheus_client

One collect() call is one scrape cycle:

    Idle -> Scraping -> Updating -> Idle

The query phase runs in a producer thread and streams rows through a queue.
The consumer applies them to the metric registry while holding the
collector lock, then snapshots every family before releasing it, so a
reader never observes a partially applied scrape.
"""
import queue
import threading
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from prometheus_client import Counter, Gauge
from prometheus_client.metrics_core import Metric

from classifier import MetricFamily, classify
from database import ScrapeError, StatusSource
from logger import get_logger
from metric_registry import LabeledCounter, MetricRegistry
from status_parser import parse_status, to_float

logger = get_logger(__name__)

NAMESPACE = "mysql"


@dataclass(frozen=True)
class StatusRow:
    """One (name, value) pair streamed from the query phase"""
    name: str
    value: str


@dataclass(frozen=True)
class ScrapeOutcome:
    """Result of the last completed scrape"""
    duration_seconds: float = 0.0
    errored: bool = False


class MySQLCollector:
    """
    Custom prometheus_client collector exporting MySQL server status.

    Example:
        registry = CollectorRegistry()
        collector = MySQLCollector(StatusSource(dsn))
        registry.register(collector)
        generate_latest(registry)   # runs one scrape
    """

    def __init__(self, source: StatusSource, namespace: str = NAMESPACE):
        self.source = source
        self.namespace = namespace
        self._lock = threading.Lock()

        self.metrics = MetricRegistry(namespace)
        self.commands = LabeledCounter(
            "commands_total", "Number of executed mysql commands.",
            "command", namespace=namespace
        )
        self.connection_errors = LabeledCounter(
            "connection_errors_total", "Number of mysql connection errors.",
            "error", namespace=namespace
        )
        self.innodb_rows = LabeledCounter(
            "innodb_rows_total", "Mysql Innodb row operations.",
            "operation", namespace=namespace
        )
        self.performance_schema = LabeledCounter(
            "performance_schema_total",
            "Mysql instrumentations that could not be loaded or created due to memory constraints",
            "instrumentation", namespace=namespace
        )
        self._families = {
            MetricFamily.COMMANDS: self.commands,
            MetricFamily.CONNECTION_ERRORS: self.connection_errors,
            MetricFamily.INNODB_ROWS: self.innodb_rows,
            MetricFamily.PERFORMANCE_SCHEMA: self.performance_schema,
        }

        # Unregistered client metrics, emitted by collect() itself
        self.duration = Gauge(
            "exporter_last_scrape_duration_seconds", "The last scrape duration.",
            namespace=namespace, registry=None
        )
        self.error = Gauge(
            "exporter_last_scrape_error", "The last scrape error status.",
            namespace=namespace, registry=None
        )
        self.total_scrapes = Counter(
            "exporter_scrapes", "Current total mysqld scrapes.",
            namespace=namespace, registry=None
        )

        self.last_outcome = ScrapeOutcome()

    def describe(self) -> List[Metric]:
        """Enumerate known metric names without scraping"""
        with self._lock:
            described = [
                *self.duration.describe(),
                *self.total_scrapes.describe(),
                *self.error.describe(),
            ]
            described.extend(family.describe() for family in self._families.values())
            described.extend(handle.describe() for handle in self.metrics)
        return described

    def collect(self) -> Iterable[Metric]:
        """Run one scrape cycle and return a snapshot of every metric"""
        rows: "queue.Queue[Union[StatusRow, ScrapeOutcome]]" = queue.Queue()

        producer = threading.Thread(
            target=self.scrape, args=(rows,), name="mysql-scrape", daemon=True
        )
        producer.start()

        with self._lock:
            self._apply(rows)
            snapshot = self._snapshot()

        producer.join()
        return snapshot

    def scrape(self, rows: "queue.Queue"):
        """
        Query phase of a scrape cycle.

        Streams a StatusRow per numeric candidate into rows and always
        terminates the stream with a ScrapeOutcome, including on failure.
        """
        start = time.monotonic()
        self.total_scrapes.inc()
        errored = True

        try:
            with self.source.connect() as conn:
                for name, value in self.source.global_status(conn):
                    rows.put(StatusRow(name, value))

                for column, value in self.source.slave_status(conn):
                    rows.put(StatusRow(column, parse_status(value)))

            errored = False
        except ScrapeError as e:
            logger.error(str(e))
        except Exception as e:
            logger.error(f"Unexpected error during scrape: {e}", exc_info=True)
        finally:
            rows.put(ScrapeOutcome(time.monotonic() - start, errored))

    def _apply(self, rows: "queue.Queue"):
        """Drain the row stream into the registry; caller holds the lock"""
        while True:
            item = rows.get()
            if isinstance(item, ScrapeOutcome):
                self._set_outcome(item)
                return
            self.set_status(item.name, item.value)

    def set_status(self, name: str, raw_value: str) -> Optional[MetricFamily]:
        """Classify one status row and store its value; caller holds the lock"""
        name = name.lower()
        value = to_float(raw_value)
        if value is None:
            logger.debug(f"Skipping non-numeric status {name}={raw_value!r}")
            return None

        family, label_value = classify(name)
        if family is MetricFamily.GENERIC:
            self.metrics.set(self.metrics.get_or_create(label_value), value)
        else:
            self._families[family].set(label_value, value)
        return family

    def _set_outcome(self, outcome: ScrapeOutcome):
        self.last_outcome = outcome
        self.duration.set(outcome.duration_seconds)
        self.error.set(1 if outcome.errored else 0)

    def _snapshot(self) -> List[Metric]:
        snapshot = [
            *self.duration.collect(),
            *self.total_scrapes.collect(),
            *self.error.collect(),
        ]
        self.metrics.for_each(lambda handle: snapshot.append(handle.collect()))
        snapshot.extend(family.collect() for family in self._families.values())
        return snapshot

    @property
    def scrapes_total(self) -> float:
        for metric in self.total_scrapes.collect():
            for sample in metric.samples:
                if sample.name.endswith("_total"):
                    return sample.value
        return 0.0
