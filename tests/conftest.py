"""
Shared fixtures for exporter tests
"""
import os
import threading
import time
from contextlib import contextmanager

import pytest

# Console logging only while testing; set before the settings are loaded
os.environ.setdefault("LOG_DIR", "")

from database import ScrapeError  # noqa: E402


class FakeStatusSource:
    """In-memory stand-in for StatusSource"""

    def __init__(self, global_rows=(), slave_columns=(), connect_error=None,
                 fail_after=None, delay=0.0):
        self.global_rows = list(global_rows)
        self.slave_columns = list(slave_columns)
        self.connect_error = connect_error
        self.fail_after = fail_after
        self.delay = delay
        self.connections = 0
        self.closed = 0
        self._lock = threading.Lock()

    @contextmanager
    def connect(self):
        if self.delay:
            time.sleep(self.delay)
        if self.connect_error is not None:
            raise ScrapeError("opening connection to database", self.connect_error)
        with self._lock:
            self.connections += 1
        try:
            yield object()
        finally:
            with self._lock:
                self.closed += 1

    def global_status(self, conn):
        for index, row in enumerate(self.global_rows):
            if self.fail_after is not None and index == self.fail_after:
                raise ScrapeError("getting result set", ValueError("malformed packet"))
            yield row

    def slave_status(self, conn):
        return list(self.slave_columns)


def sample_value(metrics, name, labels=None):
    """Find a sample value in a collect() snapshot"""
    labels = labels or {}
    for metric in metrics:
        for sample in metric.samples:
            if sample.name == name and sample.labels == labels:
                return sample.value
    return None


@pytest.fixture
def fake_source():
    return FakeStatusSource(global_rows=[
        ("Com_select", "10"),
        ("Threads_connected", "5"),
        ("Innodb_rows_read", "42"),
    ])
