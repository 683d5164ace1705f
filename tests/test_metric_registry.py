"""
Tests for the grow-only metric registry and labeled counters
"""
from metric_registry import LabeledCounter, MetricRegistry


def test_get_or_create_is_idempotent():
    registry = MetricRegistry()
    first = registry.get_or_create("threads_connected")
    second = registry.get_or_create("threads_connected")

    assert first is second
    assert len(registry) == 1
    assert first.full_name == "mysql_threads_connected"


def test_get_or_create_does_not_reset_value():
    registry = MetricRegistry()
    handle = registry.get_or_create("threads_connected")
    registry.set(handle, 5)

    again = registry.get_or_create("threads_connected")

    assert again is handle
    assert again.value == 5.0


def test_for_each_visits_every_handle():
    registry = MetricRegistry()
    for name in ("uptime", "threads_running", "questions"):
        registry.set(registry.get_or_create(name), 1)

    seen = []
    registry.for_each(lambda handle: seen.append(handle.name))

    assert sorted(seen) == ["questions", "threads_running", "uptime"]
    assert "uptime" in registry
    assert "slow_queries" not in registry


def test_status_metric_collect():
    registry = MetricRegistry(namespace="mysql")
    handle = registry.get_or_create("uptime")

    # Created but never set: family without samples
    assert handle.collect().samples == []

    handle.set(3600)
    family = handle.collect()
    assert family.name == "mysql_uptime"
    assert family.type == "unknown"
    assert [(s.name, s.value) for s in family.samples] == [("mysql_uptime", 3600.0)]


def test_labeled_counter_overwrites_absolute_values():
    commands = LabeledCounter("commands_total", "Commands.", "command", namespace="mysql")
    commands.set("select", 10)
    commands.set("select", 12)
    commands.set("insert", 3)

    assert commands.get("select") == 12.0
    assert sorted(commands.labels()) == ["insert", "select"]

    family = commands.collect()
    assert family.name == "mysql_commands"
    samples = {s.labels["command"]: s.value for s in family.samples}
    assert samples == {"select": 12.0, "insert": 3.0}
    assert all(s.name == "mysql_commands_total" for s in family.samples)


def test_labeled_counter_empty_family():
    counter = LabeledCounter("innodb_rows_total", "Rows.", "operation", namespace="mysql")
    assert counter.collect().samples == []
    assert counter.describe().name == "mysql_innodb_rows"
