"""
Tests for status name classification
"""
from classifier import MetricFamily, classify


def test_commands():
    assert classify("com_select") == (MetricFamily.COMMANDS, "select")
    assert classify("com_stmt_execute") == (MetricFamily.COMMANDS, "stmt_execute")


def test_connection_errors():
    assert classify("connection_errors_max_connections") == (
        MetricFamily.CONNECTION_ERRORS, "max_connections"
    )


def test_innodb_rows():
    assert classify("innodb_rows_deleted") == (MetricFamily.INNODB_ROWS, "deleted")


def test_performance_schema():
    assert classify("performance_schema_table_handles_lost") == (
        MetricFamily.PERFORMANCE_SCHEMA, "table_handles_lost"
    )


def test_generic_keeps_full_name():
    assert classify("threads_connected") == (MetricFamily.GENERIC, "threads_connected")
    assert classify("innodb_buffer_pool_pages_free") == (
        MetricFamily.GENERIC, "innodb_buffer_pool_pages_free"
    )


def test_prefix_must_be_at_start():
    assert classify("xcom_select") == (MetricFamily.GENERIC, "xcom_select")


def test_exact_prefix_gives_empty_label():
    """An exact prefix is kept with an empty label rather than rejected"""
    assert classify("com_") == (MetricFamily.COMMANDS, "")


def test_name_without_underscore_suffix_is_generic():
    assert classify("com") == (MetricFamily.GENERIC, "com")
