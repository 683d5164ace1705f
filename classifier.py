"""
classifier.py - Map lower-cased status names onto metric families
"""
import re
from enum import Enum
from typing import Tuple


class MetricFamily(Enum):
    """Families a status row can be exported under"""
    COMMANDS = "commands"
    CONNECTION_ERRORS = "connection_errors"
    INNODB_ROWS = "innodb_rows"
    PERFORMANCE_SCHEMA = "performance_schema"
    GENERIC = "generic"


# Prefixes are disjoint, so order only affects how soon a rule matches
CLASSIFICATION_RULES = (
    (MetricFamily.COMMANDS, re.compile(r'^com_(.*)$')),
    (MetricFamily.CONNECTION_ERRORS, re.compile(r'^connection_errors_(.*)$')),
    (MetricFamily.INNODB_ROWS, re.compile(r'^innodb_rows_(.*)$')),
    (MetricFamily.PERFORMANCE_SCHEMA, re.compile(r'^performance_schema_(.*)$')),
)


def classify(name: str) -> Tuple[MetricFamily, str]:
    """
    Classify a lower-cased status name.

    Returns the family and the label value (the name with its prefix
    stripped). An exact prefix such as "com_" yields an empty label.
    Names matching no rule are GENERIC and keyed by the full name.
    """
    for family, pattern in CLASSIFICATION_RULES:
        match = pattern.match(name)
        if match:
            return family, match.group(1)

    return MetricFamily.GENERIC, name
