"""Regression report persistence and baseline comparison.

``ResultSet`` lives in :mod:`ifcregression.report.result_set`; only the
schema is re-exported here because the record model depends on it.
"""

from ifcregression.report.schema import (
    REPORT_COLUMNS,
    SCHEMA_VERSION,
    UnsupportedReportFormat,
    sanitise,
)

__all__ = [
    "REPORT_COLUMNS",
    "SCHEMA_VERSION",
    "UnsupportedReportFormat",
    "sanitise",
]
