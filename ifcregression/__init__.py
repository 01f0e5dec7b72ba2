"""ifcregression — regression harness for batch IFC conversion."""

__version__ = "1.0.0"

from ifcregression.batch.processor import BatchProcessor, RunReport
from ifcregression.capture.handler import LogCapture, LogEvent, capture_logs
from ifcregression.config import RegressionSettings, load_settings
from ifcregression.conversion.base import (
    ConversionError,
    ConvertedModel,
    ModelConverter,
    ModelSummary,
)
from ifcregression.models.result import Outcome, ResultRecord
from ifcregression.report.result_set import ResultSet, Transition
from ifcregression.report.schema import REPORT_COLUMNS, UnsupportedReportFormat, sanitise

__all__ = [
    "__version__",
    "BatchProcessor",
    "ConversionError",
    "ConvertedModel",
    "LogCapture",
    "LogEvent",
    "ModelConverter",
    "ModelSummary",
    "Outcome",
    "REPORT_COLUMNS",
    "RegressionSettings",
    "ResultRecord",
    "ResultSet",
    "RunReport",
    "Transition",
    "UnsupportedReportFormat",
    "capture_logs",
    "load_settings",
    "sanitise",
]
