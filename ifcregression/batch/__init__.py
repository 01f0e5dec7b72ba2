"""Batch orchestration: discover sources, convert, compare, report."""

from ifcregression.batch.processor import BatchProcessor, RunReport

__all__ = ["BatchProcessor", "RunReport"]
