"""Reporting modules."""

from .reporting import HistogramRenderer, ReportGenerator, create_simple_summary_report

__all__ = [
    'HistogramRenderer', 'ReportGenerator', 'create_simple_summary_report',
]
