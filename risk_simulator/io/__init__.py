"""Input/output modules for risk registers and configuration."""

from .io_csv import CSVImporter, CSVExporter
from .io_json import JSONImporter, JSONExporter

__all__ = [
    'CSVImporter', 'CSVExporter',
    'JSONImporter', 'JSONExporter',
]
