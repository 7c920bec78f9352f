"""CSV and Excel I/O for risk registers.

Handles import/export with flexible column mapping.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from ..core.data_models import RiskDefinition
from ..core.exceptions import DataImportError, FileFormatError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")

# Export column order
REGISTER_COLUMNS = [
    'name', 'likelihood', 'delay_min', 'delay_mode', 'delay_max',
    'cost_min', 'cost_mode', 'cost_max', 'kill', 'notes',
]


class CSVImporter:
    """Imports risk registers from CSV and Excel files."""

    def __init__(self):
        """Initialize importer."""
        self.default_risk_columns = {
            'name': ['name', 'title', 'risk', 'description'],
            'likelihood': ['likelihood', 'likelihood_pct', 'likelihood (%)'],
            'delay_min': ['delay_min', 'min', 'delay min', 'min (days)'],
            'delay_mode': ['delay_mode', 'mode', 'delay mode', 'most_likely', 'mode (days)'],
            'delay_max': ['delay_max', 'max', 'delay max', 'max (days)'],
            'cost_min': ['cost_min', 'cost min'],
            'cost_mode': ['cost_mode', 'cost mode', 'cost_most_likely'],
            'cost_max': ['cost_max', 'cost max'],
            'kill': ['kill', 'kill_switch', 'kills project', 'fatal'],
            'notes': ['notes', 'comment', 'comments'],
        }

    def import_risks_from_csv(self, file_path: str) -> List[Dict[str, Any]]:
        """Import risk rows from a CSV file.

        Args:
            file_path: Path to CSV file

        Returns:
            List of risk dictionaries keyed by standard column names
        """
        try:
            df = pd.read_csv(file_path)
        except FileNotFoundError as e:
            raise DataImportError(f"Risk file not found: {file_path}", file_path=file_path, cause=e) from e
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise FileFormatError(
                f"Could not parse CSV risk file {file_path}: {e}",
                file_path=file_path, expected_format="csv", cause=e,
            ) from e

        return self._frame_to_risks(df, file_path)

    def import_risks_from_excel(self, file_path: str, sheet_name: Union[str, int] = 0) -> List[Dict[str, Any]]:
        """Import risk rows from an Excel workbook.

        Args:
            file_path: Path to .xlsx file
            sheet_name: Sheet name or index

        Returns:
            List of risk dictionaries keyed by standard column names
        """
        try:
            df = pd.read_excel(file_path, sheet_name=sheet_name, engine="openpyxl")
        except FileNotFoundError as e:
            raise DataImportError(f"Risk file not found: {file_path}", file_path=file_path, cause=e) from e
        except (ValueError, KeyError, OSError) as e:
            raise FileFormatError(
                f"Could not read Excel risk file {file_path}: {e}",
                file_path=file_path, expected_format="xlsx", cause=e,
            ) from e

        return self._frame_to_risks(df, file_path)

    def _frame_to_risks(self, df: pd.DataFrame, file_path: str) -> List[Dict[str, Any]]:
        # Clean column names
        df.columns = [str(col).strip().lower() for col in df.columns]

        column_mapping = self._map_risk_columns(df.columns.tolist())
        if 'likelihood' not in column_mapping:
            raise FileFormatError(
                f"Risk file {file_path} has no likelihood column",
                file_path=file_path, expected_format="risk register",
                detected_format=", ".join(df.columns),
            )

        # Blank rows stay in place so row positions match the sheet
        risks = []
        for _, row in df.iterrows():
            if row.isna().all():
                risks.append({})
                continue
            risks.append(self._process_risk_row(row, column_mapping))

        logger.debug(f"Imported {len(risks)} risk rows from {file_path}")
        return risks

    def _map_risk_columns(self, columns: List[str]) -> Dict[str, str]:
        """Map risk columns to standard names."""
        mapping = {}

        for standard_name, possible_names in self.default_risk_columns.items():
            for col in columns:
                if col in possible_names:
                    mapping[standard_name] = col
                    break

        return mapping

    def _process_risk_row(self, row: pd.Series, column_mapping: Dict[str, str]) -> Dict[str, Any]:
        """Process a row into a risk dictionary; blank cells become None."""
        risk_item = {}
        for standard_name, column in column_mapping.items():
            value = row[column]
            risk_item[standard_name] = None if pd.isna(value) else value
        return risk_item


class CSVExporter:
    """Exports risk registers to CSV or Excel."""

    def export_risk_register(self, risks: Sequence[Union[RiskDefinition, Mapping[str, Any]]],
                             file_path: str, sheet_name: Optional[str] = "Risks") -> None:
        """Write a risk register; the format follows the file suffix.

        Args:
            risks: Risk rows
            file_path: Output path (.csv or .xlsx)
            sheet_name: Sheet name for Excel output
        """
        rows = [
            (risk if isinstance(risk, RiskDefinition) else RiskDefinition.model_validate(dict(risk))).model_dump()
            for risk in risks
        ]
        df = pd.DataFrame(rows, columns=REGISTER_COLUMNS)

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in EXCEL_SUFFIXES:
            with pd.ExcelWriter(path, engine="openpyxl") as writer:
                df.to_excel(writer, sheet_name=sheet_name, index=False)
        else:
            df.to_csv(path, index=False)
        logger.debug(f"Wrote {len(rows)} risk rows to {file_path}")
