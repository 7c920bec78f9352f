"""Risk register template generation for Excel, CSV and JSON formats.

Every template carries the same sample register so a new user can run a
simulation straight away and then edit the rows.
"""

from pathlib import Path
from typing import Any, Dict, List

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.worksheet.datavalidation import DataValidation

from ..core.data_models import DEFAULT_ITERATIONS
from ..core.logging_config import get_logger
from ..io.io_csv import CSVExporter
from ..io.io_json import JSONExporter

logger = get_logger(__name__)

TEMPLATE_FORMATS = ("json", "csv", "excel")

SAMPLE_RISKS: List[Dict[str, Any]] = [
    {"name": "Minor bugs backlog", "likelihood": 50, "delay_min": 2, "delay_mode": 4, "delay_max": 7,
     "cost_min": 1000, "cost_mode": 2500, "cost_max": 6000, "kill": False,
     "notes": "Nuisance work slows testing"},
    {"name": "Vendor part late", "likelihood": 25, "delay_min": 10, "delay_mode": 20, "delay_max": 40,
     "cost_min": 5000, "cost_mode": 12000, "cost_max": 30000, "kill": False,
     "notes": "External dependency"},
    {"name": "Critical compliance issue", "likelihood": 5, "kill": True,
     "notes": "If it hits, project is stopped"},
    {"name": "Team attrition", "likelihood": 15, "delay_min": 7, "delay_mode": 14, "delay_max": 28,
     "cost_min": 8000, "cost_mode": 15000, "cost_max": 25000, "kill": False,
     "notes": "Loss of key engineer"},
    {"name": "Scope creep", "likelihood": 40, "delay_min": 3, "delay_mode": 7, "delay_max": 14,
     "kill": False, "notes": "Adds unplanned features"},
    {"name": "Earthquake", "likelihood": 1, "kill": True, "notes": "Disaster"},
    {"name": "Covid", "likelihood": 5, "kill": True, "notes": "Disaster"},
]

SAMPLE_CONFIG: Dict[str, Any] = {
    "iterations": DEFAULT_ITERATIONS,
    "delay_slack": 10,
    "budget_slack": 20000,
}

EXCEL_HEADERS = [
    ("Name", "name"),
    ("Likelihood", "likelihood"),
    ("Delay Min", "delay_min"),
    ("Delay Mode", "delay_mode"),
    ("Delay Max", "delay_max"),
    ("Cost Min", "cost_min"),
    ("Cost Mode", "cost_mode"),
    ("Cost Max", "cost_max"),
    ("Kill", "kill"),
    ("Notes", "notes"),
]

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")


class TemplateGenerator:
    """Generate risk register templates in various formats."""

    def create_json_template(self, output_path: Path) -> None:
        JSONExporter().export_risk_register(SAMPLE_RISKS, str(output_path))

    def create_csv_template(self, output_path: Path) -> None:
        CSVExporter().export_risk_register(SAMPLE_RISKS, str(output_path))

    def create_excel_template(self, output_path: Path) -> None:
        """Create a formatted workbook with the register, settings and instructions."""
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

        self._create_risks_sheet(wb)
        self._create_config_sheet(wb)
        self._create_instructions_sheet(wb)

        wb.save(output_path)
        logger.info(f"Created Excel risk register template: {output_path}")

    def _create_risks_sheet(self, wb: openpyxl.Workbook) -> None:
        ws = wb.create_sheet("Risks")
        self._write_header(ws, [header for header, _ in EXCEL_HEADERS])

        for row, risk in enumerate(SAMPLE_RISKS, 2):
            for col, (_, key) in enumerate(EXCEL_HEADERS, 1):
                value = risk.get(key, 0)
                if key == "kill":
                    value = 1 if value else 0
                ws.cell(row=row, column=col, value=value)

        # Likelihood in percent, kill as 0/1
        likelihood_validation = DataValidation(
            type="decimal", operator="between", formula1="0", formula2="100", allow_blank=True
        )
        kill_validation = DataValidation(type="list", formula1='"0,1"', allow_blank=True)
        ws.add_data_validation(likelihood_validation)
        ws.add_data_validation(kill_validation)
        likelihood_validation.add("B2:B51")
        kill_validation.add("I2:I51")

        self._autofit_columns(ws)

    def _create_config_sheet(self, wb: openpyxl.Workbook) -> None:
        ws = wb.create_sheet("Config")
        self._write_header(ws, ["Setting", "Value"])
        for row, (key, value) in enumerate(SAMPLE_CONFIG.items(), 2):
            ws.cell(row=row, column=1, value=key)
            ws.cell(row=row, column=2, value=value)
        self._autofit_columns(ws)

    def _create_instructions_sheet(self, wb: openpyxl.Workbook) -> None:
        ws = wb.create_sheet("Instructions")
        lines = [
            "Project Risk Register",
            "",
            "One row per risk; only the first 50 rows are simulated.",
            "Likelihood is a percentage from 0 to 100.",
            "Delay Min/Mode/Max are days; Cost Min/Mode/Max are budget units.",
            "Leave a range blank (or all zero) if the risk has no such impact.",
            "Set Kill to 1 if the risk cancels the project when it occurs.",
            "Rows with zero likelihood, or with no kill flag and no impact, are ignored.",
            "",
            "Run: risk-sim run --risks <this file> --delay-slack 10 --budget-slack 20000",
        ]
        for row, text in enumerate(lines, 1):
            ws.cell(row=row, column=1, value=text)
        ws["A1"].font = Font(bold=True, size=14)
        ws.column_dimensions["A"].width = 80

    def _write_header(self, ws, headers: List[str]) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center")

    def _autofit_columns(self, ws) -> None:
        """Auto-fit column widths."""
        for column in ws.columns:
            max_length = 0
            column_letter = column[0].column_letter

            for cell in column:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    @staticmethod
    def generate_template(format_type: str, output_path: str) -> None:
        """Generate the sample register in the given format.

        Args:
            format_type: Output format ('json', 'csv', 'excel')
            output_path: Path for output file
        """
        generator = TemplateGenerator()
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        if format_type == "json":
            generator.create_json_template(output_file)
        elif format_type == "csv":
            generator.create_csv_template(output_file)
        elif format_type == "excel":
            generator.create_excel_template(output_file)
        else:
            raise ValueError(f"Unknown format: {format_type}")

        logger.info(f"Created {format_type} template: {output_path}")


def template_filename(format_type: str) -> str:
    """Default file name for a template format."""
    suffix = {"json": "json", "csv": "csv", "excel": "xlsx"}[format_type]
    return f"risk_register_template.{suffix}"
