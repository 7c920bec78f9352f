"""JSON and YAML file I/O for risk registers and simulation configuration."""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..core.data_models import RiskDefinition, SimulationConfig
from ..core.exceptions import ConfigurationError, DataImportError, FileFormatError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def _load_document(file_path: Union[str, Path]) -> Any:
    """Parse a JSON or YAML document based on the file suffix."""
    path = Path(file_path)
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in YAML_SUFFIXES:
            return yaml.safe_load(f)
        return json.load(f)


class JSONImporter:
    """Imports risk registers and configuration from JSON (or YAML) files."""

    def import_risks(self, file_path: str) -> List[Dict[str, Any]]:
        """Import risk rows from a JSON file.

        The file holds either a list of risk objects or an object with a
        ``risks`` list. Row contents are not validated here; bad numbers are
        coerced later by the risk model.

        Args:
            file_path: Path to JSON risk file

        Returns:
            List of risk dictionaries
        """
        try:
            risk_data = _load_document(file_path)
        except FileNotFoundError as e:
            raise DataImportError(f"Risk file not found: {file_path}", file_path=file_path, cause=e) from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise FileFormatError(
                f"Could not parse risk file {file_path}: {e}",
                file_path=file_path, expected_format="json", cause=e,
            ) from e

        if isinstance(risk_data, Mapping) and "risks" in risk_data:
            risk_data = risk_data["risks"]

        if not isinstance(risk_data, list):
            raise FileFormatError(
                "Risk data must be a list of risks or an object with a 'risks' list",
                file_path=file_path, expected_format="json",
                detected_format=type(risk_data).__name__,
            )

        risks = [dict(row) if isinstance(row, Mapping) else {} for row in risk_data]
        logger.debug(f"Imported {len(risks)} risk rows from {file_path}")
        return risks

    def import_configuration(self, file_path: str) -> Dict[str, Any]:
        """Import simulation configuration from a JSON or YAML file.

        Keys may sit at the top level or under a ``simulation`` section.
        Numeric settings are clamped by ``SimulationConfig``.

        Args:
            file_path: Path to configuration file

        Returns:
            Configuration dictionary keyed by ``SimulationConfig`` field names
        """
        try:
            config_data = _load_document(file_path)
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Configuration file not found: {file_path}", config_key="file", config_value=file_path, cause=e
            ) from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Could not parse configuration file {file_path}: {e}",
                config_key="file", config_value=file_path, cause=e,
            ) from e

        if config_data is None:
            config_data = {}
        if isinstance(config_data, Mapping) and isinstance(config_data.get("simulation"), Mapping):
            config_data = config_data["simulation"]
        if not isinstance(config_data, Mapping):
            raise ConfigurationError(
                f"Configuration in {file_path} must be an object",
                config_key="file", config_value=file_path,
            )

        try:
            config = SimulationConfig.model_validate(dict(config_data))
        except PydanticValidationError as e:
            first = e.errors()[0]
            key = ".".join(str(part) for part in first["loc"])
            raise ConfigurationError(
                f"Invalid configuration value for '{key}': {first['msg']}",
                config_key=key, config_value=first.get("input"), cause=e,
            ) from e

        return config.model_dump()


class JSONExporter:
    """Exports risk registers to JSON."""

    def export_risk_register(self, risks: Sequence[Union[RiskDefinition, Mapping[str, Any]]],
                             file_path: str) -> None:
        """Write a risk register as ``{"risks": [...]}``.

        Args:
            risks: Risk rows
            file_path: Output path
        """
        rows = [
            (risk if isinstance(risk, RiskDefinition) else RiskDefinition.model_validate(dict(risk)))
            .model_dump(exclude_none=True)
            for risk in risks
        ]
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump({"risks": rows}, f, indent=2)
        logger.debug(f"Wrote {len(rows)} risk rows to {file_path}")
