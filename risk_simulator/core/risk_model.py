"""Risk register normalization.

Maps raw risk rows onto the active-risk list the simulation iterates over.
Rows without probability or without any effect are dropped silently; this
is normalization, not validation, so nothing here raises for bad rows.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .data_models import MAX_RISKS, ActiveRisk, RiskDefinition
from .logging_config import get_logger

logger = get_logger(__name__)

RiskInput = Union[RiskDefinition, Mapping[str, Any]]


@dataclass
class NormalizationSummary:
    """Bookkeeping from one normalization pass."""
    rows_seen: int = 0
    rows_truncated: int = 0
    dropped_indices: List[int] = field(default_factory=list)

    @property
    def rows_kept(self) -> int:
        return self.rows_seen - len(self.dropped_indices)


class RiskModel:
    """Normalizes a risk register into active risks."""

    def __init__(self, rows: Optional[Iterable[RiskInput]] = None):
        """Initialize risk model.

        Args:
            rows: Raw risk rows, as ``RiskDefinition`` objects or mappings.
                Only the first ``MAX_RISKS`` rows are considered.
        """
        all_rows = list(rows or [])
        self.definitions: List[RiskDefinition] = [
            self.to_definition(row) for row in all_rows[:MAX_RISKS]
        ]
        self.summary = NormalizationSummary(
            rows_seen=len(self.definitions),
            rows_truncated=max(0, len(all_rows) - MAX_RISKS),
        )
        self.active_risks: List[ActiveRisk] = self._normalize()

    @staticmethod
    def to_definition(row: RiskInput) -> RiskDefinition:
        """Coerce a mapping into a ``RiskDefinition``; non-mappings become empty rows."""
        if isinstance(row, RiskDefinition):
            return row
        if isinstance(row, Mapping):
            return RiskDefinition.model_validate(dict(row))
        return RiskDefinition()

    @staticmethod
    def normalize_row(index: int, row: RiskDefinition) -> Optional[ActiveRisk]:
        """Normalize one row, returning ``None`` if it has no effect.

        Args:
            index: Position of the row in the register
            row: Parsed risk row

        Returns:
            Active risk, or None when the row is dropped
        """
        probability = max(0.0, min(1.0, row.likelihood / 100))
        delay = None if row.delay.is_zero else row.delay
        cost = None if row.cost.is_zero else row.cost

        if probability <= 0:
            return None
        if not (row.kill or delay is not None or cost is not None):
            return None

        return ActiveRisk(
            index=index,
            name=row.name,
            probability=probability,
            delay=delay,
            cost=cost,
            kill=row.kill,
        )

    def _normalize(self) -> List[ActiveRisk]:
        active = []
        for index, row in enumerate(self.definitions):
            risk = self.normalize_row(index, row)
            if risk is None:
                self.summary.dropped_indices.append(index)
            else:
                active.append(risk)

        logger.debug(
            f"Normalized {self.summary.rows_seen} risk rows: "
            f"{len(active)} active, {len(self.summary.dropped_indices)} dropped, "
            f"{self.summary.rows_truncated} beyond the {MAX_RISKS}-row limit"
        )
        return active

    @property
    def kill_risks(self) -> List[ActiveRisk]:
        return [risk for risk in self.active_risks if risk.kill]

    def expected_impacts(self) -> List[Dict[str, Any]]:
        """Per-risk expected delay and cost contribution per trial.

        Uses the analytic triangular mean weighted by probability; collapsed
        cost ranges count at face value, collapsed delay ranges count as 0.
        """
        impacts = []
        for risk in self.active_risks:
            delay_mean = risk.delay.mean if risk.delay is not None else 0.0
            if risk.samples_cost:
                cost_mean = risk.cost.mean
            else:
                cost_mean = risk.fixed_cost
            impacts.append({
                'index': risk.index,
                'name': risk.name,
                'probability': risk.probability,
                'kill': risk.kill,
                'expected_delay': risk.probability * delay_mean,
                'expected_cost': risk.probability * cost_mean,
            })
        return impacts


def normalize_risks(rows: Optional[Sequence[RiskInput]]) -> List[ActiveRisk]:
    """Convenience wrapper returning only the active-risk list."""
    return RiskModel(rows).active_risks
