"""Pydantic data models for the project risk simulator.

Covers the raw risk rows entered by users, the normalized active risks the
engine iterates over, the simulation configuration and the result summary.

Input models never reject bad numbers: missing, blank, non-numeric and
non-finite values become 0 and out-of-range settings are clamped.
"""

import math
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from .distributions import Triangle


# Engine limits
MAX_ITERATIONS = 50000
MAX_RISKS = 50
DEFAULT_ITERATIONS = 20000
PROGRESS_INTERVAL = 1000
HISTOGRAM_BUCKETS = 20
SEED_MODULUS = 2147483647


def coerce_number(value: Any) -> float:
    """Convert a loosely typed cell value to a finite float, defaulting to 0."""
    if value is None or isinstance(value, str) and not value.strip():
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def coerce_flag(value: Any) -> bool:
    """Convert a loosely typed kill cell (bool, 0/1, "yes") to a bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "y", "kill"):
            return True
        if text in ("false", "no", "n", ""):
            return False
    return coerce_number(value) != 0


def derive_seed_from_clock() -> int:
    """Derive a seed from the wall clock.

    This is the only nondeterministic input of a run and is used only
    when the caller supplies no seed.
    """
    return int(time.time() * 1000) % SEED_MODULUS


class RiskDefinition(BaseModel):
    """One risk row as entered by the user."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field("", description="Risk title (not used by the engine)")
    likelihood: float = Field(
        0.0,
        description="Occurrence likelihood in percent (0-100)",
        validation_alias=AliasChoices("likelihood", "likelihood_pct", "likelihoodPct"),
    )
    delay_min: float = Field(
        0.0, description="Minimum delay (days)",
        validation_alias=AliasChoices("delay_min", "delayMin", "min"),
    )
    delay_mode: float = Field(
        0.0, description="Most likely delay (days)",
        validation_alias=AliasChoices("delay_mode", "delayMode", "mode"),
    )
    delay_max: float = Field(
        0.0, description="Maximum delay (days)",
        validation_alias=AliasChoices("delay_max", "delayMax", "max"),
    )
    cost_min: float = Field(
        0.0, description="Minimum cost impact (budget units)",
        validation_alias=AliasChoices("cost_min", "costMin"),
    )
    cost_mode: float = Field(
        0.0, description="Most likely cost impact (budget units)",
        validation_alias=AliasChoices("cost_mode", "costMode"),
    )
    cost_max: float = Field(
        0.0, description="Maximum cost impact (budget units)",
        validation_alias=AliasChoices("cost_max", "costMax"),
    )
    kill: bool = Field(False, description="Occurrence cancels the project")
    notes: Optional[str] = Field(None, description="Free text (not used by the engine)")

    @field_validator(
        "likelihood", "delay_min", "delay_mode", "delay_max",
        "cost_min", "cost_mode", "cost_max",
        mode="before",
    )
    @classmethod
    def coerce_numeric(cls, v):
        return coerce_number(v)

    @field_validator("kill", mode="before")
    @classmethod
    def coerce_kill(cls, v):
        return coerce_flag(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v):
        if v is None or isinstance(v, float) and math.isnan(v):
            return ""
        return str(v)

    @field_validator("notes", mode="before")
    @classmethod
    def coerce_notes(cls, v):
        if v is None or isinstance(v, float) and math.isnan(v):
            return None
        return str(v)

    @property
    def delay(self) -> Triangle:
        return Triangle(self.delay_min, self.delay_mode, self.delay_max)

    @property
    def cost(self) -> Triangle:
        return Triangle(self.cost_min, self.cost_mode, self.cost_max)


@dataclass(frozen=True)
class ActiveRisk:
    """A normalized risk retained for simulation.

    ``delay`` and ``cost`` are ``None`` when the corresponding triple is all
    zero. An instance exists only with ``probability > 0`` and some effect.
    """
    index: int
    name: str
    probability: float
    delay: Optional[Triangle]
    cost: Optional[Triangle]
    kill: bool

    @property
    def samples_delay(self) -> bool:
        return self.delay is not None and self.delay.is_valid

    @property
    def samples_cost(self) -> bool:
        return self.cost is not None and self.cost.is_valid

    @property
    def fixed_cost(self) -> float:
        """Constant cost added on occurrence, or 0 when cost is sampled or absent."""
        if self.cost is not None and self.cost.is_constant:
            return self.cost.low
        return 0.0


class SimulationConfig(BaseModel):
    """Simulation configuration.

    Out-of-range values are clamped rather than rejected.
    """

    model_config = ConfigDict(populate_by_name=True)

    iterations: int = Field(DEFAULT_ITERATIONS, description="Number of trials (1-50000)")
    delay_slack: float = Field(
        0.0, description="Allowed delay in days before a trial counts as late",
        validation_alias=AliasChoices("delay_slack", "delaySlack", "slack"),
    )
    budget_slack: float = Field(
        0.0, description="Allowed cost in budget units before a trial counts as over budget",
        validation_alias=AliasChoices("budget_slack", "budgetSlack"),
    )
    seed: Optional[int] = Field(
        None, description="Random seed; derived from the wall clock when omitted",
        validation_alias=AliasChoices("seed", "random_seed"),
    )
    backend: Literal["python", "numba"] = Field(
        "python", description="Trial loop implementation"
    )

    @field_validator("iterations", mode="before")
    @classmethod
    def clamp_iterations(cls, v):
        return max(1, min(MAX_ITERATIONS, math.floor(coerce_number(v))))

    @field_validator("delay_slack", "budget_slack", mode="before")
    @classmethod
    def clamp_slack(cls, v):
        return max(0.0, coerce_number(v))

    @field_validator("seed", mode="before")
    @classmethod
    def coerce_seed(cls, v):
        # Unusable seeds are treated as absent and fall back to the clock
        if v is None or isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, int):
            return v
        try:
            number = float(v)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return math.floor(number)

    def resolve_seed(self) -> int:
        """Return the configured seed or a fresh wall-clock seed."""
        if self.seed is None:
            return derive_seed_from_clock()
        return self.seed


class Histogram(BaseModel):
    """Fixed-bucket histogram with its own axis maximum."""

    bins: List[int] = Field(..., description="Counts per bucket")
    max_value: float = Field(..., description="Largest value in the source array")

    @property
    def bucket_width(self) -> float:
        return self.max_value / len(self.bins) if self.max_value > 0 else 1.0

    @property
    def total(self) -> int:
        return sum(self.bins)


class SimulationResult(BaseModel):
    """Summary of a completed simulation run.

    Rates are fractions in [0, 1]; delay fields are in days and cost fields
    in the same budget units as the input.
    """

    runs: int = Field(..., description="Number of trials executed")
    success_count: int = Field(..., description="Trials not killed, on time and within budget")
    killed_count: int = Field(..., description="Trials with at least one kill risk")
    not_killed_count: int = Field(..., description="Trials without a kill risk")
    late_count: int = Field(..., description="Not-killed trials with delay above slack")
    budget_exceeded_count: int = Field(
        ..., description="Trials with cost above budget slack, killed or not"
    )

    success_pct: float = Field(..., ge=0, le=1)
    killed_pct: float = Field(..., ge=0, le=1)
    budget_exceeded_pct: float = Field(..., ge=0, le=1)

    expected_delay_not_killed: float = Field(..., description="Mean delay of not-killed trials")
    expected_cost_not_killed: float = Field(..., description="Mean cost of not-killed trials")

    p50_late: float = 0.0
    p85_late: float = 0.0
    p90_late: float = 0.0
    p50_overrun: float = 0.0
    p85_overrun: float = 0.0
    p90_overrun: float = 0.0

    delay_histogram: Optional[Histogram] = Field(None, description="Late delays of not-killed trials")
    budget_histogram: Optional[Histogram] = Field(None, description="Budget overruns of not-killed trials")

    seed: int = Field(..., description="Seed the run used")
    active_risk_count: int = Field(0, description="Risks retained after normalization")
