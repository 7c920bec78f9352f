"""Reduction of raw trial outcomes to summary statistics.

Percentiles use linear interpolation between order statistics; histograms
use a fixed number of equal-width buckets starting at zero.
"""

import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from .data_models import HISTOGRAM_BUCKETS, Histogram, SimulationResult


class TrialOutcome(NamedTuple):
    """Outcome of a single trial."""
    killed: bool
    total_delay: float
    total_cost: float


@dataclass
class OutcomeTotals:
    """Running counters, sums and retained subsets for one run.

    Only the late delays and budget overruns of not-killed trials are kept
    as arrays; every other trial quantity is folded into counters and sums.
    """
    delay_slack: float
    budget_slack: float
    runs: int = 0
    success_count: int = 0
    killed_count: int = 0
    not_killed_count: int = 0
    budget_exceeded_count: int = 0
    sum_delay_not_killed: float = 0.0
    sum_cost_not_killed: float = 0.0
    late_delays: List[float] = field(default_factory=list)
    budget_overruns: List[float] = field(default_factory=list)

    def record(self, outcome: TrialOutcome) -> None:
        """Classify one trial and fold it into the totals."""
        killed, total_delay, total_cost = outcome
        over_budget = total_cost > self.budget_slack

        self.runs += 1
        # Over-budget counts killed trials too; the retained overrun subset does not.
        if over_budget:
            self.budget_exceeded_count += 1
        if not killed and total_delay <= self.delay_slack and not over_budget:
            self.success_count += 1

        if killed:
            self.killed_count += 1
            return

        self.not_killed_count += 1
        self.sum_delay_not_killed += total_delay
        self.sum_cost_not_killed += total_cost
        if total_delay > self.delay_slack:
            self.late_delays.append(total_delay)
        if over_budget:
            self.budget_overruns.append(total_cost - self.budget_slack)


class StatisticsAggregator:
    """Builds percentiles, histograms and the final result."""

    @staticmethod
    def percentile(values: Sequence[float], p: float) -> float:
        """Linear-interpolated percentile.

        Args:
            values: Sample values, in any order
            p: Percentile as a fraction in [0, 1]

        Returns:
            Interpolated order statistic, or 0.0 for an empty sample
        """
        if len(values) == 0:
            return 0.0

        ordered = np.sort(np.asarray(values, dtype=np.float64))
        idx = (len(ordered) - 1) * p
        lo = math.floor(idx)
        hi = math.ceil(idx)
        if lo == hi:
            return float(ordered[lo])
        w = idx - lo
        return float(ordered[lo] * (1 - w) + ordered[hi] * w)

    @staticmethod
    def histogram(values: Sequence[float],
                  buckets: int = HISTOGRAM_BUCKETS) -> Optional[Histogram]:
        """Bucket values into ``buckets`` equal-width bins from 0 to max.

        Args:
            values: Non-negative sample values
            buckets: Number of bins

        Returns:
            Histogram, or None when there is nothing to show
        """
        if len(values) == 0:
            return None

        data = np.asarray(values, dtype=np.float64)
        max_value = float(data.max())
        width = max_value / buckets if max_value > 0 else 1.0

        indices = np.minimum(buckets - 1, np.floor(data / width)).astype(np.int64)
        counts = np.bincount(indices, minlength=buckets)

        return Histogram(bins=[int(c) for c in counts], max_value=max_value)

    @classmethod
    def summarize(cls, totals: OutcomeTotals, seed: int,
                  active_risk_count: int = 0) -> SimulationResult:
        """Reduce run totals to a ``SimulationResult``.

        Args:
            totals: Counters and retained subsets from a run
            seed: Seed the run used
            active_risk_count: Number of risks simulated

        Returns:
            Simulation result
        """
        runs = totals.runs
        not_killed = totals.not_killed_count
        late = totals.late_delays
        overruns = totals.budget_overruns

        return SimulationResult(
            runs=runs,
            success_count=totals.success_count,
            killed_count=totals.killed_count,
            not_killed_count=not_killed,
            late_count=len(late),
            budget_exceeded_count=totals.budget_exceeded_count,
            success_pct=totals.success_count / runs if runs else 0.0,
            killed_pct=totals.killed_count / runs if runs else 0.0,
            budget_exceeded_pct=totals.budget_exceeded_count / runs if runs else 0.0,
            expected_delay_not_killed=totals.sum_delay_not_killed / not_killed if not_killed else 0.0,
            expected_cost_not_killed=totals.sum_cost_not_killed / not_killed if not_killed else 0.0,
            p50_late=cls.percentile(late, 0.50),
            p85_late=cls.percentile(late, 0.85),
            p90_late=cls.percentile(late, 0.90),
            p50_overrun=cls.percentile(overruns, 0.50),
            p85_overrun=cls.percentile(overruns, 0.85),
            p90_overrun=cls.percentile(overruns, 0.90),
            delay_histogram=cls.histogram(late),
            budget_histogram=cls.histogram(overruns),
            seed=seed,
            active_risk_count=active_risk_count,
        )
