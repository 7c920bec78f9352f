"""Compiled trial loop and timing utilities.

The Numba kernel reproduces ``SimulationRunner.run_trial`` draw for draw:
same Mulberry32 recurrence, same inverse-CDF expressions, same evaluation
order. Results therefore match the pure-Python loop field for field.

Integer state is held in int64 and masked to 32 bits after every step;
int64 multiplication wraps, which leaves the low 32 bits exact.
"""

import time
from typing import Callable, Optional, Sequence, Tuple

import numpy as np
from numba import njit

from .data_models import PROGRESS_INTERVAL, ActiveRisk, SimulationConfig
from .statistics import OutcomeTotals

COST_NONE = 0
COST_SAMPLED = 1
COST_FIXED = 2

# counters layout
_SUCCESS, _KILLED, _NOT_KILLED, _OVER_BUDGET = 0, 1, 2, 3
# sums layout
_SUM_DELAY, _SUM_COST = 0, 1


class PerformanceTimer:
    """Context manager for performance timing."""

    def __init__(self, name: str = "Operation"):
        self.name = name
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()

    @property
    def duration(self) -> float:
        """Get operation duration in seconds."""
        if self.start_time is not None and self.end_time is not None:
            return self.end_time - self.start_time
        return 0.0


@njit(cache=True)
def _next_uniform(state):
    s = (state + 0x6D2B79F5) & 0xFFFFFFFF
    t = ((s ^ (s >> 15)) * (s | 1)) & 0xFFFFFFFF
    t = ((t + (((t ^ (t >> 7)) * (t | 61)) & 0xFFFFFFFF)) & 0xFFFFFFFF) ^ t
    return s, ((t ^ (t >> 14)) & 0xFFFFFFFF) / 4294967296.0


@njit(cache=True)
def _triangular(low, mode, high, u):
    span = high - low
    k = (mode - low) / span
    if u <= k:
        return low + np.sqrt(u * span * (mode - low))
    return high - np.sqrt((1 - u) * span * (high - mode))


@njit(cache=True)
def simulate_trials_kernel(state, n_trials,
                           probabilities, kill_flags,
                           delay_params, delay_sampled,
                           cost_params, cost_modes,
                           delay_slack, budget_slack,
                           counters, sums,
                           late_delays, late_count,
                           overruns, overrun_count):
    """Run ``n_trials`` trials, updating the accumulator arrays in place.

    Returns:
        Tuple of (generator state, late delay count, overrun count)
    """
    n_risks = probabilities.shape[0]
    for _ in range(n_trials):
        killed = False
        total_delay = 0.0
        total_cost = 0.0

        for j in range(n_risks):
            state, u = _next_uniform(state)
            if u >= probabilities[j]:
                continue
            if kill_flags[j]:
                killed = True
            if delay_sampled[j]:
                state, u = _next_uniform(state)
                total_delay += _triangular(delay_params[j, 0], delay_params[j, 1],
                                           delay_params[j, 2], u)
            if cost_modes[j] == COST_SAMPLED:
                state, u = _next_uniform(state)
                total_cost += _triangular(cost_params[j, 0], cost_params[j, 1],
                                          cost_params[j, 2], u)
            elif cost_modes[j] == COST_FIXED:
                total_cost += cost_params[j, 0]

        over_budget = total_cost > budget_slack
        if over_budget:
            counters[_OVER_BUDGET] += 1
        if not killed and total_delay <= delay_slack and not over_budget:
            counters[_SUCCESS] += 1

        if killed:
            counters[_KILLED] += 1
        else:
            counters[_NOT_KILLED] += 1
            sums[_SUM_DELAY] += total_delay
            sums[_SUM_COST] += total_cost
            if total_delay > delay_slack:
                late_delays[late_count] = total_delay
                late_count += 1
            if over_budget:
                overruns[overrun_count] = total_cost - budget_slack
                overrun_count += 1

    return state, late_count, overrun_count


def pack_risks(risks: Sequence[ActiveRisk]) -> Tuple[np.ndarray, ...]:
    """Convert active risks to the flat arrays the kernel consumes.

    Returns:
        Tuple of (probabilities, kill_flags, delay_params, delay_sampled,
        cost_params, cost_modes)
    """
    n = len(risks)
    probabilities = np.zeros(n, dtype=np.float64)
    kill_flags = np.zeros(n, dtype=np.bool_)
    delay_params = np.zeros((n, 3), dtype=np.float64)
    delay_sampled = np.zeros(n, dtype=np.bool_)
    cost_params = np.zeros((n, 3), dtype=np.float64)
    cost_modes = np.zeros(n, dtype=np.int64)

    for j, risk in enumerate(risks):
        probabilities[j] = risk.probability
        kill_flags[j] = risk.kill
        if risk.samples_delay:
            delay_params[j] = risk.delay
            delay_sampled[j] = True
        if risk.samples_cost:
            cost_params[j] = risk.cost
            cost_modes[j] = COST_SAMPLED
        elif risk.fixed_cost:
            cost_params[j, 0] = risk.fixed_cost
            cost_modes[j] = COST_FIXED

    return probabilities, kill_flags, delay_params, delay_sampled, cost_params, cost_modes


def run_trials_compiled(risks: Sequence[ActiveRisk],
                        config: SimulationConfig,
                        seed: int,
                        progress_callback: Optional[Callable[[int, int], None]] = None) -> OutcomeTotals:
    """Run all trials through the compiled kernel.

    Trials are executed in chunks that end on the progress checkpoints
    (indices 0, 1000, 2000, ...) so the callback sees the same sequence as
    the pure-Python loop.

    Args:
        risks: Active risks in evaluation order
        config: Simulation configuration
        seed: 32-bit seed
        progress_callback: Optional ``(done, total)`` hook

    Returns:
        Run totals
    """
    iterations = config.iterations
    arrays = pack_risks(risks)
    delay_slack = float(config.delay_slack)
    budget_slack = float(config.budget_slack)

    counters = np.zeros(4, dtype=np.int64)
    sums = np.zeros(2, dtype=np.float64)
    late_delays = np.empty(iterations, dtype=np.float64)
    overruns = np.empty(iterations, dtype=np.float64)
    late_count = 0
    overrun_count = 0
    state = int(seed) & 0xFFFFFFFF

    start = 0
    while start < iterations:
        checkpoint = -(-start // PROGRESS_INTERVAL) * PROGRESS_INTERVAL
        stop = min(iterations, checkpoint + 1)
        state, late_count, overrun_count = simulate_trials_kernel(
            state, stop - start, *arrays,
            delay_slack, budget_slack,
            counters, sums,
            late_delays, late_count,
            overruns, overrun_count,
        )
        if progress_callback is not None and checkpoint < iterations:
            progress_callback(checkpoint, iterations)
        start = stop

    return OutcomeTotals(
        delay_slack=delay_slack,
        budget_slack=budget_slack,
        runs=iterations,
        success_count=int(counters[_SUCCESS]),
        killed_count=int(counters[_KILLED]),
        not_killed_count=int(counters[_NOT_KILLED]),
        budget_exceeded_count=int(counters[_OVER_BUDGET]),
        sum_delay_not_killed=float(sums[_SUM_DELAY]),
        sum_cost_not_killed=float(sums[_SUM_COST]),
        late_delays=late_delays[:late_count].tolist(),
        budget_overruns=overruns[:overrun_count].tolist(),
    )
