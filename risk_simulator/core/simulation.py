"""Monte Carlo trial loop.

Runs independent trials over the active-risk list, resolving each risk's
occurrence and impact from a single seeded generator, and folds every trial
into running totals for the statistics aggregator.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .data_models import (
    MAX_RISKS,
    PROGRESS_INTERVAL,
    ActiveRisk,
    SimulationConfig,
    SimulationResult,
)
from .distributions import TriangularSampler
from .logging_config import get_logger, log_performance, LoggingContext
from .performance import PerformanceTimer, run_trials_compiled
from .prng import PRNGEngine, normalize_seed
from .risk_model import RiskInput, RiskModel
from .statistics import OutcomeTotals, StatisticsAggregator, TrialOutcome

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class SimulationRunner:
    """Executes the trials of one simulation run.

    The runner owns its active-risk list and generator for the duration of
    the run. Risks are evaluated in list order within each trial; that order
    decides which draws go to which risk and is part of reproducibility.
    """

    def __init__(self,
                 risks: Sequence[ActiveRisk],
                 config: SimulationConfig,
                 seed: Optional[int] = None) -> None:
        """Initialize runner.

        Args:
            risks: Normalized active risks (truncated to ``MAX_RISKS``)
            config: Simulation configuration
            seed: Seed override; defaults to ``config.resolve_seed()``
        """
        self.risks: List[ActiveRisk] = list(risks)[:MAX_RISKS]
        self.config: SimulationConfig = config
        self.seed: int = normalize_seed(config.resolve_seed() if seed is None else seed)
        # (probability, kill, sampled delay, sampled cost, fixed cost) per risk
        self._plan = [
            (
                risk.probability,
                risk.kill,
                risk.delay if risk.samples_delay else None,
                risk.cost if risk.samples_cost else None,
                risk.fixed_cost,
            )
            for risk in self.risks
        ]

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> SimulationResult:
        """Run all trials and summarize them.

        Args:
            progress_callback: Called with ``(done, total)`` after trial
                indices 0, 1000, 2000, ...

        Returns:
            Simulation result
        """
        iterations = self.config.iterations

        with PerformanceTimer("simulation") as timer, \
                LoggingContext(logger, seed=self.seed, iterations=iterations):
            logger.info(
                f"Starting {iterations:,} trials over {len(self.risks)} active risks "
                f"(backend={self.config.backend}, seed={self.seed})"
            )

            if self.config.backend == "numba":
                totals = run_trials_compiled(
                    self.risks, self.config, self.seed, progress_callback
                )
            else:
                totals = self._run_trials(progress_callback)

            result = StatisticsAggregator.summarize(
                totals, seed=self.seed, active_risk_count=len(self.risks)
            )

            logger.debug(
                f"Result: success {result.success_pct:.1%}, killed {result.killed_pct:.1%}, "
                f"budget exceeded {result.budget_exceeded_pct:.1%}"
            )

        rate = iterations / timer.duration if timer.duration > 0 else float("inf")
        logger.info(f"Completed {iterations:,} trials in {timer.duration:.3f}s ({rate:,.0f} trials/s)")

        return result

    def _run_trials(self, progress_callback: Optional[ProgressCallback]) -> OutcomeTotals:
        iterations = self.config.iterations
        rng = PRNGEngine(self.seed)
        totals = OutcomeTotals(
            delay_slack=self.config.delay_slack,
            budget_slack=self.config.budget_slack,
        )

        for i in range(iterations):
            totals.record(self.run_trial(rng))
            if progress_callback is not None and i % PROGRESS_INTERVAL == 0:
                progress_callback(i, iterations)

        return totals

    def run_trial(self, rng: PRNGEngine) -> TrialOutcome:
        """Resolve every active risk once.

        A kill does not end the trial early: later risks still draw and
        accrue delay and cost into the same trial.
        """
        sample = TriangularSampler.sample
        killed = False
        total_delay = 0.0
        total_cost = 0.0

        for probability, kill, delay, cost, fixed_cost in self._plan:
            if rng.random() >= probability:
                continue
            if kill:
                killed = True
            if delay is not None:
                total_delay += sample(*delay, rng.random())
            if cost is not None:
                total_cost += sample(*cost, rng.random())
            elif fixed_cost:
                total_cost += fixed_cost

        return TrialOutcome(killed, total_delay, total_cost)


@log_performance
def run_simulation(risks_data: Optional[Sequence[RiskInput]] = None,
                   config_data: Optional[Union[SimulationConfig, Mapping[str, Any]]] = None,
                   progress_callback: Optional[ProgressCallback] = None) -> SimulationResult:
    """Main entry point for running a simulation in the calling process.

    Args:
        risks_data: Raw risk rows (``RiskDefinition`` objects or dicts)
        config_data: ``SimulationConfig`` or configuration dictionary
        progress_callback: Optional ``(done, total)`` progress hook

    Returns:
        Simulation result
    """
    if isinstance(config_data, SimulationConfig):
        config = config_data
    else:
        config = SimulationConfig.model_validate(dict(config_data or {}))

    model = RiskModel(risks_data)
    runner = SimulationRunner(model.active_risks, config)
    return runner.run(progress_callback)


def result_to_dict(result: SimulationResult) -> Dict[str, Any]:
    """JSON-compatible dictionary of a result."""
    return result.model_dump(mode="json")
