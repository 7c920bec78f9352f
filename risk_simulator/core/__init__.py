"""Core risk simulation engine."""

# Generator and sampling
from .prng import PRNGEngine
from .distributions import Triangle, TriangularSampler, triangular_mean

# Data models and normalization
from .data_models import (
    RiskDefinition, ActiveRisk, SimulationConfig, SimulationResult, Histogram,
    MAX_ITERATIONS, MAX_RISKS, PROGRESS_INTERVAL, HISTOGRAM_BUCKETS,
)
from .risk_model import RiskModel, normalize_risks

# Simulation and statistics
from .simulation import SimulationRunner, run_simulation
from .statistics import StatisticsAggregator, OutcomeTotals, TrialOutcome

# Worker boundary
from .messages import RunRequest, Progress, Done, parse_request, parse_worker_message
from .worker import SimulationWorker

# Verification
from .audit import DeterminismVerifier

# Exception handling and logging
from .exceptions import (
    RiskSimulatorError, ValidationError, MessageValidationError, ConfigurationError,
    DataImportError, WorkerError, WorkerBusyError, WorkerClosedError, WorkerCrashedError,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    # Generator and sampling
    'PRNGEngine', 'Triangle', 'TriangularSampler', 'triangular_mean',

    # Data models and normalization
    'RiskDefinition', 'ActiveRisk', 'SimulationConfig', 'SimulationResult', 'Histogram',
    'MAX_ITERATIONS', 'MAX_RISKS', 'PROGRESS_INTERVAL', 'HISTOGRAM_BUCKETS',
    'RiskModel', 'normalize_risks',

    # Simulation and statistics
    'SimulationRunner', 'run_simulation',
    'StatisticsAggregator', 'OutcomeTotals', 'TrialOutcome',

    # Worker boundary
    'RunRequest', 'Progress', 'Done', 'parse_request', 'parse_worker_message',
    'SimulationWorker',

    # Verification
    'DeterminismVerifier',

    # Exception handling and logging
    'RiskSimulatorError', 'ValidationError', 'MessageValidationError', 'ConfigurationError',
    'DataImportError', 'WorkerError', 'WorkerBusyError', 'WorkerClosedError', 'WorkerCrashedError',
    'setup_logging', 'get_logger',
]
