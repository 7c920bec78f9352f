"""Project Risk Simulator.

A Monte Carlo engine estimating the likelihood that a project finishes on
time, within budget and without being cancelled, given a register of
discrete risks.
"""

__version__ = "1.0.0"
__author__ = "Project Risk Simulator Team"

# Core functionality
from .core.simulation import SimulationRunner, run_simulation
from .core.data_models import RiskDefinition, SimulationConfig, SimulationResult
from .core.risk_model import RiskModel
from .core.worker import SimulationWorker

# Exception handling
from .core.exceptions import (
    RiskSimulatorError,
    ValidationError,
    MessageValidationError,
    ConfigurationError,
    DataImportError,
    WorkerError,
)

# Logging configuration
from .core.logging_config import setup_logging, get_logger

__all__ = [
    # Core functionality
    "run_simulation",
    "SimulationRunner",
    "RiskDefinition",
    "SimulationConfig",
    "SimulationResult",
    "RiskModel",
    "SimulationWorker",
    # Exception handling
    "RiskSimulatorError",
    "ValidationError",
    "MessageValidationError",
    "ConfigurationError",
    "DataImportError",
    "WorkerError",
    # Logging
    "setup_logging",
    "get_logger",
]
