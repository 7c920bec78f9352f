"""Custom exceptions for the project risk simulator.

Provides a structured exception hierarchy with error context, recovery
suggestions and classification. The simulation data path itself raises none
of these: bad numbers are coerced and degenerate ranges contribute zero.
Exceptions only surface at the boundaries (message parsing, file import,
worker lifecycle).
"""

from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for categorizing exceptions."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    VALIDATION = "validation"
    COMPUTATION = "computation"
    IO = "io"
    CONFIGURATION = "configuration"
    CONCURRENCY = "concurrency"
    SYSTEM = "system"


class RiskSimulatorError(Exception):
    """Base exception for all risk simulator errors.

    Carries structured error information with context, severity,
    and recovery suggestions.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize structured error.

        Args:
            message: Human-readable error description
            category: Error category for classification
            severity: Error severity level
            error_code: Unique error identifier
            context: Additional error context
            recovery_suggestions: List of recovery suggestions
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        self.cause = cause

    def _generate_error_code(self) -> str:
        """Generate error code from class name."""
        return f"RS_{self.__class__.__name__.upper()}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'category': self.category.value,
            'severity': self.severity.value,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions,
            'exception_type': self.__class__.__name__,
            'cause': str(self.cause) if self.cause else None
        }


# Validation Errors
class ValidationError(RiskSimulatorError):
    """Raised when input data validation fails."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Any = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        context.update({
            'field_name': field_name,
            'field_value': field_value,
        })

        recovery_suggestions = kwargs.pop('recovery_suggestions', [
            "Check input data format and values",
            "Verify data matches the risk register columns",
        ])

        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recovery_suggestions=recovery_suggestions,
            **kwargs
        )


class MessageValidationError(ValidationError):
    """Raised when a worker message payload is structurally malformed."""

    def __init__(self, message: str, schema_errors: Optional[List[str]] = None, **kwargs):
        context = kwargs.pop('context', {})
        context['schema_errors'] = schema_errors or []

        recovery_suggestions = [
            "Send a mapping with a 'type' of 'run', 'progress' or 'done'",
            "Pass 'risks' as a list of risk rows",
        ]

        super().__init__(
            message,
            context=context,
            recovery_suggestions=recovery_suggestions,
            **kwargs
        )


# Configuration Errors
class ConfigurationError(RiskSimulatorError):
    """Raised when a configuration file cannot be used."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Any = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        context.update({
            'config_key': config_key,
            'config_value': config_value
        })

        recovery_suggestions = kwargs.pop('recovery_suggestions', [
            "Check configuration syntax and format",
            "Use keys iterations, delay_slack, budget_slack, seed, backend",
        ])

        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            context=context,
            recovery_suggestions=recovery_suggestions,
            **kwargs
        )


# I/O Errors
class DataImportError(RiskSimulatorError):
    """Raised when a risk register or configuration file cannot be read."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: str = "import",
        **kwargs
    ):
        context = kwargs.pop('context', {})
        context.update({
            'file_path': file_path,
            'operation': operation
        })

        recovery_suggestions = kwargs.pop('recovery_suggestions', [
            "Check file path exists and is accessible",
            "Verify file permissions",
        ])

        super().__init__(
            message,
            category=ErrorCategory.IO,
            context=context,
            recovery_suggestions=recovery_suggestions,
            **kwargs
        )


class FileFormatError(DataImportError):
    """Raised when a file format is unsupported."""

    def __init__(
        self,
        message: str,
        file_path: str,
        expected_format: str,
        detected_format: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        context.update({
            'expected_format': expected_format,
            'detected_format': detected_format
        })

        recovery_suggestions = [
            f"Ensure file is in {expected_format} format",
            "Verify file extension matches content",
        ]

        super().__init__(
            message,
            file_path=file_path,
            operation="format_detection",
            context=context,
            recovery_suggestions=recovery_suggestions,
            **kwargs
        )


# Worker Errors
class WorkerError(RiskSimulatorError):
    """Raised when the background simulation worker is misused or fails."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.CONCURRENCY)
        super().__init__(message, **kwargs)


class WorkerBusyError(WorkerError):
    """Raised when a run is started while another run is in flight."""

    def __init__(self, message: str = "A simulation is already running on this worker", **kwargs):
        super().__init__(
            message,
            recovery_suggestions=["Wait for the Done message or cancel the current run"],
            **kwargs
        )


class WorkerClosedError(WorkerError):
    """Raised when a cancelled worker is asked to start another run."""

    def __init__(self, message: str = "Worker was cancelled; construct a new SimulationWorker", **kwargs):
        super().__init__(
            message,
            recovery_suggestions=["Create a fresh SimulationWorker for the next run"],
            **kwargs
        )


class WorkerCrashedError(WorkerError):
    """Raised when the worker process exits without delivering a result."""

    def __init__(self, message: str, exit_code: Optional[int] = None, **kwargs):
        context = kwargs.pop('context', {})
        context['exit_code'] = exit_code

        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            context=context,
            recovery_suggestions=["Check the worker log output", "Retry with a new worker"],
            **kwargs
        )


# Utility functions
def handle_exception(
    exception: Exception,
    logger,
    context: Optional[Dict[str, Any]] = None,
    reraise: bool = True
) -> Optional[RiskSimulatorError]:
    """Handle exception with proper logging and conversion.

    Args:
        exception: Original exception
        logger: Logger instance
        context: Additional context information
        reraise: Whether to reraise the exception

    Returns:
        Converted RiskSimulatorError if not reraising

    Raises:
        RiskSimulatorError: If reraise is True
    """
    if isinstance(exception, RiskSimulatorError):
        sim_error = exception
    else:
        sim_error = RiskSimulatorError(
            str(exception),
            context=context,
            cause=exception
        )

    logger.error(
        f"{sim_error.error_code}: {sim_error.message}",
        extra={'error': sim_error.to_dict()},
        exc_info=True
    )

    if reraise:
        if sim_error is exception:
            raise sim_error
        raise sim_error from exception
    return sim_error
