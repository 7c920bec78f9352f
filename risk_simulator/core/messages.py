"""Messages exchanged between a caller and the simulation worker.

The set is closed: ``RunRequest`` travels to the worker, ``Progress`` and
``Done`` travel back. Payloads are validated at the boundary so a malformed
message never reaches the trial loop. Inside a well-formed request, numbers
are still coerced and clamped rather than rejected.
"""

from typing import Annotated, Any, List, Literal, Mapping, Union

from pydantic import Field, TypeAdapter, field_validator
from pydantic import BaseModel, ValidationError as PydanticValidationError

from .data_models import MAX_RISKS, RiskDefinition, SimulationConfig, SimulationResult
from .exceptions import MessageValidationError


class RunRequest(SimulationConfig):
    """Request to run one simulation."""

    type: Literal["run"] = "run"
    risks: List[RiskDefinition] = Field(default_factory=list, description="Risk rows (first 50 used)")

    @field_validator("risks", mode="before")
    @classmethod
    def truncate_risks(cls, v):
        if isinstance(v, (list, tuple)):
            return [row if isinstance(row, (Mapping, RiskDefinition)) else {} for row in v[:MAX_RISKS]]
        return v

    def to_config(self) -> SimulationConfig:
        """Configuration part of the request."""
        return SimulationConfig.model_validate(self.model_dump(exclude={"type", "risks"}))


class Progress(BaseModel):
    """Periodic progress notification."""

    type: Literal["progress"] = "progress"
    done: int = Field(..., ge=0, description="Index of the last completed trial")
    total: int = Field(..., ge=1, description="Trials in the run")

    @property
    def fraction(self) -> float:
        return self.done / self.total


class Done(BaseModel):
    """Final notification carrying the result."""

    type: Literal["done"] = "done"
    result: SimulationResult


WorkerMessage = Annotated[Union[Progress, Done], Field(discriminator="type")]

_request_adapter = TypeAdapter(RunRequest)
_worker_message_adapter = TypeAdapter(WorkerMessage)


def _schema_errors(exc: PydanticValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
        for error in exc.errors()
    ]


def parse_request(payload: Any) -> RunRequest:
    """Validate a raw run request.

    Args:
        payload: ``RunRequest`` or mapping with ``type == "run"``

    Returns:
        Parsed request

    Raises:
        MessageValidationError: If the payload is not a well-formed run request
    """
    if isinstance(payload, RunRequest):
        return payload
    if not isinstance(payload, Mapping):
        raise MessageValidationError(
            f"Run request must be a mapping, got {type(payload).__name__}",
            field_name="<root>",
        )
    if payload.get("type", "run") != "run":
        raise MessageValidationError(
            f"Unexpected message type {payload.get('type')!r} for a run request",
            field_name="type",
            field_value=payload.get("type"),
        )
    try:
        return _request_adapter.validate_python(dict(payload))
    except PydanticValidationError as e:
        raise MessageValidationError(
            "Malformed run request", schema_errors=_schema_errors(e), cause=e
        ) from e


def parse_worker_message(payload: Any) -> Union[Progress, Done]:
    """Validate a message received from the worker.

    Raises:
        MessageValidationError: If the payload is not a progress or done message
    """
    if isinstance(payload, (Progress, Done)):
        return payload
    try:
        return _worker_message_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise MessageValidationError(
            "Malformed worker message", schema_errors=_schema_errors(e), cause=e
        ) from e
