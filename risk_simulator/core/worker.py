"""Background simulation worker.

Each run executes in its own process and talks to the caller only through
a queue of validated message payloads: zero or more ``Progress`` messages in
increasing trial order, then exactly one ``Done``. Cancelling terminates the
process immediately; no partial result is delivered and the worker cannot
be reused afterwards.
"""

import multiprocessing
import queue
from typing import Any, Callable, Iterator, Optional, Union

from .data_models import SimulationResult
from .exceptions import WorkerBusyError, WorkerClosedError, WorkerCrashedError, handle_exception
from .logging_config import get_logger
from .messages import Done, Progress, RunRequest, parse_request, parse_worker_message
from .risk_model import RiskModel
from .simulation import SimulationRunner

logger = get_logger(__name__)

POLL_INTERVAL = 0.1


def execute_request(request: RunRequest,
                    emit: Callable[[Union[Progress, Done]], None]) -> SimulationResult:
    """Run a request in the current process, emitting messages through ``emit``."""
    model = RiskModel(request.risks)
    runner = SimulationRunner(model.active_risks, request.to_config())
    result = runner.run(lambda done, total: emit(Progress(done=done, total=total)))
    emit(Done(result=result))
    return result


def _worker_main(payload: dict, outbox) -> None:
    """Process entry point: run one request and post its messages.

    Failures are logged here and re-raised, so the process exits nonzero
    without a ``Done`` and the parent reports a crash.
    """
    try:
        request = parse_request(payload)
        execute_request(request, lambda message: outbox.put(message.model_dump(mode="json")))
    except Exception as e:
        handle_exception(e, logger, context={"component": "worker"})


class SimulationWorker:
    """Runs simulations off the caller's process.

    One run at a time. After a run finishes (``Done`` consumed) the worker
    can start another; after ``cancel()`` it is closed for good.

    Example:
        >>> worker = SimulationWorker()
        >>> worker.start({"risks": risks, "iterations": 20000, "seed": 7})
        >>> for message in worker.messages():
        ...     print(message)
    """

    def __init__(self, start_method: Optional[str] = None):
        """Initialize worker.

        Args:
            start_method: multiprocessing start method ("fork", "spawn",
                "forkserver"); platform default when None
        """
        self._context = multiprocessing.get_context(start_method)
        self._process = None
        self._outbox = None
        self._closed = False

    @property
    def running(self) -> bool:
        """True while a run has been started and its ``Done`` not yet received."""
        return self._process is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self, request: Any) -> RunRequest:
        """Start a run in a fresh process.

        Args:
            request: ``RunRequest`` or raw request mapping

        Returns:
            The validated request

        Raises:
            WorkerClosedError: If the worker was cancelled
            WorkerBusyError: If a run is already in flight
            MessageValidationError: If the request is malformed
        """
        if self._closed:
            raise WorkerClosedError()
        if self.running:
            raise WorkerBusyError()

        parsed = parse_request(request)
        self._outbox = self._context.Queue()
        self._process = self._context.Process(
            target=_worker_main,
            args=(parsed.model_dump(mode="json"), self._outbox),
            daemon=True,
        )
        self._process.start()
        logger.info(
            f"Worker process {self._process.pid} started "
            f"({parsed.iterations:,} iterations, {len(parsed.risks)} risk rows)"
        )
        return parsed

    def poll(self, timeout: Optional[float] = None) -> Optional[Union[Progress, Done]]:
        """Return the next message, or None if none arrives within ``timeout``.

        Raises:
            WorkerCrashedError: If the process exited without sending ``Done``
        """
        if self._process is None:
            return None

        try:
            payload = self._outbox.get(timeout=timeout) if timeout else self._outbox.get_nowait()
        except queue.Empty:
            if self._process.is_alive():
                return None
            # Exited; drain anything flushed after the last check.
            try:
                payload = self._outbox.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                exit_code = self._process.exitcode
                self._release()
                logger.error(f"Worker process exited with code {exit_code} before finishing")
                raise WorkerCrashedError(
                    f"Simulation worker exited with code {exit_code} without a result",
                    exit_code=exit_code,
                )

        message = parse_worker_message(payload)
        if isinstance(message, Done):
            self._process.join()
            self._release()
            logger.info(f"Worker finished: {message.result.runs:,} runs")
        return message

    def messages(self) -> Iterator[Union[Progress, Done]]:
        """Yield messages until (and including) ``Done``."""
        while self.running:
            message = self.poll(timeout=POLL_INTERVAL)
            if message is not None:
                yield message

    def run(self, request: Any,
            on_progress: Optional[Callable[[Progress], None]] = None) -> SimulationResult:
        """Start a run and block until its result arrives.

        Args:
            request: ``RunRequest`` or raw request mapping
            on_progress: Optional callback for each ``Progress`` message

        Returns:
            Simulation result
        """
        self.start(request)
        for message in self.messages():
            if isinstance(message, Done):
                return message.result
            if on_progress is not None:
                on_progress(message)
        raise WorkerCrashedError("Simulation worker stopped without a result")

    def cancel(self) -> None:
        """Abandon the current run and close the worker.

        The process is terminated without delivering a partial result.
        """
        if self._process is not None:
            logger.info(f"Cancelling worker process {self._process.pid}")
            self._process.terminate()
            self._process.join()
        self._release()
        self._closed = True

    def _release(self) -> None:
        if self._outbox is not None:
            self._outbox.close()
            self._outbox.join_thread()
        self._process = None
        self._outbox = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.running:
            self.cancel()
