"""Tests for the background simulation worker."""

import pytest

from risk_simulator.core.exceptions import (
    MessageValidationError,
    WorkerBusyError,
    WorkerClosedError,
)
from risk_simulator.core.messages import Done, Progress, parse_request
from risk_simulator.core.simulation import result_to_dict, run_simulation
from risk_simulator.core.worker import SimulationWorker, execute_request
from risk_simulator.templates.template_generator import SAMPLE_RISKS


class TestExecuteRequest:
    """In-process message sequence."""

    def test_progress_then_done(self):
        messages = []
        request = parse_request({"risks": SAMPLE_RISKS, "iterations": 2500, "seed": 5})
        result = execute_request(request, messages.append)

        assert isinstance(messages[-1], Done)
        assert messages[-1].result is result
        progress = messages[:-1]
        assert all(isinstance(m, Progress) for m in progress)
        assert [m.done for m in progress] == [0, 1000, 2000]
        assert all(m.total == 2500 for m in progress)


class TestSimulationWorker:
    """Runs in a separate process."""

    @pytest.fixture
    def request_payload(self):
        return {
            "type": "run",
            "risks": SAMPLE_RISKS,
            "iterations": 3000,
            "delay_slack": 10,
            "budget_slack": 20000,
            "seed": 12345,
        }

    def test_run_matches_in_process_result(self, request_payload):
        worker = SimulationWorker()
        progress = []
        result = worker.run(request_payload, on_progress=progress.append)

        expected = run_simulation(SAMPLE_RISKS, request_payload)
        assert result_to_dict(result) == result_to_dict(expected)
        assert [m.done for m in progress] == [0, 1000, 2000]
        assert not worker.running

    def test_messages_end_with_done(self, request_payload):
        worker = SimulationWorker()
        worker.start(request_payload)
        messages = list(worker.messages())

        assert isinstance(messages[-1], Done)
        assert sum(isinstance(m, Done) for m in messages) == 1
        dones = [m.done for m in messages if isinstance(m, Progress)]
        assert dones == sorted(dones)

    def test_worker_reusable_after_done(self, request_payload):
        worker = SimulationWorker()
        first = worker.run(request_payload)
        second = worker.run({**request_payload, "seed": 1})
        assert first.seed == 12345
        assert second.seed == 1

    def test_busy_worker_rejects_second_start(self, request_payload):
        worker = SimulationWorker()
        worker.start({**request_payload, "iterations": 50000})
        try:
            with pytest.raises(WorkerBusyError):
                worker.start(request_payload)
        finally:
            worker.cancel()

    def test_cancel_closes_worker(self, request_payload):
        worker = SimulationWorker()
        worker.start({**request_payload, "iterations": 50000})
        worker.cancel()

        assert not worker.running
        assert worker.closed
        assert worker.poll() is None
        with pytest.raises(WorkerClosedError):
            worker.start(request_payload)

    def test_cancel_idle_worker(self):
        worker = SimulationWorker()
        worker.cancel()
        assert worker.closed

    def test_malformed_request_starts_nothing(self):
        worker = SimulationWorker()
        with pytest.raises(MessageValidationError):
            worker.start({"type": "progress", "done": 0, "total": 1})
        assert not worker.running

    def test_context_manager_cancels_running_worker(self, request_payload):
        with SimulationWorker() as worker:
            worker.start({**request_payload, "iterations": 50000})
        assert worker.closed
        assert not worker.running
