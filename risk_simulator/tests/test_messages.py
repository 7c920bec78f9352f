"""Tests for worker message validation."""

import pytest

from risk_simulator.core.data_models import SimulationConfig
from risk_simulator.core.exceptions import MessageValidationError
from risk_simulator.core.messages import (
    Done,
    Progress,
    RunRequest,
    parse_request,
    parse_worker_message,
)
from risk_simulator.core.simulation import run_simulation


class TestRunRequest:
    """Run requests are validated at the boundary."""

    def test_parse_minimal_request(self):
        request = parse_request({"type": "run", "risks": [], "iterations": 100})
        assert isinstance(request, RunRequest)
        assert request.iterations == 100
        assert request.risks == []

    def test_type_defaults_to_run(self):
        assert parse_request({"iterations": 10}).type == "run"

    def test_risks_truncated_to_fifty(self):
        request = parse_request({"risks": [{"likelihood": 10, "kill": 1}] * 75})
        assert len(request.risks) == 50

    def test_non_mapping_risk_rows_become_empty(self):
        request = parse_request({"risks": ["junk", {"likelihood": 5, "kill": 1}]})
        assert request.risks[0].likelihood == 0.0
        assert request.risks[1].kill is True

    def test_numbers_coerced_not_rejected(self):
        request = parse_request({"iterations": "many", "delaySlack": -1, "risks": [{"likelihood": "x"}]})
        assert request.iterations == 1
        assert request.delay_slack == 0.0
        assert request.risks[0].likelihood == 0.0

    def test_existing_request_passes_through(self):
        request = RunRequest(iterations=5)
        assert parse_request(request) is request

    def test_to_config(self):
        request = parse_request({"iterations": 300, "delay_slack": 2, "budget_slack": 9, "seed": 4,
                                 "backend": "numba"})
        config = request.to_config()
        assert isinstance(config, SimulationConfig)
        assert config.model_dump() == {
            "iterations": 300, "delay_slack": 2.0, "budget_slack": 9.0, "seed": 4, "backend": "numba",
        }

    def test_round_trip_through_json_payload(self):
        request = parse_request({"risks": [{"name": "a", "likelihood": 50, "min": 1, "mode": 2, "max": 3}],
                                 "iterations": 10, "seed": 1})
        again = parse_request(request.model_dump(mode="json"))
        assert again.model_dump() == request.model_dump()

    @pytest.mark.parametrize("payload", [
        "run",
        None,
        42,
        ["risks"],
        {"type": "progress", "done": 0, "total": 1},
        {"type": "run", "risks": "not a list"},
        {"type": "run", "backend": "gpu"},
    ])
    def test_malformed_requests_rejected(self, payload):
        with pytest.raises(MessageValidationError):
            parse_request(payload)

    def test_schema_errors_in_context(self):
        with pytest.raises(MessageValidationError) as exc_info:
            parse_request({"risks": 5})
        assert exc_info.value.context['schema_errors']
        assert exc_info.value.error_code == "RS_MESSAGEVALIDATIONERROR"


class TestWorkerMessages:
    """Progress and Done messages form a closed, tagged union."""

    def test_parse_progress(self):
        message = parse_worker_message({"type": "progress", "done": 1000, "total": 4000})
        assert isinstance(message, Progress)
        assert message.fraction == 0.25

    def test_parse_done(self):
        result = run_simulation([], {"iterations": 10, "seed": 1})
        message = parse_worker_message(Done(result=result).model_dump(mode="json"))
        assert isinstance(message, Done)
        assert message.result.model_dump() == result.model_dump()

    @pytest.mark.parametrize("payload", [
        {"type": "error", "message": "boom"},
        {"type": "progress", "done": -1, "total": 10},
        {"type": "progress", "done": 0, "total": 0},
        {"type": "done"},
        {"done": 1, "total": 2},
        "done",
    ])
    def test_malformed_messages_rejected(self, payload):
        with pytest.raises(MessageValidationError):
            parse_worker_message(payload)
