"""CLI command tests.

Runs the commands end to end through Typer's test runner.
"""

import json
import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from risk_simulator.cli import app
from risk_simulator.templates.template_generator import SAMPLE_RISKS


class TestCLI:
    """Test CLI command functionality."""

    @pytest.fixture
    def runner(self):
        """Create CLI test runner."""
        return CliRunner()

    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory for test files."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            yield Path(tmp_dir)

    @pytest.fixture
    def risks_file(self, temp_dir):
        path = temp_dir / "risks.json"
        path.write_text(json.dumps({"risks": SAMPLE_RISKS}))
        return path

    def test_cli_help(self, runner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "template", "info", "verify"):
            assert command in result.stdout

    @pytest.mark.parametrize("format_type,filename", [
        ("json", "risk_register_template.json"),
        ("csv", "risk_register_template.csv"),
        ("excel", "risk_register_template.xlsx"),
    ])
    def test_template(self, runner, temp_dir, format_type, filename):
        result = runner.invoke(app, ["template", format_type, "--output", str(temp_dir)])
        assert result.exit_code == 0
        assert (temp_dir / filename).exists()

    def test_template_unknown_format(self, runner, temp_dir):
        result = runner.invoke(app, ["template", "pdf", "--output", str(temp_dir)])
        assert result.exit_code == 1

    def test_info(self, runner, risks_file):
        result = runner.invoke(app, ["info", "--risks", str(risks_file)])
        assert result.exit_code == 0
        assert "Active: 7" in result.stdout
        assert "Kill risks: 3" in result.stdout

    def test_run_json_output(self, runner, risks_file):
        result = runner.invoke(app, [
            "run", "--risks", str(risks_file), "-n", "2000",
            "--delay-slack", "10", "--budget-slack", "20000", "--seed", "42", "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["runs"] == 2000
        assert data["seed"] == 42
        assert data["active_risk_count"] == 7
        assert 0.0 <= data["success_pct"] <= 1.0

    def test_run_is_reproducible(self, runner, risks_file):
        args = ["run", "--risks", str(risks_file), "-n", "1500", "--seed", "9", "--json"]
        first = runner.invoke(app, args)
        second = runner.invoke(app, args)
        assert json.loads(first.stdout) == json.loads(second.stdout)

    def test_run_with_config_file(self, runner, risks_file, temp_dir):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("iterations: 800\nseed: 5\ndelay_slack: 3\n")

        result = runner.invoke(app, [
            "run", "--risks", str(risks_file), "--config", str(config_path), "-n", "900", "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["runs"] == 900
        assert data["seed"] == 5

    def test_run_table_output(self, runner, temp_dir):
        template = runner.invoke(app, ["template", "csv", "--output", str(temp_dir)])
        assert template.exit_code == 0

        result = runner.invoke(app, [
            "run", "--risks", str(temp_dir / "risk_register_template.csv"), "-n", "1000", "--seed", "1",
        ])
        assert result.exit_code == 0
        assert "Likelihood of success" in result.stdout
        assert "Late delay distribution" in result.stdout

    def test_run_missing_file(self, runner, temp_dir):
        result = runner.invoke(app, ["run", "--risks", str(temp_dir / "missing.json")])
        assert result.exit_code == 1

    def test_run_unsupported_format(self, runner, temp_dir):
        path = temp_dir / "risks.txt"
        path.write_text("nothing")
        result = runner.invoke(app, ["run", "--risks", str(path)])
        assert result.exit_code == 1

    def test_run_bad_backend(self, runner, risks_file):
        result = runner.invoke(app, ["run", "--risks", str(risks_file), "--backend", "gpu"])
        assert result.exit_code == 1

    def test_verify_with_seed(self, runner, risks_file):
        result = runner.invoke(app, [
            "verify", "--risks", str(risks_file), "--seed", "7", "--runs", "2", "-n", "500",
        ])
        assert result.exit_code == 0
        assert "reproducible across 2 runs" in result.stdout

    def test_verify_without_seed(self, runner, risks_file):
        result = runner.invoke(app, ["verify", "--risks", str(risks_file), "-n", "100"])
        assert result.exit_code == 1
        assert "No random seed specified" in result.stdout
