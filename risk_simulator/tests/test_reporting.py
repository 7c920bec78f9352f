"""Tests for result summaries and text histograms."""

import pytest

from risk_simulator.core.data_models import Histogram
from risk_simulator.core.simulation import run_simulation
from risk_simulator.reporting.reporting import (
    BAR_CHAR,
    HistogramRenderer,
    ReportGenerator,
    create_simple_summary_report,
)
from risk_simulator.templates.template_generator import SAMPLE_RISKS


class TestHistogramRenderer:
    """Text bar rendering."""

    def test_no_data(self):
        assert HistogramRenderer().render(None) == ["(no data)"]

    def test_one_line_per_bucket(self):
        hist = Histogram(bins=[1, 0, 4, 2], max_value=8.0)
        lines = HistogramRenderer(width=8).render(hist, unit="d")

        assert len(lines) == 4
        assert lines[0].startswith("0.0-2.0 d")
        assert lines[2].count(BAR_CHAR) == 8
        assert lines[0].count(BAR_CHAR) == 2
        assert lines[1].count(BAR_CHAR) == 0
        assert lines[2].endswith(" 4")


class TestReportGenerator:
    """Summaries built from a result."""

    @pytest.fixture
    def result(self):
        return run_simulation(SAMPLE_RISKS, {"iterations": 4000, "delay_slack": 10,
                                             "budget_slack": 20000, "seed": 3})

    def test_summary_sections(self, result):
        summary = ReportGenerator(result).generate_summary()

        assert summary['run']['runs'] == 4000
        assert summary['run']['seed'] == 3
        assert summary['outcomes']['success_pct'] == result.success_pct
        assert list(summary['late_percentiles']) == ['P50', 'P85', 'P90']
        assert summary['overrun_percentiles']['P90'] == result.p90_overrun
        assert summary['key_insights']

    def test_histogram_lines(self, result):
        report = ReportGenerator(result)
        assert len(report.delay_histogram_lines()) == 20

    def test_insights_for_empty_register(self):
        result = run_simulation([], {"iterations": 10, "seed": 1})
        insights = ReportGenerator(result).generate_summary()['key_insights']

        assert insights[0].startswith("100.0% of runs")
        assert "No active risks: every run succeeds" in insights

    def test_simple_summary_report(self, result):
        text = create_simple_summary_report(result)

        assert text.startswith("Project Risk Simulation Summary")
        assert "Runs: 4,000 (seed 3, 7 active risks)" in text
        assert f"Likelihood of success: {result.success_pct:.1%}" in text
