"""Results reporting.

Turns a ``SimulationResult`` into summary dictionaries, insights and text
histograms for terminal output. Nothing here writes files.
"""

from typing import Any, Dict, List, Optional

from ..core.data_models import Histogram, SimulationResult

BAR_CHAR = "█"


class HistogramRenderer:
    """Renders a bucketed histogram as horizontal text bars."""

    def __init__(self, width: int = 40, precision: int = 1):
        """Initialize renderer.

        Args:
            width: Characters used by the longest bar
            precision: Decimal places in bucket labels
        """
        self.width = width
        self.precision = precision

    def render(self, histogram: Optional[Histogram], unit: str = "") -> List[str]:
        """Render one line per bucket.

        Args:
            histogram: Histogram to draw, or None
            unit: Unit suffix for bucket labels

        Returns:
            Text lines; a single placeholder line when there is no data
        """
        if histogram is None or histogram.total == 0:
            return ["(no data)"]

        peak = max(histogram.bins)
        width = histogram.bucket_width
        suffix = f" {unit}" if unit else ""
        labels = [
            f"{i * width:,.{self.precision}f}-{(i + 1) * width:,.{self.precision}f}{suffix}"
            for i in range(len(histogram.bins))
        ]
        label_width = max(len(label) for label in labels)

        lines = []
        for label, count in zip(labels, histogram.bins):
            bar = BAR_CHAR * round(self.width * count / peak) if peak else ""
            lines.append(f"{label:>{label_width}} | {bar} {count:,}")
        return lines


class ReportGenerator:
    """Generates summary reports for a simulation result."""

    def __init__(self, result: SimulationResult):
        """Initialize report generator.

        Args:
            result: Simulation result
        """
        self.result = result
        self.renderer = HistogramRenderer()

    def generate_summary(self) -> Dict[str, Any]:
        """Group result fields for display.

        Returns:
            Summary dictionary
        """
        r = self.result
        return {
            'run': {
                'runs': r.runs,
                'seed': r.seed,
                'active_risks': r.active_risk_count,
            },
            'outcomes': {
                'success_pct': r.success_pct,
                'killed_pct': r.killed_pct,
                'budget_exceeded_pct': r.budget_exceeded_pct,
                'late_count': r.late_count,
            },
            'expected': {
                'delay_not_killed': r.expected_delay_not_killed,
                'cost_not_killed': r.expected_cost_not_killed,
            },
            'late_percentiles': {'P50': r.p50_late, 'P85': r.p85_late, 'P90': r.p90_late},
            'overrun_percentiles': {'P50': r.p50_overrun, 'P85': r.p85_overrun, 'P90': r.p90_overrun},
            'key_insights': self._generate_key_insights(),
        }

    def delay_histogram_lines(self) -> List[str]:
        return self.renderer.render(self.result.delay_histogram, unit="d")

    def budget_histogram_lines(self) -> List[str]:
        return self.renderer.render(self.result.budget_histogram)

    def _generate_key_insights(self) -> List[str]:
        """Generate key insights from results."""
        insights = []
        r = self.result

        insights.append(f"{r.success_pct:.1%} of runs finish on time, within budget and not killed")

        if r.killed_count:
            insights.append(f"Project is cancelled in {r.killed_pct:.1%} of runs")

        if r.late_count:
            late_share = r.late_count / r.not_killed_count
            insights.append(
                f"{late_share:.1%} of surviving runs are late; P90 delay of late runs {r.p90_late:,.1f} days"
            )

        # Budget counts killed runs too
        if r.budget_exceeded_count:
            insights.append(
                f"Budget exceeded in {r.budget_exceeded_pct:.1%} of runs; P90 overrun {r.p90_overrun:,.0f}"
            )

        if r.active_risk_count == 0:
            insights.append("No active risks: every run succeeds")

        return insights


def create_simple_summary_report(result: SimulationResult) -> str:
    """Create a simple text summary report.

    Args:
        result: Simulation result

    Returns:
        Formatted text report
    """
    generator = ReportGenerator(result)
    report_lines = [
        "Project Risk Simulation Summary",
        "=" * 50,
        "",
        f"Runs: {result.runs:,} (seed {result.seed}, {result.active_risk_count} active risks)",
        f"Likelihood of success: {result.success_pct:.1%}",
        f"Killed: {result.killed_pct:.1%}",
        f"Budget exceeded: {result.budget_exceeded_pct:.1%}",
        f"Expected delay (not killed): {result.expected_delay_not_killed:,.2f} days",
        f"Expected cost (not killed): {result.expected_cost_not_killed:,.2f}",
        "",
        "Total delay of late runs (not killed):",
        f"  P50: {result.p50_late:,.2f}  P85: {result.p85_late:,.2f}  P90: {result.p90_late:,.2f}",
        "Budget overrun (not killed):",
        f"  P50: {result.p50_overrun:,.2f}  P85: {result.p85_overrun:,.2f}  P90: {result.p90_overrun:,.2f}",
        "",
        "Key insights:",
    ]
    report_lines.extend(f"  - {insight}" for insight in generator._generate_key_insights())

    return "\n".join(report_lines)
