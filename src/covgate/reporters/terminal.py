"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from covgate.models import MetricName

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.models import CoverageReport, ValidationResult

console = Console()

_RULE_WIDTH = 50

_SUGGESTIONS = (
    "Add more unit tests for uncovered functions",
    "Add integration tests for complex workflows",
    "Test error handling and edge cases",
)


class CLIReporter:
    """Rich terminal output for coverage validation."""

    def __init__(self, target: Console | None = None) -> None:
        self.console = target or console

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    def print_coverage_table(self, report: CoverageReport) -> None:
        """Print covered/total and percentage per metric."""
        title = "Coverage (estimated)" if report.is_estimated else "Coverage"
        table = Table(title=title, title_style="bold cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Covered", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Percentage", justify="right")

        for metric in MetricName:
            data = report.get(metric)
            color = self._get_coverage_color(data.percentage)
            table.add_row(
                metric.value,
                str(data.covered),
                str(data.total),
                f"[{color}]{data.percentage:g}%[/{color}]",
            )
        self.console.print(table)

    def print_provenance(self, report: CoverageReport) -> None:
        """Make it obvious whether the verdict rests on measured data."""
        if report.is_estimated:
            self.console.print(
                Panel(
                    "[bold yellow]Coverage is ESTIMATED from test/source file counts."
                    "[/bold yellow]\n"
                    "No coverage data was produced; the verdict below is not a measurement.",
                    border_style="yellow",
                )
            )
        else:
            self.print_info(f"Coverage measured from {report.source.value} data")
        for note in report.notes:
            self.print_warning(escape(note))

    def print_validation_results(self, results: list[ValidationResult]) -> int:
        """Print each result, a pass count and remediation hints.

        Returns:
            Process exit status: 0 if every metric passed, otherwise 1.
        """
        self.console.print("\n[bold]Coverage Results:[/bold]")
        self.console.print("━" * _RULE_WIDTH)
        for result in results:
            color = "green" if result.passed else "red"
            self.console.print(f"  [{color}]{result.message}[/{color}]")
        self.console.print("━" * _RULE_WIDTH)

        passed = sum(1 for result in results if result.passed)
        total = len(results)
        self.console.print(f"\nSummary: {passed}/{total} metrics passed")

        if passed == total:
            self.print_success("All coverage requirements met!")
            return 0

        self.print_warning("Some coverage requirements not met")
        self.console.print("\nTo improve coverage:")
        for index, suggestion in enumerate(_SUGGESTIONS, start=1):
            self.console.print(f"{index}. {suggestion}")
        return 1

    def print_artifacts(self, paths: list[Path]) -> None:
        for path in paths:
            self.print_info(f"Wrote {path}")

    def print_write_errors(self, errors: list[str]) -> None:
        for error in errors:
            self.print_warning(escape(error))

    def _get_coverage_color(self, percentage: float) -> str:
        """Get a color based on coverage percentage."""
        high_threshold = 80.0
        medium_threshold = 50.0

        if percentage >= high_threshold:
            return "green"
        if percentage >= medium_threshold:
            return "yellow"
        return "red"


# Singleton instance for easy import
reporter = CLIReporter()
