from typing import Any, List

import typer
from rich.markup import escape
from rich.table import Table

from applife.core.models import ComponentState
from applife.core.naming import identity_name
from applife.core.registry import DeclarationRegistry
from applife.runtime.contracts import LifecycleReport
from applife.utils.console import error_console
from applife.utils.diagnostics import LifecycleDiagnostic

STATE_COLORS = {
    ComponentState.STARTED: "green",
    ComponentState.INITIALIZED: "white",
    ComponentState.START_FAILED: "yellow",
    ComponentState.CONSTRUCTION_FAILED: "red",
    ComponentState.INIT_FAILED: "red",
}


class OutputFormatter:
    """
    Handles output formatting for the CLI.
    Keeps system logs on stderr and data (orders, reports) on stdout.
    """

    @staticmethod
    def log(message: str, severity: str = "info") -> None:
        """
        Print system messages to stderr with color coding.
        """
        style = "white"
        prefix = "[AppLife]"

        if severity == "warning":
            style = "yellow"
        elif severity == "error":
            style = "red"
        elif severity == "success":
            style = "green"

        error_console.print(f"[{style}]{escape(prefix)} {escape(message)}[/{style}]", markup=True, highlight=False)

    @staticmethod
    def print_diagnostics(diagnostics: List[LifecycleDiagnostic]) -> None:
        if not diagnostics:
            return

        table = Table(title="AppLife Diagnostics", border_style="red", header_style="bold red")
        table.add_column("Severity", style="bold")
        table.add_column("Code")
        table.add_column("Component")
        table.add_column("Phase")
        table.add_column("Message")

        for diag in diagnostics:
            color = "yellow" if diag.severity == "warning" else "red"
            table.add_row(
                f"[{color}]{diag.severity.upper()}[/{color}]",
                diag.error_code,
                escape(diag.component),
                diag.phase,
                escape(diag.message),
            )

        error_console.print(table)
        error_console.print()

    @staticmethod
    def print_report(report: LifecycleReport) -> None:
        """Print the per-controller states of a finished run, then its diagnostics."""
        table = Table(title=f"{escape(report.app_name)} Lifecycle ({report.status.value})")
        table.add_column("#", justify="right")
        table.add_column("Controller")
        table.add_column("State")

        for index, component in enumerate(report.components, start=1):
            color = STATE_COLORS.get(component.state, "white")
            table.add_row(str(index), escape(component.name), f"[{color}]{component.state.value}[/{color}]")

        error_console.print(table)
        OutputFormatter.print_diagnostics(report.diagnostics)

    @staticmethod
    def print_order(order: List[Any], declarations: DeclarationRegistry) -> None:
        """Print a construction order to stdout, one controller per line."""
        for index, identity in enumerate(order, start=1):
            declaration = declarations.get(identity)
            deps = ", ".join(identity_name(dep) for dep in declarations.dependencies_of(identity))
            line = f"{index}. {declaration.name} (load_order={declaration.load_order})"
            if deps:
                line += f" <- {deps}"
            typer.echo(line)
