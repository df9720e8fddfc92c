"""Rich output formatting for the AutoFix CLI.

Holds the shared console, the colors used for engine states, and the
renderers for the environment table, healing steps and config tables.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape as _escape
from rich.table import Table

from autofix.healing.engine import HealingStatus, HealingStep

if TYPE_CHECKING:
    from autofix.core.environment import EnvironmentSnapshot
    from autofix.healing.engine import HealingOutcome

console = Console()


class StatusColors:
    """Color mappings for engine states."""

    HEALING_STATUS: dict[HealingStatus, str] = {
        HealingStatus.DETECT: "cyan",
        HealingStatus.EXECUTE: "blue",
        HealingStatus.CLASSIFY: "magenta",
        HealingStatus.PROPOSE: "yellow",
        HealingStatus.CONFIRM: "yellow",
        HealingStatus.APPLY: "yellow",
        HealingStatus.RETRY: "blue",
        HealingStatus.SUCCEEDED: "green",
        HealingStatus.FAILED: "red",
    }

    RISK_LEVEL: dict[str, str] = {
        "low": "green",
        "medium": "yellow",
        "high": "red",
    }

    @classmethod
    def get_status_color(cls, status: HealingStatus) -> str:
        return cls.HEALING_STATUS.get(status, "white")


STATUS_LABELS: dict[HealingStatus, str] = {
    HealingStatus.DETECT: "Detecting Environment",
    HealingStatus.EXECUTE: "Executing Command",
    HealingStatus.CLASSIFY: "Error Detected",
    HealingStatus.PROPOSE: "Proposed Fix",
    HealingStatus.CONFIRM: "Confirmation Required",
    HealingStatus.APPLY: "Applying Fix",
    HealingStatus.RETRY: "Retry",
    HealingStatus.SUCCEEDED: "Success",
    HealingStatus.FAILED: "Failed",
}


def format_bool(value: bool) -> str:
    return "[green]yes[/green]" if value else "[dim]no[/dim]"


def create_environment_table(environment: EnvironmentSnapshot) -> Table:
    """Build a two-column table describing the detected host."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("OS", f"{environment.os.value} {environment.os_version}")
    table.add_row("Architecture", environment.architecture.value)
    table.add_row("Package Manager", environment.package_manager.value)
    table.add_row("Has Sudo", format_bool(environment.has_sudo))
    table.add_row("In Container", format_bool(environment.in_container))
    if environment.runtimes:
        table.add_row(
            "Runtimes",
            ", ".join(f"{r.name} {r.version}" for r in environment.runtimes),
        )
    return table


def format_step_label(step: HealingStep) -> str:
    """Bracketed status label, e.g. ``[Retry 1/3]``."""
    if step.status == HealingStatus.RETRY:
        label = step.message or STATUS_LABELS[step.status]
    else:
        label = STATUS_LABELS[step.status]
    color = StatusColors.get_status_color(step.status)
    return f"[{color}]\\[{label}][/{color}]"


class StepPrinter:
    """Engine observer printing each healing step to the console.

    Quiet mode prints only terminal steps; verbose mode adds the failure
    classification and the captured output of failed commands.
    """

    def __init__(
        self,
        out: Console,
        environment: EnvironmentSnapshot | None = None,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self.console = out
        self.environment = environment
        self.quiet = quiet
        self.verbose = verbose

    def __call__(self, step: HealingStep) -> None:
        if self.quiet and not step.status.is_terminal:
            return

        label = format_step_label(step)
        status = step.status

        if status == HealingStatus.DETECT:
            self.console.print(label)
            if self.environment is not None:
                self.console.print(create_environment_table(self.environment))
        elif status == HealingStatus.EXECUTE:
            self.console.print(label)
            self.console.print(f"Command: {step.command}", markup=False, highlight=False)
        elif status == HealingStatus.CLASSIFY:
            self._print_classification(label, step)
        elif status == HealingStatus.PROPOSE and step.candidate is not None:
            self._print_proposal(label, step)
        elif status == HealingStatus.CONFIRM:
            return
        elif status == HealingStatus.APPLY:
            self.console.print(f"{label} {_escape(step.command or '')}")
        elif status == HealingStatus.FAILED:
            self.console.print(f"{label} {_escape(step.message)}")
        else:
            self.console.print(label)

    def _print_classification(self, label: str, step: HealingStep) -> None:
        if not self.verbose or step.failure is None:
            return
        failure = step.failure
        extracted = f" ({failure.extracted})" if failure.extracted else ""
        self.console.print(f"{label} {failure.category.value}{_escape(extracted)}")
        if step.result is not None and step.result.stderr.strip():
            self.console.print(step.result.stderr.rstrip(), style="dim", markup=False)

    def _print_proposal(self, label: str, step: HealingStep) -> None:
        candidate = step.candidate
        assert candidate is not None
        risk = candidate.risk_level.value
        risk_color = StatusColors.RISK_LEVEL.get(risk, "white")
        self.console.print(f"{label} {_escape(candidate.command)}")
        if candidate.explanation:
            self.console.print(f"  {_escape(candidate.explanation)}", style="dim")
        self.console.print(
            f"  [dim]Source: {candidate.source.value}  Type: {candidate.kind.value}  "
            f"Risk:[/dim] [{risk_color}]{risk}[/{risk_color}]"
        )


def print_outcome_summary(out: Console, outcome: HealingOutcome) -> None:
    """Verbose end-of-run summary."""
    table = Table(title="Run Summary", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    color = StatusColors.get_status_color(outcome.status)
    table.add_row("Status", f"[{color}]{outcome.status.value}[/{color}]")
    if outcome.reason is not None:
        table.add_row("Reason", outcome.reason.value)
    table.add_row("Attempts", str(outcome.attempts))
    for fix in outcome.fixes_applied:
        table.add_row("Fix applied", _escape(fix.command))
    table.add_row("Exit code", str(outcome.exit_code))
    out.print(table)


def create_config_table(flat: dict[str, Any], title: str) -> Table:
    """Table of dotted config keys and their values."""
    table = Table(title=title)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in flat.items():
        if "api_key" in key and value and not key.endswith("_env"):
            shown = "****"
        elif value is None:
            shown = "[dim]unset[/dim]"
        else:
            shown = _escape(str(value))
        table.add_row(key, shown)
    return table
