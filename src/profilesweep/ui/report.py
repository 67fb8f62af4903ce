"""reporting of sweep decisions and outcomes."""

import logging
from typing import Any, Dict, Optional
from rich.console import Console
from rich.table import Table

from ..domain.models import Decision, SweepResult

logger = logging.getLogger(__name__)


class Reporter:
    """
    observes decisions and execution outcomes.

    per-profile output only appears in verbose mode; the before/after profile
    count and deletion failures are always shown.
    """

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """
        args:
            console: optional rich console instance. if not provided, creates new one.
            verbose: show a line for every profile decision
        """
        self.console = console or Console()
        self.verbose = verbose

    @staticmethod
    def record(decision: Decision) -> Dict[str, Any]:
        """structured record of a single decision."""
        verdict = decision.verdict
        return {
            "account_id": decision.profile.account_id,
            "verdict": verdict.action.value,
            "reason": verdict.reason.value if verdict.reason else None,
            "age_days": verdict.age_days,
        }

    def decision(self, decision: Decision):
        if not self.verbose:
            return

        record = self.record(decision)
        logger.debug(f"decision: {record}")

        line = f"[cyan]{record['account_id']}[/cyan]: {record['verdict']}"
        if record["reason"]:
            line += f" ({record['reason']})"
        if record["age_days"] is not None:
            line += f" [dim]age {record['age_days']}d[/dim]"
        if decision.verdict.domain_mismatch:
            line += " [yellow]domain mismatch[/yellow]"
        self.console.print(line)

    def deleted(self, account_id: str, dry_run: bool = False):
        if not self.verbose:
            return
        if dry_run:
            self.console.print(f"[yellow]dry run:[/yellow] would delete {account_id}")
        else:
            self.console.print(f"[green]✓[/green] deleted {account_id}")

    def failed(self, account_id: str, error: Exception):
        self.console.print(f"[red]Error:[/red] {error}")

    def summary(self, result: SweepResult):
        if self.verbose and result.decisions:
            table = Table(title="Profiles")
            table.add_column("Account", style="cyan")
            table.add_column("Verdict", style="white")
            table.add_column("Reason", style="dim")
            table.add_column("Age (days)", justify="right")

            for decision in result.decisions:
                record = self.record(decision)
                age = "" if record["age_days"] is None else str(record["age_days"])
                table.add_row(record["account_id"], record["verdict"], record["reason"] or "", age)

            self.console.print(table)

        self.console.print(f"Profiles before: {result.profiles_before}")
        self.console.print(f"Profiles after:  {result.profiles_after}")
