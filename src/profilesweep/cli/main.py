import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..config import CONFIG_FILE, build_policy
from ..domain.errors import ConfigError, ProfileSourceError
from ..domain.models import MissingTimestampPolicy, PolicyConfig
from ..profiles import WmiProfileSource, QueryUserSessionProbe, NetUserDomainProbe
from ..services.eligibility import EligibilityEngine
from ..services.sweep import SweepService
from ..ui.report import Reporter

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "-help", "--help", "-?"]},
)
console = Console()


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_sweep_service(policy: PolicyConfig, verbose: bool = False) -> SweepService:
    engine = EligibilityEngine(policy, QueryUserSessionProbe(), NetUserDomainProbe())
    reporter = Reporter(console, verbose=verbose)
    return SweepService(WmiProfileSource(), engine, reporter)


@app.command()
def sweep(
    age: Optional[str] = typer.Option(
        None, "--age", "-age", "-a", metavar="DAYS",
        help="Delete roaming profiles unused for more than this many days (required)",
    ),
    debug: bool = typer.Option(False, "--debug", "-debug", "-d", help="Show a line for every profile"),
    force: bool = typer.Option(
        False, "--force", "-force", "-f",
        help="Also consider non-roaming profiles whose account no longer resolves on the domain",
    ),
    dryrun: bool = typer.Option(
        False, "--dryrun", "-dryrun", "--dry-run",
        help="Report what would be deleted without deleting anything (implies --debug)",
    ),
    safe: Optional[List[str]] = typer.Option(
        None, "--safe", "-s", help="Account to never delete (repeatable)",
    ),
    missing_timestamp: Optional[MissingTimestampPolicy] = typer.Option(
        None, "--missing-timestamp", case_sensitive=False,
        help="Profiles with no usable last-use time: 'skip' them or treat them as unused since 1970",
    ),
    config_file: Path = typer.Option(CONFIG_FILE, "--config", help="Path to the config file"),
):
    """
    remove roaming user profiles that have not been used for a given number of days.

    must be run with administrative privileges.
    """
    verbose = debug or dryrun
    configure_logging(verbose)

    try:
        policy = build_policy(
            age,
            force=force,
            dry_run=dryrun,
            safe=safe or [],
            missing_timestamp=missing_timestamp,
            config_file=config_file,
        )
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    service = get_sweep_service(policy, verbose=verbose)

    try:
        result = service.run()
    except ProfileSourceError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if result.dry_run and result.candidates:
        console.print(f"[dim]Dry run: {len(result.candidates)} profile(s) would be deleted.[/dim]")


if __name__ == "__main__":
    app()
