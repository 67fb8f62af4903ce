import subprocess
from typing import List

POWERSHELL = "powershell.exe"
DEFAULT_TIMEOUT = 120.0


def run_command(args: List[str], timeout: float = DEFAULT_TIMEOUT) -> subprocess.CompletedProcess:
    """
    run a command and capture its output as text.

    raises:
        OSError: if the executable cannot be started
        subprocess.TimeoutExpired: if the command does not finish in time
    """
    return subprocess.run(args, capture_output=True, text=True, timeout=timeout)


def run_powershell(script: str, timeout: float = DEFAULT_TIMEOUT) -> subprocess.CompletedProcess:
    """run a windows powershell script non-interactively."""
    return run_command(
        [POWERSHELL, "-NoProfile", "-NonInteractive", "-Command", script],
        timeout=timeout,
    )


def ps_quote(value: str) -> str:
    """quote a value as a powershell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def command_output(result: subprocess.CompletedProcess) -> str:
    """combined stdout and stderr of a finished command."""
    return "\n".join(part.strip() for part in (result.stdout or "", result.stderr or "") if part.strip())
