import subprocess
from abc import ABC, abstractmethod

from ..domain.errors import ProbeError
from .shell import command_output, run_command


class SessionProbe(ABC):
    @abstractmethod
    def has_active_session(self, account_id: str) -> bool:
        """Whether the account is logged on to this machine."""
        pass


class DomainProbe(ABC):
    @abstractmethod
    def resolves(self, account_id: str) -> bool:
        """Whether the account resolves to a known account."""
        pass


class QueryUserSessionProbe(SessionProbe):
    """
    checks logon sessions with `query user`.

    disconnected sessions count as active since their profile stays loaded.
    """

    def has_active_session(self, account_id: str) -> bool:
        try:
            result = run_command(["query", "user", account_id])
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ProbeError("session", account_id, str(e)) from e

        output = command_output(result)
        if result.returncode != 0:
            if "no user exists" in output.lower():
                return False
            raise ProbeError("session", account_id, output or f"exit code {result.returncode}")

        # first line is the column header
        for line in result.stdout.splitlines()[1:]:
            fields = line.strip().lstrip(">").split()
            if fields and fields[0].lower() == account_id.lower():
                return True
        return False


class NetUserDomainProbe(DomainProbe):
    """resolves accounts against the domain with `net user <name> /domain`."""

    NOT_FOUND_MARKERS = ("user name could not be found", "helpmsg 2221")

    def resolves(self, account_id: str) -> bool:
        try:
            result = run_command(["net", "user", account_id, "/domain"])
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ProbeError("domain", account_id, str(e)) from e

        if result.returncode == 0:
            return True

        output = command_output(result)
        if any(marker in output.lower() for marker in self.NOT_FOUND_MARKERS):
            return False
        # e.g. no reachable domain controller; not a definite answer
        raise ProbeError("domain", account_id, output or f"exit code {result.returncode}")
