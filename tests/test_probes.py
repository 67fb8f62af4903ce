"""Test suite for the session and domain probes."""
import pytest
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from profilesweep.domain.errors import ProbeError
from profilesweep.profiles.probes import NetUserDomainProbe, QueryUserSessionProbe


def completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


QUERY_USER_OUTPUT = (
    " USERNAME              SESSIONNAME        ID  STATE   IDLE TIME  LOGON TIME\n"
    ">bob                   console             1  Active      none   6/1/2024 8:02 AM\n"
)

QUERY_USER_DISCONNECTED = (
    " USERNAME              SESSIONNAME        ID  STATE   IDLE TIME  LOGON TIME\n"
    " carol                                     3  Disc         1:05  6/1/2024 7:40 AM\n"
)


class TestQueryUserSessionProbe:
    @pytest.fixture
    def run_command(self):
        with patch("profilesweep.profiles.probes.run_command") as mock_run:
            yield mock_run

    def test_active_session(self, run_command):
        run_command.return_value = completed(QUERY_USER_OUTPUT)
        assert QueryUserSessionProbe().has_active_session("bob") is True
        run_command.assert_called_once_with(["query", "user", "bob"])

    def test_disconnected_session_counts(self, run_command):
        run_command.return_value = completed(QUERY_USER_DISCONNECTED)
        assert QueryUserSessionProbe().has_active_session("carol") is True

    def test_no_session(self, run_command):
        run_command.return_value = completed(stderr="No User exists for dave\n", returncode=1)
        assert QueryUserSessionProbe().has_active_session("dave") is False

    def test_other_user_listed(self, run_command):
        run_command.return_value = completed(QUERY_USER_OUTPUT)
        assert QueryUserSessionProbe().has_active_session("alice") is False

    def test_missing_tool(self, run_command):
        run_command.side_effect = FileNotFoundError("query")
        with pytest.raises(ProbeError):
            QueryUserSessionProbe().has_active_session("bob")

    def test_unexpected_failure(self, run_command):
        run_command.return_value = completed(stderr="Error 5 getting session names", returncode=1)
        with pytest.raises(ProbeError, match="session probe failed"):
            QueryUserSessionProbe().has_active_session("bob")


class TestNetUserDomainProbe:
    @pytest.fixture
    def run_command(self):
        with patch("profilesweep.profiles.probes.run_command") as mock_run:
            yield mock_run

    def test_resolves(self, run_command):
        run_command.return_value = completed("User name                    bob\n")
        assert NetUserDomainProbe().resolves("bob") is True
        run_command.assert_called_once_with(["net", "user", "bob", "/domain"])

    def test_not_found(self, run_command):
        run_command.return_value = completed(
            stderr="The user name could not be found.\n\nMore help is available by typing NET HELPMSG 2221.\n",
            returncode=2,
        )
        assert NetUserDomainProbe().resolves("bob.old") is False

    def test_ambiguous_failure(self, run_command):
        run_command.return_value = completed(
            stderr="System error 1355 has occurred.\n\nThe specified domain either does not exist or could not be contacted.\n",
            returncode=2,
        )
        with pytest.raises(ProbeError, match="domain probe failed"):
            NetUserDomainProbe().resolves("bob")

    def test_timeout(self, run_command):
        run_command.side_effect = subprocess.TimeoutExpired(cmd="net", timeout=120)
        with pytest.raises(ProbeError):
            NetUserDomainProbe().resolves("bob")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
