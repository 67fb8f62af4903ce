import json
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import List

from pydantic import ValidationError

from ..domain.errors import DeletionError, ProfileSourceError
from ..domain.models import Profile
from .shell import command_output, ps_quote, run_powershell

logger = logging.getLogger(__name__)

LIST_SCRIPT = (
    "Get-WmiObject -Class Win32_UserProfile | "
    "Select-Object SID, LocalPath, Special, RoamingConfigured, "
    "LastUseTime, LastDownloadTime, LastUploadTime | "
    "ConvertTo-Json -Compress"
)


class ProfileSource(ABC):
    @abstractmethod
    def list_profiles(self) -> List[Profile]:
        """Snapshot of the profiles present on the machine."""
        pass

    @abstractmethod
    def delete(self, profile: Profile) -> None:
        """Delete a profile, raising DeletionError on failure."""
        pass


class WmiProfileSource(ProfileSource):
    """reads and removes profiles through the Win32_UserProfile WMI class."""

    def list_profiles(self) -> List[Profile]:
        try:
            result = run_powershell(LIST_SCRIPT)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ProfileSourceError(f"could not run powershell: {e}") from e

        if result.returncode != 0:
            raise ProfileSourceError(f"profile enumeration failed: {command_output(result)}")

        output = result.stdout.strip()
        if not output:
            return []

        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise ProfileSourceError(f"unexpected profile listing output: {e}") from e

        # ConvertTo-Json emits a bare object when there is only one profile
        if isinstance(data, dict):
            data = [data]

        profiles = []
        for entry in data:
            local_path = entry.get("LocalPath")
            if not local_path:
                logger.debug(f"ignoring profile without a local path: {entry.get('SID')}")
                continue
            try:
                profiles.append(Profile(
                    local_path=local_path,
                    sid=entry.get("SID"),
                    is_special=bool(entry.get("Special")),
                    is_roaming_configured=bool(entry.get("RoamingConfigured")),
                    last_use_time=entry.get("LastUseTime"),
                    last_download_time=entry.get("LastDownloadTime"),
                    last_upload_time=entry.get("LastUploadTime"),
                ))
            except ValidationError as e:
                logger.warning(f"ignoring profile {local_path}: unreadable attributes ({e.error_count()} errors)")
        return profiles

    def delete(self, profile: Profile) -> None:
        if profile.sid:
            match = f"$_.SID -eq {ps_quote(profile.sid)}"
        else:
            match = f"$_.LocalPath -eq {ps_quote(profile.local_path)}"

        script = (
            f"$p = Get-WmiObject -Class Win32_UserProfile | Where-Object {{ {match} }}; "
            "if (-not $p) { throw 'profile not found' }; "
            "$p | Remove-WmiObject -ErrorAction Stop"
        )

        try:
            result = run_powershell(script)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise DeletionError(profile.account_id, str(e)) from e

        if result.returncode != 0:
            raise DeletionError(profile.account_id, command_output(result) or f"exit code {result.returncode}")
