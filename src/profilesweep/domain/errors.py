from typing import Any

class SweepError(Exception):
    """base class for exceptions in profilesweep."""
    pass

class ConfigError(SweepError):
    """raised when the run configuration is invalid."""
    pass

class InvalidAgeError(ConfigError):
    """raised when the minimum age is missing or not a positive integer."""
    def __init__(self, value: Any):
        self.value = value
        if value is None:
            message = "an age in days is required (-a <days>)"
        else:
            message = f"invalid age '{value}': expected a positive number of days"
        super().__init__(message)

class ProfileSourceError(SweepError):
    """raised when profiles cannot be enumerated at all."""
    pass

class ProbeError(SweepError):
    """raised when a session or domain probe cannot give a definite answer."""
    def __init__(self, probe: str, account_id: str, detail: str):
        self.probe = probe
        self.account_id = account_id
        self.detail = detail
        super().__init__(f"{probe} probe failed for '{account_id}': {detail}")

class DeletionError(SweepError):
    """raised when a single profile could not be deleted."""
    def __init__(self, account_id: str, detail: str):
        self.account_id = account_id
        self.detail = detail
        super().__init__(f"could not delete profile '{account_id}': {detail}")
