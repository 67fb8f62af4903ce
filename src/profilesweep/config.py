from pathlib import Path
from typing import Dict, Iterable, Optional, Set, Union

from .domain.errors import ConfigError, InvalidAgeError
from .domain.models import MissingTimestampPolicy, PolicyConfig

CONFIG_DIR = Path.home() / ".profilesweep"
CONFIG_FILE = CONFIG_DIR / "config"

def read_config(config_file: Path = CONFIG_FILE) -> Dict[str, str]:
    """read KEY=VALUE pairs from the config file."""
    config = {}
    if not config_file.exists():
        return config

    try:
        with open(config_file, "r") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                config[key.strip().upper()] = value.strip()
    except (IOError, PermissionError, OSError):
        # if we can't read the file, treat as not configured
        return {}
    return config

def get_safe_list(config: Dict[str, str]) -> Set[str]:
    """accounts never to delete, from SAFE_LIST=a,b,c."""
    raw = config.get("SAFE_LIST", "")
    return {name.strip().lower() for name in raw.split(",") if name.strip()}

def get_missing_timestamp_policy(config: Dict[str, str]) -> Optional[MissingTimestampPolicy]:
    raw = config.get("MISSING_TIMESTAMP")
    if not raw:
        return None
    try:
        return MissingTimestampPolicy(raw.lower())
    except ValueError:
        choices = ", ".join(p.value for p in MissingTimestampPolicy)
        raise ConfigError(f"invalid MISSING_TIMESTAMP '{raw}' in config (expected one of: {choices})")

def parse_age(value: Union[None, int, str]) -> int:
    """
    validate the minimum age in days.

    raises:
        InvalidAgeError: if the value is missing or not a positive integer
    """
    if value is None or isinstance(value, bool):
        raise InvalidAgeError(value)

    if isinstance(value, int):
        age = value
    else:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidAgeError(value)
        age = int(text)

    if age <= 0:
        raise InvalidAgeError(value)
    return age

def build_policy(
    age: Union[None, int, str],
    force: bool = False,
    dry_run: bool = False,
    safe: Iterable[str] = (),
    missing_timestamp: Optional[MissingTimestampPolicy] = None,
    config_file: Path = CONFIG_FILE,
) -> PolicyConfig:
    """
    assemble the run policy from command-line options and the config file.

    command-line values win; the safe lists of both are merged.

    raises:
        ConfigError: if the age or config file values are invalid
    """
    min_age_days = parse_age(age)
    config = read_config(config_file)

    safe_list = get_safe_list(config) | {name.strip().lower() for name in safe if name.strip()}
    policy_choice = missing_timestamp or get_missing_timestamp_policy(config) or MissingTimestampPolicy.SKIP

    return PolicyConfig(
        min_age_days=min_age_days,
        force_mode=force,
        dry_run=dry_run,
        safe_list=safe_list,
        missing_timestamp=policy_choice,
    )
