from enum import Enum
from datetime import datetime
from typing import FrozenSet, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.timestamps import account_id_from_path, normalize_timestamp


class Action(str, Enum):
    DELETE = "delete"
    SKIP = "skip"


class SkipReason(str, Enum):
    SPECIAL = "special"
    LOCAL = "local"
    ACTIVE_SESSION = "active-session"
    NO_LOGIN_DATA = "no-login-data"
    TOO_RECENT = "too-recent"


class MissingTimestampPolicy(str, Enum):
    """what to do with a profile whose last use cannot be determined."""
    SKIP = "skip"
    EPOCH = "epoch"


class Profile(BaseModel):
    """one user account's local profile, as reported by the profile source."""
    model_config = ConfigDict(frozen=True)

    local_path: str
    is_roaming_configured: bool = False
    is_special: bool = False
    sid: Optional[str] = None
    last_use_time: Optional[datetime] = None
    last_download_time: Optional[datetime] = None
    last_upload_time: Optional[datetime] = None

    @field_validator("last_use_time", "last_download_time", "last_upload_time", mode="before")
    @classmethod
    def _normalize_timestamps(cls, value):
        return normalize_timestamp(value)

    @property
    def account_id(self) -> str:
        return account_id_from_path(self.local_path)


class PolicyConfig(BaseModel):
    """immutable settings for a single run."""
    model_config = ConfigDict(frozen=True)

    min_age_days: int = Field(gt=0, strict=True)
    force_mode: bool = False
    dry_run: bool = False
    safe_list: FrozenSet[str] = frozenset()
    missing_timestamp: MissingTimestampPolicy = MissingTimestampPolicy.SKIP

    @field_validator("safe_list", mode="before")
    @classmethod
    def _lowercase_safe_list(cls, value):
        return frozenset(str(name).strip().lower() for name in value if str(name).strip())


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: Action
    reason: Optional[SkipReason] = None
    age_days: Optional[int] = None
    last_use: Optional[datetime] = None
    domain_mismatch: bool = False

    @classmethod
    def skip(cls, reason: SkipReason, **details) -> "Verdict":
        return cls(action=Action.SKIP, reason=reason, **details)

    @classmethod
    def delete(cls, age_days: int, last_use: datetime, domain_mismatch: bool = False) -> "Verdict":
        return cls(
            action=Action.DELETE,
            age_days=age_days,
            last_use=last_use,
            domain_mismatch=domain_mismatch,
        )

    @property
    def is_delete(self) -> bool:
        return self.action == Action.DELETE


class Decision(BaseModel):
    """a profile paired with the verdict computed for it."""
    profile: Profile
    verdict: Verdict


class SweepResult(BaseModel):
    decisions: List[Decision] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    failed: List[Tuple[str, str]] = Field(default_factory=list)
    profiles_before: int = 0
    profiles_after: int = 0
    dry_run: bool = False

    @property
    def candidates(self) -> List[Decision]:
        return [d for d in self.decisions if d.verdict.is_delete]
