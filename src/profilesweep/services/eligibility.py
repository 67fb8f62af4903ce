import logging
from datetime import datetime
from typing import Callable, Optional

from ..domain.errors import ProbeError
from ..domain.models import MissingTimestampPolicy, PolicyConfig, Profile, SkipReason, Verdict
from ..profiles.probes import DomainProbe, SessionProbe
from ..utils.timestamps import EPOCH, age_in_days, directory_mtime

logger = logging.getLogger(__name__)

MtimeLookup = Callable[[str], Optional[datetime]]


def detect_domain_mismatch(account_id: str, policy: PolicyConfig, domain_probe: DomainProbe) -> bool:
    """
    whether a profile's account no longer resolves as a managed account.

    only checked in force mode. a probe failure is not a mismatch; only an
    explicit "not found" answer is.
    """
    if not policy.force_mode:
        return False

    try:
        return not domain_probe.resolves(account_id)
    except ProbeError as e:
        logger.warning(f"{e}; not treating '{account_id}' as a domain mismatch")
        return False


def resolve_last_use(
    profile: Profile,
    policy: PolicyConfig,
    lookup_mtime: MtimeLookup = directory_mtime,
) -> Optional[datetime]:
    """
    best available last-use time for a profile.

    the profile directory's mtime wins, then the use, download and upload
    times reported by the source. with nothing to go on, the epoch sentinel
    is returned under the epoch policy and None otherwise.
    """
    modified = lookup_mtime(profile.local_path)
    if modified is not None:
        return modified

    for candidate in (profile.last_use_time, profile.last_download_time, profile.last_upload_time):
        if candidate is not None:
            return candidate

    if policy.missing_timestamp == MissingTimestampPolicy.EPOCH:
        return EPOCH
    return None


class EligibilityEngine:
    """decides, for each profile, whether it should be deleted."""

    def __init__(
        self,
        policy: PolicyConfig,
        session_probe: SessionProbe,
        domain_probe: DomainProbe,
        lookup_mtime: MtimeLookup = directory_mtime,
    ):
        self.policy = policy
        self.session_probe = session_probe
        self.domain_probe = domain_probe
        self.lookup_mtime = lookup_mtime

    def evaluate(self, profile: Profile, now: datetime) -> Verdict:
        """
        compute the verdict for one profile.

        rules are checked in order and the first match wins: safe-list or
        special account, roaming (or domain mismatch in force mode), active
        session, resolvable last use, and finally the age threshold.

        raises:
            ValueError: if now has no timezone
        """
        if now.tzinfo is None or now.tzinfo.utcoffset(now) is None:
            raise ValueError("now must be timezone-aware")

        account_id = profile.account_id

        if account_id in self.policy.safe_list or profile.is_special:
            return Verdict.skip(SkipReason.SPECIAL)

        mismatch = detect_domain_mismatch(account_id, self.policy, self.domain_probe)

        if not profile.is_roaming_configured and not mismatch:
            return Verdict.skip(SkipReason.LOCAL)

        if self._has_active_session(account_id):
            return Verdict.skip(SkipReason.ACTIVE_SESSION, domain_mismatch=mismatch)

        last_use = resolve_last_use(profile, self.policy, self.lookup_mtime)
        if last_use is None:
            return Verdict.skip(SkipReason.NO_LOGIN_DATA, domain_mismatch=mismatch)

        age_days = age_in_days(now, last_use)
        if age_days > self.policy.min_age_days:
            return Verdict.delete(age_days, last_use, domain_mismatch=mismatch)

        return Verdict.skip(
            SkipReason.TOO_RECENT,
            age_days=age_days,
            last_use=last_use,
            domain_mismatch=mismatch,
        )

    def _has_active_session(self, account_id: str) -> bool:
        try:
            return self.session_probe.has_active_session(account_id)
        except ProbeError as e:
            # keep the profile when we cannot tell whether it is in use
            logger.warning(f"{e}; assuming '{account_id}' is logged on")
            return True
