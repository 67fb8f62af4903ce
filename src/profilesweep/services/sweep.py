import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from ..domain.errors import DeletionError, ProfileSourceError
from ..domain.models import Decision, Profile, SweepResult
from ..profiles.source import ProfileSource
from ..ui.report import Reporter
from .eligibility import EligibilityEngine

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SweepService:
    """plans and carries out the removal of stale profiles."""

    def __init__(
        self,
        source: ProfileSource,
        engine: EligibilityEngine,
        reporter: Reporter,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.source = source
        self.engine = engine
        self.reporter = reporter
        self.clock = clock or utc_now

    @property
    def dry_run(self) -> bool:
        return self.engine.policy.dry_run

    def plan(self, profiles: List[Profile], now: datetime) -> List[Decision]:
        """evaluate every profile, in source order, without touching any of them."""
        return [
            Decision(profile=profile, verdict=self.engine.evaluate(profile, now))
            for profile in profiles
        ]

    def execute(self, decisions: List[Decision]) -> Tuple[List[str], List[Tuple[str, str]]]:
        """
        delete the profiles whose verdict is delete.

        a failed deletion is reported and recorded; the remaining profiles are
        still processed. nothing is deleted in dry-run mode.

        returns:
            (account ids deleted, (account id, error message) per failure)
        """
        deleted = []
        failed = []

        for decision in decisions:
            if not decision.verdict.is_delete:
                continue

            account_id = decision.profile.account_id
            if self.dry_run:
                self.reporter.deleted(account_id, dry_run=True)
                continue

            try:
                self.source.delete(decision.profile)
            except DeletionError as e:
                self.reporter.failed(account_id, e)
                failed.append((account_id, str(e)))
                continue

            self.reporter.deleted(account_id)
            deleted.append(account_id)

        return deleted, failed

    def run(self) -> SweepResult:
        """
        run a full sweep: list, plan, execute, list again.

        raises:
            ProfileSourceError: if profiles cannot be enumerated before the sweep
        """
        profiles = self.source.list_profiles()
        decisions = self.plan(profiles, self.clock())
        for decision in decisions:
            self.reporter.decision(decision)

        deleted, failed = self.execute(decisions)

        # the second listing only feeds the summary; deletions already happened
        try:
            profiles_after = len(self.source.list_profiles())
        except ProfileSourceError as e:
            logger.warning(f"could not list profiles after the sweep: {e}")
            profiles_after = len(profiles) - len(deleted)

        result = SweepResult(
            decisions=decisions,
            deleted=deleted,
            failed=failed,
            profiles_before=len(profiles),
            profiles_after=profiles_after,
            dry_run=self.dry_run,
        )
        self.reporter.summary(result)
        return result
