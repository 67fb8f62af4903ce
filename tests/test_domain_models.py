"""test suite for domain models."""
import pytest
import sys
from datetime import datetime, timezone
from pathlib import Path
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from profilesweep.domain.models import (
    Action,
    Decision,
    MissingTimestampPolicy,
    PolicyConfig,
    Profile,
    SkipReason,
    SweepResult,
    Verdict,
)


class TestProfile:
    def test_defaults(self):
        profile = Profile(local_path="C:\\Users\\Bob")
        assert profile.is_roaming_configured is False
        assert profile.is_special is False
        assert profile.sid is None
        assert profile.last_use_time is None

    def test_account_id_derived_from_path(self):
        profile = Profile(local_path="C:\\Users\\BOB")
        assert profile.account_id == "bob"

    def test_dmtf_timestamps_normalized(self):
        profile = Profile(
            local_path="C:\\Users\\bob",
            last_use_time="20240105093000.000000+060",
        )
        assert profile.last_use_time == datetime(2024, 1, 5, 8, 30, tzinfo=timezone.utc)

    def test_naive_timestamp_rejected(self):
        with pytest.raises(ValidationError):
            Profile(local_path="C:\\Users\\bob", last_use_time=datetime(2024, 1, 5))

    def test_frozen(self):
        profile = Profile(local_path="C:\\Users\\bob")
        with pytest.raises(ValidationError):
            profile.is_special = True


class TestPolicyConfig:
    def test_defaults(self):
        policy = PolicyConfig(min_age_days=30)
        assert policy.force_mode is False
        assert policy.dry_run is False
        assert policy.safe_list == frozenset()
        assert policy.missing_timestamp == MissingTimestampPolicy.SKIP

    def test_safe_list_lowercased(self):
        policy = PolicyConfig(min_age_days=30, safe_list=["Administrator", " Public "])
        assert policy.safe_list == frozenset({"administrator", "public"})

    @pytest.mark.parametrize("age", [0, -1, True, "30"])
    def test_age_must_be_positive_int(self, age):
        with pytest.raises(ValidationError):
            PolicyConfig(min_age_days=age)


class TestVerdict:
    def test_skip(self):
        verdict = Verdict.skip(SkipReason.LOCAL)
        assert verdict.action == Action.SKIP
        assert verdict.reason == SkipReason.LOCAL
        assert not verdict.is_delete

    def test_delete(self):
        last_use = datetime(2024, 1, 1, tzinfo=timezone.utc)
        verdict = Verdict.delete(40, last_use, domain_mismatch=True)
        assert verdict.is_delete
        assert verdict.reason is None
        assert verdict.age_days == 40
        assert verdict.domain_mismatch is True

    def test_reason_values(self):
        assert SkipReason.ACTIVE_SESSION.value == "active-session"
        assert SkipReason.NO_LOGIN_DATA.value == "no-login-data"
        assert SkipReason.TOO_RECENT.value == "too-recent"


class TestSweepResult:
    def test_candidates(self):
        keep = Decision(profile=Profile(local_path="C:\\Users\\a"), verdict=Verdict.skip(SkipReason.LOCAL))
        drop = Decision(
            profile=Profile(local_path="C:\\Users\\b"),
            verdict=Verdict.delete(50, datetime(2024, 1, 1, tzinfo=timezone.utc)),
        )
        result = SweepResult(decisions=[keep, drop])
        assert result.candidates == [drop]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
