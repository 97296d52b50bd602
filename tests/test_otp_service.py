from datetime import datetime, timedelta
from typing import List, Optional

import pytest

from salonflow.application.ports.identity_provider import AuthSession, IdentityProvider
from salonflow.application.ports.otp_repo import OtpRecordDto, OtpRepository
from salonflow.application.ports.sms_gateway import SmsGateway
from salonflow.application.services.otp_service import OtpPolicy, OtpService
from salonflow.exceptions import (
    DeliveryError,
    InvalidCode,
    NotFoundOrExpired,
    RateLimited,
    SessionError,
    TooManyAttempts,
    ValidationError,
)

T0 = datetime(2025, 3, 7, 10, 0, 0)


class FakeClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeOtpRepo(OtpRepository):
    def __init__(self):
        self.records: List[OtpRecordDto] = []
        self.active = {}

    def get_active(self, phone: str, now: datetime) -> Optional[OtpRecordDto]:
        rec = self.active.get(phone)
        if rec and not rec.verified and rec.expires_at > now:
            return rec
        return None

    def get_latest_verified(self, phone: str, now: datetime) -> Optional[OtpRecordDto]:
        mine = [r for r in self.records if r.phone == phone and r.expires_at > now]
        if mine and mine[-1].verified:
            return mine[-1]
        return None

    def insert_active(self, phone: str, otp: str, created_at: datetime, expires_at: datetime) -> OtpRecordDto:
        rec = OtpRecordDto(
            id=f"otp-{len(self.records) + 1}",
            phone=phone,
            otp=otp,
            created_at=created_at,
            expires_at=expires_at,
            verified=False,
            attempts=0,
        )
        self.records.append(rec)
        self.active[phone] = rec
        return rec

    def _find(self, record_id: str) -> OtpRecordDto:
        return next(r for r in self.records if r.id == record_id)

    def increment_attempts(self, record_id: str) -> int:
        rec = self._find(record_id)
        rec.attempts += 1
        return rec.attempts

    def mark_verified(self, record_id: str) -> None:
        rec = self._find(record_id)
        rec.verified = True
        self.active.pop(rec.phone, None)


class FakeSms(SmsGateway):
    def __init__(self, configured: bool = True, fail: bool = False):
        self.configured = configured
        self.fail = fail
        self.sent = []

    def is_configured(self) -> bool:
        return self.configured

    def send(self, phone: str, message: str) -> None:
        if self.fail:
            raise DeliveryError()
        self.sent.append((phone, message))


class FakeIdentity(IdentityProvider):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def resolve_session(self, phone: str) -> AuthSession:
        self.calls.append(phone)
        if self.fail:
            raise RuntimeError("identity backend down")
        return AuthSession(
            access_token="access",
            refresh_token="refresh",
            expires_at=2_000_000_000,
            user_id=f"user-{phone}",
            phone=phone,
        )


def make_service(sms=None, identity=None, expose_debug_code=False, clock=None):
    repo = FakeOtpRepo()
    clock = clock or FakeClock()
    svc = OtpService(
        otp_repo=repo,
        sms_gateway=sms or FakeSms(),
        identity_provider=identity or FakeIdentity(),
        policy=OtpPolicy(),
        expose_debug_code=expose_debug_code,
        clock=clock,
    )
    return svc, repo, clock


def test_issue_sends_code_to_normalized_phone():
    sms = FakeSms()
    svc, repo, _ = make_service(sms=sms)
    result = svc.issue("0771234567")

    assert result.delivered is True
    assert result.debug_code is None
    assert result.phone == "94771234567"
    assert result.expires_at == T0 + timedelta(minutes=5)
    phone, message = sms.sent[0]
    assert phone == "94771234567"
    assert repo.records[0].otp in message
    assert "Valid for 5 minutes" in message


def test_issue_requires_phone():
    svc, _, _ = make_service()
    with pytest.raises(ValidationError) as exc:
        svc.issue("")
    assert exc.value.message == "Phone number is required"


def test_second_issue_within_cooldown_is_rate_limited():
    svc, repo, clock = make_service()
    svc.issue("0771234567")
    clock.advance(30)

    with pytest.raises(RateLimited):
        svc.issue("771234567")
    assert len(repo.records) == 1


def test_issue_after_cooldown_supersedes_previous_code():
    svc, repo, clock = make_service()
    svc.issue("0771234567")
    clock.advance(61)
    svc.issue("0771234567")

    assert len(repo.records) == 2
    assert repo.get_active("94771234567", clock()).id == repo.records[1].id


def test_unconfigured_gateway_returns_debug_code_outside_production():
    svc, repo, _ = make_service(sms=FakeSms(configured=False), expose_debug_code=True)
    result = svc.issue("0771234567")

    assert result.delivered is False
    assert result.debug_code == repo.records[0].otp


def test_unconfigured_gateway_hides_code_in_production():
    svc, repo, _ = make_service(sms=FakeSms(configured=False), expose_debug_code=False)
    result = svc.issue("0771234567")

    assert result.delivered is False
    assert result.debug_code is None
    assert len(repo.records) == 1


def test_delivery_failure_is_reported():
    svc, repo, _ = make_service(sms=FakeSms(fail=True))
    with pytest.raises(DeliveryError):
        svc.issue("0771234567")
    assert len(repo.records) == 1


def test_verify_correct_code_returns_session_for_normalized_phone():
    identity = FakeIdentity()
    svc, repo, _ = make_service(identity=identity)
    svc.issue("0771234567")
    code = repo.records[0].otp

    session = svc.verify("0771234567", code)

    assert session.phone == "94771234567"
    assert repo.records[0].verified is True
    assert repo.records[0].attempts == 1
    assert identity.calls == ["94771234567"]


def test_wrong_code_consumes_exactly_one_attempt():
    svc, repo, _ = make_service()
    svc.issue("0771234567")
    wrong = "000000" if repo.records[0].otp != "000000" else "111111"

    with pytest.raises(InvalidCode):
        svc.verify("0771234567", wrong)
    assert repo.records[0].attempts == 1
    assert repo.records[0].verified is False


def test_locked_after_max_attempts_even_with_correct_code():
    svc, repo, _ = make_service()
    svc.issue("0771234567")
    repo.records[0].attempts = 3

    with pytest.raises(TooManyAttempts):
        svc.verify("0771234567", repo.records[0].otp)
    assert repo.records[0].attempts == 3
    assert repo.records[0].verified is False


def test_expired_code_is_rejected():
    svc, repo, clock = make_service()
    svc.issue("0771234567")
    clock.advance(5 * 60 + 1)

    with pytest.raises(NotFoundOrExpired):
        svc.verify("0771234567", repo.records[0].otp)


def test_verify_without_issue_is_rejected():
    svc, _, _ = make_service()
    with pytest.raises(NotFoundOrExpired):
        svc.verify("0771234567", "123456")


def test_session_failure_keeps_verification_and_can_be_retried():
    identity = FakeIdentity(fail=True)
    svc, repo, _ = make_service(identity=identity)
    svc.issue("0771234567")
    code = repo.records[0].otp

    with pytest.raises(SessionError):
        svc.verify("0771234567", code)
    assert repo.records[0].verified is True

    identity.fail = False
    session = svc.retry_session("0771234567", code)
    assert session.user_id == "user-94771234567"
    assert repo.records[0].attempts == 2


def test_retry_session_requires_a_verified_code():
    svc, repo, _ = make_service()
    svc.issue("0771234567")
    with pytest.raises(NotFoundOrExpired):
        svc.retry_session("0771234567", repo.records[0].otp)


def test_retry_session_requires_the_code():
    identity = FakeIdentity()
    svc, repo, _ = make_service(identity=identity)
    svc.issue("0771234567")
    svc.verify("0771234567", repo.records[0].otp)

    with pytest.raises(ValidationError):
        svc.retry_session("0771234567", None)
    assert identity.calls == ["94771234567"]


def test_retry_session_with_wrong_code_consumes_attempts_until_locked():
    identity = FakeIdentity()
    svc, repo, _ = make_service(identity=identity)
    svc.issue("0771234567")
    code = repo.records[0].otp
    svc.verify("0771234567", code)
    wrong = "000000" if code != "000000" else "111111"

    for _ in range(2):
        with pytest.raises(InvalidCode):
            svc.retry_session("0771234567", wrong)
    assert repo.records[0].attempts == 3

    with pytest.raises(TooManyAttempts):
        svc.retry_session("0771234567", code)
    assert identity.calls == ["94771234567"]


def test_retry_session_rejects_superseded_code():
    svc, repo, clock = make_service()
    svc.issue("0771234567")
    old_code = repo.records[0].otp
    svc.verify("0771234567", old_code)
    clock.advance(61)
    svc.issue("0771234567")

    with pytest.raises(NotFoundOrExpired):
        svc.retry_session("0771234567", old_code)


class RecordingAudit:
    def __init__(self):
        self.events = []

    def log(self, action, phone, user_id=None, success=True, details=None):
        self.events.append((action, phone, success))


def test_audit_trail_for_issue_and_verify():
    audit = RecordingAudit()
    svc, repo, _ = make_service()
    svc.audit = audit
    svc.issue("0771234567")
    svc.verify("0771234567", repo.records[0].otp)

    assert [e[0] for e in audit.events] == ["otp_sent", "otp_verified", "session_created"]
    assert all(e[1] == "94771234567" and e[2] for e in audit.events)


def test_std_audit_logger_hashes_phone(caplog):
    from salonflow.infrastructure.audit.std_logger import StdAuditLogger

    with caplog.at_level("INFO", logger="salonflow.audit"):
        StdAuditLogger().log("otp_sent", "94771234567", details={"delivered": True})

    assert "AUDIT:" in caplog.text
    assert "94771234567" not in caplog.text
