from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from clinic.core.errors import AuthenticationError
from clinic.core.security import TokenAuthority, get_password_hash, verify_password

SECRET = "unit-test-secret"
TTL = timedelta(hours=24)


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FrozenClock(1_700_000_000)


@pytest.fixture
def authority(clock):
    return TokenAuthority(SECRET, clock=clock)


class TestTokenAuthority:

    def test_issue_then_verify_returns_identity(self, authority):
        identity = uuid4()
        token = authority.issue(identity, TTL)
        assert authority.verify(token) == identity

    def test_expiry_is_issue_time_plus_ttl(self, authority, clock):
        token = authority.issue(uuid4(), TTL)
        claims = jwt.get_unverified_claims(token)
        assert claims["exp"] == clock.now + int(TTL.total_seconds())

    def test_valid_one_second_before_expiry(self, authority, clock):
        identity = uuid4()
        token = authority.issue(identity, TTL)
        clock.now += int(TTL.total_seconds()) - 1
        assert authority.verify(token) == identity

    def test_expired_at_exact_expiry(self, authority, clock):
        token = authority.issue(uuid4(), TTL)
        clock.now += int(TTL.total_seconds())
        with pytest.raises(AuthenticationError):
            authority.verify(token)

    def test_expired_after_expiry(self, authority, clock):
        token = authority.issue(uuid4(), TTL)
        clock.now += int(TTL.total_seconds()) + 3600
        with pytest.raises(AuthenticationError):
            authority.verify(token)

    def test_wrong_secret_rejected(self, authority, clock):
        token = TokenAuthority("another-secret", clock=clock).issue(uuid4(), TTL)
        with pytest.raises(AuthenticationError):
            authority.verify(token)

    def test_tampered_payload_rejected(self, authority):
        token = authority.issue(uuid4(), TTL)
        header, payload, signature = token.split(".")
        forged = authority.issue(uuid4(), TTL).split(".")[1]
        with pytest.raises(AuthenticationError):
            authority.verify(".".join([header, forged, signature]))

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z"])
    def test_malformed_rejected(self, authority, token):
        with pytest.raises(AuthenticationError):
            authority.verify(token)

    def test_non_uuid_subject_rejected(self, authority, clock):
        token = jwt.encode({"sub": "alice", "exp": clock.now + 60}, SECRET, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            authority.verify(token)

    def test_missing_expiry_rejected(self, authority):
        token = jwt.encode({"sub": str(uuid4())}, SECRET, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            authority.verify(token)

    def test_missing_subject_rejected(self, authority, clock):
        token = jwt.encode({"exp": clock.now + 60}, SECRET, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            authority.verify(token)

    def test_injected_clock_decides_expiry(self, clock):
        # Far from wall-clock time in both directions
        for instant in (1_000_000.0, 4_000_000_000.0):
            clock.now = instant
            authority = TokenAuthority(SECRET, clock=clock)
            identity = uuid4()
            assert authority.verify(authority.issue(identity, TTL)) == identity

    def test_fractional_issue_time_valid_until_full_ttl(self, authority, clock):
        clock.now = 1_700_000_000.9
        identity = uuid4()
        token = authority.issue(identity, timedelta(seconds=60))

        clock.now += 59.5
        assert authority.verify(token) == identity

        clock.now = jwt.get_unverified_claims(token)["exp"]
        with pytest.raises(AuthenticationError):
            authority.verify(token)

    def test_failures_share_one_message(self, authority, clock):
        expired = authority.issue(uuid4(), TTL)
        clock.now += int(TTL.total_seconds())
        details = set()
        for token in (expired, "garbage"):
            with pytest.raises(AuthenticationError) as exc_info:
                authority.verify(token)
            details.add(exc_info.value.detail)
        assert details == {"Invalid or expired token"}

    def test_newer_token_does_not_revoke_older(self, authority, clock):
        identity = uuid4()
        first = authority.issue(identity, TTL)
        clock.now += 10
        second = authority.issue(identity, TTL)
        assert authority.verify(first) == identity
        assert authority.verify(second) == identity


def test_password_hash_roundtrip():
    hashed = get_password_hash("CorrectHorse1")
    assert hashed != "CorrectHorse1"
    assert verify_password("CorrectHorse1", hashed)
    assert not verify_password("WrongHorse1", hashed)
