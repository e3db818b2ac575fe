from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest

from advisory.core.config import AuthSettings
from advisory.core.exceptions import AuthenticationError
from advisory.core.security import (
    REFRESH_TOKEN,
    SecurityProvider,
    TokenBlacklist,
    hash_password,
    verify_password,
)
from advisory.domain.roles import Role

SECRET = "unit-test-secret-key-that-is-long-enough"


def _settings(**overrides) -> AuthSettings:
    values = {
        "secret_key": SECRET,
        "algorithm": "HS256",
        "access_token_expire_minutes": 15,
        "refresh_token_expire_minutes": 60,
    }
    values.update(overrides)
    return AuthSettings(**values)


def _account(email: str = "jane@example.com", role: Role = Role.CLIENT, user_id: int = 5) -> SimpleNamespace:
    return SimpleNamespace(email=email, role=role, id=user_id)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_password_hashing_round_trip() -> None:
    hashed = hash_password("Secure#Pass42")

    assert hashed != "Secure#Pass42"
    assert verify_password("Secure#Pass42", hashed)
    assert not verify_password("Secure#Pass43", hashed)
    assert not verify_password("Secure#Pass42", None)
    assert not verify_password("Secure#Pass42", "not-a-bcrypt-hash")


def test_token_pair_carries_claims() -> None:
    provider = SecurityProvider(_settings())

    pair = provider.create_token_pair(_account())
    principal = provider.decode_token(pair.access_token)

    assert pair.token_type == "Bearer"
    assert pair.expires_in == 15 * 60
    assert principal.email == "jane@example.com"
    assert principal.role is Role.CLIENT
    assert principal.user_id == 5
    assert principal.expires_at is not None and principal.expires_at.tzinfo is None


def test_token_type_is_enforced() -> None:
    provider = SecurityProvider(_settings())
    pair = provider.create_token_pair(_account())

    with pytest.raises(AuthenticationError, match="Invalid token type"):
        provider.decode_token(pair.refresh_token)

    assert provider.decode_token(pair.refresh_token, REFRESH_TOKEN).email == "jane@example.com"


def test_expired_and_tampered_tokens_are_rejected() -> None:
    provider = SecurityProvider(_settings())
    past = datetime.now(tz=timezone.utc) - timedelta(hours=1)
    expired = jwt.encode(
        {"sub": "jane@example.com", "role": "CLIENT", "type": "access", "iat": int(past.timestamp()), "exp": int(past.timestamp()) + 60},
        SECRET,
        algorithm="HS256",
    )
    foreign = SecurityProvider(_settings(secret_key="another-secret-key-entirely-000000")).create_access_token(_account())

    with pytest.raises(AuthenticationError, match="Token expired"):
        provider.decode_token(expired)
    with pytest.raises(AuthenticationError, match="Invalid token"):
        provider.decode_token(foreign)
    with pytest.raises(AuthenticationError, match="Invalid token"):
        provider.decode_token("garbage")


def test_blacklisted_token_is_revoked() -> None:
    provider = SecurityProvider(_settings())
    token = provider.create_access_token(_account())

    provider.blacklist.blacklist(token)

    with pytest.raises(AuthenticationError, match="Token has been revoked"):
        provider.decode_token(token)


def test_blacklist_entries_expire() -> None:
    clock = FakeClock()
    blacklist = TokenBlacklist(ttl_seconds=60, clock=clock)

    blacklist.blacklist("abc")
    blacklist.blacklist("")

    assert blacklist.is_blacklisted("abc")
    assert not blacklist.is_blacklisted("")
    assert blacklist.size() == 1

    clock.now += 61

    assert not blacklist.is_blacklisted("abc")
    assert blacklist.size() == 0


def test_user_revocation_only_hits_older_tokens() -> None:
    clock = FakeClock(1_700_000_000.5)
    blacklist = TokenBlacklist(ttl_seconds=60, clock=clock)

    blacklist.blacklist_user("jane@example.com")

    assert blacklist.is_user_token_revoked("jane@example.com", 1_699_999_999)
    assert not blacklist.is_user_token_revoked("jane@example.com", 1_700_000_000)
    assert not blacklist.is_user_token_revoked("other@example.com", 1_699_999_999)
    assert not blacklist.is_user_token_revoked("jane@example.com", None)


def test_blacklist_cleanup_and_clear() -> None:
    clock = FakeClock()
    blacklist = TokenBlacklist(ttl_seconds=10, clock=clock)
    blacklist.blacklist("one")
    blacklist.blacklist_user("jane@example.com")
    clock.now += 5
    blacklist.blacklist("two")

    clock.now += 6

    assert blacklist.cleanup() == 2
    assert blacklist.size() == 1

    blacklist.clear()
    assert blacklist.size() == 0


def test_default_admin_user_uses_bootstrap_email() -> None:
    provider = SecurityProvider(_settings(bootstrap_admin_email="root@example.com", enabled=False))

    principal = provider.default_admin_user()

    assert not provider.is_enabled
    assert principal.email == "root@example.com"
    assert principal.role is Role.ADMIN
    assert SecurityProvider(_settings()).default_admin_user().email == "admin@localhost"
