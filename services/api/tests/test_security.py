from datetime import datetime, timedelta, timezone

import jwt
import pytest

from portal_api.core.config import get_settings
from portal_api.core.errors import (
    InvalidTokenError,
    MissingUserIdError,
    PasswordTooShortError,
    TokenExpiredError,
    UnauthorizedError,
)
from portal_api.core.security import TokenSigner, extract_bearer_token
from portal_api.services.local_auth import hash_password, verify_password

SECRET = "unit-test-secret-key-at-least-32-bytes"


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    monkeypatch.setenv("PORTAL_AUTH_PASSWORD_HASH_ITERATIONS", "1000")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _signer(**overrides) -> TokenSigner:
    options = {
        "secret": SECRET,
        "issuer": "portal-data-backend",
        "access_ttl": timedelta(minutes=15),
        "refresh_ttl": timedelta(days=7),
    }
    options.update(overrides)
    return TokenSigner(**options)


@pytest.mark.parametrize("password", ["password123", "12345678", "长度足够的中文口令八位"])
def test_password_hash_round_trip(password):
    password_hash = hash_password(password)

    assert password_hash.startswith("pbkdf2_sha256$1000$")
    assert verify_password(password, password_hash)
    assert not verify_password(password + "x", password_hash)


def test_password_hash_uses_random_salt():
    assert hash_password("password123") != hash_password("password123")


@pytest.mark.parametrize("password", ["", "short", "1234567"])
def test_short_password_is_rejected(password):
    with pytest.raises(PasswordTooShortError):
        hash_password(password)


@pytest.mark.parametrize("password_hash", ["", "plain-text", "md5$1$abc$def", "pbkdf2_sha256$x$abc$def"])
def test_verify_password_rejects_malformed_hash(password_hash):
    assert verify_password("password123", password_hash) is False


def test_issue_pair_returns_distinct_verifiable_tokens():
    signer = _signer()

    tokens = signer.issue_pair("user-1", "O1", "R1", "a@x")

    assert tokens.access_token != tokens.refresh_token
    assert tokens.token_type == "Bearer"
    assert tokens.expires_in == 900
    access = signer.verify(tokens.access_token)
    refresh = signer.verify(tokens.refresh_token)
    assert access.user_id == refresh.user_id == "user-1"
    assert access.organization_id == "O1"
    assert access.role_id == "R1"
    assert access.email == "a@x"
    assert refresh.expires_at - access.expires_at == timedelta(days=7) - timedelta(minutes=15)


def test_pairs_issued_back_to_back_never_collide():
    signer = _signer()

    first = signer.issue_pair("user-1", "O1", "R1", "a@x")
    second = signer.issue_pair("user-1", "O1", "R1", "a@x")

    assert first.access_token != second.access_token
    assert first.refresh_token != second.refresh_token


def test_issue_pair_requires_user_id():
    with pytest.raises(MissingUserIdError):
        _signer().issue_pair("", "O1", "R1", "a@x")


def test_verify_rejects_foreign_algorithm_and_secret():
    signer = _signer()
    now = datetime.now(timezone.utc)
    claims = {
        "user_id": "user-1",
        "sub": "user-1",
        "iss": "portal-data-backend",
        "iat": now,
        "exp": now + timedelta(minutes=5),
    }

    hs512 = jwt.encode(claims, SECRET, algorithm="HS512")
    unsigned = jwt.encode(claims, None, algorithm="none")
    other_secret = jwt.encode(claims, "another-secret-key-at-least-32-bytes", algorithm="HS256")

    for token in (hs512, unsigned, other_secret):
        with pytest.raises(InvalidTokenError):
            signer.verify(token)


def test_verify_rejects_wrong_issuer():
    token = _signer(issuer="someone-else").issue_pair("user-1", "O1", "R1", "a@x").access_token

    with pytest.raises(InvalidTokenError):
        _signer().verify(token)


def test_verify_reports_expired_token():
    signer = _signer(access_ttl=timedelta(seconds=-5))
    token = signer.issue_pair("user-1", "O1", "R1", "a@x").access_token

    with pytest.raises(TokenExpiredError):
        signer.verify(token)


def test_verify_rejects_token_without_user_id():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "user-1", "iss": "portal-data-backend", "iat": now, "exp": now + timedelta(minutes=5)},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        _signer().verify(token)


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    with pytest.raises(UnauthorizedError, match="Authorization header required"):
        extract_bearer_token(None)
    with pytest.raises(UnauthorizedError, match="Invalid authorization header format"):
        extract_bearer_token("Basic abc")
