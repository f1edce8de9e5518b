# tests/test_security.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from taskist import security
from taskist.config import Settings
from taskist.errors import AuthError
from taskist.security import Identity, TokenError
from taskist.services.auth import INVALID_TOKEN, Authenticator


def test_hash_and_verify_password() -> None:
    hashed = security.hash_password("hunter22", rounds=4)
    assert hashed != "hunter22"
    assert hashed.startswith("$2")
    assert security.verify_password("hunter22", hashed)
    assert not security.verify_password("hunter23", hashed)


def test_hash_rejects_passwords_over_bcrypt_limits() -> None:
    with pytest.raises(ValueError):
        security.hash_password("x" * 65, rounds=4)
    # 30 characters but 90 bytes in UTF-8.
    with pytest.raises(ValueError):
        security.hash_password("€" * 30, rounds=4)


def test_token_round_trip_carries_identity() -> None:
    identity = Identity(user_id=7, email="a@example.com")
    token = security.create_access_token(identity, "s3cret", expires_delta=timedelta(hours=2))

    assert security.decode_access_token(token, "s3cret") == identity

    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "7"
    assert claims["exp"] - claims["iat"] == 2 * 60 * 60


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = security.create_access_token(
        Identity(user_id=1, email="a@example.com"), "one", expires_delta=timedelta(hours=2)
    )
    with pytest.raises(TokenError):
        security.decode_access_token(token, "two")


def test_token_without_identity_claims_is_rejected() -> None:
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "not-a-number", "exp": int((now + timedelta(hours=1)).timestamp())},
        "s3cret",
        algorithm="HS256",
    )
    with pytest.raises(TokenError):
        security.decode_access_token(token, "s3cret")


def test_token_expires_two_hours_after_issue(settings: Settings) -> None:
    auth = Authenticator(settings)
    identity = Identity(user_id=3, email="c@example.com")
    now = datetime.now(timezone.utc)

    still_valid = auth.issue_token(identity, issued_at=now - timedelta(hours=2) + timedelta(minutes=1))
    assert auth.verify(still_valid) == identity

    expired = auth.issue_token(identity, issued_at=now - timedelta(hours=2, seconds=1))
    with pytest.raises(AuthError) as excinfo:
        auth.verify(expired)
    assert excinfo.value.message == INVALID_TOKEN


def test_tampered_token_is_rejected(settings: Settings) -> None:
    auth = Authenticator(settings)
    token = auth.issue_token(Identity(user_id=3, email="c@example.com"))
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    with pytest.raises(AuthError):
        auth.verify(tampered)
    with pytest.raises(AuthError):
        auth.verify("garbage")
