from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

_BCRYPT_MAX_BYTES = 72
_MAX_PASSWORD_CHARS = 64


@dataclass(frozen=True)
class Identity:
    """The caller a verified bearer token speaks for."""

    user_id: int
    email: str


class TokenError(Exception):
    """Raised when a bearer token cannot be trusted."""


def _prepare_password_bytes(password: str) -> bytes:
    if len(password) > _MAX_PASSWORD_CHARS:
        raise ValueError(f"Password must be at most {_MAX_PASSWORD_CHARS} characters.")
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > _BCRYPT_MAX_BYTES:
        raise ValueError("Password exceeds bcrypt 72-byte limit.")
    return password_bytes


def hash_password(password: str, rounds: int = 10) -> str:
    password_bytes = _prepare_password_bytes(password)
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    password_bytes = _prepare_password_bytes(password)
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError as exc:
        raise ValueError("Invalid stored password hash") from exc


def create_access_token(
    identity: Identity,
    secret: str,
    *,
    expires_delta: timedelta,
    algorithm: str = "HS256",
    issued_at: Optional[datetime] = None,
) -> str:
    issued = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": str(identity.user_id),
        "email": identity.email,
        "iat": int(issued.timestamp()),
        "exp": int((issued + expires_delta).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, *, algorithm: str = "HS256") -> Identity:
    """Check signature and expiry, then unpack the identity claims."""

    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm], options={"require_exp": True})
    except ExpiredSignatureError as exc:
        raise TokenError("Token expired") from exc
    except JWTError as exc:
        raise TokenError("Bad token") from exc

    subject = payload.get("sub")
    email = payload.get("email")
    if not isinstance(subject, str) or not subject.isdigit() or not isinstance(email, str):
        raise TokenError("Malformed token payload")
    return Identity(user_id=int(subject), email=email)
