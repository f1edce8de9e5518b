import logging
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional

from sqlalchemy.orm import Session

from .. import security
from ..config import Settings
from ..errors import AuthError, ConflictError, ValidationError
from ..security import Identity, TokenError
from .users import UserStore, normalize_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."
INVALID_TOKEN = "Invalid or expired token."


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    # Compared against when the email is unknown so both login failures cost one bcrypt check.
    return security.hash_password("taskist-dummy-password", rounds=rounds)


class Authenticator:
    """Registers users, checks credentials and issues/verifies bearer tokens."""

    def __init__(self, settings: Settings, users: Optional[UserStore] = None):
        self.settings = settings
        self.users = users

    @classmethod
    def for_session(cls, settings: Settings, db: Session) -> "Authenticator":
        return cls(settings, UserStore(db))

    @property
    def _secret(self) -> str:
        return self.settings.jwt_secret.get_secret_value()

    def _require_users(self) -> UserStore:
        if self.users is None:
            raise RuntimeError("Authenticator has no user store bound")
        return self.users

    def issue_token(self, identity: Identity, issued_at: Optional[datetime] = None) -> str:
        return security.create_access_token(
            identity,
            self._secret,
            expires_delta=timedelta(minutes=self.settings.token_expire_minutes),
            algorithm=self.settings.jwt_algorithm,
            issued_at=issued_at,
        )

    def verify(self, token: str) -> Identity:
        try:
            return security.decode_access_token(
                token, self._secret, algorithm=self.settings.jwt_algorithm
            )
        except TokenError as exc:
            logger.info("Rejected bearer token: %s", exc)
            raise AuthError(INVALID_TOKEN) from exc

    def register(self, email: str, password: str) -> str:
        users = self._require_users()
        email = normalize_email(email)
        if not email or "@" not in email:
            raise ValidationError("Enter a valid email.")
        min_length = self.settings.password_min_length
        if len(password) < min_length:
            raise ValidationError(f"Password must be at least {min_length} characters.")
        if users.get_by_email(email):
            raise ConflictError()
        try:
            password_hash = security.hash_password(password, rounds=self.settings.bcrypt_rounds)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        user = users.create(email, password_hash)
        logger.info("Registered user %s", user.id)
        return self.issue_token(Identity(user_id=user.id, email=user.email))

    def login(self, email: str, password: str) -> str:
        users = self._require_users()
        user = users.get_by_email(email)
        try:
            if user is None:
                security.verify_password(password, _dummy_hash(self.settings.bcrypt_rounds))
                raise AuthError(INVALID_CREDENTIALS)
            if not security.verify_password(password, user.password_hash):
                raise AuthError(INVALID_CREDENTIALS)
        except ValueError as exc:
            raise AuthError(INVALID_CREDENTIALS) from exc
        return self.issue_token(Identity(user_id=user.id, email=user.email))
