import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError
from ..models import User

logger = logging.getLogger(__name__)


def normalize_email(value: str) -> str:
    return value.strip().lower()


class UserStore:
    """Credential records keyed by normalized email."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.email == normalize_email(email))).first()

    def create(self, email: str, password_hash: str) -> User:
        user = User(email=normalize_email(email), password_hash=password_hash)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Two registrations racing past the existence check.
            self.db.rollback()
            logger.warning("Duplicate email detected during signup", exc_info=exc)
            raise ConflictError() from exc
        self.db.refresh(user)
        return user
