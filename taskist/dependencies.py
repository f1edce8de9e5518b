from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .config import Settings
from .db import Database
from .errors import AuthError
from .security import Identity
from .services.auth import Authenticator
from .services.tasks import TaskStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    db = database.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_authenticator(
    settings: Settings = Depends(get_app_settings), db: Session = Depends(get_db)
) -> Authenticator:
    return Authenticator.for_session(settings, db)


def get_current_identity(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> Identity:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise AuthError("Missing token.")
    # Verification is signature + expiry only; no database round trip.
    return Authenticator(settings).verify(token.strip())


def get_task_store(db: Session = Depends(get_db)) -> TaskStore:
    return TaskStore(db)
