from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Stored trimmed and lower-cased so the unique index is case-insensitive.
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    tasks = relationship(
        "Task", back_populates="owner", cascade="all,delete", passive_deletes=True
    )
