from sqlalchemy import Boolean, Column, Date, Enum, ForeignKey, Integer, Text, false
from sqlalchemy.orm import relationship

from ..enums import TaskPriority, TaskStatus
from .base import Base, TimestampMixin


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Task(TimestampMixin, Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    owner_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False, server_default=false())
    priority = Column(
        Enum(TaskPriority, native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
        default=TaskPriority.MEDIUM,
        server_default=TaskPriority.MEDIUM.value,
    )
    status = Column(
        Enum(TaskStatus, native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
        default=TaskStatus.TODO,
        server_default=TaskStatus.TODO.value,
    )
    due_date = Column(Date, nullable=True)

    owner = relationship("User", back_populates="tasks")
