from .auth import Credentials, TokenResponse
from .task import SuccessResponse, TaskCreate, TaskRead, TaskUpdate

__all__ = [
    "Credentials",
    "TokenResponse",
    "TaskCreate",
    "TaskRead",
    "TaskUpdate",
    "SuccessResponse",
]
