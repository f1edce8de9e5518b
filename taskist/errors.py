from typing import Optional


class TaskistError(Exception):
    """Base error carrying an HTTP status and a message that is safe to show clients."""

    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskistError):
    status_code = 400
    default_message = "Invalid request."


class AuthError(TaskistError):
    status_code = 401
    default_message = "Invalid credentials."


class NotFoundError(TaskistError):
    status_code = 404
    default_message = "Task not found."


class ConflictError(TaskistError):
    status_code = 409
    default_message = "Email already registered."


class InternalError(TaskistError):
    status_code = 500
