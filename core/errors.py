"""Two-kind error taxonomy shared by use cases and the HTTP layer.

- USER: caller-correctable (missing book, invalid input) -> HTTP 400
- SYSTEM: storage/infrastructure failure -> HTTP 500

Use cases wrap every raw storage error into one of these before it leaves
the use-case boundary.
"""

from enum import Enum


class ErrorKind(str, Enum):
    USER = "USER_ERROR"
    SYSTEM = "SYSTEM_ERROR"


class AppError(Exception):
    """Categorized failure raised by use cases and the unit-of-work."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.SYSTEM):
        super().__init__(message)
        self.message = message
        self.kind = kind

    @property
    def is_user_error(self) -> bool:
        return self.kind == ErrorKind.USER

    @property
    def is_system_error(self) -> bool:
        return self.kind == ErrorKind.SYSTEM

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, kind={self.kind.value})"


class UserError(AppError):
    def __init__(self, message: str):
        super().__init__(message, ErrorKind.USER)


class InternalError(AppError):
    def __init__(self, message: str = "System Error"):
        super().__init__(message, ErrorKind.SYSTEM)


class RollbackError(AppError):
    """Rollback failed after the transaction body had already failed.

    Keeps the original failure reachable via ``original`` (and ``__cause__``)
    and inherits its category, so the root cause is never lost.
    """

    def __init__(self, rollback_error: BaseException, original: BaseException):
        kind = original.kind if isinstance(original, AppError) else ErrorKind.SYSTEM
        super().__init__(
            f"rollback failed: {rollback_error}; original error: {original}",
            kind,
        )
        self.rollback_error = rollback_error
        self.original = original
