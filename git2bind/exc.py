"""Binding layer for libgit2 - Exceptions"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Classes of failures reported by libgit2 which callers can act upon."""

    GENERIC = "generic"
    NOT_FOUND = "not-found"
    EXISTS = "exists"
    AMBIGUOUS = "ambiguous"
    BUFFER_TOO_SMALL = "buffer-too-small"
    USER_CANCELLED = "user-cancelled"
    UNMERGED = "unmerged"
    NON_FAST_FORWARD = "non-fast-forward"
    INVALID_SPEC = "invalid-spec"
    CONFLICT = "conflict"
    LOCKED = "locked"
    MODIFIED = "modified"
    MERGE_CONFLICT = "merge-conflict"


class GitError(Exception):
    """An error reported by libgit2.

    :ivar code: the native status code of the failed call
    :ivar klass: the native error class from the detailed error state, if any
    :ivar message: the message from the detailed error state, or a synthesized one
    """

    error_code: ErrorCode = ErrorCode.GENERIC

    def __init__(self, message: str, *, code: int = -1, klass: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.klass = klass

    def __str__(self) -> str:
        return self.message


class NotFoundError(GitError, KeyError):
    error_code = ErrorCode.NOT_FOUND


class AlreadyExistsError(GitError, ValueError):
    error_code = ErrorCode.EXISTS


class AmbiguousError(GitError, ValueError):
    error_code = ErrorCode.AMBIGUOUS


class BufferTooSmallError(GitError, ValueError):
    error_code = ErrorCode.BUFFER_TOO_SMALL


class UserCancelledError(GitError):
    error_code = ErrorCode.USER_CANCELLED


class UnmergedError(GitError):
    error_code = ErrorCode.UNMERGED


class NonFastForwardError(GitError):
    error_code = ErrorCode.NON_FAST_FORWARD


class InvalidSpecError(GitError, ValueError):
    error_code = ErrorCode.INVALID_SPEC


class ConflictError(GitError):
    error_code = ErrorCode.CONFLICT


class LockedError(GitError):
    error_code = ErrorCode.LOCKED


class ModifiedError(GitError):
    error_code = ErrorCode.MODIFIED


class MergeConflictError(GitError):
    error_code = ErrorCode.MERGE_CONFLICT


# Generic failures, distinguished by the class of the detailed error state


class GitMemoryError(GitError, MemoryError):
    pass


class GitOSError(GitError, OSError):
    pass


class GitValueError(GitError, ValueError):
    pass


# Errors raised without involving libgit2


class ArgumentEncodingError(ValueError):
    """An argument can’t be converted to a NUL-terminated C string."""


class LifetimeError(RuntimeError):
    """A native handle was used outside the lifetime of the object owning it."""
