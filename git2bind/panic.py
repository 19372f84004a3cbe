"""Binding layer for libgit2 - Exceptions raised in callbacks

libgit2 calls back into Python through ctypes trampolines. An exception must
not propagate into the native frames: ctypes would print and drop it and
hand a bogus return value to libgit2. Instead, the exception is stored in a
per-thread slot, the trampoline returns an error code which makes libgit2
abort the operation, and the exception is re-raised once the native call
has returned (see `LibraryUser.raise_if_error()`).
"""

import logging
from ctypes import POINTER, c_void_p, cast, pointer, py_object
from enum import Enum
from functools import wraps
from threading import local
from typing import Any, Callable, Optional

from .native_adaptation import git_error_code

log = logging.getLogger(__name__)

_slot = local()


def panicked() -> bool:
    """Whether an exception from a callback is waiting to be re-raised."""
    return getattr(_slot, "exception", None) is not None


def take() -> Optional[BaseException]:
    exception = getattr(_slot, "exception", None)
    _slot.exception = None
    return exception


def check() -> None:
    """Re-raise the exception captured in a callback, if any."""
    exception = take()
    if exception is not None:
        raise exception


def wrap(func: Callable, *args, default: Any = None) -> Any:
    """Call func, capturing any exception it raises.

    If an exception is pending already, func isn’t called at all so that
    the pending one doesn’t get lost. In both cases, `default` is returned.
    """
    if panicked():
        log.debug("Not calling %r, an exception is pending", func)
        return default

    try:
        return func(*args)
    except BaseException as exc:
        log.debug("Callback %r raised %r, deferring until native call returns", func, exc)
        _slot.exception = exc
        return default


def callback_status(result: Any) -> int:
    """Translate what a Python callback returned into a status for libgit2.

    `None` and `True` continue, `False` stops the operation with `GIT_EUSER`,
    enum members (e.g. `CertificateCheckStatus`) map to their values.
    """
    if result is None or result is True:
        return git_error_code.OK
    if result is False:
        return git_error_code.EUSER
    if isinstance(result, Enum):
        return int(result.value)
    return int(result)


def trampoline(prototype, error_value: int = -1):
    """Create a native callback from a Python function.

    The function runs through `wrap()`, returning `error_value` to libgit2
    if it raises. The returned `CFUNCTYPE` object must stay referenced as
    long as libgit2 may call it, so bind it at module level.
    """

    def decorator(func: Callable):
        @wraps(func)
        def bridge(*args):
            return wrap(func, *args, default=error_value)

        return prototype(bridge)

    return decorator


class CallbackPayload:
    """Box a Python object so it can travel through libgit2 as `void *payload`.

    The box must be kept referenced for as long as libgit2 may hand the
    payload to a callback.
    """

    def __init__(self, obj: Any) -> None:
        self.obj = obj
        self._boxed = py_object(obj)
        self.as_parameter = cast(pointer(self._boxed), c_void_p)

    @property
    def _as_parameter_(self) -> c_void_p:
        return self.as_parameter

    @staticmethod
    def unbox(payload: Optional[int]) -> Any:
        if not payload:
            raise ValueError("Callback invoked without payload")
        return cast(payload, POINTER(py_object)).contents.value
