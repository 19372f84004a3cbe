"""Binding layer for libgit2 - LibraryUser & WrapperOfWrappings"""

from ctypes import _CFuncPtr, _SimpleCData, c_void_p, cast
from os import PathLike, fspath
from sys import getfilesystemencodeerrors, getfilesystemencoding
from typing import Iterable, NamedTuple, Optional, Union
from weakref import WeakSet, ref

from . import panic
from .exc import (
    AlreadyExistsError,
    AmbiguousError,
    ArgumentEncodingError,
    BufferTooSmallError,
    ConflictError,
    GitError,
    GitMemoryError,
    GitOSError,
    GitValueError,
    InvalidSpecError,
    LifetimeError,
    LockedError,
    MergeConflictError,
    ModifiedError,
    NonFastForwardError,
    NotFoundError,
    UnmergedError,
    UserCancelledError,
)
from .native_adaptation import git_error_code, git_error_t, lib

StrTypes = Union[str, bytes]
PathTypes = Union[str, bytes, PathLike]


def to_cstr(value: PathTypes, *, path: bool = False, encoding: str = "utf-8") -> bytes:
    """Convert a string, bytes or path to what a `const char *` parameter expects.

    Paths are encoded with the file system encoding. Values which can’t be
    represented as NUL-terminated strings raise ArgumentEncodingError.
    """
    if isinstance(value, PathLike):
        value = fspath(value)
        path = True

    if isinstance(value, str):
        try:
            if path:
                value = value.encode(
                    encoding=getfilesystemencoding(), errors=getfilesystemencodeerrors()
                )
            else:
                value = value.encode(encoding)
        except UnicodeEncodeError as exc:
            raise ArgumentEncodingError(f"Can’t encode {value!r}: {exc}") from exc
    elif not isinstance(value, bytes):
        raise TypeError(f"Expected str, bytes or path, got {type(value).__name__}")

    if b"\0" in value:
        raise ArgumentEncodingError(f"Embedded NUL byte in {value!r}")

    return value


def to_cstr_opt(value: Optional[PathTypes], **kwargs) -> Optional[bytes]:
    if value is None:
        return None
    return to_cstr(value, **kwargs)


def from_cstr(
    value: Optional[bytes], *, path: bool = False, encoding: str = "utf-8"
) -> Optional[str]:
    if value is None:
        return None
    if path:
        return value.decode(encoding=getfilesystemencoding(), errors=getfilesystemencodeerrors())
    return value.decode(encoding, errors="replace")


class ErrorState(NamedTuple):
    """The detailed error state libgit2 keeps for the last failed call."""

    message: str
    klass: git_error_t


class HandleRecord:
    """How many wrappers share a native address, and if it must be freed."""

    __slots__ = ("wrappers", "must_free")

    def __init__(self) -> None:
        self.wrappers = 0
        self.must_free = False


class LibraryUser:
    ERROR_CODE_TO_EXC_CLASS = {
        git_error_code.ENOTFOUND: NotFoundError,
        git_error_code.EEXISTS: AlreadyExistsError,
        git_error_code.EAMBIGUOUS: AmbiguousError,
        git_error_code.EBUFS: BufferTooSmallError,
        git_error_code.EUSER: UserCancelledError,
        git_error_code.EUNMERGED: UnmergedError,
        git_error_code.ENONFASTFORWARD: NonFastForwardError,
        git_error_code.EINVALIDSPEC: InvalidSpecError,
        git_error_code.ECONFLICT: ConflictError,
        git_error_code.ELOCKED: LockedError,
        git_error_code.EMODIFIED: ModifiedError,
        git_error_code.EMERGECONFLICT: MergeConflictError,
    }

    ERROR_T_TO_EXC_CLASS = {
        git_error_t.NOMEMORY: GitMemoryError,
        git_error_t.OS: GitOSError,
        git_error_t.INVALID: GitValueError,
    }

    CONTROL_FLOW_CODES = frozenset((git_error_code.PASSTHROUGH, git_error_code.ITEROVER))

    @staticmethod
    def last_error() -> Optional[ErrorState]:
        """Consume the detailed error state of the current thread.

        The state is cleared afterwards, so that a message can’t leak into
        the report of an unrelated later failure.
        """
        error_p = lib.git_error_last()
        if error_p and error_p.contents.klass != git_error_t.NONE:
            message = error_p.contents.message
            message = message.decode("utf-8", errors="replace") if message else ""
            try:
                klass = git_error_t(error_p.contents.klass)
            except ValueError:
                klass = error_p.contents.klass
            state = ErrorState(message=message, klass=klass)
        else:
            # libgit2 ≥ 1.8 returns a static "no error" instead of NULL.
            state = None
        lib.git_error_clear()
        return state

    @classmethod
    def raise_if_error(
        cls,
        error_code: int,
        exc_msg_tmpl: Optional[str] = None,
        key: Optional[StrTypes] = None,
        io: bool = False,
        *,
        stop_codes: Iterable[int] = (),
    ) -> git_error_code:
        """Translate the status code of a native call.

        An exception raised in a callback during the call is re-raised
        first. Control flow codes (iteration over, pass-through and those
        passed in `stop_codes`) are returned instead of raised.

        :param error_code: the status code
        :param exc_msg_tmpl: a template for the exception message, with a
            `{message}` placeholder
        :param key: if set, raise `KeyError(key)` if not found
        :param io: if set, raise `IOError` if not found
        :param stop_codes: codes signalling that a callback stopped the call
        :return: the status code as `git_error_code`
        """
        if panic.panicked():
            lib.git_error_clear()
            panic.check()

        if not error_code:
            return git_error_code.OK

        if error_code in cls.CONTROL_FLOW_CODES or error_code in stop_codes:
            lib.git_error_clear()
            return git_error_code(error_code)

        exc_class = cls.ERROR_CODE_TO_EXC_CLASS.get(error_code)

        if exc_class is NotFoundError:
            if io:
                exc_class = GitOSError
            elif key:
                lib.git_error_clear()
                raise NotFoundError(
                    key if isinstance(key, str) else key.decode("utf-8", errors="replace"),
                    code=error_code,
                )

        state = cls.last_error()
        if state:
            message = state.message
            klass = state.klass
            if not exc_class:
                exc_class = cls.ERROR_T_TO_EXC_CLASS.get(klass, GitError)
        else:
            message = "(No error information given)"
            klass = None
            exc_class = exc_class or GitError

        if exc_msg_tmpl:
            message = exc_msg_tmpl.format(message=message)

        raise exc_class(message, code=error_code, klass=klass)


class WrapperOfWrappings(LibraryUser):
    """Base class wrapping libgit2 objects.

    A wrapper either owns its native handle and frees it with
    `_libgit2_native_finalizer` once the last wrapper of that address goes
    away, or borrows it (`_must_free` false). `_owner` is the wrapper whose
    lifetime bounds the handle: as long as this wrapper is alive, the owner
    is kept alive, and once the owner is closed, this wrapper can’t be used
    anymore.
    """

    _libgit2_native_finalizer: Optional[Union[_CFuncPtr, str]] = None

    _live_obj_refs: dict[int, ref["WrapperOfWrappings"]] = {}
    _handles: dict[int, HandleRecord] = {}

    _real_native: Optional[_SimpleCData] = None
    _must_free: bool = True
    _owner: Optional["WrapperOfWrappings"] = None
    _expired: bool = False

    def __init__(
        self,
        native: Optional[_SimpleCData] = None,
        _must_free: Optional[bool] = None,
        _owner: Optional["WrapperOfWrappings"] = None,
    ) -> None:
        self._live_obj_refs[id(self)] = ref(self)
        self._dependents = WeakSet()
        if _must_free is not None:
            self._must_free = _must_free
        if _owner is not None:
            self._owner = _owner
            _owner._dependents.add(self)
        if native is not None:
            self._native = native

    @classmethod
    def _from_native(cls, native: _SimpleCData, **kwargs) -> "WrapperOfWrappings":
        self = cls.__new__(cls)
        WrapperOfWrappings.__init__(self, native=native, **kwargs)
        return self

    @classmethod
    def _from_native_opt(
        cls, native: Optional[_SimpleCData], **kwargs
    ) -> Optional["WrapperOfWrappings"]:
        """Wrap a handle which may be NULL, meaning “not there”."""
        if native is None or not cast(native, c_void_p).value:
            return None
        return cls._from_native(native, **kwargs)

    def __del__(self) -> None:
        del self._native
        self._live_obj_refs.pop(id(self), None)

    def __bool__(self) -> bool:
        return bool(self._real_native)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _check_alive(self) -> None:
        if self._expired:
            raise LifetimeError(
                f"{type(self).__name__} used after its native handle was released"
            )
        if self._owner is not None:
            self._owner._check_alive()

    def close(self) -> None:
        """Release the native handle now rather than on garbage collection.

        Dependents borrowing from this object become unusable. Dependents
        owning handles of their own must be closed first.
        """
        if self._expired:
            return

        blocking = [dep for dep in self._dependents if dep._must_free and dep._real_native]
        if blocking:
            raise LifetimeError(
                f"Can’t close {type(self).__name__} while dependent objects are alive: "
                + ", ".join(type(dep).__name__ for dep in blocking)
            )

        del self._native
        self._expired = True

    def _disown(self) -> _SimpleCData:
        """Hand the native handle over to libgit2, which will free it."""
        native = self._native
        self._handles.pop(cast(native, c_void_p).value, None)
        del self._real_native
        self._expired = True
        return native

    @property
    def _native(self) -> Optional[_SimpleCData]:
        self._check_alive()
        return self._real_native

    @_native.setter
    def _native(self, native: _SimpleCData) -> None:
        if self._real_native is not None:
            raise ValueError("_native can’t be changed")

        if self._libgit2_native_finalizer:
            self._track_handle(native)

        self._real_native = native

    @_native.deleter
    def _native(self) -> None:
        native = self._real_native
        if native is None:
            return

        del self._real_native

        if self._libgit2_native_finalizer:
            self._untrack_handle(native)

    def _track_handle(self, native: _SimpleCData) -> None:
        address = cast(native, c_void_p).value
        if not address:
            raise ValueError("_native must be a valid (non-NULL) pointer")

        record = self._handles.get(address)
        if record is None:
            record = self._handles[address] = HandleRecord()
        record.wrappers += 1
        record.must_free = record.must_free or self._must_free

    def _untrack_handle(self, native: _SimpleCData) -> None:
        address = cast(native, c_void_p).value
        # Disowned handles aren’t tracked anymore.
        record = self._handles.get(address) if address else None
        if record is None:
            return

        record.wrappers -= 1
        if record.wrappers:
            return

        del self._handles[address]
        if record.must_free:
            self._resolve_finalizer()(native)

    @classmethod
    def _resolve_finalizer(cls) -> _CFuncPtr:
        finalizer = cls._libgit2_native_finalizer
        if isinstance(finalizer, str):
            # Looked up late, the library isn’t loaded when classes are defined.
            finalizer = cls._libgit2_native_finalizer = getattr(lib, finalizer)
        return finalizer
