"""Binding layer for libgit2 - Global settings

Library initialization and the process-wide options of libgit2.

Setters hold the lock which also serializes initialization and shutdown,
so they don’t race each other. libgit2 doesn’t protect these options
against concurrent readers: changing them while other threads use the
library needs to be synchronized by the caller.
"""

import logging
import os
from ctypes import byref, c_char_p, c_int, c_size_t
from typing import Iterable, Optional

from .buf import Buf
from .constants import GIT_SEARCH_PATH_PLACEHOLDER, SEARCH_PATH_LEVELS
from .native_adaptation import (
    git_config_level_t,
    git_feature_t,
    git_libgit2_opt_t,
    git_strarray,
    lib,
)
from .native_adaptation import state as _state
from .wrapper import LibraryUser, PathTypes, StrTypes, from_cstr, to_cstr

log = logging.getLogger(__name__)


def init() -> int:
    """Initialize libgit2 explicitly, returning the number of initializations.

    Wrappers initialize the library on first use, so this is only needed to
    control when global setup happens.
    """
    return _state.init()


def shutdown() -> int:
    """Undo one call of `init()`, returning the remaining number of initializations."""
    return _state.shutdown()


def libgit2_version() -> tuple[int, int, int]:
    major, minor, rev = c_int(), c_int(), c_int()
    error_code = lib.git_libgit2_version(byref(major), byref(minor), byref(rev))
    LibraryUser.raise_if_error(error_code)
    return major.value, minor.value, rev.value


def features() -> git_feature_t:
    """The optional features libgit2 was built with."""
    return git_feature_t(lib.git_libgit2_features())


def _set_opt(opt: git_libgit2_opt_t, *args) -> None:
    with _state.lock:
        log.debug("Setting %s: %r", opt.name, args)
        error_code = lib.git_libgit2_opts(opt, *args)
        LibraryUser.raise_if_error(error_code, f"Can’t set {opt.name.lower()}: {{message}}")


class SearchPathList(LibraryUser):
    """The paths searched for configuration files, per configuration level."""

    @staticmethod
    def _check_level(level: int) -> git_config_level_t:
        if level not in SEARCH_PATH_LEVELS:
            raise ValueError(f"No search path for configuration level {level!r}")
        return git_config_level_t(level)

    def __getitem__(self, level: int) -> Optional[str]:
        level = self._check_level(level)
        with Buf() as buf:
            error_code = lib.git_libgit2_opts(
                git_libgit2_opt_t.GET_SEARCH_PATH, c_int(level), buf._native
            )
            self.raise_if_error(error_code, "Error retrieving search path: {message}")
            return from_cstr(buf.data, path=True)

    def __setitem__(self, level: int, value: Optional[PathTypes]) -> None:
        level = self._check_level(level)
        _set_opt(
            git_libgit2_opt_t.SET_SEARCH_PATH,
            c_int(level),
            None if value is None else to_cstr(value, path=True),
        )

    def append(self, level: int, path: PathTypes) -> None:
        """Add a path after the existing ones."""
        path = to_cstr(path, path=True)
        self[level] = GIT_SEARCH_PATH_PLACEHOLDER.encode("ascii") + os.fsencode(os.pathsep) + path

    def reset(self, level: int) -> None:
        """Restore the default, which libgit2 derives from the environment."""
        self[level] = None


search_path = SearchPathList()


def get_extensions() -> list[str]:
    """The repository extensions libgit2 accepts, built-in and custom ones."""
    extensions = git_strarray()
    error_code = lib.git_libgit2_opts(git_libgit2_opt_t.GET_EXTENSIONS, byref(extensions))
    LibraryUser.raise_if_error(error_code, "Can’t get extensions: {message}")
    try:
        return [from_cstr(extensions.strings[i]) for i in range(extensions.count)]
    finally:
        lib.git_strarray_dispose(byref(extensions))


def set_extensions(extensions: Iterable[StrTypes]) -> None:
    """Set additional repository extensions to accept.

    Names prefixed with “!” are removed from the supported extensions
    instead, which is a no-op for unknown names.
    """
    encoded = [to_cstr(extension) for extension in extensions]
    array = (c_char_p * len(encoded))(*encoded)
    _set_opt(git_libgit2_opt_t.SET_EXTENSIONS, array, c_size_t(len(encoded)))


def set_strict_hash_verification(enabled: bool) -> None:
    """Verify that objects read from the object database match their ids."""
    _set_opt(git_libgit2_opt_t.ENABLE_STRICT_HASH_VERIFICATION, c_int(enabled))


def set_caching(enabled: bool) -> None:
    _set_opt(git_libgit2_opt_t.ENABLE_CACHING, c_int(enabled))


def set_strict_object_creation(enabled: bool) -> None:
    """Validate that objects referenced by new objects exist."""
    _set_opt(git_libgit2_opt_t.ENABLE_STRICT_OBJECT_CREATION, c_int(enabled))


def get_owner_validation() -> bool:
    enabled = c_int()
    error_code = lib.git_libgit2_opts(git_libgit2_opt_t.GET_OWNER_VALIDATION, byref(enabled))
    LibraryUser.raise_if_error(error_code, "Can’t get owner validation: {message}")
    return bool(enabled.value)


def set_owner_validation(enabled: bool) -> None:
    """Check that repositories are owned by the current user before opening them."""
    _set_opt(git_libgit2_opt_t.SET_OWNER_VALIDATION, c_int(enabled))
