"""Binding layer for libgit2 - Config"""

from ctypes import byref, c_int, c_int64
from typing import Optional, Union

from .native_adaptation import git_config_entry_p, git_config_p, git_error_code, lib
from .wrapper import PathTypes, WrapperOfWrappings, from_cstr, to_cstr

ConfigValue = Union[bool, int, str, bytes]


class Config(WrapperOfWrappings):
    """Represent git configuration, as a mapping of keys like `user.name` to values.

    Values are strings, use `get_bool()` and `get_int()` to have them
    interpreted the way git does.
    """

    _libgit2_native_finalizer = "git_config_free"

    _real_native: Optional[git_config_p] = None

    @classmethod
    def open_ondisk(cls, path: PathTypes) -> "Config":
        """Open a single configuration file, which needn’t exist yet."""
        native = git_config_p()
        error_code = lib.git_config_open_ondisk(byref(native), to_cstr(path, path=True))
        cls.raise_if_error(error_code, "Can’t open configuration: {message}")
        return cls._from_native(native)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def _get_entry(self, key: str) -> tuple[int, git_config_entry_p]:
        native = git_config_entry_p()
        error_code = lib.git_config_get_entry(byref(native), self._native, to_cstr(key))
        return error_code, native

    def __contains__(self, key: str) -> bool:
        error_code, native = self._get_entry(key)
        if error_code == git_error_code.ENOTFOUND:
            lib.git_error_clear()
            return False
        self.raise_if_error(error_code)
        lib.git_config_entry_free(native)
        return True

    def __getitem__(self, key: str) -> str:
        error_code, native = self._get_entry(key)
        self.raise_if_error(error_code, key=key)
        try:
            return from_cstr(native.contents.value)
        finally:
            lib.git_config_entry_free(native)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        try:
            return self[key]
        except KeyError:
            return default

    def get_bool(self, key: str) -> bool:
        value = c_int()
        error_code = lib.git_config_get_bool(byref(value), self._native, to_cstr(key))
        self.raise_if_error(error_code, key=key)
        return bool(value.value)

    def get_int(self, key: str) -> int:
        value = c_int64()
        error_code = lib.git_config_get_int64(byref(value), self._native, to_cstr(key))
        self.raise_if_error(error_code, key=key)
        return value.value

    def __setitem__(self, key: str, value: ConfigValue) -> None:
        key_c = to_cstr(key)

        if isinstance(value, bool):
            error_code = lib.git_config_set_bool(self._native, key_c, value)
        elif isinstance(value, int):
            error_code = lib.git_config_set_int64(self._native, key_c, value)
        else:
            error_code = lib.git_config_set_string(self._native, key_c, to_cstr(value))

        self.raise_if_error(error_code, "Can’t set configuration value: {message}")

    def __delitem__(self, key: str) -> None:
        error_code = lib.git_config_delete_entry(self._native, to_cstr(key))
        self.raise_if_error(error_code, key=key)
