"""Binding layer for libgit2 - ProxyOptions"""

from ctypes import byref
from typing import Optional

from .constants import GIT_PROXY_OPTIONS_VERSION
from .native_adaptation import git_proxy_options, git_proxy_t, lib
from .wrapper import LibraryUser, StrTypes, to_cstr


class ProxyOptions(LibraryUser):
    """Proxy settings for connecting to a remote.

    Without calling `auto()` or `url()`, no proxy is used.
    """

    def __init__(self) -> None:
        self._type = git_proxy_t.NONE
        self._url: Optional[bytes] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self._type!r}, url={self._url!r})"

    def auto(self) -> "ProxyOptions":
        """Detect the proxy from the git configuration, overriding any URL."""
        self._type = git_proxy_t.AUTO
        self._url = None
        return self

    def url(self, url: StrTypes) -> "ProxyOptions":
        self._type = git_proxy_t.SPECIFIED
        self._url = to_cstr(url)
        return self

    def _to_native(self) -> git_proxy_options:
        native = git_proxy_options()
        error_code = lib.git_proxy_options_init(byref(native), GIT_PROXY_OPTIONS_VERSION)
        self.raise_if_error(error_code)
        native.type = self._type
        native.url = self._url
        return native
