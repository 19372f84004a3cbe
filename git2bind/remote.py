"""Binding layer for libgit2 - Remote"""

import logging
from ctypes import byref, c_size_t
from functools import cached_property
from typing import TYPE_CHECKING, Optional
from weakref import WeakSet

from .native_adaptation import (
    git_direction,
    git_error_code,
    git_remote_head_p,
    git_remote_head_p_p,
    git_remote_p,
    lib,
)
from .oid import Oid
from .proxy_options import ProxyOptions
from .remote_callbacks import RemoteCallbacks
from .wrapper import WrapperOfWrappings, from_cstr

if TYPE_CHECKING:
    from .repository import Repository

log = logging.getLogger(__name__)


class RemoteHead(WrapperOfWrappings):
    """A reference advertised by a remote.

    Heads are borrowed from the remote and can only be used until it is
    disconnected or closed.
    """

    _real_native: Optional[git_remote_head_p] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, oid={self.oid.hex!r})"

    @property
    def local(self) -> bool:
        """Whether the object is available locally."""
        return bool(self._native.contents.local)

    @property
    def oid(self) -> Oid:
        return Oid(self._native.contents.oid)

    @property
    def loid(self) -> Optional[Oid]:
        if not self.local:
            return None
        return Oid(self._native.contents.loid)

    @property
    def name(self) -> str:
        return from_cstr(self._native.contents.name)

    @property
    def symref_target(self) -> Optional[str]:
        return from_cstr(self._native.contents.symref_target)


class Remote(WrapperOfWrappings):
    """Represent a remote repository."""

    _libgit2_native_finalizer = "git_remote_free"

    _real_native: Optional[git_remote_p] = None

    _callbacks: Optional[RemoteCallbacks] = None
    _proxy_options: Optional[ProxyOptions] = None

    def __init__(self, repo: "Repository", native: git_remote_p) -> None:
        super().__init__(native=native, _owner=repo)
        self._heads = WeakSet()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.url!r})"

    @property
    def repo(self) -> "Repository":
        return self._owner

    @cached_property
    def url(self) -> Optional[str]:
        return from_cstr(lib.git_remote_url(self._native))

    @property
    def connected(self) -> bool:
        return bool(lib.git_remote_connected(self._native))

    def connect(
        self,
        direction: git_direction = git_direction.FETCH,
        callbacks: Optional[RemoteCallbacks] = None,
        proxy_options: Optional[ProxyOptions] = None,
    ) -> "Remote":
        """Open a connection to the remote.

        The callbacks stay in use until the remote is disconnected. If one of
        them stops the connection attempt by returning `False`, the remote
        stays disconnected, check `connected`.
        """
        callbacks_native = callbacks._to_native() if callbacks is not None else None
        proxy_native = proxy_options._to_native() if proxy_options is not None else None

        error_code = lib.git_remote_connect(
            self._native,
            direction,
            byref(callbacks_native) if callbacks_native is not None else None,
            byref(proxy_native) if proxy_native is not None else None,
            None,
        )
        result = self.raise_if_error(
            error_code, "Can’t connect to remote: {message}", stop_codes=(git_error_code.EUSER,)
        )
        if result == git_error_code.EUSER:
            log.debug("Connecting to %s stopped by callback", self.url)
            return self

        self._callbacks = callbacks
        self._proxy_options = proxy_options
        log.debug("Connected to %s for %s", self.url, git_direction(direction).name.lower())

        return self

    def list(self) -> list[RemoteHead]:
        """List the references the remote advertised when connecting."""
        heads = git_remote_head_p_p()
        size = c_size_t()
        error_code = lib.git_remote_ls(byref(heads), byref(size), self._native)
        self.raise_if_error(error_code, "Can’t list remote references: {message}")

        result = [
            RemoteHead._from_native(heads[i], _must_free=False, _owner=self)
            for i in range(size.value)
        ]
        self._heads.update(result)
        return result

    def _expire_heads(self) -> None:
        for head in list(self._heads):
            head.close()
        self._heads.clear()

    def disconnect(self) -> None:
        """Close the connection, invalidating listed heads."""
        self._expire_heads()
        error_code = lib.git_remote_disconnect(self._native)
        self._callbacks = None
        self._proxy_options = None
        self.raise_if_error(error_code, "Can’t disconnect from remote: {message}")

    def close(self) -> None:
        if not self._expired:
            self._expire_heads()
        super().close()
        self._callbacks = None
        self._proxy_options = None
