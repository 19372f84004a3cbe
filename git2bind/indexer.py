"""Binding layer for libgit2 - Indexer

The indexer turns a packfile streamed into it into an indexed pack in a
directory, reporting progress through a callback.
"""

import logging
from ctypes import byref, pointer
from typing import TYPE_CHECKING, Callable, Optional

from .constants import GIT_INDEXER_OPTIONS_VERSION
from .native_adaptation import (
    git_error_code,
    git_indexer_options,
    git_indexer_p,
    git_indexer_progress,
    git_indexer_progress_cb,
    git_indexer_progress_p,
    lib,
)
from .panic import CallbackPayload, callback_status, trampoline
from .wrapper import PathTypes, WrapperOfWrappings, from_cstr, to_cstr

if TYPE_CHECKING:
    from .odb import Odb

log = logging.getLogger(__name__)

ProgressCallback = Callable[["IndexerProgress"], Optional[bool]]


class IndexerProgress(WrapperOfWrappings):
    """Counters of an ongoing transfer or indexing operation.

    Objects passed to a callback are only valid during the call, use
    `to_owned()` to keep the values around.
    """

    _real_native: Optional[git_indexer_progress_p] = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(received_objects={self.received_objects},"
            + f" indexed_objects={self.indexed_objects}, total_objects={self.total_objects})"
        )

    def to_owned(self) -> "IndexerProgress":
        copy = git_indexer_progress.from_buffer_copy(self._native.contents)
        return type(self)._from_native(pointer(copy))

    @property
    def total_objects(self) -> int:
        return self._native.contents.total_objects

    @property
    def indexed_objects(self) -> int:
        return self._native.contents.indexed_objects

    @property
    def received_objects(self) -> int:
        return self._native.contents.received_objects

    @property
    def local_objects(self) -> int:
        return self._native.contents.local_objects

    @property
    def total_deltas(self) -> int:
        return self._native.contents.total_deltas

    @property
    def indexed_deltas(self) -> int:
        return self._native.contents.indexed_deltas

    @property
    def received_bytes(self) -> int:
        return self._native.contents.received_bytes


@trampoline(git_indexer_progress_cb)
def _transfer_progress_cb(stats: git_indexer_progress_p, payload: int) -> int:
    # Shared by the indexer and remote callbacks, the payload implements
    # `_transfer_progress()`.
    target = CallbackPayload.unbox(payload)
    with IndexerProgress._from_native(stats, _must_free=False) as progress:
        return callback_status(target._transfer_progress(progress))


class _ProgressRelay:
    """What an indexer hands to libgit2 as callback payload.

    It holds the progress callback but not the indexer, so that the indexer
    isn’t kept alive by its own payload.
    """

    __slots__ = ("callback",)

    def __init__(self) -> None:
        self.callback: Optional[ProgressCallback] = None

    def _transfer_progress(self, progress: IndexerProgress) -> Optional[bool]:
        if self.callback is None:
            return None
        return self.callback(progress)


class Indexer(WrapperOfWrappings):
    """Index a packfile into a directory.

    With an object database, objects referenced by thin packs are looked up
    in it.
    """

    _libgit2_native_finalizer = "git_indexer_free"

    _real_native: Optional[git_indexer_p] = None

    stopped: bool = False

    def __init__(
        self, path: PathTypes, odb: Optional["Odb"] = None, mode: int = 0, verify: bool = True
    ) -> None:
        self._stats = git_indexer_progress()
        self._relay = _ProgressRelay()
        # Referenced for the lifetime of the native indexer, it may call back any time.
        self._payload = CallbackPayload(self._relay)

        options = git_indexer_options()
        error_code = lib.git_indexer_options_init(byref(options), GIT_INDEXER_OPTIONS_VERSION)
        self.raise_if_error(error_code)
        options.progress_cb = _transfer_progress_cb
        options.progress_cb_payload = self._payload.as_parameter.value
        options.verify = verify

        native = git_indexer_p()
        error_code = lib.git_indexer_new(
            byref(native),
            to_cstr(path, path=True),
            mode,
            odb._native if odb is not None else None,
            byref(options),
        )
        self.raise_if_error(error_code, "Can’t create indexer: {message}")

        super().__init__(native=native, _owner=odb)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(received_objects={self._stats.received_objects})"

    def progress(self, callback: Optional[ProgressCallback]) -> "Indexer":
        """Set the progress callback.

        The callback may return `False` to stop indexing, see `stopped`.
        """
        self._relay.callback = callback
        return self

    @property
    def stats(self) -> IndexerProgress:
        return IndexerProgress._from_native(pointer(self._stats)).to_owned()

    def _check_stop(self, error_code: int, exc_msg_tmpl: str) -> bool:
        result = self.raise_if_error(error_code, exc_msg_tmpl, stop_codes=(git_error_code.EUSER,))
        if result == git_error_code.EUSER:
            log.debug("Indexing stopped by progress callback")
            self.stopped = True
        return self.stopped

    def write(self, data: bytes) -> "Indexer":
        """Feed packfile data into the indexer.

        Once the progress callback stopped indexing, further data is ignored.
        """
        if not self.stopped:
            error_code = lib.git_indexer_append(self._native, data, len(data), byref(self._stats))
            self._check_stop(error_code, "Error indexing pack data: {message}")
        return self

    def commit(self) -> Optional[str]:
        """Finalize the pack and its index, returning the name of the pack.

        If the progress callback stopped indexing, nothing is written and
        `None` is returned.
        """
        if self.stopped:
            return None
        error_code = lib.git_indexer_commit(self._native, byref(self._stats))
        if self._check_stop(error_code, "Error finalizing pack: {message}"):
            return None
        name = from_cstr(lib.git_indexer_name(self._native))
        log.debug("Indexed pack %s with %d objects", name, self._stats.indexed_objects)
        return name
