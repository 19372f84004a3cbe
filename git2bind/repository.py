"""Binding layer for libgit2 - Repository"""

import logging
from ctypes import byref
from functools import cached_property
from typing import Callable, Optional

from .annotated_commit import AnnotatedCommit
from .commit import Commit
from .config import Config
from .index import Index
from .mailmap import Mailmap
from .native_adaptation import (
    git_annotated_commit_p,
    git_config_p,
    git_error_code,
    git_index_p,
    git_odb_p,
    git_oid,
    git_oid_p,
    git_reference_p,
    git_remote_p,
    git_repository_p,
    git_revwalk_p,
    git_signature_p,
    git_sort_t,
    git_tag_foreach_cb,
    lib,
)
from .odb import Odb
from .oid import Oid, OidTypes
from .oid_array import OidArray
from .panic import CallbackPayload, callback_status, trampoline
from .reference import Reference
from .remote import Remote
from .revwalk import RevWalk
from .signature import Signature
from .tree import Tree
from .wrapper import PathTypes, StrTypes, WrapperOfWrappings, from_cstr, to_cstr

log = logging.getLogger(__name__)

TagCallback = Callable[[str, Oid], Optional[bool]]


@trampoline(git_tag_foreach_cb)
def _tag_foreach_cb(name: Optional[bytes], oid: git_oid_p, payload: int) -> int:
    callback = CallbackPayload.unbox(payload)
    return callback_status(callback(from_cstr(name), Oid(oid)))


class Repository(WrapperOfWrappings):
    """Represent a git repository."""

    _libgit2_native_finalizer = "git_repository_free"

    _real_native: Optional[git_repository_p] = None

    def __init__(self, path: PathTypes, flags: int = 0) -> None:
        native = git_repository_p()
        error_code = lib.git_repository_open_ext(
            byref(native), to_cstr(path, path=True), flags, None
        )
        self.raise_if_error(error_code, "Can’t open repository: {message}")

        super().__init__(native=native)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r})"

    @classmethod
    def init_repository(cls, path: PathTypes, bare: bool = False) -> "Repository":
        native = git_repository_p()
        error_code = lib.git_repository_init(byref(native), to_cstr(path, path=True), bare)
        cls.raise_if_error(error_code, "Can’t create repository: {message}")
        log.debug("Created %s repository at %s", "bare" if bare else "non-bare", path)
        return cls._from_native(native)

    @cached_property
    def path(self) -> str:
        return from_cstr(lib.git_repository_path(self._native), path=True)

    @cached_property
    def workdir(self) -> Optional[str]:
        return from_cstr(lib.git_repository_workdir(self._native), path=True)

    @property
    def head_id(self) -> Oid:
        """The id of the commit HEAD points to."""
        native = git_oid()
        error_code = lib.git_reference_name_to_id(byref(native), self._native, b"HEAD")
        self.raise_if_error(error_code, "Can’t resolve HEAD: {message}")
        return Oid(native)

    @property
    def default_signature(self) -> Signature:
        native = git_signature_p()
        error_code = lib.git_signature_default(byref(native), self._native)
        self.raise_if_error(error_code)
        return Signature._from_native(native=native)

    def find_commit(self, oid: OidTypes) -> Commit:
        return Commit._from_oid(self, oid)

    def odb(self) -> Odb:
        native = git_odb_p()
        error_code = lib.git_repository_odb(byref(native), self._native)
        self.raise_if_error(error_code, "Can’t get object database: {message}")
        return Odb._from_native(native, _owner=self)

    def merge_bases(self, one: OidTypes, two: OidTypes) -> OidArray:
        """Find all merge bases of two commits."""
        one = Oid._from_oid(one)
        two = Oid._from_oid(two)
        bases = OidArray()
        error_code = lib.git_merge_bases(bases._native, self._native, one._native, two._native)
        self.raise_if_error(error_code, "Can’t find merge bases: {message}")
        return bases

    def tag_foreach(self, callback: TagCallback) -> bool:
        """Call `callback(name, oid)` for every tag.

        The callback may return `False` to stop iterating.

        :return: whether all tags were visited
        """
        # Only needs to outlive the native call.
        payload = CallbackPayload(callback)
        error_code = lib.git_tag_foreach(self._native, _tag_foreach_cb, payload)
        result = self.raise_if_error(
            error_code, "Error iterating tags: {message}", stop_codes=(git_error_code.EUSER,)
        )
        return result == git_error_code.OK

    def mailmap(self) -> Mailmap:
        return Mailmap.from_repository(self)

    def find_annotated_commit(self, oid: OidTypes) -> AnnotatedCommit:
        oid = Oid._from_oid(oid)
        native = git_annotated_commit_p()
        error_code = lib.git_annotated_commit_lookup(byref(native), self._native, oid._native)
        self.raise_if_error(error_code, key=oid.hex)
        return AnnotatedCommit._from_native(native, _owner=self)

    def annotated_commit_from_revspec(self, revspec: StrTypes) -> AnnotatedCommit:
        native = git_annotated_commit_p()
        error_code = lib.git_annotated_commit_from_revspec(
            byref(native), self._native, to_cstr(revspec)
        )
        self.raise_if_error(error_code, "Can’t resolve revision: {message}")
        return AnnotatedCommit._from_native(native, _owner=self)

    def remote_anonymous(self, url: StrTypes) -> Remote:
        """Create a remote for a URL without storing it in the configuration."""
        native = git_remote_p()
        error_code = lib.git_remote_create_anonymous(byref(native), self._native, to_cstr(url))
        self.raise_if_error(error_code, "Can’t create remote: {message}")
        return Remote(self, native)

    def find_tree(self, oid: OidTypes) -> Tree:
        return Tree._from_oid(self, oid)

    @property
    def head(self) -> Reference:
        native = git_reference_p()
        error_code = lib.git_repository_head(byref(native), self._native)
        self.raise_if_error(error_code, "Can’t resolve HEAD: {message}")
        return Reference(self, native)

    def lookup_reference(self, name: StrTypes) -> Reference:
        native = git_reference_p()
        error_code = lib.git_reference_lookup(byref(native), self._native, to_cstr(name))
        self.raise_if_error(error_code, key=name)
        return Reference(self, native)

    def index(self) -> Index:
        native = git_index_p()
        error_code = lib.git_repository_index(byref(native), self._native)
        self.raise_if_error(error_code, "Can’t get repository index: {message}")
        return Index(self, native)

    def config(self) -> Config:
        """The configuration of the repository, including global and system levels."""
        native = git_config_p()
        error_code = lib.git_repository_config(byref(native), self._native)
        self.raise_if_error(error_code, "Can’t get repository configuration: {message}")
        return Config._from_native(native)

    def walk(self, oid: Optional[OidTypes] = None, sort: git_sort_t = git_sort_t.NONE) -> RevWalk:
        """Walk the history starting at a commit.

        Without `oid`, nothing is pushed yet, use `RevWalk.push()` and
        friends.
        """
        native = git_revwalk_p()
        error_code = lib.git_revwalk_new(byref(native), self._native)
        self.raise_if_error(error_code, "Can’t allocate revwalk: {message}")

        revwalk = RevWalk(self, native).sort(sort)
        if oid is not None:
            revwalk.push(oid)
        return revwalk
