"""Safe bindings for libgit2

This package wraps libgit2 through ctypes. Native handles are owned by
Python objects which free them exactly once, errors reported by libgit2 are
raised as exceptions, and Python callbacks invoked from native code never
let exceptions escape into it.

libgit2 is loaded and initialized on first use, importing this package
doesn’t require it to be installed.
"""

from . import panic, settings
from .annotated_commit import AnnotatedCommit
from .buf import Buf
from .cert import Cert, CertHostkey, CertificateCheckStatus, CertX509, SshHostKeyType
from .commit import Commit
from .common import LibError, LibNotFoundError, LibVersionError, LibVersionWarning, LibWarning
from .config import Config
from .constants import (
    GIT_CONFIG_LEVEL_GLOBAL,
    GIT_CONFIG_LEVEL_PROGRAMDATA,
    GIT_CONFIG_LEVEL_SYSTEM,
    GIT_CONFIG_LEVEL_XDG,
    GIT_DIRECTION_FETCH,
    GIT_DIRECTION_PUSH,
    GIT_REPOSITORY_OPEN_NO_SEARCH,
)
from .cred import Credential
from .exc import (
    AlreadyExistsError,
    AmbiguousError,
    ArgumentEncodingError,
    BufferTooSmallError,
    ConflictError,
    ErrorCode,
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
from .index import Index
from .indexer import Indexer, IndexerProgress
from .mailmap import Mailmap
from .native_adaptation import git_credential_t as CredentialType
from .native_adaptation import git_direction as Direction
from .native_adaptation import git_feature_t as Feature
from .native_adaptation import git_filemode_t as FileMode
from .native_adaptation import git_object_t as ObjectType
from .native_adaptation import git_reference_t as ReferenceType
from .native_adaptation import git_sort_t as SortMode
from .odb import Mempack, Odb
from .oid import Oid
from .oid_array import OidArray
from .proxy_options import ProxyOptions
from .push_update import PushUpdate
from .reference import Reference
from .remote import Remote, RemoteHead
from .remote_callbacks import RemoteCallbacks
from .repository import Repository
from .revwalk import RevWalk
from .signature import Signature
from .time import Time
from .tree import Tree, TreeEntry
from .version import __version__

init_repository = Repository.init_repository
