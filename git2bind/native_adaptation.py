"""Binding layer for libgit2 - Native Adaptation

Types, structure layouts and function declarations mirroring the public
libgit2 headers, and the process-wide state which loads and initializes the
library on first use.
"""

import logging
from ctypes import (
    CDLL,
    CFUNCTYPE,
    POINTER,
    Structure,
    c_char,
    c_char_p,
    c_int,
    c_int64,
    c_size_t,
    c_ubyte,
    c_uint,
    c_uint64,
    c_void_p,
)
from enum import IntEnum, IntFlag, auto
from threading import RLock
from typing import Optional

from .common import IntEnumMixin, LibError, install_func_decls, load_lib

log = logging.getLogger(__name__)

LIBGIT2_KNOWN_VERSIONS = tuple((1, minor) for minor in range(4, 10))


# Simple types

git_object_size_t = c_uint64
git_time_t = c_int64


class git_error_code(IntEnumMixin, IntEnum):
    # @staticmethod
    def _generate_next_value_(name, start, count, last_values):
        last_value = sorted(last_values)[0]
        return last_value - 1

    OK = 0
    ERROR = auto()

    ENOTFOUND = -3
    EEXISTS = auto()
    EAMBIGUOUS = auto()
    EBUFS = auto()

    EUSER = auto()

    EBAREREPO = auto()
    EUNBORNBRANCH = auto()
    EUNMERGED = auto()
    ENONFASTFORWARD = auto()
    EINVALIDSPEC = auto()
    ECONFLICT = auto()
    ELOCKED = auto()
    EMODIFIED = auto()
    EAUTH = auto()
    ECERTIFICATE = auto()
    EAPPLIED = auto()
    EPEEL = auto()
    EEOF = auto()
    EINVALID = auto()
    EUNCOMMITTED = auto()
    EDIRECTORY = auto()
    EMERGECONFLICT = auto()

    PASSTHROUGH = -30
    ITEROVER = auto()
    RETRY = auto()
    EMISMATCH = auto()
    EINDEXDIRTY = auto()
    EAPPLYFAIL = auto()
    EOWNER = auto()
    TIMEOUT = auto()


class git_error_t(IntEnumMixin, IntEnum):
    NONE = 0
    NOMEMORY = auto()
    OS = auto()
    INVALID = auto()
    REFERENCE = auto()
    ZLIB = auto()
    REPOSITORY = auto()
    CONFIG = auto()
    REGEX = auto()
    ODB = auto()
    INDEX = auto()
    OBJECT = auto()
    NET = auto()
    TAG = auto()
    TREE = auto()
    INDEXER = auto()
    SSL = auto()
    SUBMODULE = auto()
    THREAD = auto()
    STASH = auto()
    CHECKOUT = auto()
    FETCHHEAD = auto()
    MERGE = auto()
    SSH = auto()
    FILTER = auto()
    REVERT = auto()
    CALLBACK = auto()
    CHERRYPICK = auto()
    DESCRIBE = auto()
    REBASE = auto()
    FILESYSTEM = auto()
    PATCH = auto()
    WORKTREE = auto()
    SHA = auto()
    HTTP = auto()
    INTERNAL = auto()


class git_object_t(IntEnumMixin, IntEnum):
    ANY = -2
    INVALID = -1
    COMMIT = 1
    TREE = auto()
    BLOB = auto()
    TAG = auto()
    OFS_DELTA = auto()
    REF_DELTA = auto()


class git_config_level_t(IntEnumMixin, IntEnum):
    # Only the levels with a search path, their values are stable across versions.
    PROGRAMDATA = 1
    SYSTEM = auto()
    XDG = auto()
    GLOBAL = auto()
    LOCAL = auto()
    HIGHEST = -1


class git_libgit2_opt_t(IntEnumMixin, IntEnum):
    # This is abridged.
    GET_SEARCH_PATH = 4
    SET_SEARCH_PATH = 5
    ENABLE_CACHING = 8
    ENABLE_STRICT_OBJECT_CREATION = 14
    ENABLE_STRICT_HASH_VERIFICATION = 22
    GET_EXTENSIONS = 33
    SET_EXTENSIONS = auto()
    GET_OWNER_VALIDATION = auto()
    SET_OWNER_VALIDATION = auto()


class git_feature_t(IntEnumMixin, IntFlag):
    THREADS = 1 << 0
    HTTPS = auto()
    SSH = auto()
    NSEC = auto()


class git_credential_t(IntEnumMixin, IntFlag):
    USERPASS_PLAINTEXT = 1 << 0
    SSH_KEY = auto()
    SSH_CUSTOM = auto()
    DEFAULT = auto()
    SSH_INTERACTIVE = auto()
    USERNAME = auto()
    SSH_MEMORY = auto()


class git_cert_t(IntEnumMixin, IntEnum):
    NONE = 0
    X509 = auto()
    HOSTKEY_LIBSSH2 = auto()
    STRARRAY = auto()


class git_cert_ssh_t(IntEnumMixin, IntFlag):
    MD5 = 1 << 0
    SHA1 = auto()
    SHA256 = auto()
    RAW = auto()


class git_cert_ssh_raw_type_t(IntEnumMixin, IntEnum):
    UNKNOWN = 0
    RSA = auto()
    DSS = auto()
    KEY_ECDSA_256 = auto()
    KEY_ECDSA_384 = auto()
    KEY_ECDSA_521 = auto()
    KEY_ED25519 = auto()


class git_proxy_t(IntEnumMixin, IntEnum):
    NONE = 0
    AUTO = auto()
    SPECIFIED = auto()


class git_direction(IntEnumMixin, IntEnum):
    FETCH = 0
    PUSH = auto()


class git_reference_t(IntEnumMixin, IntFlag):
    INVALID = 0
    DIRECT = auto()
    SYMBOLIC = auto()
    ALL = DIRECT | SYMBOLIC


class git_sort_t(IntEnumMixin, IntFlag):
    NONE = 0
    TOPOLOGICAL = auto()
    TIME = auto()
    REVERSE = auto()


class git_filemode_t(IntEnumMixin, IntEnum):
    UNREADABLE = 0
    TREE = 0o40000
    BLOB = 0o100644
    BLOB_EXECUTABLE = 0o100755
    LINK = 0o120000
    COMMIT = 0o160000


# Compound types


class git_error(Structure):
    _fields_ = (
        ("message", c_char_p),
        ("klass", c_int),
    )


git_error_p = POINTER(git_error)
git_error_p_p = POINTER(git_error_p)


class git_buf(Structure):
    _fields_ = (
        ("ptr", POINTER(c_char)),
        ("reserved", c_size_t),
        ("size", c_size_t),
    )


git_buf_p = POINTER(git_buf)
git_buf_p_p = POINTER(git_buf_p)


class git_strarray(Structure):
    _fields_ = (
        ("strings", POINTER(c_char_p)),
        ("count", c_size_t),
    )


git_strarray_p = POINTER(git_strarray)
git_strarray_p_p = POINTER(git_strarray_p)


class git_oid(Structure):
    _fields_ = (("id", c_char * 20),)


git_oid_p = POINTER(git_oid)
git_oid_p_p = POINTER(git_oid_p)


class git_oidarray(Structure):
    _fields_ = (
        ("ids", git_oid_p),
        ("count", c_size_t),
    )


git_oidarray_p = POINTER(git_oidarray)
git_oidarray_p_p = POINTER(git_oidarray_p)


class git_repository(Structure):
    pass


git_repository_p = POINTER(git_repository)
git_repository_p_p = POINTER(git_repository_p)


class git_commit(Structure):
    pass


git_commit_p = POINTER(git_commit)
git_commit_p_p = POINTER(git_commit_p)


class git_annotated_commit(Structure):
    pass


git_annotated_commit_p = POINTER(git_annotated_commit)
git_annotated_commit_p_p = POINTER(git_annotated_commit_p)


class git_odb(Structure):
    pass


git_odb_p = POINTER(git_odb)
git_odb_p_p = POINTER(git_odb_p)


class git_odb_backend(Structure):
    pass


git_odb_backend_p = POINTER(git_odb_backend)
git_odb_backend_p_p = POINTER(git_odb_backend_p)


class git_indexer(Structure):
    pass


git_indexer_p = POINTER(git_indexer)
git_indexer_p_p = POINTER(git_indexer_p)


class git_mailmap(Structure):
    pass


git_mailmap_p = POINTER(git_mailmap)
git_mailmap_p_p = POINTER(git_mailmap_p)


class git_remote(Structure):
    pass


git_remote_p = POINTER(git_remote)
git_remote_p_p = POINTER(git_remote_p)


class git_object(Structure):
    pass


git_object_p = POINTER(git_object)
git_object_p_p = POINTER(git_object_p)


class git_tree(Structure):
    pass


git_tree_p = POINTER(git_tree)
git_tree_p_p = POINTER(git_tree_p)


class git_tree_entry(Structure):
    pass


git_tree_entry_p = POINTER(git_tree_entry)
git_tree_entry_p_p = POINTER(git_tree_entry_p)


class git_index(Structure):
    pass


git_index_p = POINTER(git_index)
git_index_p_p = POINTER(git_index_p)


class git_index_entry(Structure):
    pass


git_index_entry_p = POINTER(git_index_entry)


class git_reference(Structure):
    pass


git_reference_p = POINTER(git_reference)
git_reference_p_p = POINTER(git_reference_p)


class git_revwalk(Structure):
    pass


git_revwalk_p = POINTER(git_revwalk)
git_revwalk_p_p = POINTER(git_revwalk_p)


class git_config(Structure):
    pass


git_config_p = POINTER(git_config)
git_config_p_p = POINTER(git_config_p)


class git_config_entry(Structure):
    # Only the leading fields, the following ones differ between versions.
    _fields_ = (
        ("name", c_char_p),
        ("value", c_char_p),
    )


git_config_entry_p = POINTER(git_config_entry)
git_config_entry_p_p = POINTER(git_config_entry_p)


class git_time(Structure):
    _fields_ = (
        ("time", git_time_t),
        ("offset", c_int),
        ("sign", c_char),
    )


git_time_p = POINTER(git_time)


class git_signature(Structure):
    _fields_ = (
        ("name", c_char_p),
        ("email", c_char_p),
        ("when", git_time),
    )


git_signature_p = POINTER(git_signature)
git_signature_p_p = POINTER(git_signature_p)


class git_indexer_progress(Structure):
    _fields_ = (
        ("total_objects", c_uint),
        ("indexed_objects", c_uint),
        ("received_objects", c_uint),
        ("local_objects", c_uint),
        ("total_deltas", c_uint),
        ("indexed_deltas", c_uint),
        ("received_bytes", c_size_t),
    )


git_indexer_progress_p = POINTER(git_indexer_progress)

git_indexer_progress_cb = CFUNCTYPE(c_int, git_indexer_progress_p, c_void_p)


class git_indexer_options(Structure):
    _fields_ = (
        ("version", c_uint),
        ("progress_cb", git_indexer_progress_cb),
        ("progress_cb_payload", c_void_p),
        ("verify", c_ubyte),
    )


git_indexer_options_p = POINTER(git_indexer_options)


class git_cert(Structure):
    _fields_ = (("cert_type", c_int),)  # really git_cert_t


git_cert_p = POINTER(git_cert)


class git_cert_hostkey(Structure):
    _fields_ = (
        ("parent", git_cert),
        ("type", c_int),  # really git_cert_ssh_t
        ("hash_md5", c_ubyte * 16),
        ("hash_sha1", c_ubyte * 20),
        ("hash_sha256", c_ubyte * 32),
        ("raw_type", c_int),  # really git_cert_ssh_raw_type_t
        ("hostkey", POINTER(c_char)),
        ("hostkey_len", c_size_t),
    )


git_cert_hostkey_p = POINTER(git_cert_hostkey)


class git_cert_x509(Structure):
    _fields_ = (
        ("parent", git_cert),
        ("data", c_void_p),
        ("len", c_size_t),
    )


git_cert_x509_p = POINTER(git_cert_x509)


class git_credential(Structure):
    _fields_ = (
        ("credtype", c_uint),  # really git_credential_t
        ("free", c_void_p),
    )


git_credential_p = POINTER(git_credential)
git_credential_p_p = POINTER(git_credential_p)


class git_push_update(Structure):
    _fields_ = (
        ("src_refname", c_char_p),
        ("dst_refname", c_char_p),
        ("src", git_oid),
        ("dst", git_oid),
    )


git_push_update_p = POINTER(git_push_update)
git_push_update_p_p = POINTER(git_push_update_p)


class git_remote_head(Structure):
    _fields_ = (
        ("local", c_int),
        ("oid", git_oid),
        ("loid", git_oid),
        ("name", c_char_p),
        ("symref_target", c_char_p),
    )


git_remote_head_p = POINTER(git_remote_head)
git_remote_head_p_p = POINTER(git_remote_head_p)


git_index_matched_path_cb = CFUNCTYPE(c_int, c_char_p, c_char_p, c_void_p)
git_tag_foreach_cb = CFUNCTYPE(c_int, c_char_p, git_oid_p, c_void_p)
git_transport_message_cb = CFUNCTYPE(c_int, POINTER(c_char), c_int, c_void_p)
git_credential_acquire_cb = CFUNCTYPE(
    c_int, git_credential_p_p, c_char_p, c_char_p, c_uint, c_void_p
)
git_transport_certificate_check_cb = CFUNCTYPE(c_int, git_cert_p, c_int, c_char_p, c_void_p)
git_push_update_reference_cb = CFUNCTYPE(c_int, c_char_p, c_char_p, c_void_p)
git_push_negotiation = CFUNCTYPE(c_int, git_push_update_p_p, c_size_t, c_void_p)


class git_proxy_options(Structure):
    _fields_ = (
        ("version", c_uint),
        ("type", c_int),  # really git_proxy_t
        ("url", c_char_p),
        ("credentials", git_credential_acquire_cb),
        ("certificate_check", git_transport_certificate_check_cb),
        ("payload", c_void_p),
    )


git_proxy_options_p = POINTER(git_proxy_options)


class git_remote_callbacks(Structure):
    # Only ever passed by pointer, so trailing members added by newer versions (update_refs in
    # 1.8) are harmless for older ones.
    _fields_ = (
        ("version", c_uint),
        ("sideband_progress", git_transport_message_cb),
        ("completion", c_void_p),
        ("credentials", git_credential_acquire_cb),
        ("certificate_check", git_transport_certificate_check_cb),
        ("transfer_progress", git_indexer_progress_cb),
        ("update_tips", c_void_p),
        ("pack_progress", c_void_p),
        ("push_transfer_progress", c_void_p),
        ("push_update_reference", git_push_update_reference_cb),
        ("push_negotiation", git_push_negotiation),
        ("transport", c_void_p),
        ("remote_ready", c_void_p),
        ("payload", c_void_p),
        ("resolve_url", c_void_p),
        ("update_refs", c_void_p),
    )


git_remote_callbacks_p = POINTER(git_remote_callbacks)


# Native function declarations

FUNC_DECLS = {
    "git_annotated_commit_free": (None, (git_annotated_commit_p,)),
    "git_annotated_commit_from_revspec": (
        c_int,
        (git_annotated_commit_p_p, git_repository_p, c_char_p),
    ),
    "git_annotated_commit_id": (git_oid_p, (git_annotated_commit_p,)),
    "git_annotated_commit_lookup": (
        c_int,
        (git_annotated_commit_p_p, git_repository_p, git_oid_p),
    ),
    "git_annotated_commit_ref": (c_char_p, (git_annotated_commit_p,)),
    "git_buf_dispose": (None, (git_buf_p,)),
    "git_commit_author": (git_signature_p, (git_commit_p,)),
    "git_commit_committer": (git_signature_p, (git_commit_p,)),
    "git_commit_free": (None, (git_commit_p,)),
    "git_commit_id": (git_oid_p, (git_commit_p,)),
    "git_commit_lookup": (c_int, (git_commit_p_p, git_repository_p, git_oid_p)),
    "git_commit_message": (c_char_p, (git_commit_p,)),
    "git_commit_message_encoding": (c_char_p, (git_commit_p,)),
    "git_commit_parent_id": (git_oid_p, (git_commit_p, c_uint)),
    "git_commit_parentcount": (c_uint, (git_commit_p,)),
    "git_commit_tree": (c_int, (git_tree_p_p, git_commit_p)),
    "git_commit_tree_id": (git_oid_p, (git_commit_p,)),
    "git_config_delete_entry": (c_int, (git_config_p, c_char_p)),
    "git_config_entry_free": (None, (git_config_entry_p,)),
    "git_config_free": (None, (git_config_p,)),
    "git_config_get_bool": (c_int, (POINTER(c_int), git_config_p, c_char_p)),
    "git_config_get_entry": (c_int, (git_config_entry_p_p, git_config_p, c_char_p)),
    "git_config_get_int64": (c_int, (POINTER(c_int64), git_config_p, c_char_p)),
    "git_config_open_ondisk": (c_int, (git_config_p_p, c_char_p)),
    "git_config_set_bool": (c_int, (git_config_p, c_char_p, c_int)),
    "git_config_set_int64": (c_int, (git_config_p, c_char_p, c_int64)),
    "git_config_set_string": (c_int, (git_config_p, c_char_p, c_char_p)),
    "git_credential_default_new": (c_int, (git_credential_p_p,)),
    "git_credential_free": (None, (git_credential_p,)),
    "git_credential_get_username": (c_char_p, (git_credential_p,)),
    "git_credential_has_username": (c_int, (git_credential_p,)),
    "git_credential_ssh_key_from_agent": (c_int, (git_credential_p_p, c_char_p)),
    "git_credential_ssh_key_memory_new": (
        c_int,
        (git_credential_p_p, c_char_p, c_char_p, c_char_p, c_char_p),
    ),
    "git_credential_ssh_key_new": (
        c_int,
        (git_credential_p_p, c_char_p, c_char_p, c_char_p, c_char_p),
    ),
    "git_credential_username_new": (c_int, (git_credential_p_p, c_char_p)),
    "git_credential_userpass_plaintext_new": (c_int, (git_credential_p_p, c_char_p, c_char_p)),
    "git_error_clear": (None, ()),
    "git_error_last": (git_error_p, ()),
    "git_index_add_all": (
        c_int,
        (git_index_p, git_strarray_p, c_uint, git_index_matched_path_cb, c_void_p),
    ),
    "git_index_add_bypath": (c_int, (git_index_p, c_char_p)),
    "git_index_entrycount": (c_size_t, (git_index_p,)),
    "git_index_free": (None, (git_index_p,)),
    "git_index_get_bypath": (git_index_entry_p, (git_index_p, c_char_p, c_int)),
    "git_index_read": (c_int, (git_index_p, c_int)),
    "git_index_remove_bypath": (c_int, (git_index_p, c_char_p)),
    "git_index_write": (c_int, (git_index_p,)),
    "git_index_write_tree": (c_int, (git_oid_p, git_index_p)),
    "git_indexer_append": (c_int, (git_indexer_p, c_void_p, c_size_t, git_indexer_progress_p)),
    "git_indexer_commit": (c_int, (git_indexer_p, git_indexer_progress_p)),
    "git_indexer_free": (None, (git_indexer_p,)),
    "git_indexer_name": (c_char_p, (git_indexer_p,)),
    "git_indexer_new": (
        c_int,
        (git_indexer_p_p, c_char_p, c_uint, git_odb_p, git_indexer_options_p),
    ),
    "git_indexer_options_init": (c_int, (git_indexer_options_p, c_uint)),
    "git_libgit2_features": (c_int, ()),
    "git_libgit2_init": (c_int, ()),
    "git_libgit2_opts": (c_int, (c_int,)),  # variadic
    "git_libgit2_shutdown": (c_int, ()),
    "git_libgit2_version": (c_int, (POINTER(c_int), POINTER(c_int), POINTER(c_int))),
    "git_mailmap_add_entry": (
        c_int,
        (git_mailmap_p, c_char_p, c_char_p, c_char_p, c_char_p),
    ),
    "git_mailmap_free": (None, (git_mailmap_p,)),
    "git_mailmap_from_buffer": (c_int, (git_mailmap_p_p, c_char_p, c_size_t)),
    "git_mailmap_from_repository": (c_int, (git_mailmap_p_p, git_repository_p)),
    "git_mailmap_new": (c_int, (git_mailmap_p_p,)),
    "git_mailmap_resolve_signature": (
        c_int,
        (git_signature_p_p, git_mailmap_p, git_signature_p),
    ),
    "git_mempack_dump": (c_int, (git_buf_p, git_repository_p, git_odb_backend_p)),
    "git_mempack_new": (c_int, (git_odb_backend_p_p,)),
    "git_mempack_reset": (c_int, (git_odb_backend_p,)),
    "git_merge_bases": (c_int, (git_oidarray_p, git_repository_p, git_oid_p, git_oid_p)),
    "git_odb_add_backend": (c_int, (git_odb_p, git_odb_backend_p, c_int)),
    "git_odb_exists": (c_int, (git_odb_p, git_oid_p)),
    "git_odb_free": (None, (git_odb_p,)),
    "git_odb_write": (c_int, (git_oid_p, git_odb_p, c_void_p, c_size_t, git_object_t)),
    "git_oid_fmt": (c_int, (c_char_p, git_oid_p)),
    "git_oid_fromstrp": (c_int, (git_oid_p, c_char_p)),
    "git_oidarray_dispose": (None, (git_oidarray_p,)),
    "git_proxy_options_init": (c_int, (git_proxy_options_p, c_uint)),
    "git_reference_free": (None, (git_reference_p,)),
    "git_reference_lookup": (c_int, (git_reference_p_p, git_repository_p, c_char_p)),
    "git_reference_name": (c_char_p, (git_reference_p,)),
    "git_reference_name_to_id": (c_int, (git_oid_p, git_repository_p, c_char_p)),
    "git_reference_peel": (c_int, (git_object_p_p, git_reference_p, git_object_t)),
    "git_reference_resolve": (c_int, (git_reference_p_p, git_reference_p)),
    "git_reference_shorthand": (c_char_p, (git_reference_p,)),
    "git_reference_symbolic_create": (
        c_int,
        (git_reference_p_p, git_repository_p, c_char_p, c_char_p, c_int, c_char_p),
    ),
    "git_reference_symbolic_target": (c_char_p, (git_reference_p,)),
    "git_reference_target": (git_oid_p, (git_reference_p,)),
    "git_reference_type": (git_reference_t, (git_reference_p,)),
    "git_remote_connect": (
        c_int,
        (git_remote_p, git_direction, git_remote_callbacks_p, git_proxy_options_p, git_strarray_p),
    ),
    "git_remote_connected": (c_int, (git_remote_p,)),
    "git_remote_create_anonymous": (c_int, (git_remote_p_p, git_repository_p, c_char_p)),
    "git_remote_disconnect": (c_int, (git_remote_p,)),
    "git_remote_free": (None, (git_remote_p,)),
    "git_remote_init_callbacks": (c_int, (git_remote_callbacks_p, c_uint)),
    "git_remote_ls": (c_int, (POINTER(git_remote_head_p_p), POINTER(c_size_t), git_remote_p)),
    "git_remote_url": (c_char_p, (git_remote_p,)),
    "git_repository_config": (c_int, (git_config_p_p, git_repository_p)),
    "git_repository_free": (None, (git_repository_p,)),
    "git_repository_head": (c_int, (git_reference_p_p, git_repository_p)),
    "git_repository_index": (c_int, (git_index_p_p, git_repository_p)),
    "git_repository_init": (c_int, (git_repository_p_p, c_char_p, c_uint)),
    "git_repository_odb": (c_int, (git_odb_p_p, git_repository_p)),
    "git_repository_open_ext": (c_int, (git_repository_p_p, c_char_p, c_uint, c_char_p)),
    "git_repository_path": (c_char_p, (git_repository_p,)),
    "git_repository_workdir": (c_char_p, (git_repository_p,)),
    "git_revwalk_free": (None, (git_revwalk_p,)),
    "git_revwalk_hide": (c_int, (git_revwalk_p, git_oid_p)),
    "git_revwalk_new": (c_int, (git_revwalk_p_p, git_repository_p)),
    "git_revwalk_next": (c_int, (git_oid_p, git_revwalk_p)),
    "git_revwalk_push": (c_int, (git_revwalk_p, git_oid_p)),
    "git_revwalk_push_head": (c_int, (git_revwalk_p,)),
    "git_revwalk_reset": (c_int, (git_revwalk_p,)),
    "git_revwalk_sorting": (c_int, (git_revwalk_p, c_uint)),
    "git_signature_default": (c_int, (git_signature_p_p, git_repository_p)),
    "git_signature_free": (None, (git_signature_p,)),
    "git_signature_new": (c_int, (git_signature_p_p, c_char_p, c_char_p, git_time_t, c_int)),
    "git_signature_now": (c_int, (git_signature_p_p, c_char_p, c_char_p)),
    "git_strarray_dispose": (None, (git_strarray_p,)),
    "git_tag_foreach": (c_int, (git_repository_p, git_tag_foreach_cb, c_void_p)),
    "git_tree_entry_byindex": (git_tree_entry_p, (git_tree_p, c_size_t)),
    "git_tree_entry_bypath": (c_int, (git_tree_entry_p_p, git_tree_p, c_char_p)),
    "git_tree_entry_filemode": (git_filemode_t, (git_tree_entry_p,)),
    "git_tree_entry_free": (None, (git_tree_entry_p,)),
    "git_tree_entry_id": (git_oid_p, (git_tree_entry_p,)),
    "git_tree_entry_name": (c_char_p, (git_tree_entry_p,)),
    "git_tree_entry_type": (git_object_t, (git_tree_entry_p,)),
    "git_tree_entrycount": (c_size_t, (git_tree_p,)),
    "git_tree_free": (None, (git_tree_p,)),
    "git_tree_id": (git_oid_p, (git_tree_p,)),
    "git_tree_lookup": (c_int, (git_tree_p_p, git_repository_p, git_oid_p)),
}


# Process-wide library state


class LibraryState:
    """Process-wide state of the loaded libgit2.

    The library is loaded on first use. Calls to :meth:`init` and
    :meth:`shutdown` nest; libgit2 performs its global setup on the first
    and its teardown on the last. Both are serialized through :attr:`lock`,
    which the `settings` module also holds while mutating global options.
    """

    def __init__(
        self,
        name: str = "git2",
        *,
        known_versions: Optional[tuple[tuple[int]]] = LIBGIT2_KNOWN_VERSIONS,
        load_unknown: bool = True,
    ) -> None:
        self.name = name
        self.known_versions = known_versions
        self.load_unknown = load_unknown

        self.lock = RLock()

        self.lib: Optional[CDLL] = None
        self.soname: Optional[str] = None
        self.version: Optional[str] = None
        self.version_tuple: Optional[tuple[int]] = None

        self._count = 0
        self._implicit = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(soname={self.soname!r}, count={self._count})"

    @property
    def count(self) -> int:
        return self._count

    @property
    def initialized(self) -> bool:
        return self._count > 0

    def load(self) -> CDLL:
        with self.lock:
            if self.lib is None:
                loaded = load_lib(
                    self.name, known_versions=self.known_versions, load_unknown=self.load_unknown
                )
                install_func_decls(loaded.cdll, FUNC_DECLS)
                self.soname = loaded.soname
                self.version = loaded.version
                self.version_tuple = loaded.version_tuple
                self.lib = loaded.cdll
            return self.lib

    def init(self) -> int:
        with self.lock:
            lib = self.load()
            result = lib.git_libgit2_init()
            if result < 0:
                raise LibError(f"Initializing {self.soname} failed: {result}")
            self._count += 1
            if self._count == 1:
                log.debug("Initialized %s", self.soname)
            return self._count

    def shutdown(self) -> int:
        with self.lock:
            if self._count <= int(self._implicit):
                raise LibError("shutdown() called without matching init()")
            result = self.lib.git_libgit2_shutdown()
            if result < 0:
                raise LibError(f"Shutting down {self.soname} failed: {result}")
            self._count -= 1
            if not self._count:
                log.debug("Shut down %s", self.soname)
            return self._count

    def ensure_initialized(self) -> CDLL:
        """Initialize the library once on behalf of all wrappers.

        This reference is never released because wrapped handles may be
        alive anywhere in the process.
        """
        if self._implicit:
            return self.lib

        with self.lock:
            if not self._implicit:
                self.init()
                self._implicit = True

        return self.lib


state = LibraryState()


class LazyLib:
    """Stand-in for the libgit2 library object, initializing it on first use."""

    def __init__(self, library_state: LibraryState) -> None:
        self._state = library_state

    def __getattr__(self, name: str):
        return getattr(self._state.ensure_initialized(), name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._state!r})"


lib = LazyLib(state)
