"""Binding layer for libgit2 - Credential

Credentials are usually created in a credentials callback and handed over
to libgit2, which frees them once it’s done authenticating.
"""

from ctypes import byref
from typing import Optional

from .native_adaptation import git_credential_p, git_credential_t, lib
from .wrapper import PathTypes, StrTypes, WrapperOfWrappings, from_cstr, to_cstr, to_cstr_opt


class Credential(WrapperOfWrappings):
    """Represent authentication data for a remote."""

    _libgit2_native_finalizer = "git_credential_free"

    _real_native: Optional[git_credential_p] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(credtype={self.credtype!r})"

    @classmethod
    def _new(cls, func_name: str, *args) -> "Credential":
        native = git_credential_p()
        error_code = getattr(lib, func_name)(byref(native), *args)
        cls.raise_if_error(error_code, "Can’t create credential: {message}")
        return cls._from_native(native)

    @classmethod
    def default(cls) -> "Credential":
        """Credentials for default (NTLM/Negotiate) authentication."""
        return cls._new("git_credential_default_new")

    @classmethod
    def userpass_plaintext(cls, username: StrTypes, password: StrTypes) -> "Credential":
        return cls._new(
            "git_credential_userpass_plaintext_new", to_cstr(username), to_cstr(password)
        )

    @classmethod
    def username(cls, username: StrTypes) -> "Credential":
        """Only a username, for protocols which ask for it before anything else."""
        return cls._new("git_credential_username_new", to_cstr(username))

    @classmethod
    def ssh_key_from_agent(cls, username: StrTypes) -> "Credential":
        return cls._new("git_credential_ssh_key_from_agent", to_cstr(username))

    @classmethod
    def ssh_key(
        cls,
        username: StrTypes,
        publickey: Optional[PathTypes],
        privatekey: PathTypes,
        passphrase: Optional[StrTypes] = None,
    ) -> "Credential":
        return cls._new(
            "git_credential_ssh_key_new",
            to_cstr(username),
            to_cstr_opt(publickey, path=True),
            to_cstr(privatekey, path=True),
            to_cstr_opt(passphrase),
        )

    @classmethod
    def ssh_key_from_memory(
        cls,
        username: StrTypes,
        publickey: Optional[StrTypes],
        privatekey: StrTypes,
        passphrase: Optional[StrTypes] = None,
    ) -> "Credential":
        return cls._new(
            "git_credential_ssh_key_memory_new",
            to_cstr(username),
            to_cstr_opt(publickey),
            to_cstr(privatekey),
            to_cstr_opt(passphrase),
        )

    @property
    def credtype(self) -> git_credential_t:
        return git_credential_t(self._native.contents.credtype)

    def has_username(self) -> bool:
        return bool(lib.git_credential_has_username(self._native))

    def get_username(self) -> Optional[str]:
        return from_cstr(lib.git_credential_get_username(self._native))
