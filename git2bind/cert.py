"""Binding layer for libgit2 - Certificates

Certificates are only ever handed to a certificate check callback and are
borrowed from libgit2 for the duration of the call.
"""

from ctypes import cast, string_at
from enum import Enum
from typing import Optional

from .native_adaptation import (
    git_cert_hostkey_p,
    git_cert_p,
    git_cert_ssh_raw_type_t,
    git_cert_ssh_t,
    git_cert_t,
    git_cert_x509_p,
    git_error_code,
)
from .wrapper import WrapperOfWrappings


class CertificateCheckStatus(Enum):
    """What a certificate check callback can return besides `True`/`False`."""

    ACCEPT = 0
    REJECT = git_error_code.ECERTIFICATE
    # Let libgit2 decide, as if no callback had been set.
    PASSTHROUGH = git_error_code.PASSTHROUGH


class SshHostKeyType(Enum):
    UNKNOWN = git_cert_ssh_raw_type_t.UNKNOWN
    RSA = git_cert_ssh_raw_type_t.RSA
    DSS = git_cert_ssh_raw_type_t.DSS
    ECDSA_256 = git_cert_ssh_raw_type_t.KEY_ECDSA_256
    ECDSA_384 = git_cert_ssh_raw_type_t.KEY_ECDSA_384
    ECDSA_521 = git_cert_ssh_raw_type_t.KEY_ECDSA_521
    ED25519 = git_cert_ssh_raw_type_t.KEY_ED25519

    @property
    def key_name(self) -> Optional[str]:
        """The algorithm name as used in `known_hosts`."""
        return _KEY_NAMES.get(self)

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]


_KEY_NAMES = {
    SshHostKeyType.RSA: "ssh-rsa",
    SshHostKeyType.DSS: "ssh-dss",
    SshHostKeyType.ECDSA_256: "ecdsa-sha2-nistp256",
    SshHostKeyType.ECDSA_384: "ecdsa-sha2-nistp384",
    SshHostKeyType.ECDSA_521: "ecdsa-sha2-nistp521",
    SshHostKeyType.ED25519: "ssh-ed25519",
}

_SHORT_NAMES = {
    SshHostKeyType.UNKNOWN: "Unknown",
    SshHostKeyType.RSA: "RSA",
    SshHostKeyType.DSS: "DSA",
    SshHostKeyType.ECDSA_256: "ECDSA",
    SshHostKeyType.ECDSA_384: "ECDSA",
    SshHostKeyType.ECDSA_521: "ECDSA",
    SshHostKeyType.ED25519: "ED25519",
}


class Cert(WrapperOfWrappings):
    """A certificate presented by a remote, of any type."""

    _real_native: Optional[git_cert_p] = None

    def __init__(self, native: git_cert_p) -> None:
        super().__init__(native=native, _must_free=False)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cert_type={self.cert_type!r})"

    @property
    def cert_type(self) -> git_cert_t:
        return git_cert_t(self._native.contents.cert_type)

    def as_hostkey(self) -> Optional["CertHostkey"]:
        if self.cert_type != git_cert_t.HOSTKEY_LIBSSH2:
            return None
        return CertHostkey._from_native(
            cast(self._native, git_cert_hostkey_p), _must_free=False, _owner=self
        )

    def as_x509(self) -> Optional["CertX509"]:
        if self.cert_type != git_cert_t.X509:
            return None
        return CertX509._from_native(
            cast(self._native, git_cert_x509_p), _must_free=False, _owner=self
        )


class CertHostkey(WrapperOfWrappings):
    """An SSH host key certificate.

    Each hash or the raw key is only present if libgit2 flagged it as
    available, otherwise the accessor returns None.
    """

    _real_native: Optional[git_cert_hostkey_p] = None

    @property
    def _available(self) -> git_cert_ssh_t:
        return git_cert_ssh_t(self._native.contents.type)

    def _hash(self, flag: git_cert_ssh_t, field: str) -> Optional[bytes]:
        if not self._available & flag:
            return None
        return bytes(getattr(self._native.contents, field))

    @property
    def hash_md5(self) -> Optional[bytes]:
        return self._hash(git_cert_ssh_t.MD5, "hash_md5")

    @property
    def hash_sha1(self) -> Optional[bytes]:
        return self._hash(git_cert_ssh_t.SHA1, "hash_sha1")

    @property
    def hash_sha256(self) -> Optional[bytes]:
        return self._hash(git_cert_ssh_t.SHA256, "hash_sha256")

    @property
    def hostkey(self) -> Optional[bytes]:
        if not self._available & git_cert_ssh_t.RAW:
            return None
        contents = self._native.contents
        return string_at(contents.hostkey, contents.hostkey_len)

    @property
    def hostkey_type(self) -> Optional[SshHostKeyType]:
        if not self._available & git_cert_ssh_t.RAW:
            return None
        try:
            return SshHostKeyType(git_cert_ssh_raw_type_t(self._native.contents.raw_type))
        except ValueError:
            return SshHostKeyType.UNKNOWN


class CertX509(WrapperOfWrappings):
    """An X.509 certificate, DER encoded."""

    _real_native: Optional[git_cert_x509_p] = None

    @property
    def data(self) -> bytes:
        contents = self._native.contents
        if not contents.data:
            return b""
        return string_at(contents.data, contents.len)
