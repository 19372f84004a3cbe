from ctypes import POINTER, addressof, byref, c_char, cast, create_string_buffer, pointer
from random import randbytes

import pytest

from git2bind import panic
from git2bind.cert import Cert, CertHostkey, CertificateCheckStatus, CertX509, SshHostKeyType
from git2bind.cred import Credential
from git2bind.exc import LifetimeError
from git2bind.native_adaptation import (
    git_cert,
    git_cert_hostkey,
    git_cert_p,
    git_cert_ssh_raw_type_t,
    git_cert_ssh_t,
    git_cert_t,
    git_cert_x509,
    git_credential_p,
    git_credential_t,
    git_error_code,
    git_indexer_progress,
    git_oid,
    git_push_update,
    git_push_update_p,
    lib,
)
from git2bind.oid import Oid
from git2bind.panic import CallbackPayload
from git2bind.remote_callbacks import (
    RemoteCallbacks,
    _certificate_check_cb,
    _credentials_cb,
    _push_negotiation_cb,
    _push_update_reference_cb,
    _sideband_progress_cb,
    _transfer_progress_cb,
)

HOSTKEY = b"AAAAC3NzaC1lZDI1NTE5AAAAIOMqqnkVzrm0SdG6UOoqKLsabgH5C9okWi0dh2l9GKJl"
SHA256 = bytes(range(32))
DER = b"\x30\x82\x01\x0a"


def as_cert_p(native) -> git_cert_p:
    return cast(pointer(native), git_cert_p)


@pytest.fixture
def hostkey_cert() -> git_cert_hostkey:
    key_buffer = create_string_buffer(HOSTKEY, len(HOSTKEY))
    native = git_cert_hostkey(
        parent=git_cert(cert_type=git_cert_t.HOSTKEY_LIBSSH2),
        type=git_cert_ssh_t.SHA256 | git_cert_ssh_t.RAW,
        raw_type=git_cert_ssh_raw_type_t.KEY_ED25519,
        hostkey=cast(key_buffer, POINTER(c_char)),
        hostkey_len=len(HOSTKEY),
    )
    native.hash_sha256[:] = list(SHA256)
    # The struct only points to the key.
    native.key_buffer = key_buffer
    return native


@pytest.fixture
def x509_cert() -> git_cert_x509:
    data = create_string_buffer(DER, len(DER))
    native = git_cert_x509(
        parent=git_cert(cert_type=git_cert_t.X509), data=addressof(data), len=len(DER)
    )
    native.data_buffer = data
    return native


class TestCert:
    def test_hostkey(self, hostkey_cert: git_cert_hostkey) -> None:
        cert = Cert(as_cert_p(hostkey_cert))

        assert cert.cert_type == git_cert_t.HOSTKEY_LIBSSH2
        assert cert.as_x509() is None

        hostkey = cert.as_hostkey()

        assert isinstance(hostkey, CertHostkey)
        assert hostkey.hash_md5 is None
        assert hostkey.hash_sha1 is None
        assert hostkey.hash_sha256 == SHA256
        assert hostkey.hostkey == HOSTKEY
        assert hostkey.hostkey_type is SshHostKeyType.ED25519
        assert hostkey.hostkey_type.key_name == "ssh-ed25519"
        assert hostkey.hostkey_type.short_name == "ED25519"

        cert.close()

        with pytest.raises(LifetimeError):
            hostkey.hash_sha256

    def test_hostkey_without_raw_key(self, hostkey_cert: git_cert_hostkey) -> None:
        hostkey_cert.type = git_cert_ssh_t.MD5

        hostkey = Cert(as_cert_p(hostkey_cert)).as_hostkey()

        assert hostkey.hash_md5 == bytes(16)
        assert hostkey.hash_sha256 is None
        assert hostkey.hostkey is None
        assert hostkey.hostkey_type is None

    def test_hostkey_unknown_type(self, hostkey_cert: git_cert_hostkey) -> None:
        hostkey_cert.raw_type = 1000

        hostkey_type = Cert(as_cert_p(hostkey_cert)).as_hostkey().hostkey_type

        assert hostkey_type is SshHostKeyType.UNKNOWN
        assert hostkey_type.key_name is None

    def test_x509(self, x509_cert: git_cert_x509) -> None:
        cert = Cert(as_cert_p(x509_cert))

        assert cert.cert_type == git_cert_t.X509
        assert cert.as_hostkey() is None
        x509 = cert.as_x509()
        assert isinstance(x509, CertX509)
        assert x509.data == DER
        assert "X509" in repr(cert)


class TestCertificateCheckCallback:
    @pytest.mark.parametrize(
        "result, expected",
        (
            pytest.param(True, git_error_code.OK, id="accept"),
            pytest.param(CertificateCheckStatus.ACCEPT, git_error_code.OK, id="accept-status"),
            pytest.param(False, git_error_code.EUSER, id="reject"),
            pytest.param(
                CertificateCheckStatus.REJECT, git_error_code.ECERTIFICATE, id="reject-status"
            ),
            pytest.param(
                CertificateCheckStatus.PASSTHROUGH, git_error_code.PASSTHROUGH, id="passthrough"
            ),
        ),
    )
    def test_result(self, result, expected: int, hostkey_cert: git_cert_hostkey) -> None:
        seen = []

        def check(cert: Cert, valid: bool, host: str):
            seen.append((cert, valid, host, cert.as_hostkey().hostkey))
            return result

        payload = CallbackPayload(RemoteCallbacks().certificate_check(check))

        assert _certificate_check_cb(as_cert_p(hostkey_cert), 1, b"example.com", payload) == (
            expected
        )

        ((cert, valid, host, key),) = seen
        assert valid is True
        assert host == "example.com"
        assert key == HOSTKEY

        # Only valid during the callback
        with pytest.raises(LifetimeError):
            cert.cert_type

    def test_raises(self, hostkey_cert: git_cert_hostkey) -> None:
        def check(cert: Cert, valid: bool, host: str):
            raise ValueError("Unknown host")

        payload = CallbackPayload(RemoteCallbacks().certificate_check(check))

        assert _certificate_check_cb(as_cert_p(hostkey_cert), 0, b"example.com", payload) == -1

        with pytest.raises(ValueError, match="Unknown host"):
            panic.check()


@pytest.mark.usefixtures("native_lib")
class TestCredential:
    def test_userpass_plaintext(self) -> None:
        cred = Credential.userpass_plaintext("user", "secret")

        assert cred.credtype == git_credential_t.USERPASS_PLAINTEXT
        assert cred.has_username()
        assert cred.get_username() == "user"
        assert "USERPASS_PLAINTEXT" in repr(cred)

    def test_username(self) -> None:
        cred = Credential.username("git")

        assert cred.credtype == git_credential_t.USERNAME
        assert cred.get_username() == "git"

    def test_default(self) -> None:
        cred = Credential.default()

        assert cred.credtype == git_credential_t.DEFAULT
        assert not cred.has_username()
        assert cred.get_username() is None


@pytest.mark.usefixtures("native_lib")
class TestCredentialsCallback:
    def call(self, callback, allowed: git_credential_t) -> tuple[int, git_credential_p]:
        out = git_credential_p()
        payload = CallbackPayload(RemoteCallbacks().credentials(callback))
        result = _credentials_cb(
            byref(out), b"https://git@example.com/repo.git", b"git", allowed, payload
        )
        return result, out

    def test_credential_handed_over(self) -> None:
        seen = []

        def callback(url: str, username: str, allowed: git_credential_t) -> Credential:
            seen.append((url, username, allowed))
            cred = Credential.userpass_plaintext(username, "secret")
            seen.append(cred)
            return cred

        result, out = self.call(
            callback, git_credential_t.USERPASS_PLAINTEXT | git_credential_t.SSH_KEY
        )

        assert result == git_error_code.OK
        assert out
        (url, username, allowed), cred = seen
        assert url == "https://git@example.com/repo.git"
        assert username == "git"
        assert allowed == git_credential_t.USERPASS_PLAINTEXT | git_credential_t.SSH_KEY

        # Ownership went to the caller.
        with pytest.raises(LifetimeError):
            cred.credtype
        lib.git_credential_free(out)

    def test_no_credential(self) -> None:
        result, out = self.call(lambda url, username, allowed: None, git_credential_t.SSH_KEY)

        assert result == git_error_code.PASSTHROUGH
        assert not out

    def test_credential_not_allowed(self) -> None:
        result, out = self.call(
            lambda url, username, allowed: Credential.username(username),
            git_credential_t.SSH_KEY,
        )

        assert result == git_error_code.PASSTHROUGH
        assert not out

    def test_raises(self) -> None:
        def callback(url: str, username: str, allowed: git_credential_t) -> Credential:
            raise PermissionError("No credentials for you")

        result, out = self.call(callback, git_credential_t.USERNAME)

        assert result == -1
        assert not out
        with pytest.raises(PermissionError):
            panic.check()


class TestOtherCallbacks:
    def test_sideband_progress(self) -> None:
        messages = []
        payload = CallbackPayload(RemoteCallbacks().sideband_progress(messages.append))
        data = create_string_buffer(b"Counting objects: 5, done.\n")

        assert _sideband_progress_cb(data, 10, payload) == 0
        assert messages == [b"Counting o"]

    def test_transfer_progress(self) -> None:
        progress = []

        def callback(stats) -> bool:
            progress.append(stats.to_owned())
            return len(progress) < 2

        payload = CallbackPayload(RemoteCallbacks().transfer_progress(callback))
        stats = git_indexer_progress(total_objects=10, received_objects=1)

        assert _transfer_progress_cb(pointer(stats), payload) == 0
        stats.received_objects = 2
        assert _transfer_progress_cb(pointer(stats), payload) == git_error_code.EUSER

        assert [p.received_objects for p in progress] == [1, 2]

    def test_push_negotiation(self) -> None:
        src, dst = randbytes(20), randbytes(20)
        update = git_push_update(
            src_refname=b"refs/heads/main",
            dst_refname=b"refs/heads/upstream",
            src=git_oid.from_buffer_copy(src),
            dst=git_oid.from_buffer_copy(dst),
        )
        updates = (git_push_update_p * 1)(pointer(update))
        seen = []

        def callback(push_updates) -> None:
            seen.extend(push_updates)
            for u in push_updates:
                assert u.src_refname == "refs/heads/main"
                assert u.dst_refname == "refs/heads/upstream"
                assert u.src == Oid.from_raw(src)

        payload = CallbackPayload(RemoteCallbacks().push_negotiation(callback))

        assert _push_negotiation_cb(updates, 1, payload) == 0
        assert not panic.panicked()

        (wrapped,) = seen
        with pytest.raises(LifetimeError):
            wrapped.dst

    def test_push_update_reference(self) -> None:
        results = {}

        def callback(refname: str, status) -> None:
            results[refname] = status

        payload = CallbackPayload(RemoteCallbacks().push_update_reference(callback))

        assert _push_update_reference_cb(b"refs/heads/main", None, payload) == 0
        assert _push_update_reference_cb(b"refs/heads/other", b"rejected", payload) == 0

        assert results == {"refs/heads/main": None, "refs/heads/other": "rejected"}
