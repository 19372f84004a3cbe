from ctypes import c_void_p, cast
from pathlib import Path
from unittest import mock

import pytest

from git2bind import remote as remote_module
from git2bind.exc import GitError, LifetimeError
from git2bind.native_adaptation import git_direction, git_error_code, git_proxy_t
from git2bind.proxy_options import ProxyOptions
from git2bind.remote import Remote, RemoteHead
from git2bind.remote_callbacks import (
    RemoteCallbacks,
    _certificate_check_cb,
    _credentials_cb,
    _transfer_progress_cb,
)
from git2bind.repository import Repository

from ..common import git


@pytest.fixture
def local_repo(tmp_path: Path, native_lib) -> Repository:
    return Repository.init_repository(tmp_path / "local")


@pytest.fixture
def remote(local_repo: Repository, repo_root: Path) -> Remote:
    return local_repo.remote_anonymous(str(repo_root))


class TestRemote:
    def test_remote_anonymous(self, remote: Remote, repo_root: Path) -> None:
        assert remote.url == str(repo_root)
        assert not remote.connected
        assert repr(remote) == f"Remote(url={str(repo_root)!r})"

    def test_connect_list_disconnect(
        self, remote: Remote, local_repo: Repository, repo_root: Path
    ) -> None:
        head = git(repo_root, "rev-parse", "HEAD")

        assert remote.connect() is remote
        assert remote.connected
        assert remote.repo is local_repo

        heads = remote.list()

        assert all(isinstance(h, RemoteHead) for h in heads)
        by_name = {h.name: h for h in heads}
        assert by_name["HEAD"].oid == head
        assert by_name["refs/heads/main"].oid == head
        assert by_name["refs/heads/main"].symref_target is None
        # Nothing has been fetched into the local repository.
        assert not by_name["refs/heads/main"].local
        assert by_name["refs/heads/main"].loid is None

        remote.disconnect()

        assert not remote.connected
        for h in heads:
            with pytest.raises(LifetimeError):
                h.name

    def test_connect_with_options(self, remote: Remote) -> None:
        callbacks = RemoteCallbacks().sideband_progress(lambda data: None)
        proxy_options = ProxyOptions()

        remote.connect(git_direction.FETCH, callbacks=callbacks, proxy_options=proxy_options)

        assert remote._callbacks is callbacks
        assert remote._proxy_options is proxy_options

        remote.disconnect()

        assert remote._callbacks is None
        assert remote._proxy_options is None

    def test_connect_fails(self, local_repo: Repository, tmp_path: Path) -> None:
        remote = local_repo.remote_anonymous(str(tmp_path / "does-not-exist"))

        with pytest.raises(GitError, match="Can’t connect to remote"):
            remote.connect()

        assert not remote.connected

    def test_connect_stopped_by_callback(self, remote: Remote) -> None:
        callbacks = RemoteCallbacks().certificate_check(lambda cert, valid, host: False)

        # The local transport doesn’t check certificates, stand in for one which does.
        with mock.patch.object(
            remote_module.lib, "git_remote_connect", return_value=git_error_code.EUSER
        ):
            assert remote.connect(callbacks=callbacks) is remote

        assert not remote.connected
        assert remote._callbacks is None

    def test_close_expires_heads(self, remote: Remote) -> None:
        heads = remote.connect().list()
        assert heads

        remote.close()

        with pytest.raises(LifetimeError):
            heads[0].oid
        with pytest.raises(LifetimeError):
            remote.connected


class TestRemoteCallbacks:
    def test_chaining(self) -> None:
        def callback(*args):
            pass

        callbacks = (
            RemoteCallbacks()
            .credentials(callback)
            .certificate_check(callback)
            .transfer_progress(callback)
            .sideband_progress(callback)
            .push_negotiation(callback)
            .push_update_reference(callback)
        )

        assert repr(callbacks) == (
            "RemoteCallbacks(credentials, certificate_check, transfer_progress,"
            + " sideband_progress, push_negotiation, push_update_reference)"
        )

    def test__to_native(self, native_lib) -> None:
        callbacks = RemoteCallbacks().credentials(lambda url, username, allowed: None)

        native = callbacks._to_native()

        assert native.version == 1
        assert cast(native.credentials, c_void_p).value == cast(_credentials_cb, c_void_p).value
        # Unset callbacks stay NULL
        assert not native.certificate_check
        assert not native.transfer_progress
        assert native.payload == callbacks._payload.as_parameter.value

        # The payload is created once.
        assert callbacks._to_native().payload == native.payload

    def test__to_native_all(self, native_lib) -> None:
        callbacks = (
            RemoteCallbacks()
            .certificate_check(lambda cert, valid, host: True)
            .transfer_progress(lambda stats: None)
        )

        native = callbacks._to_native()

        assert (
            cast(native.certificate_check, c_void_p).value
            == cast(_certificate_check_cb, c_void_p).value
        )
        assert (
            cast(native.transfer_progress, c_void_p).value
            == cast(_transfer_progress_cb, c_void_p).value
        )
        assert not native.credentials


class TestProxyOptions:
    def test_default(self, native_lib) -> None:
        native = ProxyOptions()._to_native()

        assert native.type == git_proxy_t.NONE
        assert native.url is None

    def test_auto(self, native_lib) -> None:
        native = ProxyOptions().url("http://proxy.example.com:3128").auto()._to_native()

        assert native.type == git_proxy_t.AUTO
        assert native.url is None

    def test_url(self, native_lib) -> None:
        proxy_options = ProxyOptions().url("http://proxy.example.com:3128")
        native = proxy_options._to_native()

        assert native.type == git_proxy_t.SPECIFIED
        assert native.url == b"http://proxy.example.com:3128"
        assert "SPECIFIED" in repr(proxy_options)
