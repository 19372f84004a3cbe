"""Binding layer for libgit2 - RemoteCallbacks

Python callbacks for talking to a remote. Each setter returns the builder so
calls can be chained:

    callbacks = (
        RemoteCallbacks()
        .credentials(lambda url, username, allowed: Credential.username("git"))
        .sideband_progress(print)
    )
"""

import logging
from ctypes import byref, string_at
from typing import Callable, Optional, Union

from .cert import Cert, CertificateCheckStatus
from .constants import GIT_REMOTE_CALLBACKS_VERSION
from .cred import Credential
from .indexer import IndexerProgress, _transfer_progress_cb
from .native_adaptation import (
    git_cert_p,
    git_credential_acquire_cb,
    git_credential_p_p,
    git_credential_t,
    git_error_code,
    git_push_negotiation,
    git_push_update_p_p,
    git_push_update_reference_cb,
    git_remote_callbacks,
    git_transport_certificate_check_cb,
    git_transport_message_cb,
    lib,
)
from .panic import CallbackPayload, callback_status, trampoline
from .push_update import PushUpdate
from .wrapper import LibraryUser, from_cstr

log = logging.getLogger(__name__)

CredentialsCallback = Callable[[str, Optional[str], git_credential_t], Optional[Credential]]
CertificateCheckCallback = Callable[[Cert, bool, str], Union[bool, CertificateCheckStatus, None]]
TransferProgressCallback = Callable[[IndexerProgress], Optional[bool]]
SidebandProgressCallback = Callable[[bytes], Optional[bool]]
PushNegotiationCallback = Callable[[list[PushUpdate]], Optional[bool]]
PushUpdateReferenceCallback = Callable[[str, Optional[str]], Optional[bool]]


@trampoline(git_credential_acquire_cb)
def _credentials_cb(
    out: git_credential_p_p,
    url: Optional[bytes],
    username_from_url: Optional[bytes],
    allowed_types: int,
    payload: int,
) -> int:
    callbacks = CallbackPayload.unbox(payload)
    allowed = git_credential_t(allowed_types)

    credential = callbacks._credentials(from_cstr(url), from_cstr(username_from_url), allowed)
    if credential is None:
        return git_error_code.PASSTHROUGH

    if not credential.credtype & allowed:
        log.debug("Ignoring credential of type %r, allowed: %r", credential.credtype, allowed)
        return git_error_code.PASSTHROUGH

    # libgit2 frees the credential once it’s done with it.
    out[0] = credential._disown()
    return git_error_code.OK


@trampoline(git_transport_certificate_check_cb)
def _certificate_check_cb(
    cert: git_cert_p, valid: int, host: Optional[bytes], payload: int
) -> int:
    callbacks = CallbackPayload.unbox(payload)
    with Cert(cert) as wrapped:
        return callback_status(callbacks._certificate_check(wrapped, bool(valid), from_cstr(host)))


@trampoline(git_transport_message_cb)
def _sideband_progress_cb(data, length: int, payload: int) -> int:
    callbacks = CallbackPayload.unbox(payload)
    return callback_status(callbacks._sideband_progress(string_at(data, length)))


@trampoline(git_push_negotiation)
def _push_negotiation_cb(updates: git_push_update_p_p, length: int, payload: int) -> int:
    callbacks = CallbackPayload.unbox(payload)
    wrapped = [PushUpdate._from_native(updates[i], _must_free=False) for i in range(length)]
    try:
        return callback_status(callbacks._push_negotiation(wrapped))
    finally:
        for update in wrapped:
            update.close()


@trampoline(git_push_update_reference_cb)
def _push_update_reference_cb(
    refname: Optional[bytes], status: Optional[bytes], payload: int
) -> int:
    callbacks = CallbackPayload.unbox(payload)
    return callback_status(
        callbacks._push_update_reference(from_cstr(refname), from_cstr(status))
    )


class RemoteCallbacks(LibraryUser):
    """Callbacks invoked while connected to a remote.

    Callbacks may return `False` to abort the operation. Exceptions raised
    in them abort it as well and are re-raised from the method which talked
    to the remote.
    """

    _credentials: Optional[CredentialsCallback] = None
    _certificate_check: Optional[CertificateCheckCallback] = None
    _transfer_progress: Optional[TransferProgressCallback] = None
    _sideband_progress: Optional[SidebandProgressCallback] = None
    _push_negotiation: Optional[PushNegotiationCallback] = None
    _push_update_reference: Optional[PushUpdateReferenceCallback] = None

    _payload: Optional[CallbackPayload] = None

    def __repr__(self) -> str:
        names = (
            "credentials",
            "certificate_check",
            "transfer_progress",
            "sideband_progress",
            "push_negotiation",
            "push_update_reference",
        )
        set_names = [name for name in names if getattr(self, f"_{name}") is not None]
        return f"{type(self).__name__}({', '.join(set_names)})"

    def credentials(self, callback: CredentialsCallback) -> "RemoteCallbacks":
        """Set the callback providing credentials.

        It’s called with the URL, the username contained in it (if any) and
        the allowed credential types, and returns a `Credential` or `None`
        if it has none to offer.
        """
        self._credentials = callback
        return self

    def certificate_check(self, callback: CertificateCheckCallback) -> "RemoteCallbacks":
        """Set the callback deciding whether to trust the certificate of a remote.

        It’s called with the certificate, whether libgit2 considers it valid
        and the host name. Return `True` to accept, `False` to abort or
        `CertificateCheckStatus.PASSTHROUGH` to let libgit2 decide.
        """
        self._certificate_check = callback
        return self

    def transfer_progress(self, callback: TransferProgressCallback) -> "RemoteCallbacks":
        self._transfer_progress = callback
        return self

    def sideband_progress(self, callback: SidebandProgressCallback) -> "RemoteCallbacks":
        """Set the callback receiving progress text sent by the remote."""
        self._sideband_progress = callback
        return self

    def push_negotiation(self, callback: PushNegotiationCallback) -> "RemoteCallbacks":
        self._push_negotiation = callback
        return self

    def push_update_reference(self, callback: PushUpdateReferenceCallback) -> "RemoteCallbacks":
        """Set the callback receiving the result of updating each remote reference.

        The status is `None` if the update succeeded, or the error message.
        """
        self._push_update_reference = callback
        return self

    def _to_native(self) -> git_remote_callbacks:
        native = git_remote_callbacks()
        error_code = lib.git_remote_init_callbacks(byref(native), GIT_REMOTE_CALLBACKS_VERSION)
        self.raise_if_error(error_code)

        if self._credentials is not None:
            native.credentials = _credentials_cb
        if self._certificate_check is not None:
            native.certificate_check = _certificate_check_cb
        if self._transfer_progress is not None:
            native.transfer_progress = _transfer_progress_cb
        if self._sideband_progress is not None:
            native.sideband_progress = _sideband_progress_cb
        if self._push_negotiation is not None:
            native.push_negotiation = _push_negotiation_cb
        if self._push_update_reference is not None:
            native.push_update_reference = _push_update_reference_cb

        if self._payload is None:
            self._payload = CallbackPayload(self)
        native.payload = self._payload.as_parameter.value

        return native
