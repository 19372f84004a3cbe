"""Binding layer for libgit2 - Oid"""

from ctypes import byref, c_char, memmove, sizeof
from functools import cached_property
from typing import Optional, Union

from .constants import GIT_OID_SHA1_HEXSIZE, GIT_OID_SHA1_SIZE
from .native_adaptation import git_oid, git_oid_p, lib
from .wrapper import WrapperOfWrappings

OidTypes = Union["Oid", str, bytes]


class Oid(WrapperOfWrappings):
    """Represent a git oid.

    The native value is always copied, so an Oid never borrows from the
    object it was read from.
    """

    _real_native: Optional[git_oid] = None

    def __init__(self, native: Union[git_oid, git_oid_p]) -> None:
        if isinstance(native, git_oid_p):
            if not native:
                raise ValueError("Can’t create Oid from NULL pointer")
            src = native
            native = git_oid()
            dst = byref(native)
            memmove(dst, src, sizeof(git_oid))
        elif isinstance(native, git_oid):
            native = git_oid.from_buffer_copy(native)

        super().__init__(native=native)

    @classmethod
    def _from_oid(cls, oid: OidTypes) -> "Oid":
        if isinstance(oid, Oid):
            native = oid._native
        else:
            if isinstance(oid, str):
                oid = oid.encode("ascii")
            # libgit2 would pad a prefix with zeros, that’s a different object.
            if len(oid) != GIT_OID_SHA1_HEXSIZE:
                raise ValueError(
                    f"Oid must be {GIT_OID_SHA1_HEXSIZE} hex digits long, not {len(oid)}: {oid!r}"
                )
            native = git_oid()
            error_code = lib.git_oid_fromstrp(native, oid)
            cls.raise_if_error(error_code, "Error creating Oid: {message}")

        return Oid(native)

    @classmethod
    def from_raw(cls, raw: bytes) -> "Oid":
        if len(raw) != GIT_OID_SHA1_SIZE:
            raise ValueError(f"Raw oid must be {GIT_OID_SHA1_SIZE} bytes long, not {len(raw)}")
        return Oid(git_oid.from_buffer_copy(raw))

    def __eq__(self, other: Union["Oid", str, bytes]) -> bool:
        if isinstance(other, Oid):
            return self.raw == other.raw
        elif isinstance(other, str):
            return self.hex == other
        elif isinstance(other, bytes):
            return self.hexb == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.raw)

    @cached_property
    def raw(self) -> bytes:
        return bytes(self._native)

    @cached_property
    def hexb(self) -> bytes:
        buf = (c_char * GIT_OID_SHA1_HEXSIZE)()
        error_code = lib.git_oid_fmt(buf, self._native)
        self.raise_if_error(error_code, "Can’t format Oid: {message}")
        return buf.raw

    @cached_property
    def hex(self) -> str:
        return self.hexb.decode("ascii")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}._from_oid({self.hex!r})"

    def __str__(self) -> str:
        return self.hex
