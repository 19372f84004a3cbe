"""Binding layer for libgit2 - Loading the shared library

Installed versions of libgit2 which are known to work are preferred over
whatever the dynamic linker finds, the latter is only accepted if its
version is in range.
"""

import logging
import re
from collections.abc import Sequence
from ctypes import CDLL
from ctypes.util import find_library
from os.path import basename
from typing import NamedTuple, Optional
from warnings import warn

log = logging.getLogger(__name__)

VersionTuple = tuple[int, ...]


class LibError(Exception):
    """The native library can’t be used."""


class LibNotFoundError(LibError):
    pass


class LibVersionError(LibError):
    pass


class LibWarning(UserWarning):
    pass


class LibVersionWarning(LibWarning):
    pass


class IntEnumMixin:
    """Let enum members be passed where ctypes expects a plain int."""

    @classmethod
    def from_param(cls, obj):
        return int(obj)


class LoadedLibrary(NamedTuple):
    cdll: CDLL
    soname: str
    version: str
    version_tuple: VersionTuple


def join_version(version_tuple: VersionTuple) -> str:
    return ".".join(str(part) for part in version_tuple)


def split_soname(name: str, soname: str) -> VersionTuple:
    """Extract the version from a shared object name like `libgit2.so.1.7`."""
    match = re.fullmatch(rf"lib{re.escape(name)}\.so\.(\d+(?:\.\d+)*)", basename(soname))
    if not match:
        raise LibVersionError(f"Can’t parse lib{name} version: {soname}")
    return tuple(int(part) for part in match.group(1).split("."))


def check_version(
    name: str,
    version_tuple: VersionTuple,
    known_versions: Optional[Sequence[VersionTuple]],
    *,
    load_unknown: bool = True,
) -> None:
    """Reject versions older than the oldest known one.

    Versions newer than the newest known one only warn, unless
    `load_unknown` is unset. Only as many parts as the known versions have
    are compared, i.e. patch levels of a known version are fine.
    """
    if not known_versions:
        return

    oldest = known_versions[0]
    newest = known_versions[-1]
    found = join_version(version_tuple)

    if version_tuple < oldest:
        raise LibVersionError(
            f"Version {found} of lib{name} too low (must be ≥ {join_version(oldest)})"
        )

    if version_tuple[: len(newest)] > newest:
        msg = f"Version {found} of lib{name} is unknown (latest known is {join_version(newest)})."
        if not load_unknown:
            raise LibVersionError(msg)
        warn(msg, LibVersionWarning)


def _open_known_version(
    name: str, known_versions: Sequence[VersionTuple]
) -> Optional[LoadedLibrary]:
    for version_tuple in sorted(known_versions, reverse=True):
        version = join_version(version_tuple)
        soname = f"lib{name}.so.{version}"
        try:
            cdll = CDLL(soname)
        except OSError:
            continue
        return LoadedLibrary(cdll, soname, version, tuple(version_tuple))

    return None


def _open_found_version(
    name: str, known_versions: Optional[Sequence[VersionTuple]], load_unknown: bool
) -> LoadedLibrary:
    soname = find_library(name)
    if not soname:
        raise LibNotFoundError(f"lib{name} not found")

    version_tuple = split_soname(name, soname)
    check_version(name, version_tuple, known_versions, load_unknown=load_unknown)

    return LoadedLibrary(CDLL(soname), soname, join_version(version_tuple), version_tuple)


def load_lib(
    name: str,
    *,
    known_versions: Optional[Sequence[VersionTuple]] = None,
    load_unknown: bool = True,
) -> LoadedLibrary:
    """Load a shared library.

    :param name: Name of the library (without "lib")
    :param known_versions: Versions to try first, ordered from old to new.
        They also bound what is accepted from the dynamic linker.
    :param load_unknown: If versions newer than the known ones should be
        loaded (with a warning)

    :return: the loaded library, with its soname and version
    """
    loaded = _open_known_version(name, known_versions or ())
    if loaded is None:
        loaded = _open_found_version(name, known_versions, load_unknown)

    log.debug("Loaded %s (version %s)", loaded.soname, loaded.version)

    return loaded


def install_func_decls(cdll: CDLL, decls: dict[str, tuple]) -> None:
    """Set result and argument types of the declared functions."""
    for func_name, (restype, argtypes) in decls.items():
        func = getattr(cdll, func_name)
        func.restype = restype
        func.argtypes = argtypes
