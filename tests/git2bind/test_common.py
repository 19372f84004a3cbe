import logging
import warnings
from contextlib import nullcontext
from ctypes import c_int, c_void_p
from enum import IntEnum
from unittest import mock

import pytest

from git2bind import common

KNOWN_VERSIONS = tuple((1, minor) for minor in range(4, 10))

SONAME_LOWEST = "libgit2.so.1.4"
SONAME_HIGHEST = "libgit2.so.1.9"
SONAME_TOO_LOW = "libgit2.so.1.3"
SONAME_TOO_HIGH = "libgit2.so.1.10"


class TestIntEnumMixin:
    def test_from_param(self):
        class TestEnum(common.IntEnumMixin, IntEnum):
            VALUE = 1

        result = TestEnum.from_param(TestEnum.VALUE)
        assert type(result) is int
        assert result == 1


@pytest.mark.parametrize(
    "soname, expected",
    (
        pytest.param("libgit2.so.1.7", (1, 7), id="major-minor"),
        pytest.param("libgit2.so.1.7.2", (1, 7, 2), id="patchlevel"),
        pytest.param("/usr/lib64/libgit2.so.1.9", (1, 9), id="path"),
        pytest.param("libgit2.so", None, id="unversioned"),
        pytest.param("libgit2-glib.so.1.7", None, id="other-library"),
    ),
)
def test_split_soname(soname: str, expected) -> None:
    if expected is None:
        with pytest.raises(common.LibVersionError, match="Can’t parse libgit2 version"):
            common.split_soname("git2", soname)
    else:
        assert common.split_soname("git2", soname) == expected


@pytest.mark.parametrize(
    "version_tuple, load_unknown, outcome",
    (
        pytest.param((1, 4), True, "ok", id="oldest"),
        pytest.param((1, 9, 3), True, "ok", id="newest-patchlevel"),
        pytest.param((1, 3, 9), True, "too-low", id="too-low"),
        pytest.param((2, 0), True, "warns", id="unknown-warns"),
        pytest.param((1, 10), False, "unknown", id="unknown-refused"),
    ),
)
def test_check_version(version_tuple: tuple, load_unknown: bool, outcome: str) -> None:
    if outcome == "too-low":
        expectation = pytest.raises(common.LibVersionError, match=r"too low \(must be ≥ 1\.4\)")
    elif outcome == "warns":
        expectation = pytest.warns(common.LibVersionWarning, match="latest known is 1.9")
    elif outcome == "unknown":
        expectation = pytest.raises(common.LibVersionError, match="is unknown")
    else:
        expectation = warnings.catch_warnings()

    with expectation:
        if outcome == "ok":
            warnings.simplefilter("error")
        common.check_version("git2", version_tuple, KNOWN_VERSIONS, load_unknown=load_unknown)


def test_check_version_without_known_versions() -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        common.check_version("git2", (0, 1), None)
        common.check_version("git2", (99,), ())


class TestLoadLib:
    @pytest.mark.parametrize("testcase", ("newest", "older"))
    def test_known_soname(self, testcase: str, caplog) -> None:
        available = SONAME_HIGHEST if testcase == "newest" else SONAME_LOWEST
        mock_lib = mock.Mock()

        def mock_CDLL(soname: str):
            if soname == available:
                return mock_lib
            raise OSError(f"{soname}: cannot open shared object file")

        with (
            mock.patch.object(common, "CDLL", wraps=mock_CDLL) as CDLL,
            mock.patch.object(common, "find_library") as find_library,
            caplog.at_level(logging.DEBUG, logger="git2bind.common"),
        ):
            loaded = common.load_lib("git2", known_versions=KNOWN_VERSIONS)

        # Newest known versions are tried first
        assert CDLL.call_args_list[0] == mock.call(SONAME_HIGHEST)
        find_library.assert_not_called()

        assert isinstance(loaded, common.LoadedLibrary)
        assert loaded.cdll is mock_lib
        assert loaded.soname == available
        assert loaded.version == common.join_version(loaded.version_tuple)
        assert f"Loaded {available}" in caplog.text

    @pytest.mark.parametrize(
        "testcase",
        (
            "found",
            "not-found",
            "illegal-soname",
            "version-too-low",
            "version-too-high",
            "version-too-high-fails-unknown",
            "no-known-versions",
        ),
    )
    def test_find_library(self, testcase: str) -> None:
        not_found = testcase == "not-found"
        illegal_soname = testcase == "illegal-soname"
        too_low = testcase == "version-too-low"
        too_high = testcase.startswith("version-too-high")
        fails_unknown = testcase.endswith("fails-unknown")
        known_versions = None if testcase == "no-known-versions" else KNOWN_VERSIONS

        if not_found:
            found_soname = None
            expectation = pytest.raises(common.LibNotFoundError)
        elif illegal_soname:
            found_soname = "Hello-ho!"
            expectation = pytest.raises(common.LibVersionError, match="Can’t parse")
        elif too_low:
            found_soname = SONAME_TOO_LOW
            expectation = pytest.raises(common.LibVersionError, match="too low")
        elif too_high:
            found_soname = SONAME_TOO_HIGH
            if fails_unknown:
                expectation = pytest.raises(common.LibVersionError, match="unknown")
            else:
                expectation = pytest.warns(common.LibVersionWarning, match="unknown")
        else:
            found_soname = SONAME_HIGHEST
            expectation = nullcontext()

        mock_lib = mock.Mock()
        searched = False

        def mock_CDLL(soname: str):
            # Only what find_library() returned can be loaded.
            if not searched:
                raise OSError(f"{soname}: cannot open shared object file")
            return mock_lib

        def mock_find_library(name: str):
            nonlocal searched
            searched = True
            return found_soname

        with (
            mock.patch.object(common, "CDLL", wraps=mock_CDLL) as CDLL,
            mock.patch.object(common, "find_library", wraps=mock_find_library) as find_library,
            expectation,
        ):
            lib, soname, version, version_tuple = common.load_lib(
                "git2", known_versions=known_versions, load_unknown=not fails_unknown
            )

        find_library.assert_called_once_with("git2")

        if isinstance(expectation, nullcontext) or too_high and not fails_unknown:
            assert lib is mock_lib
            assert soname == found_soname
            assert version_tuple == tuple(int(x) for x in version.split("."))
        else:
            # Refused versions aren’t even loaded.
            assert mock.call(found_soname) not in CDLL.call_args_list


def test_install_func_decls() -> None:
    lib = mock.Mock()
    FUNC_DECLS = {
        "foo": (None, (c_int,)),
        "bar": (c_int, (c_void_p, c_int)),
    }

    common.install_func_decls(lib, FUNC_DECLS)

    for func_name, (restype, argtypes) in FUNC_DECLS.items():
        func = getattr(lib, func_name)
        assert func.restype == restype
        assert func.argtypes == argtypes
