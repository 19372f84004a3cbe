import threading
from unittest import mock

import pytest

from git2bind import native_adaptation
from git2bind.common import LibError, LoadedLibrary
from git2bind.native_adaptation import LazyLib, LibraryState, git_error_code


@pytest.fixture
def mock_lib() -> mock.Mock:
    lib = mock.Mock()
    lib.git_libgit2_init.side_effect = lambda: lib.git_libgit2_init.call_count
    lib.git_libgit2_shutdown.side_effect = lambda: (
        lib.git_libgit2_init.call_count - lib.git_libgit2_shutdown.call_count
    )
    return lib


@pytest.fixture
def library_state(mock_lib: mock.Mock) -> LibraryState:
    with (
        mock.patch.object(
            native_adaptation,
            "load_lib",
            return_value=LoadedLibrary(mock_lib, "libgit2.so.1.9", "1.9", (1, 9)),
        ) as load_lib,
        mock.patch.object(native_adaptation, "install_func_decls") as install_func_decls,
    ):
        library_state = LibraryState()
        yield library_state

    if library_state.lib is not None:
        load_lib.assert_called_once()
        install_func_decls.assert_called_once_with(mock_lib, native_adaptation.FUNC_DECLS)


class TestLibraryState:
    def test_load(self, library_state: LibraryState, mock_lib: mock.Mock) -> None:
        assert library_state.lib is None

        assert library_state.load() is mock_lib
        # Loading twice reuses the library
        assert library_state.load() is mock_lib

        assert library_state.soname == "libgit2.so.1.9"
        assert library_state.version == "1.9"
        assert library_state.version_tuple == (1, 9)
        assert not library_state.initialized
        mock_lib.git_libgit2_init.assert_not_called()

    def test_init_shutdown_nesting(self, library_state: LibraryState, mock_lib: mock.Mock) -> None:
        assert library_state.init() == 1
        assert library_state.init() == 2
        assert library_state.initialized

        assert library_state.shutdown() == 1
        assert library_state.initialized
        assert library_state.shutdown() == 0
        assert not library_state.initialized

        assert mock_lib.git_libgit2_init.call_count == 2
        assert mock_lib.git_libgit2_shutdown.call_count == 2

    def test_shutdown_without_init(self, library_state: LibraryState, mock_lib: mock.Mock) -> None:
        with pytest.raises(LibError, match="without matching init"):
            library_state.shutdown()

        mock_lib.git_libgit2_shutdown.assert_not_called()

    def test_init_failure(self, library_state: LibraryState, mock_lib: mock.Mock) -> None:
        mock_lib.git_libgit2_init.side_effect = None
        mock_lib.git_libgit2_init.return_value = git_error_code.ERROR

        with pytest.raises(LibError, match="Initializing libgit2.so.1.9 failed"):
            library_state.init()

        assert library_state.count == 0

    def test_ensure_initialized(self, library_state: LibraryState, mock_lib: mock.Mock) -> None:
        assert library_state.ensure_initialized() is mock_lib
        assert library_state.ensure_initialized() is mock_lib

        mock_lib.git_libgit2_init.assert_called_once_with()
        assert library_state.count == 1

        # The implicit initialization can’t be undone by unbalanced shutdowns.
        assert library_state.init() == 2
        assert library_state.shutdown() == 1
        with pytest.raises(LibError):
            library_state.shutdown()
        assert library_state.initialized

    def test_concurrent_init(self, library_state: LibraryState, mock_lib: mock.Mock) -> None:
        barrier = threading.Barrier(8)

        def init_and_shutdown():
            barrier.wait()
            for _ in range(50):
                library_state.init()
                library_state.shutdown()

        threads = [threading.Thread(target=init_and_shutdown) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert library_state.count == 0
        assert mock_lib.git_libgit2_init.call_count == 400
        assert mock_lib.git_libgit2_shutdown.call_count == 400


class TestLazyLib:
    def test___getattr__(self, library_state: LibraryState, mock_lib: mock.Mock) -> None:
        lazy = LazyLib(library_state)

        assert library_state.lib is None
        assert lazy.git_foo is mock_lib.git_foo
        assert library_state.count == 1

        assert "LibraryState" in repr(lazy)
