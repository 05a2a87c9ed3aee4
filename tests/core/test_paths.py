"""Tests for devcontainer.core.paths module."""

import os
import socket
import tempfile
from pathlib import Path

import pytest

from devcontainer.core.paths import (
    file_exists,
    host_ids,
    is_dir,
    is_socket,
    is_within,
    session_dir,
    socket_gid,
)
from devcontainer.core.types import DEFAULT_DOCKER_GID


@pytest.fixture
def unix_socket():
    """Create a bound Unix domain socket in a short temporary path."""
    tmpdir = tempfile.mkdtemp(prefix="sock")
    path = Path(tmpdir) / "s"
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.bind(str(path))
    try:
        yield path
    finally:
        sock.close()
        path.unlink(missing_ok=True)
        os.rmdir(tmpdir)


class TestProbes:
    """Tests for filesystem probes."""

    def test_is_dir(self, temp_dir: Path) -> None:
        """Test directory probe."""
        (temp_dir / "file").write_text("x", encoding="utf-8")
        assert is_dir(temp_dir)
        assert not is_dir(temp_dir / "file")
        assert not is_dir(temp_dir / "missing")

    def test_file_exists(self, temp_dir: Path) -> None:
        """Test existence probe accepts files and directories."""
        (temp_dir / "file").write_text("x", encoding="utf-8")
        assert file_exists(temp_dir / "file")
        assert file_exists(temp_dir)
        assert not file_exists(temp_dir / "missing")

    def test_is_socket(self, unix_socket: Path, temp_dir: Path) -> None:
        """Test socket probe."""
        (temp_dir / "file").write_text("x", encoding="utf-8")
        assert is_socket(unix_socket)
        assert not is_socket(temp_dir / "file")
        assert not is_socket(temp_dir / "missing")


class TestIsWithin:
    """Tests for is_within function."""

    def test_same_path(self) -> None:
        """Test a path contains itself."""
        assert is_within(Path("/repo/.jj/repo"), Path("/repo/.jj/repo"))

    def test_nested(self) -> None:
        """Test a nested path."""
        assert is_within(Path("/repo/.jj/repo/store/git"), Path("/repo/.jj/repo"))

    def test_sibling_with_common_prefix(self) -> None:
        """Test string prefixes are not containment."""
        assert not is_within(Path("/repo/.jj/repository"), Path("/repo/.jj/repo"))

    def test_parent_reference(self) -> None:
        """Test paths escaping via '..' are outside."""
        assert not is_within(Path("/repo/.jj/repo/../../.git"), Path("/repo/.jj/repo"))


class TestSocketGid:
    """Tests for socket_gid function."""

    def test_existing(self, temp_dir: Path) -> None:
        """Test group of an existing path."""
        assert socket_gid(temp_dir) == temp_dir.stat().st_gid

    def test_missing(self, temp_dir: Path) -> None:
        """Test fallback when the socket is absent."""
        assert socket_gid(temp_dir / "docker.sock") == DEFAULT_DOCKER_GID


def test_host_ids() -> None:
    """Test host IDs match the current process."""
    assert host_ids() == (os.getuid(), os.getgid())


class TestSessionDir:
    """Tests for session_dir function."""

    def test_named(self) -> None:
        """Test an explicit name picks a fixed directory."""
        name, path = session_dir("paths-test-named")
        assert name == "paths-test-named"
        assert path == Path(tempfile.gettempdir()) / "devcontainer-paths-test-named"
        assert not path.exists()

    def test_named_removes_stale(self) -> None:
        """Test a leftover directory is removed."""
        stale = Path(tempfile.gettempdir()) / "devcontainer-paths-test-stale"
        stale.mkdir(exist_ok=True)
        (stale / "leftover").write_text("x", encoding="utf-8")

        _, path = session_dir("paths-test-stale")
        assert path == stale
        assert not stale.exists()

    def test_random(self) -> None:
        """Test a random name is unique and its directory is free."""
        name1, path1 = session_dir()
        name2, path2 = session_dir()

        assert name1 != name2
        assert path1.name == f"devcontainer-{name1}"
        assert path2.name == f"devcontainer-{name2}"
        assert not path1.exists()
        assert not path2.exists()
