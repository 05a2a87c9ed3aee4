"""Host filesystem probes and path utilities."""

import os
import shutil
import stat
import tempfile
from pathlib import Path

from devcontainer.core.types import DEFAULT_DOCKER_GID, SESSION_PREFIX

DOCKER_SOCKET = Path("/var/run/docker.sock")


def is_dir(path: Path) -> bool:
    """Check if path is an existing directory."""
    return path.is_dir()


def file_exists(path: Path) -> bool:
    """Check if anything exists at path (file, directory or socket)."""
    return path.exists()


def is_socket(path: Path) -> bool:
    """Check if path is a Unix domain socket.

    Args:
        path: Path to check.

    Returns:
        True if path exists and is a socket.
    """
    try:
        return stat.S_ISSOCK(path.stat().st_mode)
    except OSError:
        return False


def is_within(path: Path, parent: Path) -> bool:
    """Check if path equals parent or is nested below it.

    Both paths are compared lexically after normalization, without
    touching the filesystem.

    Args:
        path: Candidate path.
        parent: Containing directory.

    Returns:
        True if path is contained in parent.
    """
    normalized = Path(os.path.normpath(path))
    normalized_parent = Path(os.path.normpath(parent))
    return normalized == normalized_parent or normalized_parent in normalized.parents


def socket_gid(path: Path = DOCKER_SOCKET) -> int:
    """Get the owning group of the container engine socket.

    Args:
        path: Socket path.

    Returns:
        Group ID of the socket, or the conventional fallback if absent.
    """
    try:
        return path.stat().st_gid
    except OSError:
        return DEFAULT_DOCKER_GID


def host_ids() -> tuple[int, int]:
    """Get the UID and GID of the current user."""
    return os.getuid(), os.getgid()


def session_dir(name: str | None = None) -> tuple[str, Path]:
    """Choose the session name and the directory for its isolated copy.

    With an explicit name the directory is ``<tmp>/devcontainer-<name>``
    and any stale directory left there is removed. Without a name a
    unique directory is reserved and released again so the VCS tool can
    create it, and its random suffix becomes the name.

    Args:
        name: Optional session name.

    Returns:
        Tuple of (session name, isolated copy path).
    """
    if name:
        path = Path(tempfile.gettempdir()) / f"{SESSION_PREFIX}{name}"
        if path.exists():
            shutil.rmtree(path, ignore_errors=True)
        return name, path

    path = Path(tempfile.mkdtemp(prefix=SESSION_PREFIX))
    path.rmdir()
    return path.name.removeprefix(SESSION_PREFIX), path
