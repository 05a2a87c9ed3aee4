"""Abstract base class for VCS backends."""

from abc import ABC, abstractmethod
from pathlib import Path

from devcontainer.core.types import Mount, VCSKind

# Marker directories, checked in this order at each level so that a
# colocated jj repository (which also has .git) resolves to jj.
MARKERS: tuple[tuple[str, VCSKind], ...] = (
    (".jj", VCSKind.JJ),
    (".git", VCSKind.GIT),
)


def _find_marker(path: Path) -> tuple[Path, VCSKind] | None:
    """Walk upward from path to the nearest directory holding a marker."""
    current = Path(path).resolve()
    for directory in (current, *current.parents):
        for marker, kind in MARKERS:
            if (directory / marker).is_dir():
                return directory, kind
    return None


def detect_vcs(path: Path) -> VCSKind:
    """Detect the VCS managing a directory tree.

    Args:
        path: Directory to start from.

    Returns:
        Kind of the nearest enclosing repository, or ``VCSKind.NONE`` if
        the filesystem root is reached without finding a marker.
    """
    found = _find_marker(path)
    return found[1] if found else VCSKind.NONE


def find_vcs_root(path: Path) -> Path:
    """Find the root of the repository enclosing path.

    Args:
        path: Directory to start from.

    Returns:
        Directory holding the nearest marker, or ``path`` unchanged if
        there is none.
    """
    found = _find_marker(path)
    return found[0] if found else path


class VCSBackend(ABC):
    """Abstract base class for VCS backends.

    A backend creates and destroys the isolated copy a session works in,
    and names the metadata stores that copy needs to reach.
    """

    kind: VCSKind
    marker: str

    def detect(self, path: Path) -> bool:
        """Check whether this backend manages the tree containing path."""
        return detect_vcs(path) is self.kind

    @abstractmethod
    def create_isolated_copy(
        self, original_root: Path, token: str, isolated_root: Path
    ) -> Path:
        """Create an isolated copy of a repository.

        Args:
            original_root: Directory inside the caller's checkout.
            token: Branch or workspace name identifying the copy.
            isolated_root: Directory to create the copy in.

        Returns:
            Path of the isolated copy.

        Raises:
            VCSCommandError: If the VCS tool fails.
        """
        pass

    @abstractmethod
    def destroy_isolated_copy(
        self, original_root: Path, token: str, isolated_root: Path
    ) -> None:
        """Destroy an isolated copy.

        Failures are logged and never raised.

        Args:
            original_root: Directory inside the caller's checkout.
            token: Branch or workspace name identifying the copy.
            isolated_root: Directory of the copy.
        """
        pass

    @abstractmethod
    def metadata_mounts(self, original_root: Path) -> list[Mount]:
        """Get the metadata stores the isolated copy must see.

        Each is mounted at its original absolute path so the VCS tool
        inside the container resolves shared history.

        Args:
            original_root: Directory inside the caller's checkout.

        Returns:
            List of mounts.
        """
        pass
