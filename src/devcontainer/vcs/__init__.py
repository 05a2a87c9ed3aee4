"""VCS layer for devcontainer."""

from devcontainer.core.types import VCSKind
from devcontainer.vcs.base import VCSBackend, detect_vcs, find_vcs_root
from devcontainer.vcs.git import GitBackend
from devcontainer.vcs.jj import JJBackend

_BACKENDS: dict[VCSKind, type[VCSBackend]] = {
    VCSKind.GIT: GitBackend,
    VCSKind.JJ: JJBackend,
}


def get_backend(kind: VCSKind) -> VCSBackend:
    """Get the backend for a VCS kind.

    Args:
        kind: VCS kind other than ``VCSKind.NONE``.

    Returns:
        Backend instance.

    Raises:
        ValueError: If no backend handles the kind.
    """
    try:
        return _BACKENDS[kind]()
    except KeyError:
        raise ValueError(f"No VCS backend for {kind.value}") from None


__all__ = [
    "GitBackend",
    "JJBackend",
    "VCSBackend",
    "detect_vcs",
    "find_vcs_root",
    "get_backend",
]
