"""devcontainer - Ephemeral Claude Code development containers.

This package launches isolated development containers bound to
per-session VCS worktrees, and removes the worktree again when the
session ends.
"""

from devcontainer.attach.resolver import AttachResolver
from devcontainer.core.config import Config, StartOptions
from devcontainer.core.errors import (
    AmbiguousTargetError,
    BuildError,
    ChildExitError,
    ConfigError,
    DevcontainerError,
    NotFoundError,
    RuntimeLaunchError,
    RuntimeUnavailableError,
    VCSCommandError,
)
from devcontainer.core.types import (
    ContainerInfo,
    Mount,
    MountPlan,
    PortMapping,
    Session,
    SessionState,
    VCSKind,
)
from devcontainer.planner.mounts import MountPlanner
from devcontainer.runtime.docker import DockerRuntime
from devcontainer.session.orchestrator import SessionOrchestrator
from devcontainer.vcs import detect_vcs, find_vcs_root, get_backend

__version__ = "0.1.0"

__all__ = [
    # Core types
    "Config",
    "ContainerInfo",
    "Mount",
    "MountPlan",
    "PortMapping",
    "Session",
    "SessionState",
    "StartOptions",
    "VCSKind",
    # Errors
    "AmbiguousTargetError",
    "BuildError",
    "ChildExitError",
    "ConfigError",
    "DevcontainerError",
    "NotFoundError",
    "RuntimeLaunchError",
    "RuntimeUnavailableError",
    "VCSCommandError",
    # Components
    "AttachResolver",
    "DockerRuntime",
    "MountPlanner",
    "SessionOrchestrator",
    "detect_vcs",
    "find_vcs_root",
    "get_backend",
]


def main() -> None:
    """CLI entry point."""
    import sys

    from devcontainer.cli import main as cli_main

    sys.exit(cli_main())
