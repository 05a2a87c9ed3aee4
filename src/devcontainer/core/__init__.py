"""Core layer for devcontainer."""

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

__all__ = [
    "AmbiguousTargetError",
    "BuildError",
    "ChildExitError",
    "Config",
    "ConfigError",
    "ContainerInfo",
    "DevcontainerError",
    "Mount",
    "MountPlan",
    "NotFoundError",
    "PortMapping",
    "RuntimeLaunchError",
    "RuntimeUnavailableError",
    "Session",
    "SessionState",
    "StartOptions",
    "VCSCommandError",
    "VCSKind",
]
