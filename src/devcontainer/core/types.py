"""Type definitions for devcontainer."""

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

# Prefix shared by session containers, git branches and jj workspaces
SESSION_PREFIX = "devcontainer-"

# Label carrying the source repository path of a session container
WORKSPACE_LABEL = "claude-devcontainer.workspace"

DEFAULT_CONTAINER_NAME = "claude-dev"
DEFAULT_IMAGE_NAME = "claude-devcontainer"

# Fallback group ID when the container engine socket is absent
DEFAULT_DOCKER_GID = 984

CONTAINER_WORKSPACE = "/workspace"
CONTAINER_HOME = "/home/dev"

# Port numbers are plain ASCII digits, unlike what int() accepts
PORT_PATTERN = re.compile(r"[0-9]+")


class VCSKind(Enum):
    """Version control systems that can back a repository."""

    NONE = "none"
    GIT = "git"
    JJ = "jj"


class SessionState(Enum):
    """Lifecycle states of a session."""

    INIT = "init"
    VCS_RESOLVED = "vcs_resolved"
    ISOLATED_COPY_CREATED = "isolated_copy_created"
    IMAGE_READY = "image_ready"
    RUNNING = "running"
    EXITED = "exited"
    CLEANED_UP = "cleaned_up"


class Mount(BaseModel):
    """A single host to container bind mount."""

    host: Path
    container: str
    read_only: bool = False

    model_config = {"extra": "forbid", "frozen": True}

    def to_volume_spec(self) -> str:
        """Render the mount in the engine's ``-v`` form."""
        spec = f"{self.host}:{self.container}"
        if self.read_only:
            spec += ":ro"
        return spec


class MountPlan(BaseModel):
    """Ordered mounts and environment for one session."""

    mounts: list[Mount] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}

    def add(self, host: Path | str, container: str, read_only: bool = False) -> None:
        """Append a mount entry.

        Args:
            host: Path on the host.
            container: Path inside the container.
            read_only: Whether the mount is read-only.
        """
        self.mounts.append(
            Mount(host=Path(host), container=container, read_only=read_only)
        )

    def extend(self, mounts: list[Mount]) -> None:
        """Append several prepared mount entries."""
        self.mounts.extend(mounts)

    def set_env(self, key: str, value: str) -> None:
        """Set an environment variable for the container."""
        self.env[key] = value

    def volume_specs(self) -> list[str]:
        """Get mounts rendered as ``-v`` values, in plan order."""
        return [m.to_volume_spec() for m in self.mounts]

    def env_specs(self) -> list[str]:
        """Get environment rendered as ``-e`` values, in plan order."""
        return [f"{key}={value}" for key, value in self.env.items()]


class PortMapping(BaseModel):
    """A published port in ``hostPort:containerPort`` form."""

    spec: str
    host_port: int
    container_port: int

    model_config = {"extra": "forbid", "frozen": True}

    @classmethod
    def parse(cls, spec: str) -> "PortMapping":
        """Parse a ``hostPort:containerPort`` string.

        Args:
            spec: Port mapping as given on the command line.

        Returns:
            PortMapping keeping the original string.

        Raises:
            ValueError: If the string is not two integers separated by ``:``.
        """
        parts = spec.split(":", 1)
        if len(parts) != 2:
            raise ValueError(
                f"invalid port format {spec!r}: expected hostPort:containerPort"
            )
        host, container = parts
        if not PORT_PATTERN.fullmatch(host):
            raise ValueError(f"invalid host port in {spec!r}")
        if not PORT_PATTERN.fullmatch(container):
            raise ValueError(f"invalid container port in {spec!r}")
        return cls(spec=spec, host_port=int(host), container_port=int(container))

    def __str__(self) -> str:
        return self.spec


class Session(BaseModel):
    """The unit of work for one ``start`` invocation."""

    name: str
    vcs_kind: VCSKind = VCSKind.NONE
    original_root: Path | None = None
    isolated_root: Path
    container_name: str
    token: str | None = None

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def has_isolated_copy(self) -> bool:
        """Check whether the session works in an isolated copy."""
        return self.vcs_kind is not VCSKind.NONE

    @property
    def source_root(self) -> Path:
        """Get the repository path used to label the container."""
        return self.original_root or self.isolated_root


class ContainerInfo(BaseModel):
    """A running container as reported by the engine."""

    id: str
    name: str

    model_config = {"extra": "forbid"}
