"""Configuration management for devcontainer."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from devcontainer.core.errors import ConfigError
from devcontainer.core.types import (
    DEFAULT_CONTAINER_NAME,
    DEFAULT_IMAGE_NAME,
    PortMapping,
    VCSKind,
)

# Values accepted for --vcs and DEVCONTAINER_VCS
VCS_CHOICES = (VCSKind.GIT.value, VCSKind.JJ.value)


class StartOptions(BaseModel):
    """Validated settings for one ``start`` invocation.

    Combines the command-line flags with the environment-derived
    settings so the orchestrator never consults the environment itself.
    """

    workspace_dir: Path
    home: Path
    name: str | None = None
    vcs: str | None = None
    docker: bool = False
    ports: list[PortMapping] = Field(default_factory=list)
    resume: str | None = None
    command: list[str] = Field(default_factory=list)
    container_name: str = DEFAULT_CONTAINER_NAME
    image_name: str = DEFAULT_IMAGE_NAME
    ssh_auth_sock: Path | None = None

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("ports", mode="before")
    @classmethod
    def parse_ports(cls, value: Any) -> Any:
        """Parse ``hostPort:containerPort`` strings."""
        if value is None:
            return []
        return [PortMapping.parse(p) if isinstance(p, str) else p for p in value]

    @field_validator("vcs")
    @classmethod
    def check_vcs(cls, value: str | None) -> str | None:
        """Reject unknown VCS names; empty means auto-detect."""
        if not value:
            return None
        if value not in VCS_CHOICES:
            raise ValueError(f"unknown VCS type: {value} (expected 'git' or 'jj')")
        return value

    @model_validator(mode="after")
    def check_resume_and_command(self) -> "StartOptions":
        """Resuming a session and running a command are exclusive."""
        if self.resume_requested and self.command:
            raise ValueError("cannot combine --resume with extra command arguments")
        return self

    @property
    def resume_requested(self) -> bool:
        """Check whether ``--resume`` was given, with or without an ID."""
        return self.resume is not None

    def container_command(self) -> list[str]:
        """Get the command to run in the container.

        Returns:
            The resume invocation, the explicit command, or an empty list
            to use the image's default command.
        """
        if self.resume_requested:
            cmd = ["claude", "--dangerously-skip-permissions", "--resume"]
            if self.resume.strip():
                cmd.append(self.resume.strip())
            return cmd
        return list(self.command)


class Config:
    """Environment-backed configuration for devcontainer."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        """Initialize configuration.

        Args:
            environ: Environment mapping. Uses a snapshot of ``os.environ``
                if None.
        """
        self._environ: dict[str, str] = dict(
            os.environ if environ is None else environ
        )

    @classmethod
    def from_environ(cls) -> "Config":
        """Create configuration from the current process environment."""
        return cls.from_dict(os.environ)

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> "Config":
        """Create configuration from a dictionary.

        Args:
            data: Environment-style mapping.

        Returns:
            Config instance.
        """
        return cls(data)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get a setting, treating empty values as unset.

        Args:
            key: Environment variable name.
            default: Value returned when the variable is unset or empty.

        Returns:
            Setting value.
        """
        value = self._environ.get(key)
        if not value:
            return default
        return value

    @property
    def container_name(self) -> str:
        """Get the default container name."""
        return self.get("CONTAINER_NAME") or DEFAULT_CONTAINER_NAME

    @property
    def image_name(self) -> str:
        """Get the image tag."""
        return self.get("IMAGE_NAME") or DEFAULT_IMAGE_NAME

    @property
    def vcs_override(self) -> str | None:
        """Get the VCS override from the environment."""
        return self.get("DEVCONTAINER_VCS")

    @property
    def build_workspace_dir(self) -> Path | None:
        """Get the workspace root set by a build tool, if any."""
        value = self.get("BUILD_WORKSPACE_DIRECTORY")
        return Path(value) if value else None

    @property
    def ssh_auth_sock(self) -> Path | None:
        """Get the SSH agent socket path, if any."""
        value = self.get("SSH_AUTH_SOCK")
        return Path(value) if value else None

    def resolve_workspace_dir(self, cwd: Path | None = None) -> Path:
        """Get the workspace root for this invocation.

        Args:
            cwd: Directory to start from. Uses the current directory if None.

        Returns:
            ``BUILD_WORKSPACE_DIRECTORY`` when set, otherwise the nearest
            VCS root above ``cwd`` (or ``cwd`` itself).
        """
        from devcontainer.vcs import find_vcs_root

        override = self.build_workspace_dir
        if override is not None:
            return override
        return find_vcs_root(Path(cwd or Path.cwd()).resolve())

    def to_start_options(
        self,
        name: str | None = None,
        vcs: str | None = None,
        docker: bool = False,
        ports: list[str] | None = None,
        resume: str | None = None,
        command: list[str] | None = None,
        cwd: Path | None = None,
        home: Path | None = None,
    ) -> StartOptions:
        """Validate ``start`` flags and combine them with the environment.

        Args:
            name: Session name.
            vcs: VCS override flag; takes precedence over DEVCONTAINER_VCS.
            docker: Whether to mount the container engine socket.
            ports: Port mappings in ``hostPort:containerPort`` form.
            resume: Session to resume; an empty string resumes interactively.
            command: Trailing command to run in the container.
            cwd: Directory to resolve the workspace from.
            home: Host home directory. Uses ``Path.home()`` if None.

        Returns:
            StartOptions instance.

        Raises:
            ConfigError: If any value is malformed or flags conflict.
        """
        # Exclusivity and port checks must fail before any filesystem probing
        try:
            flags = StartOptions.model_validate(
                {
                    "workspace_dir": Path("."),
                    "home": Path("."),
                    "resume": resume,
                    "command": command or [],
                    "ports": ports or [],
                }
            )
        except ValidationError as e:
            raise ConfigError(_first_error(e)) from e

        try:
            return StartOptions(
                workspace_dir=self.resolve_workspace_dir(cwd),
                home=home or Path.home(),
                name=name or None,
                vcs=vcs or self.vcs_override,
                docker=docker,
                ports=flags.ports,
                resume=resume,
                command=command or [],
                container_name=self.container_name,
                image_name=self.image_name,
                ssh_auth_sock=self.ssh_auth_sock,
            )
        except ValidationError as e:
            raise ConfigError(_first_error(e)) from e


def _first_error(error: ValidationError) -> str:
    """Get a readable message from a pydantic validation error."""
    errors = error.errors()
    if not errors:
        return str(error)
    message = str(errors[0].get("msg", error))
    # pydantic prefixes messages raised from validators
    return message.removeprefix("Value error, ")
