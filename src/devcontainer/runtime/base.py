"""Abstract base class for container runtimes."""

import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence

from devcontainer.core.types import ContainerInfo, MountPlan, PortMapping


class ContainerRuntime(ABC):
    """Abstract base class for container runtimes.

    A runtime is a thin pass-through to a container engine. It performs
    no retries and no business logic: every engine failure is surfaced
    to the caller as soon as it happens.
    """

    @abstractmethod
    def build(
        self, context_files: dict[str, bytes], build_args: dict[str, str], tag: str
    ) -> str:
        """Build an image.

        Args:
            context_files: Build context as a mapping of file name to content.
            build_args: Build arguments.
            tag: Tag for the resulting image.

        Returns:
            Image ID.

        Raises:
            BuildError: If the build fails.
        """
        pass

    @abstractmethod
    def remove_if_exists(self, name: str) -> bool:
        """Force-remove a container if it exists.

        Args:
            name: Container name.

        Returns:
            True if a container was removed, False if none existed.
        """
        pass

    @abstractmethod
    def run(
        self,
        name: str,
        image: str,
        plan: MountPlan,
        ports: Sequence[PortMapping] = (),
        labels: dict[str, str] | None = None,
        command: Sequence[str] = (),
        tty: bool = False,
    ) -> subprocess.Popen:
        """Start a container attached to the host's standard streams.

        Args:
            name: Container name.
            image: Image to run.
            plan: Mounts and environment.
            ports: Published ports.
            labels: Container labels.
            command: Command overriding the image default.
            tty: Whether to allocate a pseudo-terminal.

        Returns:
            Handle of the started process; the caller waits on it.

        Raises:
            RuntimeLaunchError: If the process cannot be started.
        """
        pass

    @abstractmethod
    def list_containers(
        self, names: Sequence[str], label: str | None = None
    ) -> list[ContainerInfo]:
        """List running containers.

        Args:
            names: Name filters; a container matching any of them is listed.
            label: Optional ``key=value`` label filter.

        Returns:
            List of running containers.
        """
        pass

    @abstractmethod
    def exec(
        self, name: str, command: Sequence[str] = ("bash",), tty: bool = False
    ) -> subprocess.Popen:
        """Run a command in a running container, attached to the host.

        Args:
            name: Container name.
            command: Command to run.
            tty: Whether to allocate a pseudo-terminal.

        Returns:
            Handle of the started process.

        Raises:
            RuntimeLaunchError: If the process cannot be started.
        """
        pass
