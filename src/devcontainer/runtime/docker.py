"""Docker container runtime."""

import io
import logging
import subprocess
import tarfile
import time
from collections.abc import Sequence

import docker
from docker.errors import APIError, DockerException, NotFound
from docker.errors import BuildError as DockerBuildError

from devcontainer.core.errors import (
    BuildError,
    RuntimeLaunchError,
    RuntimeUnavailableError,
)
from devcontainer.core.types import ContainerInfo, MountPlan, PortMapping
from devcontainer.runtime.base import ContainerRuntime

logger = logging.getLogger(__name__)


class DockerRuntime(ContainerRuntime):
    """Docker-based container runtime.

    Image builds, removal and listing go through the Docker API. Session
    processes are started with the ``docker`` CLI so they can share the
    host terminal.
    """

    def __init__(self, executable: str = "docker") -> None:
        """Initialize Docker runtime.

        Args:
            executable: Name or path of the docker CLI.

        Raises:
            RuntimeUnavailableError: If Docker is not available or not running.
        """
        self._executable = executable
        try:
            self._client = docker.from_env()
        except DockerException as e:
            raise RuntimeUnavailableError(
                "Docker is not available. Please ensure the Docker daemon is running.\n"
                f"Original error: {e}"
            ) from e

    def build(
        self, context_files: dict[str, bytes], build_args: dict[str, str], tag: str
    ) -> str:
        """Build a Docker image from an in-memory context.

        Args:
            context_files: Build context as a mapping of file name to content.
            build_args: Build arguments.
            tag: Tag for the resulting image.

        Returns:
            Image ID.

        Raises:
            BuildError: If the build fails.
        """
        tar_buffer = io.BytesIO()
        with tarfile.open(fileobj=tar_buffer, mode="w") as tar:
            for file_name, content in context_files.items():
                info = tarfile.TarInfo(name=file_name)
                info.size = len(content)
                tar.addfile(info, io.BytesIO(content))
        tar_buffer.seek(0)

        logger.info(f"Building image {tag}")
        try:
            image, logs = self._client.images.build(
                fileobj=tar_buffer,
                custom_context=True,
                tag=tag,
                buildargs=build_args,
                rm=True,
            )
        except DockerBuildError as e:
            for chunk in e.build_log:
                if "stream" in chunk:
                    logger.debug(chunk["stream"].rstrip())
            raise BuildError(f"docker build: {e}") from e
        except DockerException as e:
            raise BuildError(f"docker build: {e}") from e

        for chunk in logs:
            if "stream" in chunk:
                logger.debug(chunk["stream"].rstrip())

        if image.id is None:
            raise BuildError("Failed to build Docker image.")

        return image.id

    def remove_if_exists(self, name: str) -> bool:
        """Force-remove a container, tolerating its absence.

        Args:
            name: Container name.

        Returns:
            True if a container was removed, False if none existed.

        Raises:
            RuntimeLaunchError: If Docker refuses to remove the container.
        """
        try:
            container = self._client.containers.get(name)
        except NotFound:
            return False
        except DockerException as e:
            raise RuntimeLaunchError(f"inspecting container {name}: {e}") from e

        try:
            container.remove(force=True)
        except NotFound:
            return False
        except APIError as e:
            # Container might be auto-removing, wait for it to finish
            if "removal" in str(e).lower() or "in progress" in str(e).lower():
                for _ in range(10):
                    time.sleep(0.5)
                    try:
                        self._client.containers.get(name)
                    except NotFound:
                        break
            else:
                raise RuntimeLaunchError(f"removing container {name}: {e}") from e

        logger.info(f"Removed stale container {name}")
        return True

    def run_args(
        self,
        name: str,
        image: str,
        plan: MountPlan,
        ports: Sequence[PortMapping] = (),
        labels: dict[str, str] | None = None,
        command: Sequence[str] = (),
        tty: bool = False,
    ) -> list[str]:
        """Build the ``docker run`` command line.

        Args:
            name: Container name.
            image: Image to run.
            plan: Mounts and environment.
            ports: Published ports.
            labels: Container labels.
            command: Command overriding the image default.
            tty: Whether to allocate a pseudo-terminal.

        Returns:
            Command as list of arguments.
        """
        cmd = [
            self._executable,
            "run",
            "--rm",
            "-i",
            "--cap-drop=ALL",
            "--security-opt=no-new-privileges",
        ]
        for key, value in (labels or {}).items():
            cmd.extend(["--label", f"{key}={value}"])
        cmd.extend(["--name", name])

        if tty:
            cmd.append("-t")

        for volume in plan.volume_specs():
            cmd.extend(["-v", volume])
        for env in plan.env_specs():
            cmd.extend(["-e", env])
        for port in ports:
            cmd.extend(["-p", str(port)])

        cmd.append(image)
        cmd.extend(command)
        return cmd

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
        """Start a session container attached to the host's standard streams.

        Raises:
            RuntimeLaunchError: If the docker CLI cannot be started.
        """
        cmd = self.run_args(name, image, plan, ports, labels, command, tty)
        return self._spawn(cmd, "starting docker")

    def list_containers(
        self, names: Sequence[str], label: str | None = None
    ) -> list[ContainerInfo]:
        """List running containers matching any name filter and the label.

        Args:
            names: Name filters.
            label: Optional ``key=value`` label filter.

        Returns:
            List of running containers.

        Raises:
            RuntimeUnavailableError: If Docker cannot be queried.
        """
        filters: dict[str, str | list[str]] = {"name": list(names)}
        if label:
            filters["label"] = label

        try:
            containers = self._client.containers.list(filters=filters)
        except DockerException as e:
            raise RuntimeUnavailableError(f"listing containers: {e}") from e

        return [ContainerInfo(id=c.id, name=c.name) for c in containers]

    def exec_args(
        self, name: str, command: Sequence[str] = ("bash",), tty: bool = False
    ) -> list[str]:
        """Build the ``docker exec`` command line."""
        cmd = [self._executable, "exec", "-i"]
        if tty:
            cmd.append("-t")
        cmd.append(name)
        cmd.extend(command)
        return cmd

    def exec(
        self, name: str, command: Sequence[str] = ("bash",), tty: bool = False
    ) -> subprocess.Popen:
        """Open a process in a running container.

        Raises:
            RuntimeLaunchError: If the docker CLI cannot be started.
        """
        return self._spawn(self.exec_args(name, command, tty), "starting docker exec")

    def _spawn(self, cmd: list[str], action: str) -> subprocess.Popen:
        """Start a child process sharing the host's standard streams."""
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            return subprocess.Popen(cmd)
        except OSError as e:
            raise RuntimeLaunchError(f"{action}: {e}") from e
