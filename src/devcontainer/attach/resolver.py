"""Resolution of running devcontainers to attach to."""

import sys
from collections.abc import Callable
from pathlib import Path

from devcontainer.core.errors import AmbiguousTargetError, NotFoundError
from devcontainer.core.types import (
    DEFAULT_CONTAINER_NAME,
    SESSION_PREFIX,
    WORKSPACE_LABEL,
    ContainerInfo,
)
from devcontainer.runtime.base import ContainerRuntime

Prompt = Callable[[list[ContainerInfo]], ContainerInfo | None]


def select_container(containers: list[ContainerInfo]) -> ContainerInfo | None:
    """Interactively select a container.

    Args:
        containers: Candidates to choose from.

    Returns:
        Selected container or None if cancelled.
    """
    print("Running devcontainers:", file=sys.stderr)
    print(file=sys.stderr)
    for i, container in enumerate(containers, 1):
        print(f"  {i}. {container.name}", file=sys.stderr)
    print(file=sys.stderr)

    while True:
        try:
            sys.stderr.write("Select a devcontainer (number or name, q to quit): ")
            sys.stderr.flush()
            choice = input().strip()
            if choice.lower() in ("q", "quit", "exit"):
                return None

            # Try as number
            try:
                idx = int(choice) - 1
                if 0 <= idx < len(containers):
                    return containers[idx]
            except ValueError:
                pass

            # Try as name
            for container in containers:
                if container.name in (choice, f"{SESSION_PREFIX}{choice}"):
                    return container

            print(f"Invalid selection: {choice}", file=sys.stderr)
        except (KeyboardInterrupt, EOFError):
            print(file=sys.stderr)
            return None


class AttachResolver:
    """Finds the running devcontainer an ``exec`` should attach to."""

    def __init__(
        self,
        runtime: ContainerRuntime,
        default_name: str = DEFAULT_CONTAINER_NAME,
        is_interactive: Callable[[], bool] | None = None,
        prompt: Prompt = select_container,
    ) -> None:
        """Initialize attach resolver.

        Args:
            runtime: Container runtime to list containers with.
            default_name: Container name used by sessions without a VCS.
            is_interactive: Reports whether a prompt can be shown.
                Checks whether stdin is a terminal if None.
            prompt: Asks the user to pick among several containers.
        """
        self._runtime = runtime
        self._default_name = default_name
        self._is_interactive = is_interactive or sys.stdin.isatty
        self._prompt = prompt

    def candidates(self, scope: Path | None = None) -> list[ContainerInfo]:
        """List running devcontainers, optionally for one repository.

        Args:
            scope: Repository path the containers must be labelled with.

        Returns:
            List of running containers.
        """
        label = f"{WORKSPACE_LABEL}={scope}" if scope else None
        return self._runtime.list_containers(
            [SESSION_PREFIX, self._default_name], label=label
        )

    def resolve(self, target: str | None = None, scope: Path | None = None) -> str:
        """Resolve a target to the name of a running container.

        Args:
            target: Container name or session name; None to choose
                automatically.
            scope: Repository path to restrict candidates to.

        Returns:
            Container name.

        Raises:
            NotFoundError: If nothing is running or nothing matches target.
            AmbiguousTargetError: If several containers match and no
                interactive choice is possible.
        """
        containers = self.candidates(scope)
        if not containers:
            raise NotFoundError("no running devcontainers found")

        if target:
            for container in containers:
                if container.name in (target, f"{SESSION_PREFIX}{target}"):
                    return container.name
            raise NotFoundError(f"no running devcontainer matching {target!r}")

        if len(containers) == 1:
            return containers[0].name

        if not self._is_interactive():
            raise AmbiguousTargetError(
                "multiple devcontainers running; specify a name or run interactively"
            )

        selected = self._prompt(containers)
        if selected is None:
            raise AmbiguousTargetError("no devcontainer selected")
        return selected.name
