"""Bind mount and environment planning for sessions."""

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path

from devcontainer.core.paths import DOCKER_SOCKET, file_exists, is_dir, is_socket
from devcontainer.core.types import (
    CONTAINER_HOME,
    CONTAINER_WORKSPACE,
    MountPlan,
    Session,
)
from devcontainer.vcs.base import VCSBackend

logger = logging.getLogger(__name__)

# Toolchain caches and assistant state, relative to the host and container
# home directories: (host path, container path, read-only)
HOME_MOUNTS: tuple[tuple[str, str, bool], ...] = (
    (".cache/bazelisk", ".cache/bazelisk", True),
    (".cargo", ".cargo", True),
    (".rustup", ".rustup", True),
    ("go", "go", True),
    ("dev/go", "gopath", False),
    (".npm", ".npm", True),
    (".cache/pnpm", ".cache/pnpm", True),
    (".claude", ".claude", False),
    (".claude.json", ".claude.json", False),
)

# Credentials and VCS configuration, mounted read-only when present
OPTIONAL_HOME_MOUNTS: tuple[tuple[str, Callable[[Path], bool]], ...] = (
    (".gitconfig", file_exists),
    (".config/gh", is_dir),
    (".config/jj", is_dir),
    (".ssh", is_dir),
)

BAZEL_MANIFEST = "MODULE.bazel"
BAZEL_RC_TARGET = "/etc/bazel.bazelrc"
SSH_AGENT_TARGET = "/tmp/ssh-agent.sock"


def query_bazel_output_base(workspace: Path) -> Path | None:
    """Ask Bazel for the output base of a workspace.

    Args:
        workspace: Directory containing ``MODULE.bazel``.

    Returns:
        Output base path, or None if Bazel is unavailable or fails.
    """
    try:
        result = subprocess.run(
            ["bazel", "info", "output_base"],
            cwd=workspace,
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, OSError) as e:
        logger.debug(f"bazel info output_base failed: {e}")
        return None
    output = result.stdout.strip()
    return Path(output) if output else None


class MountPlanner:
    """Computes the mounts and environment of a session container."""

    def __init__(
        self,
        home: Path,
        ssh_auth_sock: Path | None = None,
        docker_socket: Path = DOCKER_SOCKET,
        bazel_output_base: Callable[[Path], Path | None] = query_bazel_output_base,
    ) -> None:
        """Initialize mount planner.

        Args:
            home: Host home directory.
            ssh_auth_sock: SSH agent socket to forward, if any.
            docker_socket: Container engine control socket.
            bazel_output_base: Resolves the Bazel output base of a workspace.
        """
        self._home = home
        self._ssh_auth_sock = ssh_auth_sock
        self._docker_socket = docker_socket
        self._bazel_output_base = bazel_output_base

    def plan(
        self,
        session: Session,
        backend: VCSBackend | None = None,
        mount_docker_socket: bool = False,
        scratch_dir: Path | None = None,
    ) -> MountPlan:
        """Build the mount plan for a session.

        Entries are added in a fixed order so the resulting plan is
        deterministic for a given host state.

        Args:
            session: Session to plan for.
            backend: VCS backend of the session; required when the session
                has an isolated copy.
            mount_docker_socket: Whether the caller asked for the engine
                socket.
            scratch_dir: Directory for generated files mounted into the
                container. Bazel support is skipped without one.

        Returns:
            MountPlan instance.
        """
        plan = MountPlan()
        plan.add(session.isolated_root, CONTAINER_WORKSPACE)

        for host_rel, container_rel, read_only in HOME_MOUNTS:
            plan.add(
                self._home / host_rel,
                f"{CONTAINER_HOME}/{container_rel}",
                read_only=read_only,
            )

        self._add_bazel(plan, session.source_root, scratch_dir)

        if mount_docker_socket and is_socket(self._docker_socket):
            plan.add(self._docker_socket, str(self._docker_socket))

        for rel, probe in OPTIONAL_HOME_MOUNTS:
            host_path = self._home / rel
            if probe(host_path):
                plan.add(host_path, f"{CONTAINER_HOME}/{rel}", read_only=True)

        if self._ssh_auth_sock is not None and file_exists(self._ssh_auth_sock):
            plan.add(self._ssh_auth_sock, SSH_AGENT_TARGET)
            plan.set_env("SSH_AUTH_SOCK", SSH_AGENT_TARGET)

        if session.has_isolated_copy and session.original_root is not None:
            if backend is None:
                raise ValueError("A VCS backend is required for an isolated copy")
            plan.extend(backend.metadata_mounts(session.original_root))

        return plan

    def _add_bazel(
        self, plan: MountPlan, repo_root: Path, scratch_dir: Path | None
    ) -> None:
        """Share the host Bazel output base when the repository uses Bazel.

        The manifest is looked up in the original checkout, whose output
        base is the one the host has already populated.
        """
        if not file_exists(repo_root / BAZEL_MANIFEST):
            return
        if scratch_dir is None:
            logger.debug("No scratch directory; skipping Bazel output base")
            return

        output_base = self._bazel_output_base(repo_root)
        if output_base is None:
            return

        bazelrc = scratch_dir / "bazel.bazelrc"
        bazelrc.write_text(f"startup --output_base={output_base}\n", encoding="utf-8")
        plan.add(output_base, str(output_base))
        plan.add(bazelrc, BAZEL_RC_TARGET, read_only=True)
