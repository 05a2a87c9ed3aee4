"""Session lifecycle orchestration."""

import logging
import subprocess
import sys
import tempfile
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path

from devcontainer.core.config import StartOptions
from devcontainer.core.errors import ChildExitError
from devcontainer.core.paths import DOCKER_SOCKET, host_ids, session_dir, socket_gid
from devcontainer.core.trust import try_trust_workspace
from devcontainer.core.types import (
    SESSION_PREFIX,
    WORKSPACE_LABEL,
    Session,
    SessionState,
    VCSKind,
)
from devcontainer.planner.mounts import MountPlanner
from devcontainer.runtime.base import ContainerRuntime
from devcontainer.session.supervise import (
    defer_termination,
    interrupt_on_termination,
    supervise,
)
from devcontainer.templates.dockerfile import DockerfileTemplate
from devcontainer.vcs import detect_vcs, get_backend
from devcontainer.vcs.base import VCSBackend

logger = logging.getLogger(__name__)


class IsolatedCopy:
    """Handle on a session's isolated copy.

    ``release`` destroys the copy on its first call and does nothing
    afterwards.
    """

    def __init__(self, session: Session, backend: VCSBackend | None) -> None:
        """Initialize isolated copy handle.

        Args:
            session: Session owning the copy.
            backend: Backend that created the copy; None without a VCS.
        """
        self._session = session
        self._backend = backend
        self._released = False

    @property
    def session(self) -> Session:
        """Get the owning session."""
        return self._session

    @property
    def released(self) -> bool:
        """Check whether the copy has been released."""
        return self._released

    def release(self) -> None:
        """Destroy the isolated copy once."""
        if self._released:
            return
        self._released = True
        session = self._session
        if self._backend is None or session.original_root is None:
            return
        logger.info(f"Removing isolated copy {session.isolated_root}")
        # Runs once, so a termination signal must not cut it short
        with defer_termination() as received:
            try:
                self._backend.destroy_isolated_copy(
                    session.original_root, session.token or "", session.isolated_root
                )
            except Exception as e:
                # Never mask the session's own outcome
                logger.warning(f"Cleanup of {session.isolated_root} failed: {e}")
        if received:
            logger.warning(f"Deferred signal {received[0]} until cleanup finished")


class SessionOrchestrator:
    """Runs one session from VCS resolution to cleanup.

    The orchestrator moves through ``SessionState`` in order; the
    isolated copy is acquired as a scoped resource, so it is destroyed
    exactly once whether the session ends normally, fails, or is
    interrupted.
    """

    def __init__(
        self,
        options: StartOptions,
        runtime: ContainerRuntime,
        planner: MountPlanner | None = None,
        template: DockerfileTemplate | None = None,
        backend_factory: Callable[[VCSKind], VCSBackend] = get_backend,
        supervisor: Callable[[subprocess.Popen], int] = supervise,
        tty: bool | None = None,
        docker_socket: Path = DOCKER_SOCKET,
    ) -> None:
        """Initialize session orchestrator.

        Args:
            options: Validated start options.
            runtime: Container runtime.
            planner: Mount planner. Built from the options if None.
            template: Image template. Uses the default image if None.
            backend_factory: Returns the VCS backend for a kind.
            supervisor: Waits for the container process, returning its
                exit status.
            tty: Whether to allocate a terminal. Detected from stdin if None.
            docker_socket: Container engine control socket.
        """
        self._options = options
        self._runtime = runtime
        self._planner = planner or MountPlanner(
            home=options.home,
            ssh_auth_sock=options.ssh_auth_sock,
            docker_socket=docker_socket,
        )
        self._template = template or DockerfileTemplate()
        self._backend_factory = backend_factory
        self._supervisor = supervisor
        self._tty = sys.stdin.isatty() if tty is None else tty
        self._docker_socket = docker_socket
        self._state = SessionState.INIT
        self._history: list[SessionState] = [SessionState.INIT]
        self._session: Session | None = None

    @property
    def state(self) -> SessionState:
        """Get the current lifecycle state."""
        return self._state

    @property
    def history(self) -> list[SessionState]:
        """Get every state entered so far, in order."""
        return list(self._history)

    @property
    def session(self) -> Session | None:
        """Get the session, once prepared."""
        return self._session

    def _transition(self, state: SessionState) -> None:
        logger.debug(f"Session state {self._state.value} -> {state.value}")
        self._state = state
        self._history.append(state)

    def resolve_vcs(self) -> VCSKind:
        """Resolve the VCS kind of the workspace.

        The explicit override (flag, then environment, already folded
        into the options) wins over auto-detection.

        Returns:
            Resolved VCS kind.
        """
        if self._options.vcs:
            return VCSKind(self._options.vcs)
        return detect_vcs(self._options.workspace_dir)

    def prepare_session(self, kind: VCSKind) -> Session:
        """Name the session and choose where its isolated copy lives.

        Args:
            kind: Resolved VCS kind.

        Returns:
            Session instance.
        """
        options = self._options
        if kind is VCSKind.NONE:
            if options.name:
                container_name = f"{SESSION_PREFIX}{options.name}"
            else:
                container_name = options.container_name
            return Session(
                name=options.name or container_name,
                vcs_kind=kind,
                isolated_root=options.workspace_dir,
                container_name=container_name,
            )

        name, isolated_root = session_dir(options.name)
        return Session(
            name=name,
            vcs_kind=kind,
            original_root=options.workspace_dir,
            isolated_root=isolated_root,
            container_name=f"{SESSION_PREFIX}{name}",
            token=f"{SESSION_PREFIX}{name}",
        )

    @contextmanager
    def isolated_copy(
        self, session: Session, backend: VCSBackend | None
    ) -> Iterator[IsolatedCopy]:
        """Acquire the isolated copy for the duration of the block.

        Creation failures propagate before anything needs releasing.

        Args:
            session: Session to create the copy for.
            backend: VCS backend; None when the session has no VCS.

        Yields:
            IsolatedCopy handle.

        Raises:
            VCSCommandError: If the copy cannot be created.
        """
        if backend is not None and session.original_root is not None:
            backend.create_isolated_copy(
                session.original_root, session.token or "", session.isolated_root
            )
            self._transition(SessionState.ISOLATED_COPY_CREATED)

        handle = IsolatedCopy(session, backend)
        try:
            yield handle
        finally:
            handle.release()

    def build_image(self) -> str:
        """Build the session image for the current host user.

        Returns:
            Image ID.

        Raises:
            BuildError: If the build fails.
        """
        uid, gid = host_ids()
        build_args = {
            "USER_UID": str(uid),
            "USER_GID": str(gid),
            "DOCKER_GID": str(socket_gid(self._docker_socket)),
        }
        image_id = self._runtime.build(
            self._template.context_files(), build_args, self._options.image_name
        )
        self._transition(SessionState.IMAGE_READY)
        return image_id

    def run(self) -> int:
        """Run the session to completion.

        Returns:
            0 when the container process exits successfully.

        Raises:
            ChildExitError: If the container process exits non-zero.
            VCSCommandError: If the isolated copy cannot be created.
            BuildError: If the image build fails.
            RuntimeLaunchError: If the container cannot be started.
        """
        options = self._options
        kind = self.resolve_vcs()
        self._transition(SessionState.VCS_RESOLVED)
        logger.debug(f"Using VCS {kind.value} for {options.workspace_dir}")

        session = self.prepare_session(kind)
        self._session = session
        backend = self._backend_factory(kind) if session.has_isolated_copy else None

        try:
            with ExitStack() as stack:
                stack.enter_context(interrupt_on_termination())
                stack.enter_context(self.isolated_copy(session, backend))

                self.build_image()
                self._runtime.remove_if_exists(session.container_name)
                try_trust_workspace(options.home / ".claude.json")

                scratch_dir = Path(
                    stack.enter_context(
                        tempfile.TemporaryDirectory(prefix="devcontainer-context-")
                    )
                )
                plan = self._planner.plan(
                    session,
                    backend=backend,
                    mount_docker_socket=options.docker,
                    scratch_dir=scratch_dir,
                )

                process = self._runtime.run(
                    name=session.container_name,
                    image=options.image_name,
                    plan=plan,
                    ports=options.ports,
                    labels={WORKSPACE_LABEL: str(session.source_root)},
                    command=options.container_command(),
                    tty=self._tty,
                )
                self._transition(SessionState.RUNNING)

                exit_code = self._supervisor(process)
                self._transition(SessionState.EXITED)
        finally:
            self._transition(SessionState.CLEANED_UP)

        if exit_code != 0:
            raise ChildExitError(exit_code)
        return 0
