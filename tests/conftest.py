"""Pytest fixtures and configuration."""

import gc
import shutil
import tempfile
from collections.abc import Generator, Sequence
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from git import Actor, Repo

from devcontainer.core.errors import BuildError, RuntimeLaunchError, VCSCommandError
from devcontainer.core.types import (
    ContainerInfo,
    Mount,
    MountPlan,
    PortMapping,
    VCSKind,
)
from devcontainer.runtime.base import ContainerRuntime
from devcontainer.vcs.base import VCSBackend

TEST_ACTOR = Actor("Test User", "test@example.com")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir).resolve()
    finally:
        # Release git objects that might hold open files
        gc.collect()
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def home_dir(temp_dir: Path) -> Path:
    """Create an empty host home directory."""
    home = temp_dir / "home"
    home.mkdir()
    return home


@pytest.fixture
def git_repo(temp_dir: Path) -> Repo:
    """Create a git repository with one commit."""
    repo_dir = temp_dir / "repo"
    repo_dir.mkdir()
    repo = Repo.init(repo_dir, initial_branch="main")
    with repo.config_writer() as writer:
        writer.set_value("user", "name", TEST_ACTOR.name)
        writer.set_value("user", "email", TEST_ACTOR.email)
    (repo_dir / "README.md").write_text("hello\n", encoding="utf-8")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit", author=TEST_ACTOR, committer=TEST_ACTOR)
    return repo


@pytest.fixture
def mock_docker_client() -> Generator[MagicMock, None, None]:
    """Create a mock Docker client."""
    with patch("docker.from_env") as mock:
        client = MagicMock()
        mock.return_value = client
        yield client


class FakeBackend(VCSBackend):
    """VCS backend recording calls instead of running a VCS."""

    kind = VCSKind.GIT
    marker = ".git"

    def __init__(self, fail_create: bool = False) -> None:
        self.fail_create = fail_create
        self.created: list[tuple[Path, str, Path]] = []
        self.destroyed: list[tuple[Path, str, Path]] = []

    def create_isolated_copy(
        self, original_root: Path, token: str, isolated_root: Path
    ) -> Path:
        if self.fail_create:
            raise VCSCommandError("creating git worktree: branch already exists")
        self.created.append((original_root, token, isolated_root))
        return isolated_root

    def destroy_isolated_copy(
        self, original_root: Path, token: str, isolated_root: Path
    ) -> None:
        self.destroyed.append((original_root, token, isolated_root))

    def metadata_mounts(self, original_root: Path) -> list[Mount]:
        git_dir = original_root / ".git"
        return [Mount(host=git_dir, container=str(git_dir))]


class FakeRuntime(ContainerRuntime):
    """Container runtime recording calls instead of talking to Docker."""

    def __init__(
        self,
        containers: list[ContainerInfo] | None = None,
        fail_build: bool = False,
        fail_run: bool = False,
    ) -> None:
        self.containers = containers or []
        self.fail_build = fail_build
        self.fail_run = fail_run
        self.builds: list[tuple[dict[str, bytes], dict[str, str], str]] = []
        self.removed: list[str] = []
        self.runs: list[dict] = []
        self.execs: list[tuple[str, tuple[str, ...], bool]] = []
        self.list_calls: list[tuple[list[str], str | None]] = []
        self.process = MagicMock(pid=4242)

    def build(
        self, context_files: dict[str, bytes], build_args: dict[str, str], tag: str
    ) -> str:
        self.builds.append((context_files, build_args, tag))
        if self.fail_build:
            raise BuildError("docker build: exit status 1")
        return "sha256:abc123"

    def remove_if_exists(self, name: str) -> bool:
        self.removed.append(name)
        return False

    def run(
        self,
        name: str,
        image: str,
        plan: MountPlan,
        ports: Sequence[PortMapping] = (),
        labels: dict[str, str] | None = None,
        command: Sequence[str] = (),
        tty: bool = False,
    ) -> MagicMock:
        if self.fail_run:
            raise RuntimeLaunchError("starting docker: No such file or directory")
        self.runs.append(
            {
                "name": name,
                "image": image,
                "plan": plan,
                "ports": list(ports),
                "labels": labels,
                "command": list(command),
                "tty": tty,
            }
        )
        return self.process

    def list_containers(
        self, names: Sequence[str], label: str | None = None
    ) -> list[ContainerInfo]:
        self.list_calls.append((list(names), label))
        return list(self.containers)

    def exec(
        self, name: str, command: Sequence[str] = ("bash",), tty: bool = False
    ) -> MagicMock:
        self.execs.append((name, tuple(command), tty))
        return self.process


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Create a recording VCS backend."""
    return FakeBackend()


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    """Create a recording container runtime."""
    return FakeRuntime()


@pytest.fixture
def make_backend() -> type[FakeBackend]:
    """Get the recording VCS backend class."""
    return FakeBackend


@pytest.fixture
def make_runtime() -> type[FakeRuntime]:
    """Get the recording container runtime class."""
    return FakeRuntime
