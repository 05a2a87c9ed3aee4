"""Dockerfile template for the devcontainer image."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from devcontainer.core.types import CONTAINER_WORKSPACE, DEFAULT_DOCKER_GID


class DockerfileTemplate:
    """Renders the devcontainer image definition and its build context.

    Host-specific values (user and group IDs, the engine socket group)
    stay build arguments so one rendered Dockerfile serves every host.
    """

    # Template directory path
    _TEMPLATE_DIR = Path(__file__).parent / "files"

    DEFAULT_PACKAGES = [
        "build-essential",
        "git",
        "curl",
        "ca-certificates",
        "openssh-client",
        "jq",
        "less",
        "gnupg",
        "unzip",
        "xz-utils",
        "python3",
    ]

    # Mount targets under the container home, created ahead of time
    HOME_DIRS = [
        ".cache/bazelisk",
        ".cache/pnpm",
        ".cargo",
        ".rustup",
        "go",
        "gopath",
        ".npm",
        ".config/jj",
        ".claude",
        ".ssh",
    ]

    def __init__(
        self,
        base_image: str = "ubuntu:24.04",
        user: str = "dev",
        work_dir: str = CONTAINER_WORKSPACE,
        bazelisk_version: str = "v1.25.0",
        jj_version: str = "0.38.0",
        node_major: int = 24,
    ) -> None:
        """Initialize Dockerfile template.

        Args:
            base_image: Base Docker image.
            user: Username to create in container.
            work_dir: Working directory in container.
            bazelisk_version: Bazelisk release tag.
            jj_version: Jujutsu release version.
            node_major: Node.js major version.
        """
        self._base_image = base_image
        self._user = user
        self._work_dir = work_dir
        self._bazelisk_version = bazelisk_version
        self._jj_version = jj_version
        self._node_major = node_major
        self._additional_packages: list[str] = []

        self._env = Environment(
            loader=FileSystemLoader(self._TEMPLATE_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def with_packages(self, packages: list[str]) -> "DockerfileTemplate":
        """Add additional apt packages.

        Args:
            packages: List of package names.

        Returns:
            Self for chaining.
        """
        self._additional_packages.extend(packages)
        return self

    def render(self) -> str:
        """Render the Dockerfile.

        Returns:
            Dockerfile content.
        """
        packages = list(self.DEFAULT_PACKAGES)
        packages.extend(p for p in self._additional_packages if p not in packages)

        template = self._env.get_template("Dockerfile.j2")
        return template.render(
            base_image=self._base_image,
            user=self._user,
            work_dir=self._work_dir,
            default_docker_gid=DEFAULT_DOCKER_GID,
            bazelisk_version=self._bazelisk_version,
            jj_version=self._jj_version,
            node_major=self._node_major,
            packages=packages,
            home_dirs=self.HOME_DIRS,
        )

    def render_dockerignore(self) -> str:
        """Get the ``.dockerignore`` content."""
        return (self._TEMPLATE_DIR / "dockerignore").read_text(encoding="utf-8")

    def context_files(self) -> dict[str, bytes]:
        """Get the files making up the image build context.

        Returns:
            Mapping of file name to content.
        """
        return {
            "Dockerfile": self.render().encode("utf-8"),
            ".dockerignore": self.render_dockerignore().encode("utf-8"),
        }
