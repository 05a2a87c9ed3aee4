"""Tests for devcontainer.templates.dockerfile module."""

from devcontainer.templates.dockerfile import DockerfileTemplate


class TestDockerfileTemplate:
    """Tests for DockerfileTemplate class."""

    def test_render_default(self) -> None:
        """Test rendering with defaults."""
        content = DockerfileTemplate().render()

        assert content.startswith("FROM ubuntu:24.04\n")
        assert "ARG USER_UID=" in content
        assert "ARG USER_GID=" in content
        assert "ARG DOCKER_GID=984" in content
        assert "WORKDIR /workspace" in content
        assert "USER ${USER_NAME}" in content
        assert 'CMD ["claude", "--dangerously-skip-permissions"]' in content

    def test_default_packages(self) -> None:
        """Test default packages are installed."""
        content = DockerfileTemplate().render()

        for package in DockerfileTemplate.DEFAULT_PACKAGES:
            assert f"        {package} \\\n" in content

    def test_toolchains(self) -> None:
        """Test toolchain versions are pinned."""
        content = DockerfileTemplate(
            bazelisk_version="v1.20.0", jj_version="0.30.0", node_major=22
        ).render()

        assert "ARG BAZELISK_VERSION=v1.20.0" in content
        assert "ARG JJ_VERSION=0.30.0" in content
        assert "ARG NODE_MAJOR=22" in content
        assert "docker-ce-cli" in content
        assert "@anthropic-ai/claude-code" in content

    def test_home_dirs(self) -> None:
        """Test mount targets are created for the user."""
        content = DockerfileTemplate().render()

        for directory in DockerfileTemplate.HOME_DIRS:
            assert f"/home/${{USER_NAME}}/{directory} \\" in content

    def test_custom_base_and_user(self) -> None:
        """Test custom base image and user."""
        content = DockerfileTemplate(base_image="debian:12", user="coder").render()

        assert content.startswith("FROM debian:12\n")
        assert "ARG USER_NAME=coder" in content

    def test_with_packages(self) -> None:
        """Test adding packages without duplicates."""
        template = DockerfileTemplate().with_packages(["ripgrep", "git"])
        content = template.render()

        assert "        ripgrep \\\n" in content
        assert content.count("        git \\\n") == 1

    def test_context_files(self) -> None:
        """Test the build context contents."""
        files = DockerfileTemplate().context_files()

        assert set(files) == {"Dockerfile", ".dockerignore"}
        assert files["Dockerfile"].startswith(b"FROM ")
        assert files[".dockerignore"].strip() == b"*"
