"""Tests for devcontainer.core.config module."""

from pathlib import Path

import pytest

from devcontainer.core.config import Config, StartOptions
from devcontainer.core.errors import ConfigError
from devcontainer.core.types import DEFAULT_CONTAINER_NAME, DEFAULT_IMAGE_NAME


class TestConfig:
    """Tests for Config class."""

    def test_defaults(self) -> None:
        """Test defaults with an empty environment."""
        config = Config.from_dict({})
        assert config.container_name == DEFAULT_CONTAINER_NAME
        assert config.image_name == DEFAULT_IMAGE_NAME
        assert config.vcs_override is None
        assert config.build_workspace_dir is None
        assert config.ssh_auth_sock is None

    def test_overrides(self) -> None:
        """Test values read from the environment."""
        config = Config.from_dict(
            {
                "CONTAINER_NAME": "my-dev",
                "IMAGE_NAME": "my-image",
                "DEVCONTAINER_VCS": "jj",
                "SSH_AUTH_SOCK": "/run/agent.sock",
            }
        )
        assert config.container_name == "my-dev"
        assert config.image_name == "my-image"
        assert config.vcs_override == "jj"
        assert config.ssh_auth_sock == Path("/run/agent.sock")

    def test_empty_values_are_unset(self) -> None:
        """Test empty variables fall back to defaults."""
        config = Config.from_dict({"CONTAINER_NAME": "", "DEVCONTAINER_VCS": ""})
        assert config.container_name == DEFAULT_CONTAINER_NAME
        assert config.vcs_override is None

    def test_get_default(self) -> None:
        """Test get with default value."""
        config = Config.from_dict({"A": "1"})
        assert config.get("A") == "1"
        assert config.get("B", "fallback") == "fallback"

    def test_environ_is_snapshot(self) -> None:
        """Test later changes to the source mapping are not seen."""
        env = {"IMAGE_NAME": "first"}
        config = Config(env)
        env["IMAGE_NAME"] = "second"
        assert config.image_name == "first"

    def test_workspace_from_build_tool(self, temp_dir: Path) -> None:
        """Test BUILD_WORKSPACE_DIRECTORY wins over detection."""
        config = Config.from_dict({"BUILD_WORKSPACE_DIRECTORY": "/src/monorepo"})
        assert config.resolve_workspace_dir(temp_dir) == Path("/src/monorepo")

    def test_workspace_from_vcs_root(self, temp_dir: Path) -> None:
        """Test the nearest repository root is used."""
        (temp_dir / ".git").mkdir()
        nested = temp_dir / "pkg" / "sub"
        nested.mkdir(parents=True)

        config = Config.from_dict({})
        assert config.resolve_workspace_dir(nested) == temp_dir

    def test_workspace_without_vcs(self, temp_dir: Path) -> None:
        """Test the directory itself is used outside a repository."""
        config = Config.from_dict({})
        assert config.resolve_workspace_dir(temp_dir) == temp_dir


class TestToStartOptions:
    """Tests for Config.to_start_options."""

    @pytest.fixture
    def config(self, temp_dir: Path) -> Config:
        """Create config pinned to a temporary workspace."""
        return Config.from_dict({"BUILD_WORKSPACE_DIRECTORY": str(temp_dir)})

    def test_basic(self, config: Config, temp_dir: Path) -> None:
        """Test building options from flags."""
        options = config.to_start_options(
            name="feature", ports=["8080:80"], home=temp_dir / "home"
        )
        assert options.workspace_dir == temp_dir
        assert options.home == temp_dir / "home"
        assert options.name == "feature"
        assert [str(p) for p in options.ports] == ["8080:80"]
        assert options.container_name == DEFAULT_CONTAINER_NAME
        assert options.image_name == DEFAULT_IMAGE_NAME

    def test_vcs_flag_beats_environment(self, temp_dir: Path) -> None:
        """Test --vcs takes precedence over DEVCONTAINER_VCS."""
        config = Config.from_dict(
            {"BUILD_WORKSPACE_DIRECTORY": str(temp_dir), "DEVCONTAINER_VCS": "jj"}
        )
        assert config.to_start_options(vcs="git").vcs == "git"
        assert config.to_start_options().vcs == "jj"

    def test_unknown_vcs(self, config: Config) -> None:
        """Test an unknown VCS name is rejected."""
        with pytest.raises(ConfigError, match="unknown VCS type: svn"):
            config.to_start_options(vcs="svn")

    def test_invalid_port(self, config: Config) -> None:
        """Test a malformed port mapping is rejected."""
        with pytest.raises(ConfigError, match="invalid container port"):
            config.to_start_options(ports=["8080:abc"])

    @pytest.mark.parametrize("port", ["8080:8_0", "8080: 80"])
    def test_port_must_be_plain_digits(self, config: Config, port: str) -> None:
        """Test ports docker would reject fail before the session starts."""
        with pytest.raises(ConfigError, match="invalid container port"):
            config.to_start_options(ports=[port])

    def test_resume_with_command(self, config: Config) -> None:
        """Test resume and a trailing command are exclusive."""
        with pytest.raises(
            ConfigError, match="cannot combine --resume with extra command arguments"
        ):
            config.to_start_options(resume="abc", command=["bash"])

    def test_flag_errors_before_workspace_lookup(self) -> None:
        """Test flag errors are reported without probing the filesystem."""
        config = Config.from_dict({})
        with pytest.raises(ConfigError, match="cannot combine"):
            config.to_start_options(
                resume="", command=["bash"], cwd=Path("/nonexistent/path")
            )


class TestStartOptions:
    """Tests for StartOptions model."""

    def _options(self, **kwargs: object) -> StartOptions:
        return StartOptions(workspace_dir=Path("/repo"), home=Path("/home/u"), **kwargs)

    def test_default_command(self) -> None:
        """Test the image default runs without resume or command."""
        options = self._options()
        assert not options.resume_requested
        assert options.container_command() == []

    def test_resume_without_id(self) -> None:
        """Test resuming interactively."""
        options = self._options(resume="")
        assert options.resume_requested
        assert options.container_command() == [
            "claude",
            "--dangerously-skip-permissions",
            "--resume",
        ]

    def test_resume_with_id(self) -> None:
        """Test resuming a named session."""
        options = self._options(resume="abc123")
        assert options.container_command()[-1] == "abc123"

    def test_explicit_command(self) -> None:
        """Test running an explicit command."""
        options = self._options(command=["bash", "-lc", "make test"])
        assert options.container_command() == ["bash", "-lc", "make test"]

    def test_empty_vcs_means_detect(self) -> None:
        """Test an empty VCS string is treated as unset."""
        assert self._options(vcs="").vcs is None
