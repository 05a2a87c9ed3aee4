"""Exception hierarchy for devcontainer."""


class DevcontainerError(Exception):
    """Base class for all harness-level errors.

    The CLI reports these once on stderr and exits with status 1.
    """

    pass


class ConfigError(DevcontainerError):
    """Invalid flag combination or malformed input.

    Always raised before any side effect takes place.
    """

    pass


class VCSCommandError(DevcontainerError):
    """The VCS tool failed while creating an isolated copy."""

    pass


class BuildError(DevcontainerError):
    """The container image build failed."""

    pass


class RuntimeUnavailableError(DevcontainerError):
    """Raised when the container engine is not available or not running."""

    pass


class RuntimeLaunchError(DevcontainerError):
    """The container engine failed to start the session process."""

    pass


class NotFoundError(DevcontainerError):
    """No running devcontainer matches the request."""

    pass


class AmbiguousTargetError(DevcontainerError):
    """Several devcontainers match and no interactive prompt is possible."""

    pass


class ChildExitError(DevcontainerError):
    """The supervised process exited with a non-zero status.

    This is not a harness failure: cleanup has already run and the CLI
    mirrors ``exit_code`` as its own exit status.
    """

    def __init__(self, exit_code: int) -> None:
        """Initialize child exit error.

        Args:
            exit_code: Exit status of the child process.
        """
        super().__init__(f"exit status {exit_code}")
        self.exit_code = exit_code
