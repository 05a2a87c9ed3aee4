"""CLI for launching and attaching to devcontainers.

This module provides command-line interface for:
- Starting a session container on an isolated worktree
- Attaching a shell to a running session container
"""

import argparse
import logging
import sys

from devcontainer import __version__
from devcontainer.attach.resolver import AttachResolver
from devcontainer.core.config import Config
from devcontainer.core.errors import ChildExitError, DevcontainerError
from devcontainer.runtime.docker import DockerRuntime
from devcontainer.session.orchestrator import SessionOrchestrator
from devcontainer.session.supervise import supervise

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr.

    Args:
        verbose: Show debug output, including image build logs.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
        stream=sys.stderr,
    )


def cmd_start(args: argparse.Namespace) -> int:
    """Start command handler.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code.
    """
    command = list(args.container_command)
    if command and command[0] == "--":
        command = command[1:]

    config = Config.from_environ()
    options = config.to_start_options(
        name=args.name,
        vcs=args.vcs,
        docker=args.docker,
        ports=args.port,
        resume=args.resume,
        command=command,
    )

    runtime = DockerRuntime()
    return SessionOrchestrator(options, runtime).run()


def cmd_exec(args: argparse.Namespace) -> int:
    """Exec command handler.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code.
    """
    config = Config.from_environ()
    workspace_dir = config.resolve_workspace_dir()

    runtime = DockerRuntime()
    resolver = AttachResolver(runtime, default_name=config.container_name)
    name = resolver.resolve(args.name, scope=workspace_dir)
    logger.debug(f"Attaching to {name}")

    exit_code = supervise(runtime.exec(name, tty=sys.stdin.isatty()))
    if exit_code != 0:
        raise ChildExitError(exit_code)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="devcontainer",
        description="Manage Claude devcontainers",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug output",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    # start command
    start_parser = subparsers.add_parser(
        "start",
        help="Launch a new Claude devcontainer",
        description=(
            "Creates a Docker container with Claude Code and development tools, "
            "using VCS worktrees for isolation."
        ),
    )
    start_parser.add_argument(
        "--name",
        help="Name for worktree/container (default: random suffix)",
    )
    start_parser.add_argument(
        "--vcs",
        help="Override VCS type: git or jj (default: auto-detect)",
    )
    start_parser.add_argument(
        "--docker",
        action="store_true",
        help="Mount the Docker socket into the container",
    )
    start_parser.add_argument(
        "--port",
        action="append",
        metavar="HOST:CONTAINER",
        help="Publish a container port to the host (repeatable)",
    )
    start_parser.add_argument(
        "--resume",
        nargs="?",
        const="",
        metavar="ID",
        help="Resume a Claude session by ID or name",
    )
    start_parser.add_argument(
        "container_command",
        nargs="*",
        metavar="COMMAND",
        help="Command to run instead of Claude (after --)",
    )
    start_parser.set_defaults(func=cmd_start)

    # exec command
    exec_parser = subparsers.add_parser(
        "exec",
        help="Attach to a running devcontainer",
    )
    exec_parser.add_argument(
        "name",
        nargs="?",
        help="Container or session name (prompts if several are running)",
    )
    exec_parser.set_defaults(func=cmd_exec)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments to parse. Uses ``sys.argv`` if None.

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.subcommand is None:
        parser.print_help()
        return 0

    configure_logging(args.verbose)

    try:
        return args.func(args)
    except ChildExitError as e:
        return e.exit_code
    except DevcontainerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
