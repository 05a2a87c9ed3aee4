"""Jujutsu (jj) workspace backend."""

import logging
import os
import shutil
import subprocess
from pathlib import Path

from devcontainer.core.errors import VCSCommandError
from devcontainer.core.paths import is_within
from devcontainer.core.types import Mount, VCSKind
from devcontainer.vcs.base import VCSBackend, find_vcs_root

logger = logging.getLogger(__name__)


class JJBackend(VCSBackend):
    """Isolates sessions in additional jj workspaces."""

    kind = VCSKind.JJ
    marker = ".jj"

    def __init__(self, executable: str = "jj") -> None:
        """Initialize jj backend.

        Args:
            executable: Name or path of the jj binary.
        """
        self._executable = executable

    def _run(self, original_root: Path, *args: str) -> subprocess.CompletedProcess:
        """Run a jj command against a repository.

        Raises:
            subprocess.CalledProcessError: If jj exits non-zero.
            OSError: If jj cannot be executed.
        """
        repo_root = find_vcs_root(original_root)
        cmd = [self._executable, "-R", str(repo_root), *args]
        logger.debug(f"Running {' '.join(cmd)}")
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        if result.stderr.strip():
            logger.debug(result.stderr.strip())
        return result

    def create_isolated_copy(
        self, original_root: Path, token: str, isolated_root: Path
    ) -> Path:
        """Add a named jj workspace.

        Args:
            original_root: Directory inside the caller's checkout.
            token: Workspace name.
            isolated_root: Directory for the workspace.

        Returns:
            Path of the workspace.

        Raises:
            VCSCommandError: If jj fails or is not installed.
        """
        try:
            self._run(
                original_root, "workspace", "add", "--name", token, str(isolated_root)
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise VCSCommandError(f"creating jj workspace: {detail}") from e
        except OSError as e:
            raise VCSCommandError(f"creating jj workspace: {e}") from e
        logger.info(f"Created jj workspace {token} at {isolated_root}")
        return isolated_root

    def destroy_isolated_copy(
        self, original_root: Path, token: str, isolated_root: Path
    ) -> None:
        """Forget the workspace and delete its directory.

        Args:
            original_root: Directory inside the caller's checkout.
            token: Workspace name.
            isolated_root: Directory of the workspace.
        """
        try:
            self._run(original_root, "workspace", "forget", token)
        except subprocess.CalledProcessError as e:
            logger.warning(
                f"Could not forget jj workspace {token}: {(e.stderr or '').strip()}"
            )
        except OSError as e:
            logger.warning(f"Could not forget jj workspace {token}: {e}")

        try:
            shutil.rmtree(isolated_root)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {isolated_root}: {e}")

    def metadata_mounts(self, original_root: Path) -> list[Mount]:
        """Get the shared jj repo store and its git backend, if separate.

        When the store is backed by a git repository outside
        ``.jj/repo`` (for example a colocated ``.git``), that directory
        is mounted too. A target inside ``.jj/repo`` is already covered
        by the first mount and is not mounted again.

        Args:
            original_root: Directory inside the caller's checkout.

        Returns:
            List of mounts.
        """
        repo_dir = find_vcs_root(original_root) / ".jj" / "repo"
        mounts = [Mount(host=repo_dir, container=str(repo_dir))]

        git_target_file = repo_dir / "store" / "git_target"
        try:
            target_str = git_target_file.read_text(encoding="utf-8").strip()
        except OSError:
            return mounts
        if not target_str:
            return mounts

        target = Path(target_str)
        if not target.is_absolute():
            target = git_target_file.parent / target
        target = Path(os.path.normpath(target))

        if not is_within(target, repo_dir) and target.is_dir():
            mounts.append(Mount(host=target, container=str(target)))
        return mounts
