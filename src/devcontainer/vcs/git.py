"""Git worktree backend."""

import logging
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from devcontainer.core.errors import VCSCommandError
from devcontainer.core.types import Mount, VCSKind
from devcontainer.vcs.base import VCSBackend, find_vcs_root

logger = logging.getLogger(__name__)


class GitBackend(VCSBackend):
    """Isolates sessions in git worktrees on a dedicated branch."""

    kind = VCSKind.GIT
    marker = ".git"

    def create_isolated_copy(
        self, original_root: Path, token: str, isolated_root: Path
    ) -> Path:
        """Add a worktree on a new branch.

        Args:
            original_root: Directory inside the caller's checkout.
            token: Name of the branch to create.
            isolated_root: Directory for the worktree.

        Returns:
            Path of the worktree.

        Raises:
            VCSCommandError: If git refuses to create the worktree.
        """
        try:
            repo = Repo(original_root, search_parent_directories=True)
            repo.git.worktree("add", "-b", token, str(isolated_root))
        except (GitCommandError, InvalidGitRepositoryError, NoSuchPathError) as e:
            raise VCSCommandError(f"creating git worktree: {e}") from e
        logger.info(f"Created git worktree {isolated_root} on branch {token}")
        return isolated_root

    def destroy_isolated_copy(
        self, original_root: Path, token: str, isolated_root: Path
    ) -> None:
        """Remove the worktree and delete its branch if fully merged.

        A branch that is not an ancestor of ``HEAD`` holds work that
        exists nowhere else, so it is kept.

        Args:
            original_root: Directory inside the caller's checkout.
            token: Name of the session branch.
            isolated_root: Directory of the worktree.
        """
        try:
            repo = Repo(original_root, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            logger.warning(f"Could not open {original_root} for cleanup: {e}")
            return

        try:
            repo.git.worktree("remove", "--force", str(isolated_root))
        except GitCommandError as e:
            logger.warning(f"Could not remove worktree {isolated_root}: {e}")
            try:
                repo.git.worktree("prune")
            except GitCommandError as prune_error:
                logger.debug(f"git worktree prune failed: {prune_error}")

        try:
            merged = repo.is_ancestor(token, "HEAD")
        except GitCommandError as e:
            logger.warning(f"Could not check branch {token}: {e}")
            return

        if not merged:
            logger.warning(f"Keeping branch {token}: it has unmerged commits")
            return

        try:
            repo.git.branch("-d", token)
        except GitCommandError as e:
            logger.warning(f"Could not delete branch {token}: {e}")
        else:
            logger.info(f"Deleted merged branch {token}")

    def metadata_mounts(self, original_root: Path) -> list[Mount]:
        """Get the shared ``.git`` directory of the original checkout."""
        git_dir = find_vcs_root(original_root) / ".git"
        return [Mount(host=git_dir, container=str(git_dir))]
