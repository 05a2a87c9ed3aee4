"""Claude Code trust settings for the container workspace."""

import json
import logging
from pathlib import Path
from typing import Any

from devcontainer.core.types import CONTAINER_WORKSPACE

logger = logging.getLogger(__name__)


def trust_workspace(config_path: Path, workspace: str = CONTAINER_WORKSPACE) -> bool:
    """Mark a project directory as trusted in a Claude Code config file.

    The file is shared with the container, so accepting the trust dialog
    here skips it inside the session. A missing file is left alone.

    Args:
        config_path: Path to ``.claude.json``.
        workspace: Project path as seen inside the container.

    Returns:
        True if the file was updated, False if it does not exist.

    Raises:
        OSError: If the file cannot be read or written.
        ValueError: If the file does not hold a JSON object.
    """
    if not config_path.exists():
        return False

    data: Any = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} does not contain a JSON object")

    projects = data.get("projects")
    if not isinstance(projects, dict):
        projects = {}
        data["projects"] = projects

    project = projects.get(workspace)
    if not isinstance(project, dict):
        project = {}
        projects[workspace] = project

    project["hasTrustDialogAccepted"] = True
    project["hasCompletedProjectOnboarding"] = True

    config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return True


def try_trust_workspace(config_path: Path) -> None:
    """Trust the container workspace, logging instead of failing."""
    try:
        trust_workspace(config_path)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not update {config_path}: {e}")
