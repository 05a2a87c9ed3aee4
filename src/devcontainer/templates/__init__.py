"""Template generation for devcontainer."""

from devcontainer.templates.dockerfile import DockerfileTemplate

__all__ = [
    "DockerfileTemplate",
]
