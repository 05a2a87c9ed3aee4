"""Container runtime layer for devcontainer."""

from devcontainer.runtime.base import ContainerRuntime
from devcontainer.runtime.docker import DockerRuntime

__all__ = [
    "ContainerRuntime",
    "DockerRuntime",
]
