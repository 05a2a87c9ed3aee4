"""Attach layer for devcontainer."""

from devcontainer.attach.resolver import AttachResolver, select_container

__all__ = [
    "AttachResolver",
    "select_container",
]
