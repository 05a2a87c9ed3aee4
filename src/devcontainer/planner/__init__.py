"""Mount planning layer for devcontainer."""

from devcontainer.planner.mounts import MountPlanner, query_bazel_output_base

__all__ = [
    "MountPlanner",
    "query_bazel_output_base",
]
