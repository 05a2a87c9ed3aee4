"""Session lifecycle layer for devcontainer."""

from devcontainer.session.orchestrator import IsolatedCopy, SessionOrchestrator
from devcontainer.session.supervise import SignalRelay, exit_status, supervise

__all__ = [
    "IsolatedCopy",
    "SessionOrchestrator",
    "SignalRelay",
    "exit_status",
    "supervise",
]
