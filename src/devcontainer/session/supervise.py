"""Child process supervision and signal forwarding."""

import logging
import signal
import subprocess
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from types import FrameType
from typing import Any

logger = logging.getLogger(__name__)

FORWARDED_SIGNALS = (signal.SIGINT, signal.SIGTERM)
TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


def _in_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


class SignalRelay:
    """Forwards signals received by this process to a child process.

    While active, the relay replaces the handlers of the given signals.
    Stopping it sets a cancellation flag first and then restores the
    previous handlers, so a signal arriving after the wait has returned
    is never delivered to a reaped process ID.
    """

    def __init__(
        self,
        process: subprocess.Popen,
        signals: Sequence[signal.Signals] = FORWARDED_SIGNALS,
    ) -> None:
        """Initialize signal relay.

        Args:
            process: Child process to forward signals to.
            signals: Signals to forward.
        """
        self._process = process
        self._signals = tuple(signals)
        self._previous: dict[signal.Signals, Any] = {}
        self._stopped = threading.Event()
        self.forwarded: list[int] = []

    @property
    def stopped(self) -> bool:
        """Check whether the relay has stopped listening."""
        return self._stopped.is_set()

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        if self._stopped.is_set():
            return
        try:
            # A no-op once the process has been waited for
            self._process.send_signal(signum)
        except ProcessLookupError:
            return
        self.forwarded.append(signum)
        logger.debug(f"Forwarded signal {signum} to pid {self._process.pid}")

    def start(self) -> None:
        """Install the forwarding handlers."""
        if not _in_main_thread():
            logger.debug("Not in the main thread; signals will not be forwarded")
            return
        for sig in self._signals:
            self._previous[sig] = signal.signal(sig, self._handle)

    def stop(self) -> None:
        """Stop forwarding and restore the previous handlers."""
        self._stopped.set()
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()

    def __enter__(self) -> "SignalRelay":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()


def exit_status(returncode: int) -> int:
    """Convert a Popen return code into a shell-style exit status.

    A process killed by signal N is reported as ``128 + N``.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


def supervise(process: subprocess.Popen) -> int:
    """Wait for a child process while relaying signals to it.

    Args:
        process: Started child process.

    Returns:
        Exit status of the child.
    """
    with SignalRelay(process):
        returncode = process.wait()
    return exit_status(returncode)


def _raise_interrupt(signum: int, frame: FrameType | None) -> None:
    raise KeyboardInterrupt(f"received signal {signum}")


@contextmanager
def interrupt_on_termination(
    signals: Sequence[signal.Signals] = TERMINATION_SIGNALS,
) -> Iterator[None]:
    """Raise KeyboardInterrupt on termination signals inside the block.

    Termination outside the supervised wait then unwinds the session
    scope like Ctrl-C does, and its cleanup runs.
    """
    if not _in_main_thread():
        yield
        return

    previous = {sig: signal.signal(sig, _raise_interrupt) for sig in signals}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@contextmanager
def defer_termination(
    signals: Sequence[signal.Signals] = TERMINATION_SIGNALS,
) -> Iterator[list[int]]:
    """Hold termination signals back until the block has finished.

    Signals received inside the block are recorded in the yielded list
    instead of interrupting it. The previous handlers are restored on
    exit.
    """
    received: list[int] = []
    if not _in_main_thread():
        yield received
        return

    def _record(signum: int, frame: FrameType | None) -> None:
        received.append(signum)

    previous = {sig: signal.signal(sig, _record) for sig in signals}
    try:
        yield received
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
