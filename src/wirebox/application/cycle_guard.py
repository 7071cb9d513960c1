"""Application layer - Circular dependency detection."""

import threading
from contextlib import contextmanager
from typing import Iterator, List

from wirebox.domain import ResolutionFrame


class CycleGuard:
    """Detects circular constructor dependencies during resolution.

    Uses thread-local storage to hold the current ResolutionFrame.
    When a TypeKey is entered while already on the frame, a cycle is detected.

    Attributes:
        _local: Thread-local storage for resolution frames.
    """

    def __init__(self) -> None:
        """Initialize the cycle guard with thread-local storage."""
        self._local = threading.local()

    def _get_frame(self) -> ResolutionFrame:
        """Get the current thread's resolution frame.

        Returns:
            The resolution frame for the current thread.
        """
        if not hasattr(self._local, "frame"):
            self._local.frame = ResolutionFrame()
        return self._local.frame

    @contextmanager
    def guard(self, type_key: str) -> Iterator[None]:
        """Hold ``type_key`` on the frame for the duration of the block.

        The key is released on every exit path, including exceptions.

        Raises:
            CyclicDependencyError: If the key is already under construction.

        Example:
            >>> guard = CycleGuard()
            >>> with guard.guard("app.a"):
            ...     with guard.guard("app.b"):
            ...         with guard.guard("app.a"):  # Raises CyclicDependencyError
            ...             pass
        """
        frame = self._get_frame()
        frame.push(type_key)
        try:
            yield
        finally:
            frame.pop()

    def in_progress(self) -> List[str]:
        """Return a copy of the TypeKeys currently under construction."""
        return list(self._get_frame().stack)

    def clear(self) -> None:
        """Clear the entire frame.

        Useful for testing or error recovery.
        """
        if hasattr(self._local, "frame"):
            self._local.frame.clear()
