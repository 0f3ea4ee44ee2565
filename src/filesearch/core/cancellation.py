"""
Cancellation tokens shared by the search service and its listing backends.

A CancellationTokenSource owns the flag; consumers only ever see the read-only
CancellationToken. A source built with a parent token mirrors the parent, so
cancelling a caller's token reaches every derived token down the call graph.
"""
import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger("filesearch.cancellation")

Listener = Callable[[], None]


class CancellationToken:
    def __init__(self, source: "CancellationTokenSource"):
        self._source = source

    @property
    def is_cancellation_requested(self) -> bool:
        return self._source._cancelled

    def on_cancellation_requested(self, listener: Listener) -> Callable[[], None]:
        """
        Register a one-shot listener.

        Runs the listener immediately when the token is already cancelled.
        Returns a callable that unregisters the listener.
        """
        return self._source._subscribe(listener)


class CancellationTokenSource:
    def __init__(self, parent: Optional[CancellationToken] = None):
        self._cancelled = False
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []
        self.token = CancellationToken(self)
        self._detach_parent: Optional[Callable[[], None]] = None
        if parent is not None:
            self._detach_parent = parent.on_cancellation_requested(self.cancel)

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            listeners, self._listeners = self._listeners, []
        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.warning("Cancellation listener failed: %s", e)

    def dispose(self) -> None:
        """Detach from the parent token and drop pending listeners."""
        if self._detach_parent is not None:
            self._detach_parent()
            self._detach_parent = None
        with self._lock:
            self._listeners = []

    def _subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            if not self._cancelled:
                self._listeners.append(listener)
                return lambda: self._unsubscribe(listener)
        listener()
        return lambda: None

    def _unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass
