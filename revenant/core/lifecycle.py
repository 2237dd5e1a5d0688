from __future__ import annotations

import threading
from enum import Enum

from revenant.core.errors import NotOpenError


class SessionState(Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class Lifecycle:
    """Tracks the Unopened -> Open -> Closed progression of one session.

    ``close`` reports whether the caller performed the transition, which lets
    the session run its release routine exactly once however many exit paths
    reach it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: SessionState = SessionState.UNOPENED
        self.current_url: str | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SessionState.OPEN

    @property
    def is_closed(self) -> bool:
        return self._state is SessionState.CLOSED

    def require_open(self) -> None:
        state = self._state
        if state is SessionState.CLOSED:
            raise NotOpenError("page is not open: session has been terminated")
        if state is not SessionState.OPEN:
            raise NotOpenError()

    def require_openable(self) -> None:
        if self._state is SessionState.CLOSED:
            raise NotOpenError("page is not open: session has been terminated")

    def mark_open(self, url: str) -> None:
        with self._lock:
            if self._state is SessionState.CLOSED:
                raise NotOpenError("page is not open: session has been terminated")
            self._state = SessionState.OPEN
            self.current_url = url

    def close(self) -> bool:
        with self._lock:
            if self._state is SessionState.CLOSED:
                return False
            self._state = SessionState.CLOSED
            return True
