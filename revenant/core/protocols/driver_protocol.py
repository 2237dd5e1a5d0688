from __future__ import annotations

from typing import Any, Protocol


class PageDriverProtocol(Protocol):
    """Lightweight page driver interface used by the Session.

    The protocol intentionally exposes a very small surface so the core
    package does not depend on Playwright. Concrete drivers (for example
    the Playwright-based driver in `revenant/driver_adapter/driver.py`) should
    implement these methods. A driver owns one browser process and one page
    and is only ever called from the owning session's worker thread.
    """

    def navigate(self, url: str) -> str:
        """Open the given absolute url and return the final (post-redirect) url.

        Raises NavigationError when the page cannot be loaded and
        ProcessError when the browser process is gone.
        """

    def evaluate(self, script: str, arg: Any = None) -> Any:
        """Evaluate a page function with a single argument and return its result.

        Raises ScriptError when the script throws and ProcessError when the
        browser process is gone.
        """

    def content(self) -> str:
        """Return the serialized HTML of the current document."""

    def current_url(self) -> str:
        """Return the driver's current URL as a string."""

    def exit(self) -> None:
        """Stop the browser process. Best effort, idempotent, never raises."""
