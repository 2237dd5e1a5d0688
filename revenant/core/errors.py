from __future__ import annotations


class RevenantError(Exception):
    """Base class for every failure delivered by a Session operation."""


class InvalidUrlError(RevenantError):
    def __init__(self, url: object) -> None:
        super().__init__(f"Invalid url: {url!r}")
        self.url = url


class NotOpenError(RevenantError):
    """Raised when an operation runs while the session has no open page."""

    def __init__(self, reason: str = "page is not open") -> None:
        super().__init__(reason)
        self.reason = reason


class NavigationError(RevenantError):
    """Network or navigation failure while opening a url."""


class ElementTimeoutError(RevenantError):
    def __init__(self, selector: str, timeout_ms: int) -> None:
        super().__init__(f"Timed out after {timeout_ms} ms waiting for element {selector!r}")
        self.selector = selector
        self.timeout_ms = timeout_ms


class ElementNotFoundError(RevenantError):
    def __init__(self, selector: str) -> None:
        super().__init__(f"No element matches selector {selector!r}")
        self.selector = selector


class ElementNotWritableError(RevenantError):
    def __init__(self, selector: str) -> None:
        super().__init__(f"Element {selector!r} cannot take a value")
        self.selector = selector


class ScriptError(RevenantError):
    """A script evaluated in the page threw."""


class ProcessError(RevenantError):
    """The browser process crashed, disconnected or failed to launch."""
