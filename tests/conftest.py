import logging
import threading
from typing import Any

import pytest

from revenant.config.config import SessionConfig
from revenant.core import scripts
from revenant.core.errors import NavigationError, ProcessError, ScriptError
from revenant.core.session import Session


class _FakeDriver:
    """In-memory page driver answering the scripts the Session evaluates.

    ``elements`` maps selectors to element dicts with optional ``html``,
    ``value`` and ``writable`` keys. ``delayed`` maps selectors to
    ``(polls, element)``: the element appears after that many presence polls.
    """

    def __init__(
        self,
        config: SessionConfig,
        *,
        elements: dict[str, dict[str, Any]] | None = None,
        delayed: dict[str, tuple[int, dict[str, Any]]] | None = None,
        redirects: dict[str, str] | None = None,
        unreachable: tuple[str, ...] = (),
        crash_on: tuple[str, ...] = (),
        evaluate_results: dict[str, Any] | None = None,
        click_navigates_to: str | None = None,
    ) -> None:
        self.config = config
        self.elements = {selector: dict(element) for selector, element in (elements or {}).items()}
        self.delayed = dict(delayed or {})
        self.redirects = redirects or {}
        self.unreachable = unreachable
        self.crash_on = crash_on
        self.evaluate_results = evaluate_results or {}
        self.click_navigates_to = click_navigates_to
        self._url = "about:blank"

        # recording
        self.navigate_calls: list[str] = []
        self.evaluate_calls: list[tuple[str, Any]] = []
        self.exit_calls = 0
        self.threads: set[int] = set()

    def _record(self, method: str) -> None:
        self.threads.add(threading.get_ident())
        if method in self.crash_on:
            raise ProcessError("browser process exited unexpectedly")

    # PageDriverProtocol
    def navigate(self, url: str) -> str:
        self.navigate_calls.append(url)
        self._record("navigate")
        if url in self.unreachable:
            raise NavigationError(f"Failed to open {url}: net::ERR_NAME_NOT_RESOLVED")
        self._url = self.redirects.get(url, url)
        return self._url

    def evaluate(self, script: str, arg: Any = None) -> Any:
        self.evaluate_calls.append((script, arg))
        self._record("evaluate")

        if script == scripts.ELEMENT_EXISTS:
            self._tick()
            return arg in self.elements
        if script == scripts.INNER_HTML:
            element = self.elements.get(arg)
            return {"found": False} if element is None else {"found": True, "value": element.get("html", "")}
        if script == scripts.SELECTOR_VALUE:
            element = self.elements.get(arg)
            return {"found": False} if element is None else {"found": True, "value": element.get("value")}
        if script == scripts.FILL_FORM:
            element = self.elements.get(arg["selector"])
            if element is None:
                return {"found": False, "writable": False}
            if not element.get("writable", True):
                return {"found": True, "writable": False}
            element["value"] = arg["value"]
            return {"found": True, "writable": True}
        if script == scripts.CLICK_ELEMENT:
            if arg not in self.elements:
                return {"found": False}
            if self.click_navigates_to:
                self._url = self.click_navigates_to
            return {"found": True}
        if script in self.evaluate_results:
            result = self.evaluate_results[script]
            if isinstance(result, Exception):
                raise result
            return result(arg) if callable(result) else result
        raise ScriptError(f"Unknown script: {script}")

    def _tick(self) -> None:
        for selector, (polls, element) in list(self.delayed.items()):
            if polls <= 1:
                self.elements[selector] = dict(element)
                del self.delayed[selector]
            else:
                self.delayed[selector] = (polls - 1, element)

    def content(self) -> str:
        self._record("content")
        body = "".join(
            f'<div id="{selector.lstrip("#")}">{element.get("html", "")}</div>'
            for selector, element in self.elements.items()
        )
        return f"<html><head><title>{self._url}</title></head><body>{body}</body></html>"

    def current_url(self) -> str:
        return self._url

    def exit(self) -> None:
        self.threads.add(threading.get_ident())
        self.exit_calls += 1


class FakeDriverFactory:
    """Callable handed to ``Session(driver_factory=...)``; records every driver it builds."""

    def __init__(self, launch_error: Exception | None = None, **driver_kwargs: Any) -> None:
        self.launch_error = launch_error
        self.driver_kwargs = driver_kwargs
        self.created: list[_FakeDriver] = []
        self.configs: list[SessionConfig] = []

    def __call__(self, config: SessionConfig) -> _FakeDriver:
        self.configs.append(config)
        if self.launch_error is not None:
            raise self.launch_error
        driver = _FakeDriver(config, **self.driver_kwargs)
        self.created.append(driver)
        return driver

    @property
    def driver(self) -> _FakeDriver:
        assert len(self.created) == 1, f"expected exactly one driver, got {len(self.created)}"
        return self.created[0]


FAST_CONFIG = SessionConfig(wait_timeout_ms=200, poll_interval_ms=5, exit_timeout_ms=2000)


@pytest.fixture
def fake_driver_factory():
    """Return a factory that constructs a configured FakeDriverFactory.

    Usage:
        factory = fake_driver_factory(elements={"#a": {"html": "x"}})
        session = Session(driver_factory=factory)
    """

    def _factory(**kwargs):
        return FakeDriverFactory(**kwargs)

    return _factory


@pytest.fixture
def session_factory():
    """Build sessions with fast timeouts and terminate them all on teardown."""
    sessions: list[Session] = []

    def _factory(driver_factory, config: SessionConfig = FAST_CONFIG, **kwargs) -> Session:
        session = Session(config, driver_factory=driver_factory, **kwargs)
        sessions.append(session)
        return session

    yield _factory

    for session in sessions:
        session.terminate()


class CallbackRecorder:
    """Completion callback that records every delivery and lets tests wait for the first."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, Any]] = []
        self.threads: list[int] = []
        self._event = threading.Event()

    def __call__(self, error: Any, result: Any) -> None:
        self.calls.append((error, result))
        self.threads.append(threading.get_ident())
        self._event.set()

    def wait(self, timeout: float = 5) -> tuple[Any, Any]:
        assert self._event.wait(timeout), "callback was never invoked"
        return self.calls[0]


@pytest.fixture
def callback_recorder():
    return CallbackRecorder


@pytest.fixture
def restore_package_logger():
    """Undo configure_logging so caplog keeps seeing ``revenant`` records."""
    logger = logging.getLogger("revenant")
    level, handlers, propagate = logger.level, list(logger.handlers), logger.propagate
    yield logger
    logger.setLevel(level)
    logger.handlers[:] = handlers
    logger.propagate = propagate
