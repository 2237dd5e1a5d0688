from __future__ import annotations

import dataclasses
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Iterable, Optional

from revenant.config.config import SessionConfig
from revenant.core import scripts
from revenant.core.errors import (
    ElementNotFoundError,
    ElementNotWritableError,
    ElementTimeoutError,
    InvalidUrlError,
    NotOpenError,
    ProcessError,
)
from revenant.core.lifecycle import Lifecycle, SessionState
from revenant.core.promise import Promise
from revenant.core.protocols.driver_protocol import PageDriverProtocol
from revenant.core.task import task
from revenant.core.urls import is_web_uri

logger = logging.getLogger(__name__)

DriverFactory = Callable[[SessionConfig], PageDriverProtocol]


def _default_driver_factory(config: SessionConfig) -> PageDriverProtocol:
    # Playwright is imported on first launch only
    from revenant.driver_adapter.driver import Driver

    return Driver(config)


class Session:
    """One browser-automation context wrapping exactly one driver process.

    Operations run one at a time, in call order, on a dedicated worker
    thread. Each accepts an optional completion callback; without one it
    returns a :class:`Promise`::

        browser = Session()
        (browser.open_page("http://example.com")
            .then(lambda _: browser.take_snapshot())
            .then(print)
            .always(browser.done))

    Always terminate a session (``done``/``exit``/``terminate`` or a ``with``
    block) so the browser process is stopped.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        flags: Iterable[str] | None = None,
        driver_factory: DriverFactory | None = None,
    ) -> None:
        config = config or SessionConfig()
        if flags is not None:
            config = dataclasses.replace(config, flags=tuple(flags))
        self._config: SessionConfig = config
        self._driver_factory: DriverFactory = driver_factory or _default_driver_factory
        self._driver: Optional[PageDriverProtocol] = None
        self._driver_lock = threading.Lock()
        self._lifecycle = Lifecycle()
        self._worker_ident: Optional[int] = None
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="revenant-session",
            initializer=self._bind_worker,
        )

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.terminate()

    def __repr__(self) -> str:
        return f"<Session state={self.state.value} url={self.url!r}>"

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._lifecycle.state

    @property
    def url(self) -> str | None:
        return self._lifecycle.current_url

    # --- Worker plumbing ---
    def _bind_worker(self) -> None:
        self._worker_ident = threading.get_ident()

    def _on_worker_thread(self) -> bool:
        return self._worker_ident == threading.get_ident()

    def _submit(self, operation: Callable[..., Any], requires_open: bool, *args: Any, **kwargs: Any) -> Promise:
        if self._lifecycle.is_closed:
            return Promise.rejected(NotOpenError("page is not open: session has been terminated"))
        try:
            future: Future = self._executor.submit(self._execute, operation, requires_open, args, kwargs)
        except RuntimeError:
            # Executor shut down between the state check and the submit
            return Promise.rejected(NotOpenError("page is not open: session has been terminated"))
        return Promise(future)

    def _execute(self, operation: Callable[..., Any], requires_open: bool, args: tuple, kwargs: dict) -> Any:
        if requires_open:
            self._lifecycle.require_open()
        logger.debug(f"Running {operation.__name__}")
        try:
            return operation(self, *args, **kwargs)
        except ProcessError as exc:
            self._handle_process_failure(exc)
            raise

    def _handle_process_failure(self, exc: ProcessError) -> None:
        logger.warning(f"Browser process failed: {exc}")
        if self._lifecycle.is_open:
            self._shutdown()
        else:
            self._release_driver()

    def _ensure_driver(self) -> PageDriverProtocol:
        if self._driver is None:
            self._driver = self._driver_factory(self._config)
        return self._driver

    def _require_driver(self) -> PageDriverProtocol:
        if self._driver is None:
            raise NotOpenError()
        return self._driver

    def _release_driver(self) -> None:
        with self._driver_lock:
            driver, self._driver = self._driver, None
        if driver is None:
            return
        try:
            driver.exit()
        except Exception as exc:
            logger.warning(f"Error while stopping browser process (ignored): {exc}")

    # --- Lifecycle ---
    def terminate(self) -> None:
        """Stop the browser process and close the session.

        Safe from any state and any thread, including from inside a callback
        or promise handler; repeated calls are no-ops. Never raises.
        """
        if self._lifecycle.is_closed:
            return
        self._shutdown()

    def done(self) -> None:
        self.terminate()

    def exit(self) -> None:
        self.terminate()

    def _shutdown(self) -> None:
        if not self._lifecycle.close():
            return
        logger.info(f"Terminating session (url={self.url})")
        try:
            if self._on_worker_thread():
                self._release_driver()
            else:
                release = self._executor.submit(self._release_driver)
                release.result(timeout=self._config.exit_timeout_ms / 1000)
        except FutureTimeoutError:
            logger.warning("Browser process still busy; it will be stopped once the current operation returns")
        except Exception as exc:
            logger.warning(f"Error while terminating session (ignored): {exc}")
        finally:
            self._executor.shutdown(wait=False)

    # --- Operations ---
    @task(requires_open=False)
    def open_page(self, url: str) -> None:
        self._lifecycle.require_openable()
        if not is_web_uri(url):
            raise InvalidUrlError(url)
        driver = self._ensure_driver()
        final_url = driver.navigate(url)
        self._lifecycle.mark_open(final_url or url)
        logger.info(f"Opened {self.url}")

    @task()
    def wait_for_element(self, selector: str, timeout_ms: int | None = None) -> None:
        """Poll until ``selector`` matches an element or ``timeout_ms`` elapses."""
        if timeout_ms is None:
            timeout_ms = self._config.wait_timeout_ms
        driver = self._require_driver()
        interval = self._config.poll_interval_ms / 1000
        deadline = time.monotonic() + timeout_ms / 1000

        while not driver.evaluate(scripts.ELEMENT_EXISTS, selector):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ElementTimeoutError(selector, timeout_ms)
            time.sleep(min(interval, remaining))
        logger.debug(f"Element {selector!r} is present")

    def _read(self, script: str, selector: str) -> Any:
        result = self._require_driver().evaluate(script, selector)
        if not result or not result.get("found"):
            raise ElementNotFoundError(selector)
        return result.get("value")

    @task()
    def get_inner_html(self, selector: str) -> str:
        return self._read(scripts.INNER_HTML, selector)

    @task()
    def get_selector_value(self, selector: str) -> Any:
        return self._read(scripts.SELECTOR_VALUE, selector)

    @task()
    def fill_form(self, selector: str, value: str) -> None:
        result = self._require_driver().evaluate(scripts.FILL_FORM, {"selector": selector, "value": value})
        if not result or not result.get("found"):
            raise ElementNotFoundError(selector)
        if not result.get("writable"):
            raise ElementNotWritableError(selector)

    @task()
    def click_element(self, selector: str) -> None:
        driver = self._require_driver()
        result = driver.evaluate(scripts.CLICK_ELEMENT, selector)
        if not result or not result.get("found"):
            raise ElementNotFoundError(selector)
        self._lifecycle.current_url = driver.current_url()

    @task()
    def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run a page function (``arg => ...``) and return its serializable result."""
        driver = self._require_driver()
        value = driver.evaluate(script, arg)
        self._lifecycle.current_url = driver.current_url()
        return value

    @task()
    def take_snapshot(self) -> str:
        return self._require_driver().content()
