import logging
from typing import Any, Iterable, Optional

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from revenant.config.config import SessionConfig
from revenant.core.errors import NavigationError, ProcessError, RevenantError, ScriptError

logger = logging.getLogger(__name__)

CERTIFICATE_BYPASS_FLAGS = ("--ignore-certificate-errors", "--ignore-ssl-errors")


def ignores_certificate_errors(flags: Iterable[str]) -> bool:
    """Return True when the launch flags ask to skip TLS certificate validation.

    Accepts the Chromium switch as well as the PhantomJS-style
    ``--ignore-ssl-errors=yes`` form.
    """
    for flag in flags:
        name, _, value = flag.partition("=")
        if name in CERTIFICATE_BYPASS_FLAGS and value.lower() in ("", "yes", "true", "1"):
            return True
    return False


class Driver:
    """Playwright-backed page driver owning one browser process and one page.

    Created lazily by the Session on the first ``open_page`` and used only
    from that session's worker thread (the Playwright sync API is bound to
    the thread that started it).
    """

    def __init__(self, config: SessionConfig) -> None:
        self.config = config
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._dead_reason: Optional[str] = None
        self._stopped = False

        logger.info(f"Launching {config.browser} (headless={config.headless}, flags={list(config.flags)})")
        try:
            self.playwright = sync_playwright().start()
            launcher = getattr(self.playwright, config.browser)
            self.browser = launcher.launch(headless=config.headless, args=list(config.flags))
            self.context = self.browser.new_context(ignore_https_errors=ignores_certificate_errors(config.flags))
            self.page = self.context.new_page()
        except Exception as exc:
            self.exit()
            raise ProcessError(f"Failed to launch {config.browser}: {exc}") from exc

        self.browser.on("disconnected", lambda _: self._mark_dead("browser disconnected"))
        self.page.on("crash", lambda _: self._mark_dead("page crashed"))

    def _mark_dead(self, reason: str) -> None:
        if self._dead_reason is None and not self._stopped:
            logger.warning(f"Browser process failure: {reason}")
        self._dead_reason = self._dead_reason or reason

    def _ensure_alive(self) -> None:
        if self._stopped:
            raise ProcessError("browser process has been stopped")
        if self._dead_reason is not None:
            raise ProcessError(f"browser process is gone: {self._dead_reason}")

    def _translate(self, exc: PlaywrightError, error_type: type[RevenantError], message: str) -> RevenantError:
        if self._dead_reason is not None or (self.browser is not None and not self.browser.is_connected()):
            self._mark_dead("browser disconnected")
            return ProcessError(f"{message}: {exc.message}")
        return error_type(f"{message}: {exc.message}")

    def navigate(self, url: str) -> str:
        self._ensure_alive()
        logger.debug(f"Navigating to: {url}")
        try:
            self.page.goto(url, timeout=self.config.navigation_timeout_ms)
        except PlaywrightError as exc:
            raise self._translate(exc, NavigationError, f"Failed to open {url}") from exc
        return self.page.url

    def evaluate(self, script: str, arg: Any = None) -> Any:
        self._ensure_alive()
        try:
            return self.page.evaluate(script, arg)
        except PlaywrightError as exc:
            raise self._translate(exc, ScriptError, "Script evaluation failed") from exc

    def content(self) -> str:
        self._ensure_alive()
        try:
            return self.page.content()
        except PlaywrightError as exc:
            raise self._translate(exc, ScriptError, "Failed to serialize document") from exc

    def current_url(self) -> str:
        self._ensure_alive()
        return self.page.url

    def exit(self) -> None:
        if self._stopped:
            return
        self._stopped = True

        if self.browser is not None:
            try:
                self.browser.close()
            except Exception as exc:
                # Non-fatal: the process may already be gone
                logger.debug(f"Closing browser failed: {exc}")
        if self.playwright is not None:
            try:
                self.playwright.stop()
            except Exception as exc:
                logger.debug(f"Stopping playwright failed: {exc}")
        logger.info(f"Stopped {self.config.browser}")
