"""Drive a headless browser through sequential tasks, with callbacks or chainable promises."""

from revenant.config.config import Config, SessionConfig
from revenant.core import (
    ElementNotFoundError,
    ElementNotWritableError,
    ElementTimeoutError,
    InvalidUrlError,
    NavigationError,
    NotOpenError,
    ProcessError,
    Promise,
    RevenantError,
    ScriptError,
    Session,
    SessionState,
)
from revenant.environment import open_session, setup_env
