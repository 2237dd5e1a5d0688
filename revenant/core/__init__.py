"""Session orchestration: lifecycle, dual-mode task delivery and the operation surface."""

from revenant.core.errors import (
    ElementNotFoundError,
    ElementNotWritableError,
    ElementTimeoutError,
    InvalidUrlError,
    NavigationError,
    NotOpenError,
    ProcessError,
    RevenantError,
    ScriptError,
)
from revenant.core.lifecycle import Lifecycle, SessionState
from revenant.core.promise import Promise
from revenant.core.session import Session
