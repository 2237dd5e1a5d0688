from dataclasses import dataclass, field

BROWSERS = ("chromium", "firefox", "webkit")


@dataclass(frozen=True)
class SessionConfig:
    """Configuration for one browser session and its driver process."""
    browser: str = "chromium"
    headless: bool = True
    flags: tuple[str, ...] = ()
    navigation_timeout_ms: int = 30000
    wait_timeout_ms: int = 10000
    poll_interval_ms: int = 100
    exit_timeout_ms: int = 10000

    def __post_init__(self):
        if self.browser not in BROWSERS:
            raise ValueError(f"browser must be one of {', '.join(BROWSERS)}, got: {self.browser}")
        # Frozen: normalize through object.__setattr__
        object.__setattr__(self, "flags", tuple(str(flag) for flag in self.flags))
        for name in ("navigation_timeout_ms", "wait_timeout_ms", "poll_interval_ms", "exit_timeout_ms"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got: {value}")


@dataclass
class Config:
    """Main configuration containing log level and nested config objects."""
    log_level: str = "INFO"
    session_config: SessionConfig = field(default_factory=SessionConfig)
