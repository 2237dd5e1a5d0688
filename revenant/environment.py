import os
from typing import Any, Optional

from revenant.config.config import Config
from revenant.config.logging_config import configure_logging
from revenant.core.session import Session
from revenant.infrastructure.config_loader import load


def setup_env(config_path: Optional[str] = None) -> Config:
    """Load configuration and configure logging.

    ``LOG_LEVEL`` in the environment overrides the configured level.
    """
    config = load(config_path)
    configure_logging(os.getenv("LOG_LEVEL", config.log_level))
    return config


def open_session(config_path: Optional[str] = None, **kwargs: Any) -> Session:
    """Build a Session from revenant.yaml (see ``config_loader.find_config_path``)."""
    config = setup_env(config_path)
    return Session(config.session_config, **kwargs)
