import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from revenant.config.config import Config, SessionConfig

CONFIG_FILENAME = "revenant.yaml"


def find_config_path() -> str:
    """Find the most appropriate revenant.yaml path.

    Order of precedence:
    1. CONFIG_PATH environment variable (if set and file exists)
    2. ./revenant.yaml in current working directory
    3. Search upward from current working directory for revenant.yaml

    Raises FileNotFoundError if no config file is found.
    """
    env_config_path = os.getenv("CONFIG_PATH")
    if env_config_path:
        path = Path(env_config_path)
        if path.is_file():
            return str(path)
        raise FileNotFoundError(f"CONFIG_PATH is set but file not found: {env_config_path}")

    cwd = Path.cwd()
    for parent in (cwd, *cwd.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.is_file():
            return str(candidate)

    raise FileNotFoundError(
        f"{CONFIG_FILENAME} not found. Set CONFIG_PATH, or place {CONFIG_FILENAME} in the current working "
        "directory or a parent directory."
    )


def load(config_path: Optional[str] = None) -> Config:
    file = _find_config(config_path)
    data = _read_config(file)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Parsed config file {file} does not contain a mapping")

    return _map_to_config(data)


def _read_config(file: Path) -> Any:
    content = file.read_text()

    def replace_env_var(match: re.Match) -> str:
        var_name = match.group(1)
        return os.getenv(var_name, match.group(0))

    content = re.sub(r'\$\{(\w+)}', replace_env_var, content)

    return yaml.safe_load(content)


def _find_config(config_path: str | None) -> Path:
    load_dotenv()

    if config_path:
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return path
    return Path(find_config_path())


def _parse_flags(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, list):
        raise ValueError(f"session.flags must be a list of strings, got: {raw!r}")
    return tuple(str(flag) for flag in raw)


def _map_to_config(data: dict) -> Config:
    session_data = data.get('session') or {}
    if not isinstance(session_data, dict):
        raise ValueError("session section must be a mapping")

    defaults = SessionConfig()
    session_config = SessionConfig(
        browser=str(session_data.get('browser', defaults.browser)),
        headless=bool(session_data.get('headless', defaults.headless)),
        flags=_parse_flags(session_data.get('flags')),
        navigation_timeout_ms=int(session_data.get('navigation-timeout-ms', defaults.navigation_timeout_ms)),
        wait_timeout_ms=int(session_data.get('wait-timeout-ms', defaults.wait_timeout_ms)),
        poll_interval_ms=int(session_data.get('poll-interval-ms', defaults.poll_interval_ms)),
        exit_timeout_ms=int(session_data.get('exit-timeout-ms', defaults.exit_timeout_ms)),
    )

    return Config(
        log_level=str(data.get('log_level', 'INFO')),
        session_config=session_config,
    )
