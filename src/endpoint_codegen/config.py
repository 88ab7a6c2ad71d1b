"""Configuration and credential storage for endpoint-codegen.

Settings and the LLM API key live in one YAML file inside the app
directory ($ENDPOINT_CODEGEN_HOME, default ~/.endpoint-codegen).
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable

import yaml

from endpoint_codegen.errors import ConfigFileError, ValidationError
from endpoint_codegen.generator.prompt import DEFAULT_TEMPLATE
from endpoint_codegen.llm import DEFAULT_MODEL

logger = logging.getLogger(__name__)

HOME_ENV = "ENDPOINT_CODEGEN_HOME"
CONFIG_FILENAME = "config.yaml"
CREDENTIAL_KEY = "gemini_api_key"

DEFAULT_CONFIG = {
    "model": DEFAULT_MODEL,
    "template": DEFAULT_TEMPLATE,
    "log_level": "WARNING",
}


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logging to stderr and set its level."""
    log_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger().setLevel(log_level)


def default_config_path() -> Path:
    home = os.environ.get(HOME_ENV)
    base = Path(home) if home else Path.home() / ".endpoint-codegen"
    return base / CONFIG_FILENAME


def _read_yaml(path: Path, strict: bool = False) -> dict[str, Any]:
    """Read a YAML mapping; ``strict`` raises ConfigFileError instead of ignoring bad content."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        if strict:
            raise ConfigFileError(f"配置文件格式错误：{path}") from e
        logger.warning("Ignoring malformed config file %s: %s", path, e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        if strict:
            raise ConfigFileError(f"配置文件格式错误：{path}")
        logger.warning("Ignoring config file %s: not a mapping", path)
        return {}
    return data


def _write_yaml(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, allow_unicode=True, sort_keys=True), encoding="utf-8")


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load settings, filling unset keys from DEFAULT_CONFIG."""
    config = dict(DEFAULT_CONFIG)
    for key, value in _read_yaml(path or default_config_path()).items():
        if key != CREDENTIAL_KEY and value is not None:
            config[key] = value
    return config


class CredentialStore:
    """Persists the API key and notifies subscribers when its presence changes."""

    def __init__(self, path: Path | None = None):
        self.path = path or default_config_path()
        self._subscribers: list[Callable[[bool], None]] = []

    def get(self) -> str | None:
        value = _read_yaml(self.path).get(CREDENTIAL_KEY)
        return str(value) if value else None

    @property
    def is_configured(self) -> bool:
        return self.get() is not None

    def set(self, api_key: str) -> None:
        """Save ``api_key``; blank keys are rejected and nothing is written."""
        api_key = api_key.strip()
        if not api_key:
            raise ValidationError()
        # a malformed file is left untouched
        data = _read_yaml(self.path, strict=True)
        data[CREDENTIAL_KEY] = api_key
        _write_yaml(self.path, data)
        logger.info("API key saved to %s", self.path)
        self._publish(True)

    def clear(self) -> None:
        data = _read_yaml(self.path)
        if data.pop(CREDENTIAL_KEY, None) is not None:
            _write_yaml(self.path, data)
            logger.info("API key removed from %s", self.path)
        self._publish(False)

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """Register ``callback(available)``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, available: bool) -> None:
        for callback in list(self._subscribers):
            callback(available)
