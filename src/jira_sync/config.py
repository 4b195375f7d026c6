"""
Configuration

Connection settings read from ~/.jira-cli.yaml, the system keyring
(token, when the file has none) and JIRA_* environment variables, which
override both.
"""

import os
from typing import Any, Dict, Optional

import keyring
import yaml
from dotenv import load_dotenv
from keyring.errors import KeyringError

from jira_sync.constants import (
    CONFIG_FILENAME,
    ENV_EMAIL,
    ENV_TOKEN,
    ENV_URL,
    KEYRING_SERVICE,
    KEYRING_TOKEN_KEY,
)
from jira_sync.exceptions import ConfigError
from jira_sync.logger import logger


def default_config_path() -> str:
    """~/.jira-cli.yaml"""
    return os.path.join(os.path.expanduser("~"), CONFIG_FILENAME)


class Config:
    """JIRA / Confluence connection settings."""

    def __init__(self, url: str = "", email: str = "", token: str = ""):
        self.url = url
        self.email = email
        self.token = token

    def validate(self) -> None:
        """Check that every required field is set.

        Raises:
            ConfigError: a field is missing
        """
        if not self.url:
            raise ConfigError(f"JIRA URL is required (set in config file or {ENV_URL} env var)")
        if not self.email:
            raise ConfigError(f"JIRA email is required (set in config file or {ENV_EMAIL} env var)")
        if not self.token:
            raise ConfigError(f"JIRA token is required (set in config file or {ENV_TOKEN} env var)")

    def __repr__(self):
        # never print the token
        return f"Config(url={self.url!r}, email={self.email!r}, token={'***' if self.token else ''!r})"


# ============================================================
# Secure Token Storage (keyring)
# ============================================================
def _keyring_user(email: str) -> str:
    return email or KEYRING_TOKEN_KEY


def _load_token_from_keyring(email: str) -> Optional[str]:
    try:
        return keyring.get_password(KEYRING_SERVICE, _keyring_user(email))
    except KeyringError as e:
        logger.debug(f"Keyring unavailable: {e}")
        return None


def _save_token_to_keyring(email: str, token: str) -> bool:
    if not token:
        return False
    try:
        keyring.set_password(KEYRING_SERVICE, _keyring_user(email), token)
        return True
    except KeyringError as e:
        logger.debug(f"Keyring unavailable, token goes to the config file: {e}")
        return False


# ============================================================
# Configuration Loading
# ============================================================
def _read_config_file(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"reading config {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"reading config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"reading config {path}: expected a mapping")
    return data


def load_config(config_path: Optional[str] = None, use_keyring: bool = True) -> Config:
    """Load settings: config file, then keyring for the token, then env vars.

    Environment variables (also read from a ``.env`` file) override
    everything else.
    """
    load_dotenv()
    data = _read_config_file(config_path or default_config_path())

    cfg = Config(
        url=str(data.get("url") or ""),
        email=str(data.get("email") or ""),
        token=str(data.get("token") or ""),
    )
    if not cfg.token and use_keyring:
        cfg.token = _load_token_from_keyring(cfg.email) or ""

    cfg.url = os.getenv(ENV_URL) or cfg.url
    cfg.email = os.getenv(ENV_EMAIL) or cfg.email
    cfg.token = os.getenv(ENV_TOKEN) or cfg.token
    return cfg


def save_config(cfg: Config, config_path: Optional[str] = None, use_keyring: bool = True) -> str:
    """Write settings to the config file (mode 0600).

    The token is stored in the OS keyring when possible and only written to
    the file as a fallback.

    Returns:
        path written
    """
    path = config_path or default_config_path()
    data = {"url": cfg.url, "email": cfg.email}
    if not (use_keyring and _save_token_to_keyring(cfg.email, cfg.token)):
        data["token"] = cfg.token

    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
    except OSError as e:
        raise ConfigError(f"writing config file {path}: {e}") from e
    return path
