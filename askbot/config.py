"""
Configuration loading.

Settings come from the environment (a .env file is loaded with
python-dotenv) and an optional per-bot JSON config file.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

BOT_DIR = Path(__file__).parent.parent
DEFAULT_STATE_FILE = "data/user_state.json"
DEFAULT_PORT = 3000


class ConfigurationError(Exception):
    """Invalid or missing configuration. Fatal at startup."""
    pass


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the bot."""
    slack_bot_token: str
    slack_app_token: Optional[str] = None
    slack_signing_secret: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: Optional[str] = None
    openai_max_tokens: Optional[int] = None
    anthropic_api_key: Optional[str] = None
    anthropic_model: Optional[str] = None
    anthropic_max_tokens: Optional[int] = None
    default_provider: str = "primary"
    state_file: Path = BOT_DIR / DEFAULT_STATE_FILE
    port: int = DEFAULT_PORT
    request_timeout: Optional[float] = None
    log_level: str = "INFO"
    name: str = "ask-bot"

    @property
    def socket_mode(self) -> bool:
        return bool(self.slack_app_token)


def load_bot_config(config_path: Path | str) -> dict:
    """Read a JSON bot config file."""
    path = Path(config_path)
    if not path.is_absolute():
        path = BOT_DIR / path
    try:
        with open(path, encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot load bot config {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Bot config {path} must be a JSON object")
    logger.info(f"Loaded bot config: {config.get('name', path.name)}")
    return config


def _int_env(name: str, default: Optional[int] = None) -> Optional[int]:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _float_env(name: str) -> Optional[float]:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def load_settings(
    env_file: Optional[str] = None,
    config_path: Optional[str] = None,
) -> Settings:
    """
    Load and validate settings.

    Args:
        env_file: .env file to load, relative to the bot directory
        config_path: Optional JSON bot config file

    Returns:
        Settings

    Raises:
        ConfigurationError: If required variables are missing or invalid
    """
    config = load_bot_config(config_path) if config_path else {}

    env_file = env_file or config.get("env_file")
    env_path = BOT_DIR / env_file if env_file else BOT_DIR / ".env"
    load_dotenv(env_path)

    required_vars = ["SLACK_BOT_TOKEN"]
    if not os.getenv("SLACK_APP_TOKEN"):
        required_vars.append("SLACK_SIGNING_SECRET")
    missing = [var for var in required_vars if not os.getenv(var)]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    state_file = Path(
        os.getenv("STATE_FILE") or config.get("state_file") or DEFAULT_STATE_FILE
    )
    if not state_file.is_absolute():
        state_file = BOT_DIR / state_file

    port = _int_env("PORT", config.get("port", DEFAULT_PORT))

    log_level = (os.getenv("LOG_LEVEL") or "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"Unknown LOG_LEVEL: {log_level}")

    return Settings(
        slack_bot_token=os.environ["SLACK_BOT_TOKEN"],
        slack_app_token=os.getenv("SLACK_APP_TOKEN") or None,
        slack_signing_secret=os.getenv("SLACK_SIGNING_SECRET") or None,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL") or None,
        openai_max_tokens=_int_env("OPENAI_MAX_TOKENS"),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        anthropic_model=os.getenv("ANTHROPIC_MODEL") or None,
        anthropic_max_tokens=_int_env("ANTHROPIC_MAX_TOKENS"),
        default_provider=(
            os.getenv("DEFAULT_PROVIDER") or config.get("default_provider") or "primary"
        ),
        state_file=state_file,
        port=port,
        request_timeout=_float_env("AI_REQUEST_TIMEOUT"),
        log_level=log_level,
        name=config.get("name", "ask-bot"),
    )
