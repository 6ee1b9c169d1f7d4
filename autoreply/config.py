"""
Auto-reply configuration.

Loads configuration from a YAML file and environment variables with
precedence: env > config file > defaults.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Default config file locations (checked in order)
DEFAULT_CONFIG_PATHS = [
    Path("~/.config/gmail_autoreply/config.yaml").expanduser(),
    Path("~/.gmail_autoreply.yaml").expanduser(),
    Path("gmail_autoreply.yaml"),
]

DEFAULT_SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]

DEDUP_BY_THREAD = "thread"
DEDUP_BY_SENDER = "sender"
DEDUP_MODES = (DEDUP_BY_THREAD, DEDUP_BY_SENDER)


@dataclass
class Config:
    """
    Main configuration container.

    Holds the mailbox identity, the reply template and the polling settings.
    """
    # Mailbox
    own_address: Optional[str] = None
    query: str = "in:inbox is:unread"
    label_name: str = "REPLIED"

    # Reply
    reply_subject: str = "Re: Your Message"
    reply_body: str = "Thanks for contacting."

    # Dedup ledger
    ledger_file: str = "repliedThreads.json"
    dedup_by: str = DEDUP_BY_THREAD

    # Scheduler
    min_delay_seconds: int = 75
    max_delay_seconds: int = 120

    # General
    log_level: str = "INFO"

    # Credentials
    token_file: str = "token.json"
    credentials_file: str = "credentials.json"
    scopes: List[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))

    def validate(self) -> None:
        """
        Check settings that would break the loop.

        Raises:
            ValueError: If the delay range or dedup mode is invalid
        """
        if self.min_delay_seconds < 0:
            raise ValueError(f"min_delay_seconds must be >= 0, got {self.min_delay_seconds}")
        if self.max_delay_seconds < self.min_delay_seconds:
            raise ValueError(
                f"max_delay_seconds ({self.max_delay_seconds}) is lower than "
                f"min_delay_seconds ({self.min_delay_seconds})"
            )
        if self.dedup_by not in DEDUP_MODES:
            raise ValueError(f"dedup_by must be one of {DEDUP_MODES}, got {self.dedup_by!r}")
        if not self.label_name:
            raise ValueError("label_name must not be empty")


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Load configuration from a YAML file."""
    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level is not a mapping")
        return {}

    logger.info(f"Loaded config from {path}")
    return data


def find_config_file() -> Optional[Path]:
    """Find the first existing config file."""
    env_path = os.getenv("AUTOREPLY_CONFIG")
    if env_path:
        path = Path(env_path).expanduser()
        if path.exists():
            return path

    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return path

    return None


def load_config(
    config_path: Optional[Path] = None,
    env_prefix: str = "AUTOREPLY_",
) -> Config:
    """
    Load configuration with proper precedence.

    Priority (highest to lowest):
    1. Environment variables (AUTOREPLY_*)
    2. Config file
    3. Defaults

    Args:
        config_path: Explicit config file path (optional)
        env_prefix: Prefix for environment variables

    Returns:
        Populated Config object
    """
    config = Config()

    if config_path is None:
        config_path = find_config_file()

    if config_path:
        _apply_yaml_config(config, load_yaml_config(config_path))

    _apply_env_config(config, env_prefix)

    return config


_STRING_FIELDS = (
    "own_address",
    "query",
    "label_name",
    "reply_subject",
    "reply_body",
    "ledger_file",
    "dedup_by",
    "log_level",
    "token_file",
    "credentials_file",
)

_INT_FIELDS = (
    "min_delay_seconds",
    "max_delay_seconds",
)


def _set_int(config: Config, name: str, value: Any, source: str) -> None:
    """Set an integer field, keeping the current value if it does not parse."""
    try:
        setattr(config, name, int(value))
    except (TypeError, ValueError):
        logger.warning(f"Ignoring {name}={value!r} from {source}: not an integer")


def _apply_yaml_config(config: Config, data: Dict[str, Any]) -> None:
    """Apply YAML configuration data to config object."""
    if not data:
        return

    for name in _STRING_FIELDS:
        if name in data and data[name] is not None:
            setattr(config, name, str(data[name]))

    for name in _INT_FIELDS:
        if name in data:
            _set_int(config, name, data[name], "config file")

    if "scopes" in data and isinstance(data["scopes"], list):
        config.scopes = [str(s) for s in data["scopes"]]


def _apply_env_config(config: Config, prefix: str) -> None:
    """Apply environment variable overrides to config object."""
    for name in _STRING_FIELDS:
        value = os.getenv(f"{prefix}{name.upper()}")
        if value:
            setattr(config, name, value)

    for name in _INT_FIELDS:
        value = os.getenv(f"{prefix}{name.upper()}")
        if value:
            _set_int(config, name, value, f"{prefix}{name.upper()}")

    scopes = os.getenv(f"{prefix}SCOPES")
    if scopes:
        config.scopes = [s.strip() for s in scopes.split(",") if s.strip()]
