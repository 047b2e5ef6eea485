"""Configuration loading utilities."""

from __future__ import annotations

import json
import logging
import os
import sys

from pydantic import ValidationError

from ..constants import CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE
from ..errors.internal import ConfigurationError
from .model import BotConfig


def config_path() -> str:
    return os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE)


def load_config(path: str | os.PathLike[str] | None = None) -> BotConfig:
    """Read and validate the JSON configuration file.

    Args:
        path: Config file path; defaults to ``$EMOJIBOT_CONF_FILE`` or
            ``config.json``.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If the file is missing, is not JSON or fails validation.
    """
    target = str(path) if path is not None else config_path()
    try:
        with open(target, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"{target} not found. Copy config.example.json to {target} and fill it in.",
            data={"path": target},
        ) from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Could not read {target}: {e}", data={"path": target}
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{target} must contain a JSON object", data={"path": target}
        )
    try:
        return BotConfig.from_dict(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {target}: {e}", data={"path": target}
        ) from e


def get_configuration(path: str | None = None) -> BotConfig:
    """Load configuration or terminate the process.

    Missing or invalid configuration is the only process-fatal condition.

    Raises:
        SystemExit: If the configuration cannot be loaded.
    """
    try:
        config = load_config(path)
    except ConfigurationError as e:
        logging.error(f"📁 {e}")
        sys.exit(1)
    logging.info(f"✅ Configuration loaded vms={len(config.vms)} auth={config.auth_type}")
    return config


def print_config_summary(config: BotConfig) -> None:
    logging.info(
        f"⚙️ Bot '{config.username}' prefix='{config.prefix}' auth={config.auth_type} "
        f"login_as={config.login_as} colon_emoji={config.colon_emoji}"
    )
    for vm in config.vms:
        logging.info(f"   • {vm.node_id} → {vm.url} (origin {vm.effective_origin})")
