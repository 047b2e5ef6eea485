"""
Configuration constants for the CollabVM Emoji Bot

This module contains the tunables used throughout the application.
Most constants can be overridden by setting an environment variable with the
same name. The emoji refresh interval is fixed.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Reconnection policy (flat delay, bounded attempts)
RECONNECT_DELAY_SECONDS = _get_env_float("RECONNECT_DELAY_SECONDS", 5.0)
RECONNECT_MAX_RETRIES = _get_env_int("RECONNECT_MAX_RETRIES", 5)

# Delay between initial connects of consecutive endpoints
CONNECT_STAGGER_SECONDS = _get_env_float("CONNECT_STAGGER_SECONDS", 1.0)

# Main loop polling interval for shutdown signals
MANAGER_LOOP_SLEEP_SECONDS = _get_env_float("MANAGER_LOOP_SLEEP_SECONDS", 1.0)

# Websocket open timeout
CONNECT_TIMEOUT_SECONDS = _get_env_float("CONNECT_TIMEOUT_SECONDS", 15.0)

# Emoji directory refresh period (not configurable)
EMOJI_REFRESH_INTERVAL_SECONDS = 10.0

# Websocket close codes
NORMAL_CLOSE_CODE = 1000
ABNORMAL_CLOSE_CODE = 1006
# Application-level code used when the bot abandons a session (bad credentials,
# incompatible auth scheme). Anything other than 1000 is retried.
AUTH_FAILURE_CLOSE_CODE = 4001

# Transport defaults
GUACAMOLE_SUBPROTOCOL = "guacamole"
DEFAULT_ORIGIN = "https://computernewb.com"

# Configuration file location
DEFAULT_CONFIG_FILE = "config.json"
CONFIG_FILE_ENV = "EMOJIBOT_CONF_FILE"
