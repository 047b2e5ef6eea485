"""Configuration package: pydantic models and JSON loading."""

from .loader import get_configuration, load_config, print_config_summary
from .model import AuthScheme, BotConfig, EndpointConfig, LoginLevel

__all__ = [
    "AuthScheme",
    "BotConfig",
    "EndpointConfig",
    "LoginLevel",
    "get_configuration",
    "load_config",
    "print_config_summary",
]
