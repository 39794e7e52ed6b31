"""Desktop configuration loaded from the environment and an optional .env file."""
import logging
import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

from .base import BaseConfiguration, ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _env(name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from exc


@dataclass
class DesktopConfiguration(BaseConfiguration):
    """Configuration for the Qt desktop client."""

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "DesktopConfiguration":
        """
        Build configuration from MINES_* environment variables.

        Args:
            load_env_file: If True, read a .env file first

        Returns:
            Validated DesktopConfiguration

        Raises:
            ConfigurationError: If a value cannot be parsed or is out of range
        """
        if load_env_file:
            load_dotenv()

        defaults = cls()
        config = cls(
            api_base_url=_env("MINES_API_BASE_URL", defaults.api_base_url, str).rstrip("/"),
            request_timeout=_env("MINES_REQUEST_TIMEOUT", defaults.request_timeout, float),
            mqtt_host=_env("MINES_MQTT_HOST", defaults.mqtt_host, str),
            mqtt_port=_env("MINES_MQTT_PORT", defaults.mqtt_port, int),
            mqtt_topic=_env("MINES_MQTT_TOPIC", defaults.mqtt_topic, str),
            mqtt_transport=_env("MINES_MQTT_TRANSPORT", defaults.mqtt_transport, str).lower(),
            surface_width=_env("MINES_SURFACE_WIDTH", defaults.surface_width, int),
            surface_height=_env("MINES_SURFACE_HEIGHT", defaults.surface_height, int),
            max_cell_size=_env("MINES_MAX_CELL_SIZE", defaults.max_cell_size, int),
            log_level=_env("MINES_LOG_LEVEL", defaults.log_level, str).upper(),
        )
        config.validate()
        logger.debug("Loaded configuration: %s", config)
        return config
