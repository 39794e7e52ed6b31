"""
Platform-independent configuration values.

Holds the settings shared by every front end: where the engine's HTTP API
lives, which push channel to listen on, and the board drawing limits.
"""
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

VALID_MQTT_TRANSPORTS = ("tcp", "websockets")


class ConfigurationError(Exception):
    """Raised when a configuration value is missing or invalid."""


@dataclass
class BaseConfiguration:
    """Settings common to all platforms."""
    api_base_url: str = "http://127.0.0.1:9091"
    request_timeout: float = 5.0
    mqtt_host: str = "127.0.0.1"
    mqtt_port: int = 1883
    mqtt_topic: str = "board-updates"
    mqtt_transport: str = "tcp"
    surface_width: int = 600
    surface_height: int = 600
    max_cell_size: int = 40
    log_level: str = "INFO"

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ConfigurationError: If any value is out of range
        """
        if not self.api_base_url:
            raise ConfigurationError("API base URL must not be empty")
        if self.request_timeout <= 0:
            raise ConfigurationError(f"Request timeout must be positive, got {self.request_timeout}")
        if not 0 < self.mqtt_port < 65536:
            raise ConfigurationError(f"Invalid MQTT port: {self.mqtt_port}")
        if not self.mqtt_topic:
            raise ConfigurationError("MQTT topic must not be empty")
        if self.mqtt_transport not in VALID_MQTT_TRANSPORTS:
            raise ConfigurationError(
                f"MQTT transport must be one of {VALID_MQTT_TRANSPORTS}, got {self.mqtt_transport!r}"
            )
        if self.surface_width <= 0 or self.surface_height <= 0:
            raise ConfigurationError(
                f"Surface size must be positive, got {self.surface_width}x{self.surface_height}"
            )
        if self.max_cell_size <= 0:
            raise ConfigurationError(f"Max cell size must be positive, got {self.max_cell_size}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
