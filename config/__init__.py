"""
Configuration package for platform-specific settings.

Provides the shared configuration values and the desktop implementation
that reads them from the environment.
"""
from .base import BaseConfiguration, ConfigurationError
from .desktop import DesktopConfiguration

__all__ = [
    'BaseConfiguration',
    'ConfigurationError',
    'DesktopConfiguration'
]
