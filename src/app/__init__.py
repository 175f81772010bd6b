"""Core application utilities: configuration, logging and the CLI."""

from app.config import get_config, load_band_settings
from app.logging import get_logger

__all__ = ["get_config", "get_logger", "load_band_settings"]
