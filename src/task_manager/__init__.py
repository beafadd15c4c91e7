"""Application-wide configuration and logging setup."""

from .config import Config, DatabaseConfig, LogConfig, ServerConfig
from .logger import setup_logger

__all__ = ["Config", "ServerConfig", "DatabaseConfig", "LogConfig", "setup_logger"]
