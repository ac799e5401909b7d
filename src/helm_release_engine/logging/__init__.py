"""Logging configuration for helm_release_engine."""

from helm_release_engine.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
