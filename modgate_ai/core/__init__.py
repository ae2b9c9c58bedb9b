"""
Core utilities and configuration for ModGate-AI.

This package provides shared functionality such as logging configuration and
Logfire monitoring.
"""

from modgate_ai.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
