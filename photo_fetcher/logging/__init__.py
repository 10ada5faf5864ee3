"""
Logging module for structured logging with structlog.
"""

from .config import LoggerConfig
from .correlation import CorrelationContext
from .progress import ProgressTracker

__all__ = ['LoggerConfig', 'CorrelationContext', 'ProgressTracker']
