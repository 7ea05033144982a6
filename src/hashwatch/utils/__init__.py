"""
hashwatch Utilities.

Console output and logging shared by the CLI, the history store
and the watch session.
"""

from .console import console, HashWatchConsole
from .logger import setup_logging, get_logger, LoggerAdapter

__all__ = [
    # Console
    'console',
    'HashWatchConsole',

    # Logging
    'setup_logging',
    'get_logger',
    'LoggerAdapter',
]
