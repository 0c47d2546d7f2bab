"""
Utility modules.
"""

from .logging import setup_logging, get_logger, log_config

__all__ = ['setup_logging', 'get_logger', 'log_config']
