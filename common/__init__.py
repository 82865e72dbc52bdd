"""Common services for the trivia bot (config, logging, database)."""
from .config import configure_logger, get_config, load_config

__all__ = ['get_config', 'load_config', 'configure_logger']
