"""
Logging configuration for tunedir.

The interactive UI owns the terminal, so records only ever go to the log
file; without one they are dropped.
"""
import logging
from pathlib import Path
from typing import Optional


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Setup logging configuration for tunedir.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; its directory is created if needed
    """
    logger = logging.getLogger('tunedir')
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()
    # Nothing may reach the screen through the root logger.
    logger.propagate = False

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        ))
        logger.addHandler(file_handler)
    else:
        logger.addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.
    
    Args:
        name: Module name
        
    Returns:
        Logger instance
    """
    return logging.getLogger(f'tunedir.{name}')


class TunedirError(Exception):
    """Base exception for tunedir."""
    pass


class MetadataError(TunedirError):
    """Track metadata could not be read."""
    pass


class DecodeError(TunedirError):
    """An audio file could not be handed to the audio sink."""
    pass


class CommandError(TunedirError):
    """Malformed command-mode input."""
    pass


class AudioPlayerError(TunedirError):
    """No usable audio player is available."""
    pass


class ConfigurationError(TunedirError):
    """The configuration cannot be used to start the player."""
    pass
