"""
Logging utilities for photo-organizer.

The console carries the command's own diagnostics (skipped files, transfer
failures) and stays terse; the optional log file keeps a timestamped record
of the whole run.

Example:
    >>> from photo_organizer.utils import setup_logging
    >>> setup_logging('INFO', verbose=True)
    10
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
VERBOSE_CONSOLE_FORMAT = '%(levelname)s %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Decoder libraries log odd maker notes and padding at INFO and below
THIRD_PARTY_LOGGERS = {'PIL': logging.WARNING, 'exifread': logging.ERROR}


def _numeric_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    return numeric


def setup_logging(
    level: Union[str, int] = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> int:
    """Configure logging for a photo-organizer run.

    Console output goes to stderr so it never mixes with the plan listing
    and summary on stdout.

    Args:
        level: Configured level name or number for the console
        log_file: Optional path of a log file; it records INFO and above
            even when the console is quieter
        verbose: Log everything to the console, decoder libraries included
        quiet: Raise the console level to at least WARNING

    Returns:
        The level the console handler was set to

    Raises:
        ValueError: If level is not a known logging level name
    """
    console_level = _numeric_level(level)
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = max(console_level, logging.WARNING)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(VERBOSE_CONSOLE_FORMAT if verbose else CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)
    root_level = console_level

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_level = min(console_level, logging.INFO)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)
        root_level = min(root_level, file_level)

    root_logger.setLevel(root_level)

    for name, quiet_level in THIRD_PARTY_LOGGERS.items():
        logging.getLogger(name).setLevel(logging.NOTSET if verbose else quiet_level)

    return console_level
