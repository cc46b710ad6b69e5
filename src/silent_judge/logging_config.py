"""
Logging configuration for silent-judge.

The level comes from ``JudgeConfig.verbosity``:

    quiet    ERROR only
    normal   WARNING and up: evidence-law downgrades, degraded snapshots
    verbose  DEBUG: every scope, evidence and confidence decision

Records carry an ``[SJxxx]`` error code prefix when they report a
degradation, so a log file can be grepped per component.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import DEFAULT_CONFIG, JudgeConfig

ROOT_LOGGER = "silent_judge"

VERBOSITY_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def level_for_verbosity(verbosity: str) -> int:
    return VERBOSITY_LEVELS.get(verbosity, logging.WARNING)


def setup_logging(
    config: Optional[JudgeConfig] = None, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach a rich console handler (and optionally a file handler) to the
    silent_judge logger.

    Calling it again replaces the handlers installed by the previous call,
    so a run can switch verbosity after loading its config.

    Args:
        config: Supplies verbosity; defaults to DEFAULT_CONFIG
        log_file: Optional file path; records are appended

    Returns:
        The silent_judge logger
    """
    config = config or DEFAULT_CONFIG
    verbose = config.verbosity == "verbose"
    level = level_for_verbosity(config.verbosity)

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in logger.handlers if getattr(h, "_silent_judge", False)]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    for handler in handlers:
        handler._silent_judge = True  # type: ignore[attr-defined]
        handler.setLevel(level)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the silent_judge namespace.

    Args:
        name: Module name (e.g., 'silent_judge.scope.classifier');
              None returns the silent_judge logger itself
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
