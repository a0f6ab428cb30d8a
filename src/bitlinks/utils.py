from __future__ import annotations

from typing import Generator

from loguru import logger
from tqdm import tqdm


def task_id_generator() -> Generator[int, None, None]:
    """
    Generate integers 0, 1, 2, and so on.

    Returns:
        Generator[int, None, None]: A generator that yields integers 0, 1, 2, and so on.
    """
    task_id = 0
    while True:
        yield task_id
        task_id += 1


def is_success_status(status: int) -> bool:
    """2xx and 3xx responses carry a usable body."""
    return 200 <= status < 400


def setup_logger(logging_level: int) -> None:
    """
    Configure logger with clean format.

    Replaces every existing loguru sink with one that writes through
    tqdm, so log lines do not break an active progress bar.

    Args:
        logging_level (int): Loguru logging level (20=INFO, 10=DEBUG)
    """
    logger.remove()

    # Show module info only at DEBUG level (10 or lower)
    if logging_level <= 10:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        )

    logger.add(
        lambda msg: tqdm.write(msg, end=""),
        format=log_format,
        colorize=True,
        level=logging_level,
    )
