"""
Logging — логгер пакета poptree

Единый именованный логгер "poptree" и дополнительный уровень TRACE (5)
для пошаговой трассировки запросов. Библиотека сама handlers не
настраивает: это делает приложение через setup_logging().
"""

import logging
from typing import Final

TRACE: Final[int] = 5

logging.addLevelName(TRACE, "TRACE")

logger = logging.getLogger("poptree")


def trace(msg: str, *args, **kwargs) -> None:
    """Запись в лог на уровне TRACE."""
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, msg, *args, **kwargs)


def setup_logging(verbosity: int) -> None:
    """
    Настройка логирования.

    Args:
        verbosity: Уровень (0=SILENT, 1=INFO, 2=DEBUG, 3=TRACE)
    """
    level_map = {
        0: logging.CRITICAL + 1,  # Silent
        1: logging.INFO,
        2: logging.DEBUG,
        3: TRACE,
    }
    level = level_map.get(verbosity, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logger.setLevel(level)
