"""
States — Флаги состояния id в популяции

Каждому id соответствует одно 64-битное слово флагов. Сейчас определён
только младший бит "in use"; остальные биты зарезервированы.
"""

from enum import Enum
from typing import Final

# Маска бита "in use" в слове состояния
IN_USE_STATE_MASK: Final[int] = 0x0000_0000_0000_0001


class PreferredState(str, Enum):
    """Предпочтительное in-use состояние при выборке id."""

    EITHER = "EITHER"
    NOT_IN_USE = "NOT_IN_USE"
    IN_USE = "IN_USE"

    def accepts(self, in_use: bool) -> bool:
        """Подходит ли id с данным in-use битом под это состояние."""
        if self is PreferredState.EITHER:
            return True
        if self is PreferredState.IN_USE:
            return in_use
        return not in_use
