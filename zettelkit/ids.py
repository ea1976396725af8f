"""Options used to generate random note IDs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

CHARSET_ALPHANUM = "0123456789abcdefghijklmnopqrstuvwxyz"
CHARSET_HEX = "0123456789abcdef"
CHARSET_LETTERS = "abcdefghijklmnopqrstuvwxyz"
CHARSET_NUMBERS = "0123456789"


class Case(IntEnum):
    """Letter case used when generating an ID."""

    LOWER = 1
    UPPER = 2
    MIXED = 3


@dataclass
class IDOptions:
    """Length, character set and letter case of generated IDs."""

    length: int = 4
    charset: str = CHARSET_ALPHANUM
    case: Case = Case.LOWER


IDGenerator = Callable[[], str]
IDGeneratorFactory = Callable[[IDOptions], IDGenerator]