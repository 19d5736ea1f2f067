"""CEFR fluency ladder used for learner levels (A1 -> C1)."""
from enum import Enum

from errors import InvalidLevel


class FluencyLevel(str, Enum):
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"

    @property
    def index(self) -> int:
        return LADDER.index(self)

    @property
    def next_level(self) -> "FluencyLevel | None":
        i = self.index
        return LADDER[i + 1] if i + 1 < len(LADDER) else None

    @property
    def previous_level(self) -> "FluencyLevel | None":
        i = self.index
        return LADDER[i - 1] if i > 0 else None

    def is_adjacent(self, other: "FluencyLevel") -> bool:
        # A level is never adjacent to itself.
        return other in (self.next_level, self.previous_level)

    def is_upgrade_to(self, other: "FluencyLevel") -> bool:
        return other.index > self.index

    def __str__(self) -> str:
        return self.value


LADDER: tuple[FluencyLevel, ...] = tuple(FluencyLevel)
DEFAULT_LEVEL = FluencyLevel.A1
LEVEL_CODES = frozenset(level.value for level in LADDER)

LEVEL_METADATA: dict[FluencyLevel, dict[str, str]] = {
    FluencyLevel.A1: {
        "code": "A1",
        "name": "Beginner",
        "description": "Can understand and use familiar everyday expressions",
        "color": "#10b981",
        "icon": "\U0001F331",
    },
    FluencyLevel.A2: {
        "code": "A2",
        "name": "Elementary",
        "description": "Can communicate in simple and routine tasks",
        "color": "#3b82f6",
        "icon": "\U0001F33F",
    },
    FluencyLevel.B1: {
        "code": "B1",
        "name": "Intermediate",
        "description": "Can deal with most situations while traveling",
        "color": "#8b5cf6",
        "icon": "\U0001F333",
    },
    FluencyLevel.B2: {
        "code": "B2",
        "name": "Upper Intermediate",
        "description": "Can interact with a degree of fluency and spontaneity",
        "color": "#f59e0b",
        "icon": "\U0001F3C6",
    },
    FluencyLevel.C1: {
        "code": "C1",
        "name": "Advanced",
        "description": "Can express ideas fluently and spontaneously",
        "color": "#ef4444",
        "icon": "\U0001F451",
    },
}


def is_valid_level(value) -> bool:
    return isinstance(value, str) and value in LEVEL_CODES


def parse_level(value) -> FluencyLevel:
    """Strict parse: exact, case-sensitive ladder codes only."""
    if not is_valid_level(value):
        raise InvalidLevel()
    return FluencyLevel(value)


def level_or_default(value) -> FluencyLevel:
    """Stored level, or A1 for legacy records that predate fluency tracking."""
    if value is None or value == "":
        return DEFAULT_LEVEL
    return parse_level(value)


def get_metadata(level: FluencyLevel) -> dict[str, str]:
    return dict(LEVEL_METADATA[level])


def format_level(level: FluencyLevel) -> str:
    return f"{level.value} - {LEVEL_METADATA[level]['name']}"
