"""Game state resource describing whether the current life is still in play."""
from dataclasses import dataclass
from enum import Enum, auto


class GameMode(Enum):
    """High-level outcomes that gate firing and ticking."""
    PLAYING = auto()
    CLEARED = auto()
    FAILED = auto()


@dataclass
class GameState:
    """Singleton component storing the current game mode."""
    mode: GameMode = GameMode.PLAYING
