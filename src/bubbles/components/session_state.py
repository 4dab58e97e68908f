from dataclasses import dataclass
from typing import Optional

from bubbles.constants import STARTING_LIVES

@dataclass(slots=True)
class SessionState:
    """Caller-side runtime counters derived from engine events.

    The simulation core never reads this component; it exists for the
    presentation layer (HUD, star rating) to consume.
    """
    score: int = 0
    combo: int = 1
    lives: int = STARTING_LIVES
    shots: int = 0
    time_left: Optional[float] = None
    freeze_until: Optional[float] = None
    aim_boost_until: Optional[float] = None
    game_over: bool = False
