from dataclasses import dataclass
from typing import Optional

from bubbles.components.bubble_kind import BubbleKind

@dataclass(slots=True)
class ActiveProjectile:
    """The bubble currently in flight. Speed is in pixels per second."""
    x: float
    y: float
    dx: float
    dy: float
    speed: float
    color: Optional[str]
    kind: BubbleKind = BubbleKind.NORMAL
    launched_at: float = 0.0
