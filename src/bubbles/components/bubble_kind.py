from enum import Enum


class BubbleKind(Enum):
    """Closed set of bubble behaviours dispatched by matching and collision."""
    NORMAL = "normal"
    BOMB = "bomb"
    RAINBOW = "rainbow"
    FREEZE = "freeze"
    AIM = "aim"
    OBSTACLE = "obstacle"


# Kinds whose removal is reported back to the caller as a triggered effect.
TRIGGER_KINDS = frozenset({BubbleKind.FREEZE, BubbleKind.AIM})
