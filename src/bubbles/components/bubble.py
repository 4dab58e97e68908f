from dataclasses import dataclass
from typing import Optional

from bubbles.components.bubble_kind import BubbleKind

@dataclass(slots=True)
class Bubble:
    """Per-cell bubble data (color name and special kind).

    Occupancy is handled by ActiveSwitch; an empty cell keeps color=None and kind=NORMAL.
    """
    color: Optional[str] = None
    kind: BubbleKind = BubbleKind.NORMAL

    def clear(self) -> None:
        self.color = None
        self.kind = BubbleKind.NORMAL
