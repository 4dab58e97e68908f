from dataclasses import dataclass, field
from typing import List, Optional

from bubbles.components.bubble_kind import BubbleKind


@dataclass(frozen=True, slots=True)
class ShooterCandidate:
    color: Optional[str]
    kind: BubbleKind = BubbleKind.NORMAL


@dataclass(slots=True)
class ShooterQueue:
    """Upcoming shooter bubbles; the head is consumed on every fire."""
    candidates: List[ShooterCandidate] = field(default_factory=list)
