from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from bubbles.components.bubble_kind import BubbleKind


@dataclass(frozen=True, slots=True)
class ClearedBubble:
    row: int
    col: int
    color: Optional[str]
    kind: BubbleKind

    @property
    def position(self) -> Tuple[int, int]:
        return self.row, self.col


@dataclass(frozen=True, slots=True)
class TriggeredSpecial:
    row: int
    col: int
    kind: BubbleKind


@dataclass(slots=True)
class MatchResult:
    """Outcome of resolving one placement; produced and consumed within a tick."""
    placed: Tuple[int, int]
    removed: List[ClearedBubble] = field(default_factory=list)
    floating: List[ClearedBubble] = field(default_factory=list)
    combo_bonus: int = 0
    triggered_specials: List[TriggeredSpecial] = field(default_factory=list)

    @property
    def total_cleared(self) -> int:
        return len(self.removed) + len(self.floating)


@dataclass(slots=True)
class TickReport:
    match_result: Optional[MatchResult] = None
    dropped_row: bool = False
    failure_breached: bool = False
    cleared: bool = False
    life_lost: bool = False
