from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from bubbles.components.bubble_kind import BubbleKind
from bubbles.constants import BUBBLE_COLORS


@dataclass(frozen=True, slots=True)
class SpecialChances:
    """Independent per-candidate spawn probabilities for special bubbles."""
    bomb: float = 0.0
    rainbow: float = 0.0
    freeze: float = 0.0
    aim: float = 0.0

    def __post_init__(self) -> None:
        for kind, chance in self.weights().items():
            if chance < 0:
                raise ValueError(f"Special chance for '{kind.value}' must not be negative")
        if self.total() > 1.0:
            raise ValueError("Special chances must sum to at most 1.0")

    def weights(self) -> Dict[BubbleKind, float]:
        return {
            BubbleKind.BOMB: self.bomb,
            BubbleKind.RAINBOW: self.rainbow,
            BubbleKind.FREEZE: self.freeze,
            BubbleKind.AIM: self.aim,
        }

    def total(self) -> float:
        return self.bomb + self.rainbow + self.freeze + self.aim


@dataclass(frozen=True, slots=True)
class LevelConfig:
    """Immutable per-level parameters supplied by the caller."""
    level: int
    colors: Tuple[str, ...]
    name: str = ""
    difficulty: str = "Easy"
    special_chances: SpecialChances = field(default_factory=SpecialChances)
    obstacle_chance: float = 0.0
    initial_rows: int = 5
    descent_interval_ms: float = 30000.0
    time_limit_seconds: Optional[float] = None
    moving_rows: Tuple[int, ...] = ()
    moving_amplitude: float = 20.0
    moving_speed: float = 1.0
    endless: bool = False

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValueError("Level palette must contain at least one color")
        unknown = [color for color in self.colors if color not in BUBBLE_COLORS]
        if unknown:
            raise ValueError(f"Unknown bubble colors {unknown}")
        if not 0.0 <= self.obstacle_chance < 1.0:
            raise ValueError("obstacle_chance must be in [0, 1)")
        if self.descent_interval_ms <= 0:
            raise ValueError("descent_interval_ms must be positive")
        if self.moving_speed <= 0:
            raise ValueError("moving_speed must be positive")
        if self.initial_rows < 0:
            raise ValueError("initial_rows must not be negative")
