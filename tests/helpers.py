from __future__ import annotations

import random
from typing import Mapping, Tuple

from esper import World

from bubbles.components.bubble_kind import BubbleKind
from bubbles.components.level_config import LevelConfig
from bubbles.events.bus import EventBus
from bubbles.simulation import BubbleSimulation
from bubbles.systems.grid_ops import set_cell


def make_level(**overrides) -> LevelConfig:
    """A plain level with no specials or obstacles unless overridden."""
    params = dict(level=1, colors=("red", "blue", "green"), initial_rows=4, descent_interval_ms=30000)
    params.update(overrides)
    return LevelConfig(**params)


def make_simulation(level: LevelConfig | None = None, *, seed: int = 0, populate: bool = False, **kwargs) -> BubbleSimulation:
    """Simulation with an empty lattice by default so tests can lay out bubbles."""
    return BubbleSimulation(
        level or make_level(),
        event_bus=kwargs.pop("event_bus", None) or EventBus(),
        rng=random.Random(seed),
        populate=populate,
        **kwargs,
    )


def lay_out(world: World, cells: Mapping[Tuple[int, int], object]) -> None:
    """Write bubbles into the grid.

    Values are a color name, BubbleKind.OBSTACLE, or a (color, kind) tuple.
    """
    for (row, col), value in cells.items():
        if isinstance(value, tuple):
            color, kind = value
        elif value == BubbleKind.OBSTACLE:
            color, kind = None, BubbleKind.OBSTACLE
        else:
            color, kind = value, BubbleKind.NORMAL
        set_cell(world, row, col, color, kind)
