import random

from esper import World

from bubbles.components.descent_state import DescentState
from bubbles.components.game_state import GameMode, GameState
from bubbles.components.level_config import LevelConfig
from bubbles.components.row_offsets import RowOffsets
from bubbles.components.shooter_queue import ShooterQueue
from bubbles.constants import FAILURE_ROW, GRID_COLS, MAX_ROWS
from bubbles.events.bus import EventBus
from bubbles.systems.candidate_ops import fill_shooter_queue
from bubbles.systems.grid_ops import generate_initial_grid, present_colors, spawn_grid


def create_world(
    event_bus: EventBus,
    level: LevelConfig,
    *,
    rng: random.Random | None = None,
    rows: int = MAX_ROWS,
    cols: int = GRID_COLS,
    failure_row: int = FAILURE_ROW,
    now_ms: float = 0.0,
    populate: bool = True,
) -> World:
    """Build the simulation world for one level.

    With ``populate=False`` the lattice is left empty so tests can lay out
    bubbles by hand.
    """
    world = World()
    setattr(world, "random", rng or random.Random())

    # Singleton state entity shared by every system.
    world.create_entity(
        GameState(mode=GameMode.PLAYING),
        level,
        DescentState(last_drop_at=now_ms),
        RowOffsets(offsets=[0.0] * rows),
        ShooterQueue(),
    )

    spawn_grid(world, rows=rows, cols=cols, failure_row=failure_row)
    if populate:
        generate_initial_grid(world, level, getattr(world, "random"))
    fill_shooter_queue(world, level, present_colors=present_colors(world) if populate else None)
    return world
