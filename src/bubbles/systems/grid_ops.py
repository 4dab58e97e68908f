from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from esper import World

from bubbles.components.active_switch import ActiveSwitch
from bubbles.components.bubble import Bubble
from bubbles.components.bubble_cell import BubbleCell
from bubbles.components.bubble_kind import BubbleKind
from bubbles.components.grid import Grid
from bubbles.components.level_config import LevelConfig
from bubbles.components.match_result import ClearedBubble
from bubbles.components.projectile import ActiveProjectile
from bubbles.components.row_offsets import RowOffsets
from bubbles.constants import FAILURE_ROW, GRID_COLS, MAX_ROWS
from bubbles.errors import GridFull, NoSlotAvailable
from bubbles.systems.candidate_ops import generate_grid_bubble, world_rng
from bubbles.utils.hex_geometry import (
    cell_center,
    nearest_empty_anywhere,
    nearest_empty_cell,
    nearest_empty_in_row,
)

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class CellSnapshot:
    row: int
    col: int
    x: float
    y: float
    occupied: bool
    color: Optional[str]
    kind: BubbleKind


@dataclass(frozen=True, slots=True)
class Placement:
    row: int
    col: int
    # True when the contacted bubble had no free neighbor and a same-row/any-row slot was used.
    fallback: bool = False

    @property
    def position(self) -> Position:
        return self.row, self.col


def spawn_grid(
    world: World,
    rows: int = MAX_ROWS,
    cols: int = GRID_COLS,
    failure_row: int = FAILURE_ROW,
) -> Grid:
    """Create the Grid singleton and one empty cell entity per lattice position."""
    if not 0 < failure_row <= rows:
        raise ValueError("failure_row must lie within the grid")
    grid = Grid(rows=rows, cols=cols, failure_row=failure_row)
    world.create_entity(grid)
    for row in range(rows):
        for col in range(cols):
            x, y = cell_center(row, col)
            entity = world.create_entity(
                BubbleCell(row=row, col=col, x=x, y=y),
                ActiveSwitch(active=False),
                Bubble(),
            )
            grid.cells[(row, col)] = entity
    return grid


def get_grid(world: World) -> Grid:
    for _, grid in world.get_component(Grid):
        return grid
    raise RuntimeError("Grid not found")


def get_entity_at(world: World, row: int, col: int) -> int | None:
    return get_grid(world).cells.get((row, col))


def occupied_bubbles(world: World) -> Dict[Position, Bubble]:
    """Return mapping of occupied cell positions to their Bubble component."""
    mapping: Dict[Position, Bubble] = {}
    for _, (cell, switch, bubble) in world.get_components(BubbleCell, ActiveSwitch, Bubble):
        if switch.active:
            mapping[(cell.row, cell.col)] = bubble
    return mapping


def occupied_positions(world: World) -> Set[Position]:
    return set(occupied_bubbles(world))


def present_colors(world: World) -> Set[str]:
    return {
        bubble.color
        for bubble in occupied_bubbles(world).values()
        if bubble.color is not None and bubble.kind != BubbleKind.OBSTACLE
    }


def set_cell(world: World, row: int, col: int, color: Optional[str], kind: BubbleKind) -> None:
    entity = get_entity_at(world, row, col)
    if entity is None:
        raise ValueError(f"Cell ({row}, {col}) is outside the grid")
    bubble: Bubble = world.component_for_entity(entity, Bubble)
    bubble.color = None if kind == BubbleKind.OBSTACLE else color
    bubble.kind = kind
    world.component_for_entity(entity, ActiveSwitch).active = True


def clear_cells(world: World, positions) -> List[ClearedBubble]:
    """Empty the given cells and return what they held, in row/col order."""
    cleared: List[ClearedBubble] = []
    for row, col in sorted(set(positions)):
        entity = get_entity_at(world, row, col)
        if entity is None:
            continue
        switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if not switch.active:
            continue
        bubble: Bubble = world.component_for_entity(entity, Bubble)
        cleared.append(ClearedBubble(row=row, col=col, color=bubble.color, kind=bubble.kind))
        bubble.clear()
        switch.active = False
    return cleared


def clear_grid(world: World) -> None:
    grid = get_grid(world)
    clear_cells(world, grid.cells.keys())
    grid.overflowed = False


def generate_initial_grid(world: World, level: LevelConfig, rng: random.Random | None = None) -> List[Position]:
    """Fill the level's top rows; rows at or past the failure line stay empty."""
    rng = rng or world_rng(world)
    grid = get_grid(world)
    clear_grid(world)
    filled_rows = min(level.initial_rows, grid.failure_row - 1, grid.rows)
    spawned: List[Position] = []
    for row in range(filled_rows):
        for col in range(grid.cols):
            candidate = generate_grid_bubble(level, rng)
            set_cell(world, row, col, candidate.color, candidate.kind)
            spawned.append((row, col))
    logger.debug("Generated level %s grid with %d bubbles", level.level, len(spawned))
    return spawned


def resolve_landing_cell(
    world: World,
    point: Tuple[float, float],
    contacted: Position | None,
    offsets: RowOffsets | None = None,
) -> Placement:
    """Pick the empty cell a projectile at ``point`` settles into.

    ``contacted`` is the occupied cell that was touched, or None for a ceiling stop.
    Candidate centers are shifted by ``offsets`` so moving rows snap where they are.
    """
    grid = get_grid(world)
    occupied = occupied_positions(world)
    row_offset = offsets.offset_for if offsets is not None else None
    if contacted is not None:
        try:
            row, col = nearest_empty_cell(point, occupied, contacted, grid.rows, grid.cols, row_offset)
            return Placement(row, col)
        except NoSlotAvailable:
            logger.debug("No free neighbor around %s; falling back to same row", contacted)
        fallback_row = contacted[0]
    else:
        fallback_row = 0
    slot = nearest_empty_in_row(point, occupied, fallback_row, grid.cols, row_offset)
    if slot is None:
        slot = nearest_empty_anywhere(point, occupied, grid.rows, grid.cols, row_offset)
    if slot is None:
        raise GridFull("No empty cell left within the maximum row bound")
    # A ceiling stop landing in row 0 is the regular path, not a fallback.
    return Placement(slot[0], slot[1], fallback=contacted is not None or slot[0] != 0)


def place_bubble_on_grid(
    world: World,
    projectile: ActiveProjectile,
    contacted: Position | None = None,
    *,
    offsets: RowOffsets | None = None,
) -> Placement:
    """Snap the projectile into the lattice and write its color/kind into the cell."""
    placement = resolve_landing_cell(world, (projectile.x, projectile.y), contacted, offsets)
    set_cell(world, placement.row, placement.col, projectile.color, projectile.kind)
    return placement


def drop_new_row(world: World, level: LevelConfig, rng: random.Random | None = None) -> List[ClearedBubble]:
    """Shift every row down one index and inject a freshly generated row 0.

    Bubbles pushed past the last row are discarded and returned; losing any marks the
    grid as overflowed, which counts as a failure-line breach.
    """
    rng = rng or world_rng(world)
    grid = get_grid(world)
    discarded = clear_cells(world, [(grid.rows - 1, col) for col in range(grid.cols)])
    for row in range(grid.rows - 1, 0, -1):
        for col in range(grid.cols):
            _copy_cell(world, (row - 1, col), (row, col))
    for col in range(grid.cols):
        candidate = generate_grid_bubble(level, rng)
        set_cell(world, 0, col, candidate.color, candidate.kind)
    if discarded:
        grid.overflowed = True
        logger.info("Row drop pushed %d bubbles past the last row", len(discarded))
    return discarded


def _copy_cell(world: World, src: Position, dst: Position) -> None:
    src_entity = get_entity_at(world, *src)
    dst_entity = get_entity_at(world, *dst)
    if src_entity is None or dst_entity is None:
        return
    src_switch: ActiveSwitch = world.component_for_entity(src_entity, ActiveSwitch)
    dst_switch: ActiveSwitch = world.component_for_entity(dst_entity, ActiveSwitch)
    src_bubble: Bubble = world.component_for_entity(src_entity, Bubble)
    dst_bubble: Bubble = world.component_for_entity(dst_entity, Bubble)
    dst_bubble.color = src_bubble.color
    dst_bubble.kind = src_bubble.kind
    dst_switch.active = src_switch.active
    src_bubble.clear()
    src_switch.active = False


def grid_cleared(world: World) -> bool:
    return not occupied_bubbles(world)


def grid_reached_failure_line(world: World) -> bool:
    grid = get_grid(world)
    if grid.overflowed:
        return True
    return any(row >= grid.failure_row for row, _ in occupied_positions(world))


def grid_snapshot(world: World) -> Tuple[Tuple[CellSnapshot, ...], ...]:
    """Read-only copy of the lattice for rendering, row-major."""
    grid = get_grid(world)
    rows: List[Tuple[CellSnapshot, ...]] = []
    for row in range(grid.rows):
        cells: List[CellSnapshot] = []
        for col in range(grid.cols):
            entity = grid.cells[(row, col)]
            cell: BubbleCell = world.component_for_entity(entity, BubbleCell)
            switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            bubble: Bubble = world.component_for_entity(entity, Bubble)
            cells.append(
                CellSnapshot(
                    row=row,
                    col=col,
                    x=cell.x,
                    y=cell.y,
                    occupied=switch.active,
                    color=bubble.color,
                    kind=bubble.kind,
                )
            )
        rows.append(tuple(cells))
    return tuple(rows)
