"""Hex-offset lattice math shared by collision and rendering.

Odd rows are shifted right by one bubble radius. Every function here is pure;
occupancy is passed in as a set of ``(row, col)`` tuples so the same helpers
work against the ECS grid and against plain test fixtures.
"""
from __future__ import annotations

import math
from typing import AbstractSet, Callable, Iterable, List, Set, Tuple

from bubbles.constants import (
    BUBBLE_RADIUS,
    GRID_COLS,
    MAX_ROWS,
    PLAYFIELD_WIDTH,
    ROW_HEIGHT,
    SIDE_MARGIN,
    TOP_MARGIN,
)
from bubbles.errors import NoSlotAvailable

Position = Tuple[int, int]
Point = Tuple[float, float]
RowOffset = Callable[[int], float]

# Column offsets for the rows above/below, keyed by row parity.
_EVEN_ROW_DIAGONALS = (-1, 0)
_ODD_ROW_DIAGONALS = (0, 1)


def cell_center(row: int, col: int) -> Point:
    x = SIDE_MARGIN + BUBBLE_RADIUS + col * 2 * BUBBLE_RADIUS
    if row % 2 == 1:
        x += BUBBLE_RADIUS
    y = TOP_MARGIN + BUBBLE_RADIUS + row * ROW_HEIGHT
    return x, y


def playfield_bounds() -> Tuple[float, float]:
    """Return the (left, right) x limits for a bubble center."""
    inset = BUBBLE_RADIUS + SIDE_MARGIN
    return inset, PLAYFIELD_WIDTH - inset


def ceiling_y() -> float:
    return TOP_MARGIN + BUBBLE_RADIUS / 2


def in_bounds(row: int, col: int, rows: int = MAX_ROWS, cols: int = GRID_COLS) -> bool:
    return 0 <= row < rows and 0 <= col < cols


def neighbors(row: int, col: int, rows: int = MAX_ROWS, cols: int = GRID_COLS) -> Set[Position]:
    diagonals = _ODD_ROW_DIAGONALS if row % 2 == 1 else _EVEN_ROW_DIAGONALS
    candidates: List[Position] = [(row, col - 1), (row, col + 1)]
    for d_row in (-1, 1):
        for d_col in diagonals:
            candidates.append((row + d_row, col + d_col))
    return {(r, c) for r, c in candidates if in_bounds(r, c, rows, cols)}


def ring(row: int, col: int, radius: int, rows: int = MAX_ROWS, cols: int = GRID_COLS) -> Set[Position]:
    """All cells within ``radius`` neighbor steps of (row, col), the origin included."""
    reached: Set[Position] = {(row, col)}
    frontier: Set[Position] = {(row, col)}
    for _ in range(max(0, radius)):
        next_frontier: Set[Position] = set()
        for r, c in frontier:
            next_frontier |= neighbors(r, c, rows, cols)
        next_frontier -= reached
        reached |= next_frontier
        frontier = next_frontier
    return reached


def distance_sq(point: Point, position: Position, row_offset: RowOffset | None = None) -> float:
    cx, cy = cell_center(*position)
    if row_offset is not None:
        cx += row_offset(position[0])
    return (point[0] - cx) ** 2 + (point[1] - cy) ** 2


def _closest(point: Point, positions: Iterable[Position], row_offset: RowOffset | None = None) -> Position | None:
    # Sorting the candidates first keeps ties deterministic.
    best: Position | None = None
    best_dist = math.inf
    for position in sorted(positions):
        dist = distance_sq(point, position, row_offset)
        if dist < best_dist:
            best = position
            best_dist = dist
    return best


def nearest_empty_cell(
    point: Point,
    occupied: AbstractSet[Position],
    contacted: Position,
    rows: int = MAX_ROWS,
    cols: int = GRID_COLS,
    row_offset: RowOffset | None = None,
) -> Position:
    """Return the empty neighbor of ``contacted`` closest to the contact point.

    ``row_offset`` maps a row index to its current lateral shift; candidate centers
    are measured where they are drawn, not where the static lattice puts them.
    """
    free = [pos for pos in neighbors(*contacted, rows, cols) if pos not in occupied]
    best = _closest(point, free, row_offset)
    if best is None:
        raise NoSlotAvailable(f"No empty neighbor around {contacted}")
    return best


def nearest_empty_in_row(
    point: Point,
    occupied: AbstractSet[Position],
    row: int,
    cols: int = GRID_COLS,
    row_offset: RowOffset | None = None,
) -> Position | None:
    return _closest(point, ((row, col) for col in range(cols) if (row, col) not in occupied), row_offset)


def nearest_empty_anywhere(
    point: Point,
    occupied: AbstractSet[Position],
    rows: int = MAX_ROWS,
    cols: int = GRID_COLS,
    row_offset: RowOffset | None = None,
) -> Position | None:
    return _closest(
        point,
        ((r, c) for r in range(rows) for c in range(cols) if (r, c) not in occupied),
        row_offset,
    )
