from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from esper import World

from bubbles.components.bubble import Bubble
from bubbles.components.bubble_kind import TRIGGER_KINDS, BubbleKind
from bubbles.components.match_result import ClearedBubble, MatchResult, TriggeredSpecial
from bubbles.constants import BOMB_RADIUS, MIN_CLUSTER
from bubbles.systems.grid_ops import clear_cells, get_grid, occupied_bubbles
from bubbles.utils.hex_geometry import neighbors, ring

Position = Tuple[int, int]


def _joins_cluster(bubble: Bubble, color: Optional[str]) -> bool:
    if bubble.kind == BubbleKind.OBSTACLE:
        return False
    if bubble.kind == BubbleKind.RAINBOW:
        return True
    return color is not None and bubble.color == color


def find_color_cluster(
    bubbles: Mapping[Position, Bubble],
    start: Position,
    color: Optional[str],
    rows: int,
    cols: int,
) -> Set[Position]:
    """Breadth-first cluster of cells sharing ``color``; rainbows join any cluster."""
    origin = bubbles.get(start)
    if origin is None or origin.kind == BubbleKind.OBSTACLE:
        return set()
    cluster: Set[Position] = {start}
    queue = deque([start])
    while queue:
        row, col = queue.popleft()
        for pos in neighbors(row, col, rows, cols):
            if pos in cluster:
                continue
            bubble = bubbles.get(pos)
            if bubble is None or not _joins_cluster(bubble, color):
                continue
            cluster.add(pos)
            queue.append(pos)
    return cluster


def placed_cluster(bubbles: Mapping[Position, Bubble], start: Position, rows: int, cols: int) -> Set[Position]:
    """Cluster grown from a freshly placed bubble.

    A placed rainbow takes whichever adjacent color (or its own) yields the largest
    cluster; ties go to the alphabetically first color.
    """
    placed = bubbles.get(start)
    if placed is None:
        return set()
    if placed.kind != BubbleKind.RAINBOW:
        return find_color_cluster(bubbles, start, placed.color, rows, cols)
    options: Set[str] = set()
    if placed.color is not None:
        options.add(placed.color)
    for pos in neighbors(*start, rows, cols):
        bubble = bubbles.get(pos)
        if bubble is None or bubble.color is None:
            continue
        if bubble.kind in (BubbleKind.OBSTACLE, BubbleKind.RAINBOW):
            continue
        options.add(bubble.color)
    best = find_color_cluster(bubbles, start, None, rows, cols)
    for color in sorted(options):
        cluster = find_color_cluster(bubbles, start, color, rows, cols)
        if len(cluster) > len(best):
            best = cluster
    return best


def find_anchored(occupied: Iterable[Position], rows: int, cols: int) -> Set[Position]:
    """Cells transitively connected to row 0 through any occupied cell."""
    occupied_set = set(occupied)
    anchored: Set[Position] = {pos for pos in occupied_set if pos[0] == 0}
    queue = deque(sorted(anchored))
    while queue:
        row, col = queue.popleft()
        for pos in neighbors(row, col, rows, cols):
            if pos in occupied_set and pos not in anchored:
                anchored.add(pos)
                queue.append(pos)
    return anchored


def find_floating(occupied: Iterable[Position], rows: int, cols: int) -> Set[Position]:
    occupied_set = set(occupied)
    return occupied_set - find_anchored(occupied_set, rows, cols)


def remove_floating(world: World) -> List[ClearedBubble]:
    grid = get_grid(world)
    floating = find_floating(occupied_bubbles(world).keys(), grid.rows, grid.cols)
    return clear_cells(world, floating)


def bomb_blast(bubbles: Mapping[Position, Bubble], center: Position, rows: int, cols: int) -> Set[Position]:
    """Occupied cells within BOMB_RADIUS neighbor steps of the bomb, whatever their color."""
    return {pos for pos in ring(center[0], center[1], BOMB_RADIUS, rows, cols) if pos in bubbles}


def triggered_specials(cleared: Iterable[ClearedBubble]) -> List[TriggeredSpecial]:
    return [
        TriggeredSpecial(row=entry.row, col=entry.col, kind=entry.kind)
        for entry in cleared
        if entry.kind in TRIGGER_KINDS
    ]


def combo_bonus_for(removed_count: int, floating_count: int) -> int:
    return floating_count + max(0, removed_count - MIN_CLUSTER)


def compute_match_result(world: World, row: int, col: int) -> MatchResult:
    """Resolve the placement at (row, col): cluster/bomb removal, then floating cleanup."""
    grid = get_grid(world)
    bubbles: Dict[Position, Bubble] = occupied_bubbles(world)
    result = MatchResult(placed=(row, col))
    placed = bubbles.get((row, col))
    if placed is None:
        return result

    cluster = placed_cluster(bubbles, (row, col), grid.rows, grid.cols)
    to_remove: Set[Position] = set(cluster) if len(cluster) >= MIN_CLUSTER else set()
    if placed.kind == BubbleKind.BOMB:
        to_remove |= bomb_blast(bubbles, (row, col), grid.rows, grid.cols)

    result.removed = clear_cells(world, to_remove)
    result.floating = remove_floating(world)
    result.triggered_specials = triggered_specials(result.removed + result.floating)
    result.combo_bonus = combo_bonus_for(len(result.removed), len(result.floating))
    return result
