from __future__ import annotations

import random
from typing import Iterable, List, Sequence

from esper import World

from bubbles.components.bubble_kind import BubbleKind
from bubbles.components.level_config import LevelConfig
from bubbles.components.shooter_queue import ShooterCandidate, ShooterQueue
from bubbles.constants import SHOOTER_LOOKAHEAD


def world_rng(world: World) -> random.Random:
    candidate = getattr(world, "random", None)
    if isinstance(candidate, random.Random):
        return candidate
    rng = random.Random()
    setattr(world, "random", rng)
    return rng


def roll_special_kind(level: LevelConfig, rng: random.Random) -> BubbleKind:
    """Pick a special kind using the level's explicit weights; the remainder is NORMAL."""
    roll = rng.random()
    cumulative = 0.0
    for kind, chance in level.special_chances.weights().items():
        if chance <= 0:
            continue
        cumulative += chance
        if roll < cumulative:
            return kind
    return BubbleKind.NORMAL


def candidate_colors(level: LevelConfig, present_colors: Iterable[str] | None = None) -> List[str]:
    """Palette colors to draw from; restricted to colors still on the grid when any remain."""
    palette = list(level.colors)
    if present_colors is None:
        return palette
    present = set(present_colors)
    remaining = [color for color in palette if color in present]
    return remaining or palette


def generate_shooter_bubble(
    level: LevelConfig,
    rng: random.Random,
    present_colors: Iterable[str] | None = None,
) -> ShooterCandidate:
    kind = roll_special_kind(level, rng)
    color = rng.choice(candidate_colors(level, present_colors))
    return ShooterCandidate(color=color, kind=kind)


def generate_grid_bubble(level: LevelConfig, rng: random.Random) -> ShooterCandidate:
    """Bubble for grid generation and row injection; may be an obstacle."""
    if level.obstacle_chance > 0 and rng.random() < level.obstacle_chance:
        return ShooterCandidate(color=None, kind=BubbleKind.OBSTACLE)
    return generate_shooter_bubble(level, rng)


def get_shooter_queue(world: World) -> ShooterQueue:
    for _, queue in world.get_component(ShooterQueue):
        return queue
    world.create_entity(ShooterQueue())
    return list(world.get_component(ShooterQueue))[0][1]


def fill_shooter_queue(
    world: World,
    level: LevelConfig,
    *,
    present_colors: Iterable[str] | None = None,
    lookahead: int = SHOOTER_LOOKAHEAD,
) -> Sequence[ShooterCandidate]:
    queue = get_shooter_queue(world)
    rng = world_rng(world)
    colors = list(present_colors) if present_colors is not None else None
    while len(queue.candidates) < lookahead:
        queue.candidates.append(generate_shooter_bubble(level, rng, colors))
    return tuple(queue.candidates)


def pop_shooter_candidate(
    world: World,
    level: LevelConfig,
    *,
    present_colors: Iterable[str] | None = None,
) -> ShooterCandidate:
    """Consume the queue head and replenish the tail so the queue is never empty."""
    colors = list(present_colors) if present_colors is not None else None
    queue = get_shooter_queue(world)
    if not queue.candidates:
        fill_shooter_queue(world, level, present_colors=colors)
    head = queue.candidates.pop(0)
    fill_shooter_queue(world, level, present_colors=colors)
    return head


def peek_shooter_candidates(world: World, lookahead: int = SHOOTER_LOOKAHEAD) -> List[ShooterCandidate]:
    queue = get_shooter_queue(world)
    return list(queue.candidates[:lookahead])
