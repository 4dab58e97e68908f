from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from esper import World

from bubbles.components.active_switch import ActiveSwitch
from bubbles.components.bubble_cell import BubbleCell
from bubbles.components.level_config import LevelConfig
from bubbles.components.projectile import ActiveProjectile
from bubbles.components.row_offsets import RowOffsets
from bubbles.components.shooter_queue import ShooterCandidate
from bubbles.constants import (
    AIM_ANGLE_MAX,
    AIM_ANGLE_MIN,
    BASE_SHOT_SPEED,
    BUBBLE_RADIUS,
    CONTACT_TOLERANCE,
    MAX_SHOT_SPEED_BONUS,
    PLAYFIELD_WIDTH,
    SHOOTER_Y,
    SHOT_SPEED_PER_LEVEL,
)
from bubbles.events.bus import EVENT_BUBBLE_PLACED, EVENT_WALL_BOUNCE, EventBus
from bubbles.systems.grid_ops import Placement, place_bubble_on_grid
from bubbles.utils.hex_geometry import ceiling_y, playfield_bounds

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


def compute_shot_speed(level: LevelConfig) -> float:
    return BASE_SHOT_SPEED + min(level.level * SHOT_SPEED_PER_LEVEL, MAX_SHOT_SPEED_BONUS)


def clamp_aim_angle(angle: float) -> float:
    return max(AIM_ANGLE_MIN, min(AIM_ANGLE_MAX, angle))


def muzzle_position() -> Tuple[float, float]:
    return PLAYFIELD_WIDTH / 2, SHOOTER_Y - BUBBLE_RADIUS - 4


def get_active_projectile(world: World) -> Tuple[int, ActiveProjectile] | None:
    for entity, projectile in world.get_component(ActiveProjectile):
        return entity, projectile
    return None


def spawn_projectile(
    world: World,
    candidate: ShooterCandidate,
    angle: float,
    speed: float,
    now_ms: float,
) -> ActiveProjectile:
    x, y = muzzle_position()
    projectile = ActiveProjectile(
        x=x,
        y=y,
        dx=math.cos(angle),
        dy=math.sin(angle),
        speed=speed,
        color=candidate.color,
        kind=candidate.kind,
        launched_at=now_ms,
    )
    world.create_entity(projectile)
    return projectile


def advance(projectile: ActiveProjectile, delta_ms: float) -> None:
    delta_seconds = delta_ms / 1000.0
    projectile.x += projectile.dx * projectile.speed * delta_seconds
    projectile.y += projectile.dy * projectile.speed * delta_seconds


def apply_wall_bounce(projectile: ActiveProjectile) -> bool:
    """Reflect dx inward and clamp x when the projectile touches a side wall."""
    left, right = playfield_bounds()
    if projectile.x <= left:
        projectile.dx = abs(projectile.dx)
        projectile.x = left
        return True
    if projectile.x >= right:
        projectile.dx = -abs(projectile.dx)
        projectile.x = right
        return True
    return False


def reached_ceiling(projectile: ActiveProjectile) -> bool:
    return projectile.y <= ceiling_y()


def find_contact(world: World, projectile: ActiveProjectile, offsets: Optional[RowOffsets] = None) -> Position | None:
    """Closest occupied cell (obstacles included) within touching distance, if any."""
    limit = BUBBLE_RADIUS * 2 - CONTACT_TOLERANCE
    best: Position | None = None
    best_dist = math.inf
    for _, (cell, switch) in world.get_components(BubbleCell, ActiveSwitch):
        if not switch.active:
            continue
        offset = offsets.offset_for(cell.row) if offsets is not None else 0.0
        dist = math.hypot(projectile.x - (cell.x + offset), projectile.y - cell.y)
        if dist > limit:
            continue
        if dist < best_dist:
            best = (cell.row, cell.col)
            best_dist = dist
    return best


class CollisionSystem:
    """Moves the active projectile and snaps it into the grid on contact."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus

    def process(self, delta_ms: float) -> Placement | None:
        """Advance one tick. Returns the placement when the projectile landed.

        Raises GridFull when the lattice has no empty cell left.
        """
        active = get_active_projectile(self.world)
        if active is None:
            return None
        entity, projectile = active
        advance(projectile, delta_ms)
        if apply_wall_bounce(projectile):
            self.event_bus.emit(EVENT_WALL_BOUNCE, x=projectile.x, dx=projectile.dx)

        offsets = self._row_offsets()
        if reached_ceiling(projectile):
            return self._land(entity, projectile, None, offsets)
        contacted = find_contact(self.world, projectile, offsets)
        if contacted is not None:
            return self._land(entity, projectile, contacted, offsets)
        return None

    def _land(
        self,
        entity: int,
        projectile: ActiveProjectile,
        contacted: Position | None,
        offsets: Optional[RowOffsets] = None,
    ) -> Placement:
        # The projectile is gone before placement so a failure cannot resolve it twice.
        self.world.delete_entity(entity, immediate=True)
        placement = place_bubble_on_grid(self.world, projectile, contacted, offsets=offsets)
        logger.debug(
            "Projectile %s/%s landed at %s (contact=%s, fallback=%s)",
            projectile.color,
            projectile.kind.value,
            placement.position,
            contacted,
            placement.fallback,
        )
        self.event_bus.emit(
            EVENT_BUBBLE_PLACED,
            row=placement.row,
            col=placement.col,
            color=projectile.color,
            kind=projectile.kind,
            fallback=placement.fallback,
        )
        return placement

    def _row_offsets(self) -> Optional[RowOffsets]:
        for _, offsets in self.world.get_component(RowOffsets):
            return offsets
        return None
