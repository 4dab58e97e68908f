"""Caller-facing facade over the bubble grid simulation.

The caller owns the frame loop and invokes ``tick`` with elapsed time; it also
decides when to ``fire``. Everything that happened during a tick is returned
as a ``TickReport`` and broadcast on the event bus for presentation layers.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from bubbles.components.game_state import GameMode
from bubbles.components.level_config import LevelConfig
from bubbles.components.match_result import TickReport
from bubbles.components.projectile import ActiveProjectile
from bubbles.components.shooter_queue import ShooterCandidate
from bubbles.constants import FAILURE_ROW, GRID_COLS, MAX_ROWS, SHOOTER_LOOKAHEAD
from bubbles.errors import GridFull
from bubbles.events.bus import (
    EventBus,
    EVENT_FAILURE_LINE_REACHED,
    EVENT_FIRE_REJECTED,
    EVENT_GRID_CLEARED,
    EVENT_GRID_RESET,
    EVENT_LIFE_LOST,
    EVENT_PROJECTILE_FIRED,
    EVENT_QUEUE_CHANGED,
    EVENT_TICK,
)
from bubbles.systems.candidate_ops import (
    fill_shooter_queue,
    get_shooter_queue,
    peek_shooter_candidates,
    pop_shooter_candidate,
    world_rng,
)
from bubbles.systems.collision_system import (
    CollisionSystem,
    clamp_aim_angle,
    compute_shot_speed,
    get_active_projectile,
    spawn_projectile,
)
from bubbles.systems.descent_system import DescentSystem
from bubbles.systems.grid_ops import (
    CellSnapshot,
    generate_initial_grid,
    grid_cleared,
    grid_reached_failure_line,
    grid_snapshot,
    present_colors,
)
from bubbles.systems.match_resolution import MatchResolutionSystem
from bubbles.systems.row_wave_system import RowWaveSystem
from bubbles.utils.game_state import current_mode, get_level_config, set_game_mode
from bubbles.world import create_world

logger = logging.getLogger(__name__)


class BubbleSimulation:
    def __init__(
        self,
        level: LevelConfig,
        *,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        rows: int = MAX_ROWS,
        cols: int = GRID_COLS,
        failure_row: int = FAILURE_ROW,
        now_ms: float = 0.0,
        populate: bool = True,
    ):
        self.event_bus = event_bus or EventBus()
        self.world = create_world(
            self.event_bus,
            level,
            rng=rng,
            rows=rows,
            cols=cols,
            failure_row=failure_row,
            now_ms=now_ms,
            populate=populate,
        )
        self.descent_system = DescentSystem(self.world, self.event_bus)
        self.row_wave_system = RowWaveSystem(self.world)
        self.collision_system = CollisionSystem(self.world, self.event_bus)
        self.match_resolution_system = MatchResolutionSystem(self.world, self.event_bus)
        self._life_lost = False
        self.event_bus.subscribe(EVENT_LIFE_LOST, self._on_life_lost)

    @property
    def level(self) -> LevelConfig:
        return get_level_config(self.world)

    @property
    def mode(self) -> GameMode:
        return current_mode(self.world)

    @property
    def projectile(self) -> ActiveProjectile | None:
        active = get_active_projectile(self.world)
        return active[1] if active else None

    def fire(self, aim_angle: float, now_ms: float = 0.0) -> ActiveProjectile | None:
        """Launch the queue head along ``aim_angle`` (radians, y axis pointing down).

        Returns None when rejected: a projectile is already in flight or the
        level has ended.
        """
        if get_active_projectile(self.world) is not None:
            logger.debug("Fire rejected: projectile already in flight")
            self.event_bus.emit(EVENT_FIRE_REJECTED, reason="projectile_active")
            return None
        if self.mode != GameMode.PLAYING:
            logger.debug("Fire rejected: level is %s", self.mode.name)
            self.event_bus.emit(EVENT_FIRE_REJECTED, reason=self.mode.name.lower())
            return None
        level = self.level
        angle = clamp_aim_angle(aim_angle)
        candidate = pop_shooter_candidate(self.world, level, present_colors=present_colors(self.world))
        projectile = spawn_projectile(self.world, candidate, angle, compute_shot_speed(level), now_ms)
        self.event_bus.emit(
            EVENT_PROJECTILE_FIRED,
            color=candidate.color,
            kind=candidate.kind,
            angle=angle,
            now_ms=now_ms,
        )
        self.event_bus.emit(EVENT_QUEUE_CHANGED, candidates=self.next_candidates())
        return projectile

    def tick(self, delta_ms: float, now_ms: float, descent_interval_ms: Optional[float] = None) -> TickReport:
        """Advance the simulation one frame.

        Order: descent, row wave, projectile motion/collision and matching,
        then terminal checks. A failure caused by the descent ends the tick
        before the projectile moves against the shifted grid.

        ``life_lost`` is set when a listener reported a lost life during the
        tick, including a time-limit expiry that restarted the grid.
        """
        self._life_lost = False
        report = self._advance(delta_ms, now_ms, descent_interval_ms)
        report.life_lost = self._life_lost
        return report

    def _advance(self, delta_ms: float, now_ms: float, descent_interval_ms: Optional[float]) -> TickReport:
        report = TickReport()
        mode = self.mode
        if mode != GameMode.PLAYING:
            report.cleared = mode == GameMode.CLEARED
            report.failure_breached = mode == GameMode.FAILED
            return report
        self.event_bus.emit(EVENT_TICK, delta_ms=delta_ms, now_ms=now_ms)
        # Listeners (time limits) may end the life during the tick event.
        if self.mode != GameMode.PLAYING:
            report.failure_breached = self.mode == GameMode.FAILED
            return report

        report.dropped_row = self.descent_system.process(now_ms, descent_interval_ms)
        if report.dropped_row and grid_reached_failure_line(self.world):
            report.failure_breached = True
            self._fail("descent", now_ms)
            return report

        self.row_wave_system.process(now_ms)

        try:
            placement = self.collision_system.process(delta_ms)
        except GridFull:
            logger.info("Grid full on placement; treating as failure line breach")
            report.failure_breached = True
            self._fail("grid_full", now_ms)
            return report
        if placement is not None:
            report.match_result = self.match_resolution_system.resolve(placement, now_ms)

        if report.match_result is not None or report.dropped_row:
            if grid_cleared(self.world):
                report.cleared = True
                self._clear(now_ms)
            elif grid_reached_failure_line(self.world):
                report.failure_breached = True
                self._fail("placement", now_ms)
        return report

    def current_grid(self) -> Tuple[Tuple[CellSnapshot, ...], ...]:
        return grid_snapshot(self.world)

    def next_candidates(self, lookahead: int = SHOOTER_LOOKAHEAD) -> List[ShooterCandidate]:
        if len(get_shooter_queue(self.world).candidates) < lookahead:
            fill_shooter_queue(
                self.world,
                self.level,
                present_colors=present_colors(self.world),
                lookahead=lookahead,
            )
        return peek_shooter_candidates(self.world, lookahead)

    def restart(self, now_ms: float = 0.0, *, reason: str = "restart") -> None:
        """Regenerate the grid and clear transient state for a fresh life."""
        active = get_active_projectile(self.world)
        if active is not None:
            self.world.delete_entity(active[0], immediate=True)
        generate_initial_grid(self.world, self.level, world_rng(self.world))
        self.descent_system.reset(now_ms)
        self.row_wave_system.reset()
        set_game_mode(self.world, self.event_bus, GameMode.PLAYING)
        self.event_bus.emit(EVENT_GRID_RESET, reason=reason)

    def _fail(self, reason: str, now_ms: float) -> None:
        logger.info("Failure line reached (%s) at %.0fms", reason, now_ms)
        set_game_mode(self.world, self.event_bus, GameMode.FAILED)
        self.event_bus.emit(EVENT_FAILURE_LINE_REACHED, reason=reason, now_ms=now_ms)

    def _clear(self, now_ms: float) -> None:
        logger.info("Level %s cleared at %.0fms", self.level.level, now_ms)
        set_game_mode(self.world, self.event_bus, GameMode.CLEARED)
        self.event_bus.emit(EVENT_GRID_CLEARED, now_ms=now_ms)

    def _on_life_lost(self, sender, **payload) -> None:
        self._life_lost = True
        if payload.get("lives", 0) <= 0:
            return
        self.restart(payload.get("now_ms", 0.0), reason=payload.get("reason", "life_lost"))
