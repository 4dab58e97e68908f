from __future__ import annotations

import logging
from typing import Optional

from esper import World

from bubbles.components.bubble_kind import BubbleKind
from bubbles.components.game_state import GameMode
from bubbles.components.match_result import MatchResult
from bubbles.components.session_state import SessionState
from bubbles.constants import (
    AIM_BOOST_DURATION_MS,
    FREEZE_DESCENT_MULTIPLIER,
    FREEZE_DURATION_MS,
    MAX_COMBO_MULTIPLIER,
    STARTING_LIVES,
)
from bubbles.events.bus import (
    EventBus,
    EVENT_FAILURE_LINE_REACHED,
    EVENT_GAME_OVER,
    EVENT_LIFE_LOST,
    EVENT_MATCH_RESOLVED,
    EVENT_PROJECTILE_FIRED,
    EVENT_SPECIAL_TRIGGERED,
    EVENT_TICK,
)
from bubbles.utils.game_state import get_level_config, set_game_mode

logger = logging.getLogger(__name__)

POINTS_PER_BUBBLE = 80
COMBO_BONUS_POINTS = 10
BIG_CLEAR_THRESHOLD = 6
BIG_CLEAR_BONUS = 150


def score_for_clear(cleared: int, combo_bonus: int, combo: int) -> int:
    gained = cleared * POINTS_PER_BUBBLE + combo_bonus * combo * COMBO_BONUS_POINTS
    if cleared >= BIG_CLEAR_THRESHOLD:
        gained += BIG_CLEAR_BONUS
    return gained


class SessionSystem:
    """Caller-side runtime counters: score, combo, lives, timers.

    Driven purely by engine events; the engine itself never consults it.
    """

    def __init__(self, world: World, event_bus: EventBus, *, lives: int = STARTING_LIVES):
        self.world = world
        self.event_bus = event_bus
        level = get_level_config(world)
        self.state = SessionState(lives=lives, time_left=level.time_limit_seconds)
        world.create_entity(self.state)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_MATCH_RESOLVED, self.on_match_resolved)
        self.event_bus.subscribe(EVENT_SPECIAL_TRIGGERED, self.on_special_triggered)
        self.event_bus.subscribe(EVENT_PROJECTILE_FIRED, self.on_projectile_fired)
        self.event_bus.subscribe(EVENT_FAILURE_LINE_REACHED, self.on_failure_line_reached)

    def is_frozen(self, now_ms: float) -> bool:
        return self.state.freeze_until is not None and self.state.freeze_until > now_ms

    def aim_boost_active(self, now_ms: float) -> bool:
        return self.state.aim_boost_until is not None and self.state.aim_boost_until > now_ms

    def effective_descent_interval(self, now_ms: float) -> float:
        interval = get_level_config(self.world).descent_interval_ms
        if self.is_frozen(now_ms):
            return interval * FREEZE_DESCENT_MULTIPLIER
        return interval

    def on_tick(self, sender, **payload) -> None:
        if self.state.game_over or self.state.time_left is None:
            return
        delta_ms = payload.get("delta_ms", 0.0)
        now_ms = payload.get("now_ms", 0.0)
        self.state.time_left -= delta_ms / 1000.0
        if self.state.time_left <= 0:
            self.state.time_left = 0.0
            self._lose_life("time_up", now_ms)

    def on_match_resolved(self, sender, **payload) -> None:
        result: Optional[MatchResult] = payload.get("result")
        if result is None:
            return
        cleared = result.total_cleared
        if cleared > 0:
            self.state.combo = min(self.state.combo + 1, MAX_COMBO_MULTIPLIER)
            self.state.score += score_for_clear(cleared, result.combo_bonus, self.state.combo)
        else:
            self.state.combo = 1

    def on_special_triggered(self, sender, **payload) -> None:
        self._apply_special(payload.get("kind"), payload.get("now_ms", 0.0))

    def on_projectile_fired(self, sender, **payload) -> None:
        self.state.shots += 1
        self._apply_special(payload.get("kind"), payload.get("now_ms", 0.0))

    def on_failure_line_reached(self, sender, **payload) -> None:
        self._lose_life(payload.get("reason", "failure_line"), payload.get("now_ms", 0.0))

    def _apply_special(self, kind, now_ms: float) -> None:
        if kind == BubbleKind.FREEZE:
            self.state.freeze_until = now_ms + FREEZE_DURATION_MS
        elif kind == BubbleKind.AIM:
            self.state.aim_boost_until = now_ms + AIM_BOOST_DURATION_MS

    def _lose_life(self, reason: str, now_ms: float) -> None:
        if self.state.game_over:
            return
        self.state.lives -= 1
        self.state.combo = 1
        self.state.freeze_until = None
        self.state.aim_boost_until = None
        # A fresh life gets the full time budget back.
        self.state.time_left = get_level_config(self.world).time_limit_seconds
        logger.info("Life lost (%s); %d remaining", reason, self.state.lives)
        if self.state.lives <= 0:
            self.state.game_over = True
            set_game_mode(self.world, self.event_bus, GameMode.FAILED)
        self.event_bus.emit(EVENT_LIFE_LOST, lives=self.state.lives, reason=reason, now_ms=now_ms)
        if self.state.game_over:
            self.event_bus.emit(EVENT_GAME_OVER, score=self.state.score)
