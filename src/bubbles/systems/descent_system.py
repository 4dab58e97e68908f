import logging
from typing import Optional

from esper import World

from bubbles.components.descent_state import DescentState
from bubbles.events.bus import EventBus, EVENT_ROW_DROPPED
from bubbles.systems.candidate_ops import world_rng
from bubbles.systems.grid_ops import drop_new_row
from bubbles.utils.game_state import get_level_config

logger = logging.getLogger(__name__)


def get_descent_state(world: World) -> DescentState:
    for _, state in world.get_component(DescentState):
        return state
    world.create_entity(DescentState())
    return list(world.get_component(DescentState))[0][1]


class DescentSystem:
    """Drops a new row whenever the effective descent interval has elapsed.

    Freeze handling belongs to the caller, which passes the already-scaled interval.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus

    def process(self, now_ms: float, interval_ms: Optional[float] = None) -> bool:
        state = get_descent_state(self.world)
        level = get_level_config(self.world)
        interval = interval_ms if interval_ms is not None else level.descent_interval_ms
        if now_ms - state.last_drop_at < interval:
            return False
        discarded = drop_new_row(self.world, level, world_rng(self.world))
        state.last_drop_at = now_ms
        state.drops += 1
        logger.debug("Row drop %d at %.0fms", state.drops, now_ms)
        self.event_bus.emit(
            EVENT_ROW_DROPPED,
            discarded=[entry.position for entry in discarded],
            now_ms=now_ms,
        )
        return True

    def reset(self, now_ms: float) -> None:
        state = get_descent_state(self.world)
        state.last_drop_at = now_ms
