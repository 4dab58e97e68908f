import logging

from esper import World

from bubbles.components.match_result import MatchResult
from bubbles.events.bus import (
    EventBus,
    EVENT_FLOATING_DROPPED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_RESOLVED,
    EVENT_SPECIAL_TRIGGERED,
)
from bubbles.systems.grid_ops import Placement
from bubbles.systems.match_ops import compute_match_result

logger = logging.getLogger(__name__)


class MatchResolutionSystem:
    """Runs the match engine on a fresh placement and broadcasts what was cleared."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus

    def resolve(self, placement: Placement, now_ms: float = 0.0) -> MatchResult:
        result = compute_match_result(self.world, placement.row, placement.col)
        if result.removed:
            self.event_bus.emit(
                EVENT_MATCH_CLEARED,
                positions=[entry.position for entry in result.removed],
                colors=[entry.color for entry in result.removed],
            )
        if result.floating:
            self.event_bus.emit(
                EVENT_FLOATING_DROPPED,
                positions=[entry.position for entry in result.floating],
            )
        for special in result.triggered_specials:
            self.event_bus.emit(
                EVENT_SPECIAL_TRIGGERED,
                row=special.row,
                col=special.col,
                kind=special.kind,
                now_ms=now_ms,
            )
        if result.total_cleared:
            logger.debug(
                "Placement at %s cleared %d matched and %d floating bubbles",
                result.placed,
                len(result.removed),
                len(result.floating),
            )
        self.event_bus.emit(EVENT_MATCH_RESOLVED, result=result, now_ms=now_ms)
        return result
