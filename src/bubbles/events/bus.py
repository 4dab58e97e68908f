from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references so subscribers that are not stored elsewhere keep receiving events.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: delta_ms=float, now_ms=float


# ============================================================================
# SHOOTER & PROJECTILE
# ============================================================================
EVENT_PROJECTILE_FIRED = "projectile_fired"        # payload: color=str|None, kind=BubbleKind, angle=float, now_ms=float
EVENT_FIRE_REJECTED = "fire_rejected"              # payload: reason=str
EVENT_WALL_BOUNCE = "wall_bounce"                  # payload: x=float, dx=float
EVENT_QUEUE_CHANGED = "queue_changed"              # payload: candidates=list[ShooterCandidate]


# ============================================================================
# GRID MECHANICS
# ============================================================================
EVENT_BUBBLE_PLACED = "bubble_placed"              # payload: row, col, color, kind, fallback=bool
EVENT_MATCH_RESOLVED = "match_resolved"            # payload: result=MatchResult, now_ms=float
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], colors=[str|None,...]
EVENT_FLOATING_DROPPED = "floating_dropped"        # payload: positions=[(r,c),...]
EVENT_SPECIAL_TRIGGERED = "special_triggered"      # payload: row, col, kind=BubbleKind, now_ms=float
EVENT_ROW_DROPPED = "row_dropped"                  # payload: discarded=[(r,c),...], now_ms=float
EVENT_GRID_RESET = "grid_reset"                    # payload: reason=str


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_MODE_CHANGED = "game_mode_changed"          # payload: previous_mode=GameMode|None, new_mode=GameMode
EVENT_GRID_CLEARED = "grid_cleared"                    # payload: now_ms=float
EVENT_FAILURE_LINE_REACHED = "failure_line_reached"    # payload: reason=str, now_ms=float
EVENT_LIFE_LOST = "life_lost"                          # payload: lives=int, reason=str, now_ms=float
EVENT_GAME_OVER = "game_over"                          # payload: score=int
