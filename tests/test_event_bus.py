import math

from bubbles.components.game_state import GameMode
from bubbles.components.shooter_queue import ShooterCandidate
from bubbles.events.bus import (
    EventBus,
    EVENT_GAME_MODE_CHANGED,
    EVENT_MATCH_CLEARED,
    EVENT_ROW_DROPPED,
)
from bubbles.systems.candidate_ops import get_shooter_queue
from tests.helpers import lay_out, make_level, make_simulation


def test_emit_without_subscribers_is_noop():
    bus = EventBus()
    bus.emit("nobody_listens", value=1)


def test_lambda_subscribers_stay_connected():
    bus = EventBus()
    calls = []
    bus.subscribe("kept", lambda sender, **kwargs: calls.append(kwargs["n"]))

    bus.emit("kept", n=1)
    bus.emit("kept", n=2)

    assert calls == [1, 2]


def test_row_drop_reports_discarded_cells():
    sim = make_simulation(make_level(descent_interval_ms=1000), rows=4, failure_row=4)
    lay_out(sim.world, {(3, 1): "red", (3, 2): "blue", (2, 0): "green"})
    drops = []
    sim.event_bus.subscribe(EVENT_ROW_DROPPED, lambda sender, **kw: drops.append(kw))

    sim.descent_system.process(1000)

    assert drops == [{"discarded": [(3, 1), (3, 2)], "now_ms": 1000}]


def test_match_cleared_carries_positions_and_colors():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): "red", (0, 6): "red", (0, 0): "blue"})
    get_shooter_queue(sim.world).candidates[0] = ShooterCandidate(color="red")
    cleared = []
    modes = []
    sim.event_bus.subscribe(EVENT_MATCH_CLEARED, lambda sender, **kw: cleared.append(kw))
    sim.event_bus.subscribe(EVENT_GAME_MODE_CHANGED, lambda sender, **kw: modes.append(kw))

    sim.fire(-math.pi / 2)
    now = 0
    while not cleared and now < 5000:
        now += 16
        sim.tick(16, now)

    assert len(cleared) == 1
    assert sorted(cleared[0]["positions"]) == [(0, 5), (0, 6), (1, 5)]
    assert cleared[0]["colors"] == ["red", "red", "red"]
    assert modes == []


def test_mode_change_payload_names_both_modes():
    sim = make_simulation()
    modes = []
    sim.event_bus.subscribe(EVENT_GAME_MODE_CHANGED, lambda sender, **kw: modes.append(kw))
    lay_out(sim.world, {(0, 5): "red", (0, 6): "red"})
    get_shooter_queue(sim.world).candidates[0] = ShooterCandidate(color="red")

    sim.fire(-math.pi / 2)
    now = 0
    while sim.mode == GameMode.PLAYING and now < 5000:
        now += 16
        sim.tick(16, now)

    assert modes == [{"previous_mode": GameMode.PLAYING, "new_mode": GameMode.CLEARED}]
