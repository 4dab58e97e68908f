import math

from bubbles.components.bubble_kind import BubbleKind
from bubbles.components.game_state import GameMode
from bubbles.components.projectile import ActiveProjectile
from bubbles.components.shooter_queue import ShooterCandidate
from bubbles.events.bus import (
    EVENT_FAILURE_LINE_REACHED,
    EVENT_FIRE_REJECTED,
    EVENT_GRID_CLEARED,
    EVENT_MATCH_CLEARED,
    EVENT_PROJECTILE_FIRED,
)
from bubbles.systems.candidate_ops import get_shooter_queue
from bubbles.systems.collision_system import muzzle_position
from bubbles.systems.grid_ops import occupied_positions
from bubbles.utils.hex_geometry import cell_center
from tests.helpers import lay_out, make_level, make_simulation


def _tick_until(sim, predicate, *, frame_ms=16, start_ms=0, limit=500):
    now = start_ms
    for _ in range(limit):
        now += frame_ms
        report = sim.tick(frame_ms, now)
        if predicate(report):
            return report
    raise AssertionError("condition never met")


def test_fire_spawns_projectile_from_queue_head():
    sim = make_simulation()
    fired = []
    sim.event_bus.subscribe(EVENT_PROJECTILE_FIRED, lambda sender, **kw: fired.append(kw))
    head, second = sim.next_candidates()

    projectile = sim.fire(-math.pi / 2, now_ms=10)

    assert projectile is not None
    assert (projectile.x, projectile.y) == muzzle_position()
    assert projectile.color == head.color
    assert projectile.kind == head.kind
    assert sim.next_candidates()[0] == second
    assert len(sim.next_candidates()) == 2
    assert fired[0]["color"] == head.color
    assert fired[0]["now_ms"] == 10


def test_second_fire_while_in_flight_is_rejected():
    sim = make_simulation()
    rejected = []
    sim.event_bus.subscribe(EVENT_FIRE_REJECTED, lambda sender, **kw: rejected.append(kw))
    first = sim.fire(-math.pi / 2)
    queue_before = sim.next_candidates()

    assert sim.fire(-math.pi / 3) is None
    assert sim.projectile is first
    assert sim.next_candidates() == queue_before
    assert rejected == [{"reason": "projectile_active"}]


def test_fire_clamps_aim_angle():
    sim = make_simulation()

    projectile = sim.fire(0.2)

    assert math.isclose(math.atan2(projectile.dy, projectile.dx), -math.pi / 8)


def test_straight_shot_completes_red_cluster_and_clears_level():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): "red", (0, 6): "red"})
    get_shooter_queue(sim.world).candidates[0] = ShooterCandidate(color="red")
    cleared_events = []
    sim.event_bus.subscribe(EVENT_MATCH_CLEARED, lambda sender, **kw: cleared_events.append(kw))
    sim.event_bus.subscribe(EVENT_GRID_CLEARED, lambda sender, **kw: cleared_events.append("grid"))

    sim.fire(-math.pi / 2)
    report = _tick_until(sim, lambda r: r.match_result is not None)

    assert report.match_result.placed == (1, 5)
    assert {entry.position for entry in report.match_result.removed} == {(0, 5), (0, 6), (1, 5)}
    assert report.cleared
    assert sim.mode == GameMode.CLEARED
    assert cleared_events[-1] == "grid"
    assert sim.projectile is None


def test_ticks_after_level_end_are_inert():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): "red", (0, 6): "red"})
    get_shooter_queue(sim.world).candidates[0] = ShooterCandidate(color="red")
    sim.fire(-math.pi / 2)
    _tick_until(sim, lambda r: r.cleared)

    report = sim.tick(16, 100000)

    assert report.cleared
    assert not report.dropped_row
    assert sim.fire(-math.pi / 2) is None


def test_descent_failure_stops_the_tick_before_projectile_moves():
    sim = make_simulation(make_level(descent_interval_ms=1000), rows=4, failure_row=3)
    lay_out(sim.world, {(0, 0): "red", (1, 0): "blue", (2, 0): "green"})
    failures = []
    sim.event_bus.subscribe(EVENT_FAILURE_LINE_REACHED, lambda sender, **kw: failures.append(kw))
    projectile = sim.fire(-math.pi / 2)
    start_y = projectile.y

    report = sim.tick(16, 1000)

    assert report.dropped_row
    assert report.failure_breached
    assert projectile.y == start_y
    assert sim.mode == GameMode.FAILED
    assert failures == [{"reason": "descent", "now_ms": 1000}]


def test_placement_past_failure_line_is_a_failure():
    sim = make_simulation(rows=6, failure_row=2)
    lay_out(sim.world, {(0, 0): "red", (1, 0): "blue"})
    x, y = cell_center(1, 0)
    sim.world.create_entity(ActiveProjectile(x=x, y=y + 30, dx=0.0, dy=-1.0, speed=0.0, color="green"))

    report = sim.tick(0, 1)

    assert report.match_result is not None
    assert report.match_result.placed[0] >= 2
    assert report.failure_breached
    assert sim.mode == GameMode.FAILED


def test_full_grid_on_landing_is_reported_as_failure():
    sim = make_simulation(rows=2, cols=2, failure_row=2)
    lay_out(sim.world, {(0, 0): "red", (0, 1): "blue", (1, 0): "green", (1, 1): "blue"})
    x, y = cell_center(1, 0)
    sim.world.create_entity(ActiveProjectile(x=x, y=y, dx=0.0, dy=-1.0, speed=0.0, color="red"))

    report = sim.tick(0, 1)

    assert report.failure_breached
    assert report.match_result is None
    assert sim.mode == GameMode.FAILED
    assert sim.projectile is None


def test_current_grid_snapshot_shape():
    sim = make_simulation(rows=5, cols=7, failure_row=4)
    lay_out(sim.world, {(0, 3): "blue", (1, 2): BubbleKind.OBSTACLE})

    grid = sim.current_grid()

    assert len(grid) == 5
    assert all(len(row) == 7 for row in grid)
    assert grid[0][3].color == "blue"
    assert grid[1][2].kind == BubbleKind.OBSTACLE
    assert grid[1][2].color is None
    assert grid[2][2].occupied is False


def test_restart_regenerates_grid_and_discards_projectile():
    sim = make_simulation(populate=True)
    sim.fire(-math.pi / 2)
    lay_out(sim.world, {(9, 4): "red"})

    sim.restart(5000)

    assert sim.projectile is None
    assert (9, 4) not in occupied_positions(sim.world)
    assert max(row for row, _ in occupied_positions(sim.world)) == 3
    assert sim.mode == GameMode.PLAYING
