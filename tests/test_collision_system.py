import math

import pytest

from bubbles.components.bubble import Bubble
from bubbles.components.bubble_kind import BubbleKind
from bubbles.components.projectile import ActiveProjectile
from bubbles.components.row_offsets import RowOffsets
from bubbles.constants import BUBBLE_RADIUS
from bubbles.events.bus import EVENT_BUBBLE_PLACED, EVENT_WALL_BOUNCE
from bubbles.systems.collision_system import (
    apply_wall_bounce,
    clamp_aim_angle,
    compute_shot_speed,
    find_contact,
    get_active_projectile,
)
from bubbles.systems.grid_ops import occupied_bubbles, occupied_positions
from bubbles.utils.hex_geometry import cell_center, playfield_bounds
from tests.helpers import lay_out, make_level, make_simulation


def _launch(sim, x, y, dx=0.0, dy=-1.0, speed=0.0, color="red", kind=BubbleKind.NORMAL):
    projectile = ActiveProjectile(x=x, y=y, dx=dx, dy=dy, speed=speed, color=color, kind=kind)
    sim.world.create_entity(projectile)
    return projectile


def test_left_wall_bounce_reflects_and_clamps():
    left, _ = playfield_bounds()
    projectile = ActiveProjectile(x=left - 1, y=300, dx=-1.0, dy=0.0, speed=500, color="red")

    assert apply_wall_bounce(projectile)
    assert projectile.dx == 1.0
    assert projectile.x == left


def test_right_wall_bounce_reflects_and_clamps():
    _, right = playfield_bounds()
    projectile = ActiveProjectile(x=right + 3, y=300, dx=0.6, dy=-0.8, speed=500, color="red")

    assert apply_wall_bounce(projectile)
    assert projectile.dx == -0.6
    assert projectile.dy == -0.8
    assert projectile.x == right


def test_no_bounce_inside_playfield():
    projectile = ActiveProjectile(x=200, y=300, dx=-0.6, dy=-0.8, speed=500, color="red")
    assert not apply_wall_bounce(projectile)
    assert projectile.dx == -0.6


def test_wall_bounce_event_is_emitted_during_tick():
    sim = make_simulation()
    bounces = []
    sim.event_bus.subscribe(EVENT_WALL_BOUNCE, lambda sender, **kw: bounces.append(kw))
    left, _ = playfield_bounds()
    _launch(sim, left + 2, 400, dx=-1.0, dy=0.0, speed=1000)

    sim.tick(16, 16)

    assert len(bounces) == 1
    assert bounces[0]["dx"] == 1.0
    assert sim.projectile.x == left


def test_ceiling_stop_snaps_into_row_zero():
    sim = make_simulation()
    x, _ = cell_center(0, 3)
    _launch(sim, x + 4, 36, speed=500)

    report = sim.tick(16, 16)

    assert report.match_result is not None
    assert report.match_result.placed == (0, 3)
    assert occupied_positions(sim.world) == {(0, 3)}
    assert get_active_projectile(sim.world) is None


def test_contact_snaps_to_nearest_empty_neighbor():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): "blue", (0, 0): "green"})
    placed = []
    sim.event_bus.subscribe(EVENT_BUBBLE_PLACED, lambda sender, **kw: placed.append(kw))
    _launch(sim, 215, 74)

    sim.tick(0, 1)

    assert [(event["row"], event["col"]) for event in placed] == [(1, 4)]
    assert placed[0]["fallback"] is False
    assert occupied_bubbles(sim.world)[(1, 4)].color == "red"


def test_obstacles_are_collidable():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): BubbleKind.OBSTACLE})
    projectile = ActiveProjectile(x=215, y=74, dx=0.0, dy=-1.0, speed=0.0, color="red")

    assert find_contact(sim.world, projectile) == (0, 5)


def test_row_offset_moves_the_contact_point():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): "blue"})
    projectile = ActiveProjectile(x=215, y=74, dx=0.0, dy=-1.0, speed=0.0, color="red")

    assert find_contact(sim.world, projectile, RowOffsets(offsets=[0.0] * 14)) == (0, 5)
    shifted = RowOffsets(offsets=[30.0] + [0.0] * 13)
    assert find_contact(sim.world, projectile, shifted) is None


def test_closest_contact_wins():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): "blue", (0, 6): "green"})
    x5, _ = cell_center(0, 5)
    projectile = ActiveProjectile(x=x5 + 16, y=68, dx=0.0, dy=-1.0, speed=0.0, color="red")

    assert find_contact(sim.world, projectile) == (0, 5)


def test_projectile_resolves_exactly_once():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): "blue"})
    placed = []
    sim.event_bus.subscribe(EVENT_BUBBLE_PLACED, lambda sender, **kw: placed.append(kw))
    _launch(sim, 215, 74)

    sim.tick(0, 1)
    sim.tick(16, 17)
    sim.tick(16, 33)

    assert len(placed) == 1
    assert sim.projectile is None


def test_projectile_moves_by_speed_and_elapsed_time():
    sim = make_simulation()
    projectile = _launch(sim, 249, 500, dx=0.0, dy=-1.0, speed=500)

    sim.tick(100, 100)

    assert projectile.y == pytest.approx(450)
    assert sim.projectile is projectile


def test_shot_speed_grows_with_level_and_caps():
    assert compute_shot_speed(make_level(level=1)) == 536
    assert compute_shot_speed(make_level(level=10)) == 680
    assert compute_shot_speed(make_level(level=40)) == 740


def test_aim_angle_is_clamped():
    assert clamp_aim_angle(-math.pi / 2) == -math.pi / 2
    assert clamp_aim_angle(0.0) == -math.pi / 8
    assert clamp_aim_angle(-math.pi) == -4 * math.pi / 5


def test_placed_bubble_keeps_projectile_kind():
    sim = make_simulation()
    x, _ = cell_center(0, 8)
    _launch(sim, x, 30, color="yellow", kind=BubbleKind.FREEZE)

    sim.tick(0, 1)

    bubble = occupied_bubbles(sim.world)[(0, 8)]
    assert isinstance(bubble, Bubble)
    assert bubble.kind == BubbleKind.FREEZE
    assert bubble.color == "yellow"


def _shift_row(sim, row, offset):
    offsets = list(sim.world.get_component(RowOffsets))[0][1]
    offsets.offsets[row] = offset


def test_hit_on_shifted_row_lands_under_the_impact_point():
    sim = make_simulation()
    lay_out(sim.world, {(0, 5): "blue", (1, 5): "blue", (2, 5): "green"})
    _shift_row(sim, 2, 30.0)
    _launch(sim, 247.0, 136.35)

    report = sim.tick(0, 1)

    assert report.match_result.placed == (3, 5)
    x, _ = cell_center(3, 5)
    assert abs(x - 247.0) <= BUBBLE_RADIUS


def test_ceiling_stop_respects_row_zero_offset():
    sim = make_simulation()
    lay_out(sim.world, {(0, 0): "blue"})
    _shift_row(sim, 0, 30.0)
    x, _ = cell_center(0, 3)
    _launch(sim, x + 30.0, 30.0)

    report = sim.tick(0, 1)

    assert report.match_result.placed == (0, 3)
