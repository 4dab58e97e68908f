import pytest

from bubbles.factories.levels import all_levels, get_level, level_by_index
from bubbles.systems.grid_ops import occupied_positions
from tests.helpers import make_simulation


def test_catalogue_is_numbered_contiguously():
    numbers = sorted(level.level for level in all_levels())
    assert numbers == list(range(1, 11))


def test_levels_get_harder():
    levels = sorted(all_levels(), key=lambda level: level.level)
    intervals = [level.descent_interval_ms for level in levels]
    palettes = [len(level.colors) for level in levels]

    assert intervals == sorted(intervals, reverse=True)
    assert palettes == sorted(palettes)


def test_unknown_level_raises():
    with pytest.raises(ValueError):
        get_level(99)


def test_level_by_index_clamps():
    assert level_by_index(0).level == 1
    assert level_by_index(-3).level == 1
    assert level_by_index(500).level == 10


@pytest.mark.parametrize("number", range(1, 11))
def test_every_level_builds_a_playable_world(number):
    level = get_level(number)
    sim = make_simulation(level, seed=number, populate=True)

    occupied = occupied_positions(sim.world)
    assert occupied
    assert max(row for row, _ in occupied) == level.initial_rows - 1
    assert len(sim.next_candidates()) == 2
