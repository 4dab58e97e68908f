from __future__ import annotations

from typing import Iterable, Mapping, Tuple

from bubbles.components.level_config import LevelConfig, SpecialChances

_BASE_COLORS: Tuple[str, ...] = ("red", "blue", "green", "yellow")


_LEVELS: Mapping[int, LevelConfig] = {
    config.level: config
    for config in (
        LevelConfig(
            level=1,
            name="First Pop",
            difficulty="Easy",
            colors=_BASE_COLORS[:3],
            initial_rows=4,
            descent_interval_ms=32000,
        ),
        LevelConfig(
            level=2,
            name="Warm Up",
            difficulty="Easy",
            colors=_BASE_COLORS,
            special_chances=SpecialChances(bomb=0.04),
            initial_rows=5,
            descent_interval_ms=30000,
        ),
        LevelConfig(
            level=3,
            name="Rainbow Road",
            difficulty="Easy",
            colors=_BASE_COLORS,
            special_chances=SpecialChances(bomb=0.04, rainbow=0.05),
            initial_rows=5,
            descent_interval_ms=28000,
        ),
        LevelConfig(
            level=4,
            name="Cold Snap",
            difficulty="Medium",
            colors=_BASE_COLORS + ("purple",),
            special_chances=SpecialChances(bomb=0.04, rainbow=0.04, freeze=0.05),
            initial_rows=6,
            descent_interval_ms=26000,
        ),
        LevelConfig(
            level=5,
            name="Stone Garden",
            difficulty="Medium",
            colors=_BASE_COLORS + ("purple",),
            special_chances=SpecialChances(bomb=0.05, rainbow=0.04, aim=0.04),
            obstacle_chance=0.05,
            initial_rows=6,
            descent_interval_ms=24000,
        ),
        LevelConfig(
            level=6,
            name="Against the Clock",
            difficulty="Hard",
            colors=_BASE_COLORS + ("purple", "orange"),
            special_chances=SpecialChances(bomb=0.05, rainbow=0.05, freeze=0.04, aim=0.04),
            obstacle_chance=0.06,
            initial_rows=6,
            descent_interval_ms=22000,
            time_limit_seconds=150,
        ),
        LevelConfig(
            level=7,
            name="Swaying Rows",
            difficulty="Hard",
            colors=_BASE_COLORS + ("purple", "orange"),
            special_chances=SpecialChances(bomb=0.05, rainbow=0.05, freeze=0.04, aim=0.03),
            obstacle_chance=0.06,
            initial_rows=7,
            descent_interval_ms=20000,
            moving_rows=(1, 3),
            moving_amplitude=18,
            moving_speed=1.0,
        ),
        LevelConfig(
            level=8,
            name="Undertow",
            difficulty="Very Hard",
            colors=_BASE_COLORS + ("purple", "orange", "cyan"),
            special_chances=SpecialChances(bomb=0.06, rainbow=0.05, freeze=0.05, aim=0.03),
            obstacle_chance=0.08,
            initial_rows=7,
            descent_interval_ms=18000,
            time_limit_seconds=140,
            moving_rows=(0, 2, 4),
            moving_amplitude=22,
            moving_speed=1.3,
        ),
        LevelConfig(
            level=9,
            name="Color Burst",
            difficulty="Extreme",
            colors=_BASE_COLORS + ("purple", "orange", "cyan", "pink"),
            special_chances=SpecialChances(bomb=0.06, rainbow=0.06, freeze=0.05, aim=0.04),
            obstacle_chance=0.1,
            initial_rows=8,
            descent_interval_ms=16000,
            time_limit_seconds=130,
            moving_rows=(1, 3, 5),
            moving_amplitude=24,
            moving_speed=1.5,
        ),
        LevelConfig(
            level=10,
            name="Endless Cascade",
            difficulty="Extreme",
            colors=_BASE_COLORS + ("purple", "orange", "cyan", "pink"),
            special_chances=SpecialChances(bomb=0.06, rainbow=0.06, freeze=0.06, aim=0.04),
            obstacle_chance=0.08,
            initial_rows=7,
            descent_interval_ms=15000,
            moving_rows=(2, 4),
            moving_amplitude=20,
            moving_speed=1.2,
            endless=True,
        ),
    )
}


def all_levels() -> Iterable[LevelConfig]:
    return _LEVELS.values()


def get_level(level: int) -> LevelConfig:
    try:
        return _LEVELS[level]
    except KeyError as exc:
        raise ValueError(f"Unknown level '{level}'") from exc


def level_by_index(index: int) -> LevelConfig:
    """Zero-based lookup clamped to the catalogue, for level-select style callers."""
    ordered = sorted(_LEVELS.values(), key=lambda config: config.level)
    index = max(0, min(len(ordered) - 1, index))
    return ordered[index]
