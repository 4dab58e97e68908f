import math

from esper import World

from bubbles.components.row_offsets import RowOffsets
from bubbles.systems.grid_ops import get_grid
from bubbles.utils.game_state import get_level_config

# Milliseconds per radian of wave phase at moving_speed == 1.
WAVE_PERIOD_MS = 900.0


def wave_offset(row: int, now_ms: float, amplitude: float, speed: float) -> float:
    direction = 1 if row % 2 == 0 else -1
    return math.sin(now_ms / (WAVE_PERIOD_MS / speed) + row) * amplitude * direction


class RowWaveSystem:
    """Updates lateral offsets for the level's moving rows."""

    def __init__(self, world: World):
        self.world = world

    def process(self, now_ms: float) -> None:
        level = get_level_config(self.world)
        if not level.moving_rows:
            return
        offsets = self._offsets()
        grid = get_grid(self.world)
        if len(offsets.offsets) < grid.rows:
            offsets.offsets.extend([0.0] * (grid.rows - len(offsets.offsets)))
        for row in level.moving_rows:
            if 0 <= row < grid.rows:
                offsets.offsets[row] = wave_offset(row, now_ms, level.moving_amplitude, level.moving_speed)

    def reset(self) -> None:
        offsets = self._offsets()
        offsets.offsets = [0.0] * len(offsets.offsets)

    def _offsets(self) -> RowOffsets:
        for _, offsets in self.world.get_component(RowOffsets):
            return offsets
        self.world.create_entity(RowOffsets())
        return list(self.world.get_component(RowOffsets))[0][1]
