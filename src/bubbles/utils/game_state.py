from __future__ import annotations

from esper import World

from bubbles.components.game_state import GameMode, GameState
from bubbles.components.level_config import LevelConfig
from bubbles.events.bus import EVENT_GAME_MODE_CHANGED, EventBus


def get_game_state(world: World) -> GameState:
    for _, state in world.get_component(GameState):
        return state
    world.create_entity(GameState())
    return list(world.get_component(GameState))[0][1]


def current_mode(world: World) -> GameMode:
    return get_game_state(world).mode


def set_game_mode(world: World, event_bus: EventBus, mode: GameMode) -> None:
    """Update the game mode and emit a change event when it differs."""
    state = get_game_state(world)
    previous_mode = state.mode
    if previous_mode == mode:
        return
    state.mode = mode
    event_bus.emit(EVENT_GAME_MODE_CHANGED, previous_mode=previous_mode, new_mode=mode)


def get_level_config(world: World) -> LevelConfig:
    for _, level in world.get_component(LevelConfig):
        return level
    raise RuntimeError("LevelConfig not found")
