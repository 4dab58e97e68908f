"""Headless entry point for the bubble shooter simulation core.

Plays one level with a random aiming policy at a fixed frame rate and logs
what happened. Useful as a smoke run and as a reference caller loop.
"""
import logging
import math
import random
import sys

from bubbles.events.bus import EventBus, EVENT_GAME_OVER, EVENT_GRID_CLEARED
from bubbles.factories.levels import get_level
from bubbles.simulation import BubbleSimulation
from bubbles.systems.session_system import SessionSystem

FRAME_MS = 1000 / 60
MAX_FRAMES = 60 * 60 * 5


def run(level_number: int = 1, seed: int = 0) -> int:
    rng = random.Random(seed)
    event_bus = EventBus()
    simulation = BubbleSimulation(get_level(level_number), event_bus=event_bus, rng=random.Random(seed))
    session = SessionSystem(simulation.world, event_bus)
    finished = {}
    event_bus.subscribe(EVENT_GRID_CLEARED, lambda sender, **payload: finished.update(outcome="cleared"))
    event_bus.subscribe(EVENT_GAME_OVER, lambda sender, **payload: finished.update(outcome="game_over"))

    now = 0.0
    for _ in range(MAX_FRAMES):
        now += FRAME_MS
        if simulation.projectile is None:
            simulation.fire(rng.uniform(-4 * math.pi / 5, -math.pi / 8), now)
        simulation.tick(FRAME_MS, now, session.effective_descent_interval(now))
        if finished:
            break
    logging.info(
        "Level %d finished: %s, score=%d, shots=%d, lives=%d",
        level_number,
        finished.get("outcome", "timeout"),
        session.state.score,
        session.state.shots,
        session.state.lives,
    )
    return 0


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    level_number = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    seed = int(sys.argv[2]) if len(sys.argv) > 2 else 0
    return run(level_number, seed)

if __name__ == "__main__":
    sys.exit(main())
