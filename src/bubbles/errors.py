"""Engine error kinds. None of them are fatal; callers map them to a no-op or a lost life."""


class NoSlotAvailable(RuntimeError):
    """A contacted bubble has no empty in-bounds neighbor to snap into."""


class GridFull(RuntimeError):
    """No empty cell exists within the maximum row bound for a placement."""
