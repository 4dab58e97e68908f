from dataclasses import dataclass

@dataclass(slots=True)
class ActiveSwitch:
    """Per-cell occupancy flag.

    active: True if the cell currently holds a bubble; False if cleared/empty.
    Color and kind live in the separate Bubble component.
    """
    active: bool = False
