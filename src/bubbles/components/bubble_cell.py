from dataclasses import dataclass

@dataclass(slots=True)
class BubbleCell:
    """Lattice position of a cell entity with its cached center in playfield pixels."""
    row: int
    col: int
    x: float
    y: float
