from dataclasses import dataclass, field
from typing import Dict, Tuple

@dataclass(slots=True)
class Grid:
    rows: int
    cols: int
    failure_row: int
    # (row, col) -> cell entity, filled once when the lattice is spawned.
    cells: Dict[Tuple[int, int], int] = field(default_factory=dict)
    # Set when a row drop pushed bubbles past the last row.
    overflowed: bool = False
