from dataclasses import dataclass, field
from typing import List

@dataclass(slots=True)
class RowOffsets:
    """Current lateral offset (pixels) of each grid row for moving-row levels."""
    offsets: List[float] = field(default_factory=list)

    def offset_for(self, row: int) -> float:
        if 0 <= row < len(self.offsets):
            return self.offsets[row]
        return 0.0
