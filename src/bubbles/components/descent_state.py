from dataclasses import dataclass

@dataclass(slots=True)
class DescentState:
    last_drop_at: float = 0.0
    drops: int = 0
