"""Target asset allocation for a risk score"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Allocation:
    """Target percentages per asset class, always summing to 100."""

    equity: int
    debt: int
    government: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


# (inclusive upper score bound, allocation)
ALLOCATION_BANDS: List[Tuple[int, Allocation]] = [
    (30, Allocation(equity=20, debt=50, government=30)),
    (50, Allocation(equity=40, debt=40, government=20)),
    (70, Allocation(equity=60, debt=25, government=15)),
]
AGGRESSIVE_ALLOCATION = Allocation(equity=80, debt=15, government=5)


def allocate(score: int) -> Allocation:
    for upper, allocation in ALLOCATION_BANDS:
        if score <= upper:
            return allocation
    return AGGRESSIVE_ALLOCATION
