## Project: Megasena Predictor
## Purpose of File: Immutable Draw Record
## Description:
## A draw is six integers from the 1..60 pool. Records are immutable once built and may hold
## out-of-range or repeated values (rounded network outputs do), so range and distinctness are
## exposed as queries rather than enforced at construction.

import math
from dataclasses import dataclass
from numbers import Integral
from typing import Iterable, Iterator, Tuple

from pipeline import NUMBER_RANGE, PICK_SIZE


@dataclass(frozen=True)
class DrawRecord:
    numbers: Tuple[int, ...]

    def __post_init__(self) -> None:
        values = tuple(self.numbers)
        if len(values) != PICK_SIZE:
            raise ValueError(f"A draw holds exactly {PICK_SIZE} numbers, got {len(values)}.")
        if not all(isinstance(v, Integral) and not isinstance(v, bool) for v in values):
            raise TypeError(f"Draw numbers must be integers, got {values!r}.")
        object.__setattr__(self, "numbers", tuple(int(v) for v in values))

    @classmethod
    def of(cls, v1: int, v2: int, v3: int, v4: int, v5: int, v6: int) -> "DrawRecord":
        return cls((v1, v2, v3, v4, v5, v6))

    @classmethod
    def from_values(cls, values: Iterable[float]) -> "DrawRecord":
        """
        Build a record by rounding raw network outputs (halves round to even).
        NaN and infinite outputs become 0, which is out of range.
        """
        values = list(values)
        if len(values) < PICK_SIZE:
            raise ValueError(f"Need {PICK_SIZE} values to build a draw, got {len(values)}.")
        rounded = []
        for v in values[:PICK_SIZE]:
            v = float(v)
            rounded.append(int(round(v)) if math.isfinite(v) else 0)
        return cls(tuple(rounded))

    def is_out(self, number_range: int = NUMBER_RANGE) -> bool:
        return any(v < 1 or v > number_range for v in self.numbers)

    def is_valid(self, number_range: int = NUMBER_RANGE) -> bool:
        return not self.is_out(number_range) and len(set(self.numbers)) == PICK_SIZE

    def sorted(self) -> Tuple[int, ...]:
        return tuple(sorted(self.numbers))

    def __iter__(self) -> Iterator[int]:
        return iter(self.numbers)

    def __len__(self) -> int:
        return len(self.numbers)

    def __str__(self) -> str:
        return ",".join(str(v) for v in self.numbers)
