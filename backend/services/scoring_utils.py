"""Numeric and list helpers shared by the deterministic scorers."""

import math
from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

T = TypeVar("T")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3), unlike Python's banker's rounding."""
    factor = 10 ** digits
    # Snap away float noise first so 72.49999999999999 rounds like 72.5
    scaled = round(value * factor, 9)
    return math.floor(scaled + 0.5) / factor


def round_score(value: float, low: float = 0, high: float = 100) -> int:
    """Clamp then round to an integer score."""
    return int(round_half_up(clamp(value, low, high)))


def round3(value: float) -> float:
    return round_half_up(value, 3)


def cap_unique(
    items: Iterable[T],
    size: int,
    key: Callable[[T], Hashable],
) -> list[T]:
    """Keep the first ``size`` items with distinct non-empty keys, in order."""
    out: list[T] = []
    if size <= 0:
        return out
    seen: set[Hashable] = set()
    for item in items:
        k = key(item)
        if not k or k in seen:
            continue
        seen.add(k)
        out.append(item)
        if len(out) >= size:
            break
    return out
