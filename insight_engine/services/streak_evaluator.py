"""Run-length evaluation of metric sequences against a rule condition."""
from __future__ import annotations

import operator as op
from dataclasses import dataclass
from typing import Callable, Iterable


_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    "<=": op.le,
    ">=": op.ge,
    "<": op.lt,
    ">": op.gt,
    "==": op.eq,
}


@dataclass(frozen=True)
class StreakResult:
    """Outcome of scanning one metric sequence."""

    has_qualifying_run: bool
    max_streak: int


def evaluate_condition(value: float, threshold: float, operator: str) -> bool:
    """Compare ``value`` to ``threshold``; unknown operators never match."""
    comparator = _COMPARATORS.get(operator)
    if comparator is None:
        return False
    return comparator(value, threshold)


def evaluate_streak(
    values: Iterable[float],
    operator: str,
    threshold: float,
    consecutive_days: int,
) -> StreakResult:
    """
    Scan ``values`` in order and measure runs that satisfy the condition.

    Adjacent entries count as consecutive regardless of the calendar dates they
    came from; callers pass the user's check-ins already sorted by date.

    Args:
        values: Metric values, oldest first
        operator: One of ``<=``, ``>=``, ``<``, ``>``, ``==``
        threshold: Value each entry is compared against
        consecutive_days: Run length that makes the rule fire

    Returns:
        StreakResult with whether any run reached ``consecutive_days`` and the
        longest run seen anywhere in the sequence
    """
    current_streak = 0
    max_streak = 0
    qualifying_runs = 0

    for value in values:
        if evaluate_condition(value, threshold, operator):
            current_streak += 1
            max_streak = max(max_streak, current_streak)
            if current_streak >= consecutive_days:
                qualifying_runs += 1
        else:
            current_streak = 0

    return StreakResult(has_qualifying_run=qualifying_runs > 0, max_streak=max_streak)
