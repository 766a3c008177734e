"""
Heatmap Aggregator: per-day completion percentages across a habit set.

For each date:  completed = habits with count >= target_count
                percentage = floor(completed * 100 / total), 0 when total == 0

The aggregator never touches the database itself; callers pass the
`CompletionCounts` from one `counts_for_range` read covering the window.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator, Sequence
from datetime import date, timedelta

from habitflow.core.errors import InvalidDateRangeError
from habitflow.models.habit import Habit
from habitflow.services.ledger import CompletionCounts


def heatmap_window(end: date, days: int) -> tuple[date, date]:
    """Trailing window [end - days, end], inclusive on both ends."""
    return end - timedelta(days=days), end


def date_range(start: date, end: date) -> Iterator[date]:
    if start > end:
        raise InvalidDateRangeError(start, end)
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def completion_percentage(completed: int, total: int) -> int:
    if total == 0:
        return 0
    return completed * 100 // total


def completed_on(habits: Sequence[Habit], day: date, counts: CompletionCounts) -> int:
    return sum(1 for h in habits if counts.get(h.id, day) >= h.target_count)


def _percentage_on(habits: Sequence[Habit], day: date, counts: CompletionCounts) -> int:
    return completion_percentage(completed_on(habits, day, counts), len(habits))


def build_heatmap(
    habits: Sequence[Habit],
    start: date,
    end: date,
    counts: CompletionCounts,
) -> dict[date, int]:
    return {day: _percentage_on(habits, day, counts) for day in date_range(start, end)}


def build_category_heatmap(
    habits: Sequence[Habit],
    start: date,
    end: date,
    counts: CompletionCounts,
) -> dict[int, dict[date, int]]:
    """Same series per category. Uncategorised habits and empty categories are left out."""
    by_category: dict[int, list[Habit]] = defaultdict(list)
    for habit in habits:
        if habit.category_id is not None:
            by_category[habit.category_id].append(habit)

    return {
        category_id: build_heatmap(members, start, end, counts)
        for category_id, members in by_category.items()
    }


def serialize_series(series: dict[date, int]) -> dict[str, int]:
    """date -> percentage becomes ISO string -> percentage for JSON payloads."""
    return {day.isoformat(): pct for day, pct in series.items()}
