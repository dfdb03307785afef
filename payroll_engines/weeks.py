"""
Module: payroll_engines.weeks
Responsibility:
    Week Grouper.  Partitions one employee's daily accumulations into
    ISO weeks (Monday start) keyed by (ISO year, ISO week number).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Total function: every day maps to exactly one week.
    - Weeks and the days inside them are returned in chronological order.
    - The ISO year can differ from the calendar year around New Year
      (e.g. 2024-12-30 is in 2025-W01).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from payroll_engines.aggregation import DayTasks


@dataclass(frozen=True, order=True)
class WeekKey:
    """An ISO week. Orders chronologically."""

    year: int
    week: int

    @classmethod
    def for_date(cls, day: date) -> WeekKey:
        iso = day.isocalendar()
        return cls(year=iso.year, week=iso.week)

    @property
    def monday(self) -> date:
        return date.fromisocalendar(self.year, self.week, 1)

    @property
    def sunday(self) -> date:
        return date.fromisocalendar(self.year, self.week, 7)

    @property
    def label(self) -> str:
        return f"{self.year}-W{self.week:02d}"

    def __str__(self) -> str:
        return self.label


def group_by_week(days: Mapping[date, DayTasks]) -> dict[WeekKey, dict[date, DayTasks]]:
    """Group ``day -> task -> totals`` into ``week -> day -> task -> totals``."""
    weeks: dict[WeekKey, dict[date, DayTasks]] = {}
    for day in sorted(days):
        weeks.setdefault(WeekKey.for_date(day), {})[day] = days[day]
    return {key: weeks[key] for key in sorted(weeks)}


def hours_by_week(days: Mapping[date, Decimal]) -> dict[WeekKey, Decimal]:
    """Sum ``day -> hours`` into ``week -> hours``, chronologically."""
    totals: dict[WeekKey, Decimal] = {}
    for day in sorted(days):
        key = WeekKey.for_date(day)
        totals[key] = totals.get(key, Decimal("0")) + days[day]
    return totals
