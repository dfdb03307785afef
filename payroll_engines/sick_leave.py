"""
Module: payroll_engines.sick_leave
Responsibility:
    Paid sick leave accrual.  Washington employees earn one hour of paid
    sick leave for every 40 hours worked (RCW 49.46.210); the ratio is a
    policy value.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Accrual is proportional to hours worked; no cap is applied here.
    - Weekly accruals are rounded to 2 decimals; the period total is the
      sum of the reported weekly values so the stub adds up.
    - Hours paid from the balance are drawn week by week and never exceed
      what is available (opening balance plus accruals to date), so
      new balance = opening + accrued - used >= 0.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

_HUNDREDTHS = Decimal("0.01")


def round_hours(value: Decimal) -> Decimal:
    """Round an hour quantity to 2 decimals, half up."""
    return value.quantize(_HUNDREDTHS, rounding=ROUND_HALF_UP)


def accrue_sick_hours(hours_worked: Decimal, hours_per_sick_hour: Decimal) -> Decimal:
    """Unrounded sick hours earned for ``hours_worked``."""
    if hours_per_sick_hour <= 0:
        raise ValueError("hours_per_sick_hour must be positive")
    if hours_worked <= 0:
        return Decimal("0")
    return hours_worked / hours_per_sick_hour


@dataclass(frozen=True)
class SickLeaveAccrual:
    """Sick leave earned and drawn over a reporting period."""

    weekly: tuple[Decimal, ...]
    weekly_used: tuple[Decimal, ...]
    total_accrued: Decimal
    total_used: Decimal
    opening_balance: Decimal
    new_balance: Decimal


def compute_sick_leave_accrual(
    weekly_hours: Sequence[Decimal],
    opening_balance: Decimal,
    hours_per_sick_hour: Decimal,
    weekly_requested: Sequence[Decimal] | None = None,
) -> SickLeaveAccrual:
    """Weekly accruals and draws plus the resulting balance (all rounded).

    Args:
        weekly_hours: Hours worked per week, chronologically.
        opening_balance: Sick hours available before the period.
        hours_per_sick_hour: Hours worked per sick hour accrued.
        weekly_requested: Sick hours claimed for payment per week.

    Returns:
        SickLeaveAccrual with ``weekly_used`` capped by the running balance.
    """
    if weekly_requested is None:
        weekly_requested = [Decimal("0")] * len(weekly_hours)
    if len(weekly_requested) != len(weekly_hours):
        raise ValueError("weekly_requested must have one value per week")

    balance = opening_balance
    weekly: list[Decimal] = []
    used: list[Decimal] = []
    for hours, requested in zip(weekly_hours, weekly_requested):
        accrued = round_hours(accrue_sick_hours(hours, hours_per_sick_hour))
        balance += accrued
        available = max(balance, Decimal("0")).quantize(_HUNDREDTHS, rounding=ROUND_DOWN)
        draw = min(round_hours(max(requested, Decimal("0"))), available)
        balance -= draw
        weekly.append(accrued)
        used.append(draw)

    return SickLeaveAccrual(
        weekly=tuple(weekly),
        weekly_used=tuple(used),
        total_accrued=sum(weekly, Decimal("0")),
        total_used=sum(used, Decimal("0")),
        opening_balance=opening_balance,
        new_balance=round_hours(balance),
    )
