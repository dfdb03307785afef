"""
Module: payroll_engines.aggregation
Responsibility:
    Work Aggregator.  Folds raw activity logs (time entries and piecework
    tickets) into a per-employee, per-day, per-task accumulation of hours
    and piece counts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel.domain.

Invariants enforced:
    - Only closed time entries (end_time present) with a positive duration
      contribute hours; break and sick-leave entries are not work.
    - An entry marked use_sick_hours_for_payment is a sick-leave claim: its
      hours go to ``WorkLedger.sick_claims``, never to worked hours.
    - The calendar day is the local date of the entry's start, never its end.
    - Records outside the date-level window [period_start, period_end], or
      referencing an unknown employee or task, are dropped.
    - A shared piecework ticket credits piece_count / N per identifier,
      where N counts the identifiers that resolve to a known employee;
      unresolvable identifiers are ignored.

Failure modes:
    - None.  Every exclusion is silent in the result and counted in
      ``WorkLedger.excluded`` for diagnostics.

Usage:
    from payroll_engines.aggregation import aggregate_work

    ledger = aggregate_work(
        snapshot=snapshot, tables=tables,
        period_start=date(2025, 6, 2), period_end=date(2025, 6, 15),
    )
    ledger.days_for("emp_1")[date(2025, 6, 2)]["task_a"].hours
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from payroll_kernel.domain.records import RecordSnapshot
from payroll_kernel.domain.roster import LookupTables
from payroll_kernel.logging_config import get_logger
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.aggregation")


@dataclass(frozen=True)
class WorkTotals:
    """Hours and pieces accumulated for one (employee, day, task)."""

    hours: Decimal = Decimal("0")
    pieces: Decimal = Decimal("0")

    def __add__(self, other: WorkTotals) -> WorkTotals:
        if not isinstance(other, WorkTotals):
            return NotImplemented
        return WorkTotals(self.hours + other.hours, self.pieces + other.pieces)


DayTasks = dict[str, WorkTotals]
EmployeeDays = dict[date, DayTasks]


@dataclass(frozen=True)
class WorkLedger:
    """
    Result of aggregation: ``employee_id -> day -> task_id -> WorkTotals``
    plus the sick hours claimed per ``employee_id -> day``.

    Contract:
        Only employees with at least one counted record or claim appear.
    Non-goals:
        Does not carry earnings; see ``payroll_engines.earnings``.
    """

    by_employee: dict[str, EmployeeDays] = field(default_factory=dict)
    sick_claims: dict[str, dict[date, Decimal]] = field(default_factory=dict)
    excluded: dict[str, int] = field(default_factory=dict)

    def employee_ids(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys([*self.by_employee, *self.sick_claims]))

    def days_for(self, employee_id: str) -> EmployeeDays:
        return self.by_employee.get(employee_id, {})

    def sick_claims_for(self, employee_id: str) -> dict[date, Decimal]:
        return self.sick_claims.get(employee_id, {})

    @property
    def is_empty(self) -> bool:
        return not self.by_employee and not self.sick_claims


def _credit(
    ledger: dict[str, EmployeeDays],
    employee_id: str,
    work_date: date,
    task_id: str,
    totals: WorkTotals,
) -> None:
    days = ledger.setdefault(employee_id, {})
    tasks = days.setdefault(work_date, {})
    tasks[task_id] = tasks.get(task_id, WorkTotals()) + totals


@traced_engine("work_aggregator", "1.0", fingerprint_fields=("period_start", "period_end"))
def aggregate_work(
    *,
    snapshot: RecordSnapshot,
    tables: LookupTables,
    period_start: date,
    period_end: date,
) -> WorkLedger:
    """Fold time entries and piecework tickets into a ``WorkLedger``.

    Args:
        snapshot: Parsed records for this run.
        tables: Lookup tables built from the same snapshot.
        period_start: First day of the reporting window (inclusive).
        period_end: Last day of the reporting window (inclusive).

    Returns:
        WorkLedger keyed by employee id, local day and task id.
    """
    ledger: dict[str, EmployeeDays] = {}
    sick_claims: dict[str, dict[date, Decimal]] = {}
    excluded: Counter[str] = Counter()

    for entry in snapshot.time_entries:
        if entry.is_active:
            excluded["active_time_entry"] += 1
            continue
        claims_sick_pay = entry.use_sick_hours_for_payment
        if not claims_sick_pay and (entry.is_break or entry.is_sick_leave):
            excluded["non_work_time_entry"] += 1
            continue
        if not (period_start <= entry.work_date <= period_end):
            excluded["outside_period"] += 1
            continue
        employee = tables.resolve_employee(entry.employee_id)
        if employee is None:
            excluded["unknown_employee"] += 1
            continue
        if entry.task_id not in tables.tasks:
            excluded["unknown_task"] += 1
            continue
        if claims_sick_pay:
            claimed = entry.sick_hours_claimed
            if claimed <= 0:
                excluded["non_positive_duration"] += 1
                continue
            days = sick_claims.setdefault(employee.id, {})
            days[entry.work_date] = days.get(entry.work_date, Decimal("0")) + claimed
            continue
        hours = entry.duration_hours
        if hours <= 0:
            excluded["non_positive_duration"] += 1
            continue
        _credit(ledger, employee.id, entry.work_date, entry.task_id, WorkTotals(hours=hours))

    for ticket in snapshot.piecework:
        if not (period_start <= ticket.work_date <= period_end):
            excluded["outside_period"] += 1
            continue
        if ticket.task_id not in tables.tasks:
            excluded["unknown_task"] += 1
            continue
        employees = tables.resolve_participants(ticket.participants)
        if not employees:
            excluded["unresolved_piecework"] += 1
            continue
        share = ticket.piece_count / len(employees)
        for employee in employees:
            _credit(ledger, employee.id, ticket.work_date, ticket.task_id, WorkTotals(pieces=share))

    logger.info(
        "work_aggregated",
        extra={
            "employees": len(ledger),
            "sick_claims": len(sick_claims),
            "excluded": dict(excluded),
        },
    )
    return WorkLedger(by_employee=ledger, sick_claims=sick_claims, excluded=dict(excluded))
