"""
Module: payroll_engines.report
Responsibility:
    Report Assembler.  Turns unrounded ``WeekEarnings`` per employee into
    the structured payroll report (``ProcessedPayrollData``): weekly
    summaries in chronological order, per-employee final pay, sick leave
    accrual and the configuration warnings raised while computing.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - This is the ONLY place values are rounded, half up: money to its
      currency's minor unit, hours and piece counts to 2 decimals.
    - Employee final pay is the sum of the reported weekly final pays.
    - Employees without any computed week are omitted, never zero-filled.
    - Output ordering is deterministic: employees by (name, id), weeks
      chronologically, days by date, tasks by (display name, id).

Audit relevance:
    ``to_dict()`` is the wire shape consumed by the UI and the printed
    stub; identical inputs produce byte-identical JSON.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from payroll_kernel.domain.records import Employee
from payroll_kernel.domain.values import Money
from payroll_kernel.logging_config import get_logger
from payroll_engines.earnings import ConfigurationWarning, DayEarnings, TaskEarnings, WeekEarnings
from payroll_engines.sick_leave import compute_sick_leave_accrual
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.report")

UNKNOWN_CLIENT_NAME = "Unknown Client"

_HUNDREDTHS = Decimal("0.01")


def round2(value: Decimal | Money) -> Decimal:
    """Round Money to its currency's minor unit, a quantity to 2 decimals."""
    if isinstance(value, Money):
        return value.round().amount
    return value.quantize(_HUNDREDTHS, rounding=ROUND_HALF_UP)


def _num(value: Decimal) -> float:
    # JSON number; values are already quantized to cents
    return float(value)


# ---------------------------------------------------------------------------
# Output types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DailyTaskDetail:
    task_id: str
    task_name: str
    client_name: str
    hours: Decimal
    piecework_count: Decimal
    total_earnings: Decimal
    ranch: str | None = None
    block: str | None = None

    def to_dict(self) -> dict:
        data: dict = {
            "taskId": self.task_id,
            "taskName": self.task_name,
            "clientName": self.client_name,
        }
        if self.ranch is not None:
            data["ranch"] = self.ranch
        if self.block is not None:
            data["block"] = self.block
        data.update(
            hours=_num(self.hours),
            pieceworkCount=_num(self.piecework_count),
            totalEarnings=_num(self.total_earnings),
        )
        return data


@dataclass(frozen=True)
class DailyBreakdown:
    date: str
    tasks: tuple[DailyTaskDetail, ...]
    total_daily_hours: Decimal
    total_daily_earnings: Decimal

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "tasks": [t.to_dict() for t in self.tasks],
            "totalDailyHours": _num(self.total_daily_hours),
            "totalDailyEarnings": _num(self.total_daily_earnings),
        }


@dataclass(frozen=True)
class WeeklySummary:
    week_number: int
    year: int
    total_hours: Decimal
    total_earnings: Decimal
    minimum_wage_top_up: Decimal
    paid_rest_breaks: Decimal
    final_pay: Decimal
    daily_breakdown: tuple[DailyBreakdown, ...]
    applicable_minimum_wage: Decimal = Decimal("0.00")
    regular_rate_of_pay: Decimal = Decimal("0.00")
    rest_break_hours: Decimal = Decimal("0.00")
    sick_hours_accrued: Decimal = Decimal("0.00")
    sick_hours_used: Decimal = Decimal("0.00")
    paid_sick_leave: Decimal = Decimal("0.00")

    def to_dict(self) -> dict:
        return {
            "weekNumber": self.week_number,
            "year": self.year,
            "totalHours": _num(self.total_hours),
            "totalEarnings": _num(self.total_earnings),
            "minimumWageTopUp": _num(self.minimum_wage_top_up),
            "paidRestBreaks": _num(self.paid_rest_breaks),
            "paidSickLeave": _num(self.paid_sick_leave),
            "finalPay": _num(self.final_pay),
            "applicableMinimumWage": _num(self.applicable_minimum_wage),
            "regularRateOfPay": _num(self.regular_rate_of_pay),
            "restBreakHours": _num(self.rest_break_hours),
            "sickHoursAccrued": _num(self.sick_hours_accrued),
            "sickHoursUsed": _num(self.sick_hours_used),
            "dailyBreakdown": [d.to_dict() for d in self.daily_breakdown],
        }


@dataclass(frozen=True)
class EmployeePayrollSummary:
    employee_id: str
    employee_name: str
    weekly_summaries: tuple[WeeklySummary, ...]
    final_pay: Decimal
    total_sick_hours_accrued: Decimal = Decimal("0.00")
    total_sick_hours_used: Decimal = Decimal("0.00")
    new_sick_hours_balance: Decimal = Decimal("0.00")

    @property
    def total_hours(self) -> Decimal:
        return sum((w.total_hours for w in self.weekly_summaries), Decimal("0"))

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "weeklySummaries": [w.to_dict() for w in self.weekly_summaries],
            "finalPay": _num(self.final_pay),
            "totalSickHoursAccrued": _num(self.total_sick_hours_accrued),
            "totalSickHoursUsed": _num(self.total_sick_hours_used),
            "newSickHoursBalance": _num(self.new_sick_hours_balance),
        }


@dataclass(frozen=True)
class ProcessedPayrollData:
    """The complete payroll report for one window."""

    start_date: str
    end_date: str
    pay_date: str
    employee_summaries: tuple[EmployeePayrollSummary, ...]
    warnings: tuple[ConfigurationWarning, ...] = ()
    skipped_records: dict[str, int] = field(default_factory=dict)

    @property
    def total_final_pay(self) -> Decimal:
        return sum((e.final_pay for e in self.employee_summaries), Decimal("0"))

    def to_dict(self) -> dict:
        return {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "payDate": self.pay_date,
            "employeeSummaries": [e.to_dict() for e in self.employee_summaries],
            "warnings": [w.to_dict() for w in self.warnings],
            "skippedRecords": dict(sorted(self.skipped_records.items())),
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def _task_detail(task_earnings: TaskEarnings) -> DailyTaskDetail:
    task = task_earnings.task
    client = task_earnings.client
    return DailyTaskDetail(
        task_id=task.id,
        task_name=task.display_name,
        client_name=client.name if client is not None else UNKNOWN_CLIENT_NAME,
        ranch=task.ranch,
        block=task.block,
        hours=round2(task_earnings.hours),
        piecework_count=round2(task_earnings.pieces),
        total_earnings=round2(task_earnings.earnings),
    )


def _daily_breakdown(day: DayEarnings) -> DailyBreakdown:
    return DailyBreakdown(
        date=day.work_date.isoformat(),
        tasks=tuple(_task_detail(t) for t in day.tasks),
        total_daily_hours=round2(day.total_hours),
        total_daily_earnings=round2(day.total_earnings),
    )


def summarize_week(week: WeekEarnings, sick_hours_accrued: Decimal = Decimal("0")) -> WeeklySummary:
    """Round one ``WeekEarnings`` into its reported summary."""
    return WeeklySummary(
        week_number=week.week.week,
        year=week.week.year,
        total_hours=round2(week.total_hours),
        total_earnings=round2(week.raw_earnings),
        minimum_wage_top_up=round2(week.top_up),
        paid_rest_breaks=round2(week.break_pay),
        final_pay=round2(week.final_pay),
        daily_breakdown=tuple(_daily_breakdown(d) for d in week.days),
        applicable_minimum_wage=round2(week.applicable_minimum_wage),
        regular_rate_of_pay=round2(week.regular_rate),
        rest_break_hours=round2(week.break_hours),
        sick_hours_accrued=round2(sick_hours_accrued),
        sick_hours_used=round2(week.sick_hours_paid),
        paid_sick_leave=round2(week.sick_pay) if week.sick_pay is not None else Decimal("0.00"),
    )


def summarize_employee(
    employee: Employee,
    weeks: Sequence[WeekEarnings],
    hours_per_sick_hour: Decimal,
) -> EmployeePayrollSummary:
    """Weekly summaries (chronological) and period totals for one employee."""
    ordered = sorted(weeks, key=lambda w: w.week)
    accrual = compute_sick_leave_accrual(
        [w.total_hours for w in ordered],
        employee.sick_hours_balance,
        hours_per_sick_hour,
        [w.sick_hours_paid for w in ordered],
    )
    summaries = tuple(
        summarize_week(week, accrued)
        for week, accrued in zip(ordered, accrual.weekly)
    )
    return EmployeePayrollSummary(
        employee_id=employee.id,
        employee_name=employee.name,
        weekly_summaries=summaries,
        final_pay=sum((s.final_pay for s in summaries), Decimal("0.00")),
        total_sick_hours_accrued=round2(accrual.total_accrued),
        total_sick_hours_used=round2(accrual.total_used),
        new_sick_hours_balance=accrual.new_balance,
    )


def collect_warnings(weeks: Sequence[WeekEarnings]) -> tuple[ConfigurationWarning, ...]:
    """Distinct warnings across weeks, one per (task, code)."""
    seen: dict[tuple[str, str], ConfigurationWarning] = {}
    for week in weeks:
        for warning in week.warnings:
            seen.setdefault((warning.task_id, warning.code.value), warning)
    return tuple(seen[k] for k in sorted(seen))


@traced_engine(
    "report_assembler", "1.0",
    fingerprint_fields=("start_date", "end_date", "pay_date"),
)
def assemble_report(
    *,
    start_date: date,
    end_date: date,
    pay_date: date,
    employee_weeks: Sequence[tuple[Employee, Sequence[WeekEarnings]]],
    hours_per_sick_hour: Decimal,
    skipped_records: dict[str, int] | None = None,
) -> ProcessedPayrollData:
    """Build the payroll report.

    Args:
        start_date: First day of the window.
        end_date: Last day of the window.
        pay_date: Date the wages are paid.
        employee_weeks: For each active employee, their computed weeks.
        hours_per_sick_hour: Hours worked per sick hour accrued.
        skipped_records: Per-collection count of malformed rows skipped.

    Returns:
        ProcessedPayrollData ready for ``to_dict()``.
    """
    summaries = [
        summarize_employee(employee, weeks, hours_per_sick_hour)
        for employee, weeks in employee_weeks
        if weeks
    ]
    summaries.sort(key=lambda s: (s.employee_name, s.employee_id))

    all_weeks = [week for _, weeks in employee_weeks for week in weeks]
    warnings = collect_warnings(all_weeks)
    for warning in warnings:
        logger.warning(
            "task_configuration_warning",
            extra={
                "warning_code": warning.code.value,
                "task_id": warning.task_id,
                "detail": warning.message,
            },
        )

    return ProcessedPayrollData(
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        pay_date=pay_date.isoformat(),
        employee_summaries=tuple(summaries),
        warnings=warnings,
        skipped_records=dict(skipped_records or {}),
    )
