"""
Module: payroll_engines.earnings
Responsibility:
    Earnings Calculator.  For one employee-week: task-level earnings,
    the applicable minimum wage, the minimum-wage top-up, the regular
    rate of pay, paid rest breaks and the final weekly pay.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Policy values arrive as a ``WagePolicy``; this module never reads
    configuration.

Invariants enforced:
    - Decimal/Money arithmetic throughout; nothing is rounded here.
      Rounding happens once, in ``payroll_engines.report``.
    - applicable minimum wage = max(statewide floor, every touched
      client's minimum_wage override).
    - top_up = max(0, hours * applicable minimum wage - raw earnings), so
      (raw + top_up) / hours >= applicable minimum wage whenever hours > 0.
    - rest breaks: floor(hours / interval) breaks of ``rest_break_minutes``
      each, paid at the regular rate (raw + top_up) / hours.
    - A week with zero hours has zero top-up, zero regular rate and zero
      break pay; no division is attempted.
    - A task with a missing, negative or unusable rate earns zero and yields
      a ``ConfigurationWarning`` instead of an exception.
    - Sick hours drawn from the balance are paid at max(regular rate,
      applicable minimum wage) and add to final pay; they are not hours
      worked, so they earn no top-up and no rest break.

Failure modes:
    - None for data problems (they become warnings).
    - CurrencyMismatchError only on programming errors (mixed currencies).

Washington State (WAC 296-131-020) requires a paid ten minute rest break
for each four hours worked; for piece-rate workers the break is paid at
the week's average hourly rate.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.records import Client, PayType, Task
from payroll_kernel.domain.roster import LookupTables
from payroll_kernel.domain.values import Money
from payroll_kernel.logging_config import get_logger
from payroll_engines.aggregation import DayTasks, WorkTotals
from payroll_engines.tracer import traced_engine
from payroll_engines.weeks import WeekKey

logger = get_logger("engines.earnings")

_ZERO = Decimal("0")
_MINUTES_PER_HOUR = Decimal("60")


@dataclass(frozen=True)
class WagePolicy:
    """Jurisdiction wage rules the calculator applies."""

    statewide_minimum_wage: Decimal
    rest_break_minutes: Decimal = Decimal("10")
    rest_break_interval_hours: Decimal = Decimal("4")
    currency: str = "USD"

    def __post_init__(self) -> None:
        if self.statewide_minimum_wage < 0:
            raise ValueError("statewide_minimum_wage cannot be negative")
        if self.rest_break_minutes < 0:
            raise ValueError("rest_break_minutes cannot be negative")
        if self.rest_break_interval_hours <= 0:
            raise ValueError("rest_break_interval_hours must be positive")


class WarningCode(Enum):
    """Configuration problems surfaced on the report."""
    UNKNOWN_PAY_TYPE = "UNKNOWN_PAY_TYPE"
    MISSING_EMPLOYEE_RATE = "MISSING_EMPLOYEE_RATE"
    NEGATIVE_EMPLOYEE_RATE = "NEGATIVE_EMPLOYEE_RATE"
    ZERO_EMPLOYEE_RATE = "ZERO_EMPLOYEE_RATE"
    MISSING_CLIENT_RATE = "MISSING_CLIENT_RATE"


@dataclass(frozen=True)
class ConfigurationWarning:
    """A task configuration problem that would otherwise misstate pay silently."""

    code: WarningCode
    task_id: str
    message: str

    def to_dict(self) -> dict:
        return {"code": self.code.value, "taskId": self.task_id, "message": self.message}


def check_task_rate(task: Task) -> ConfigurationWarning | None:
    """Return a warning when the task cannot be paid as configured."""
    if task.employee_pay_type is None:
        return ConfigurationWarning(
            WarningCode.UNKNOWN_PAY_TYPE, task.id,
            f"Task '{task.name}' has no valid employeePayType (hourly or piecework)",
        )
    if task.employee_rate is None:
        return ConfigurationWarning(
            WarningCode.MISSING_EMPLOYEE_RATE, task.id,
            f"Task '{task.name}' is {task.employee_pay_type.value} but has no employeeRate",
        )
    if task.employee_rate < 0:
        return ConfigurationWarning(
            WarningCode.NEGATIVE_EMPLOYEE_RATE, task.id,
            f"Task '{task.name}' has negative employeeRate {task.employee_rate}",
        )
    if task.employee_rate == 0:
        return ConfigurationWarning(
            WarningCode.ZERO_EMPLOYEE_RATE, task.id,
            f"Task '{task.name}' has a zero employeeRate",
        )
    return None


@dataclass(frozen=True)
class TaskEarnings:
    """Earnings for one task on one day."""

    task: Task
    client: Client | None
    hours: Decimal
    pieces: Decimal
    earnings: Money


@dataclass(frozen=True)
class DayEarnings:
    """All task earnings for one day."""

    work_date: date
    tasks: tuple[TaskEarnings, ...]
    total_hours: Decimal
    total_earnings: Money


@dataclass(frozen=True)
class WeekEarnings:
    """
    Unrounded weekly wage computation for one employee.

    Guarantees:
        - final_pay == raw_earnings + top_up + break_pay + sick_pay
        - top_up >= 0, break_pay >= 0, sick_pay >= 0
    """

    week: WeekKey
    days: tuple[DayEarnings, ...]
    total_hours: Decimal
    raw_earnings: Money
    applicable_minimum_wage: Money
    minimum_gross: Money
    top_up: Money
    regular_rate: Money
    break_hours: Decimal
    break_pay: Money
    final_pay: Money
    sick_hours_paid: Decimal = Decimal("0")
    sick_pay: Money | None = None
    warnings: tuple[ConfigurationWarning, ...] = ()


def calculate_task_earnings(
    task: Task, totals: WorkTotals, currency: str,
) -> tuple[Money, ConfigurationWarning | None]:
    """hours x rate for hourly tasks, pieces x rate for piecework tasks."""
    warning = check_task_rate(task)
    if warning is not None and warning.code is not WarningCode.ZERO_EMPLOYEE_RATE:
        return Money.zero(currency), warning
    rate = Money.of(task.employee_rate, currency)
    if task.employee_pay_type is PayType.HOURLY:
        return rate * totals.hours, warning
    return rate * totals.pieces, warning


def applicable_minimum_wage(
    clients: Iterable[Client | None],
    policy: WagePolicy,
) -> Money:
    """max(statewide floor, every touched client's override)."""
    floor = policy.statewide_minimum_wage
    for client in clients:
        if client is not None and client.minimum_wage is not None:
            floor = max(floor, client.minimum_wage)
    return Money.of(floor, policy.currency)


def rest_break_hours(total_hours: Decimal, policy: WagePolicy) -> Decimal:
    """floor(hours / interval) x break minutes, in hours."""
    if total_hours <= 0:
        return _ZERO
    breaks = int(total_hours // policy.rest_break_interval_hours)
    return Decimal(breaks) * policy.rest_break_minutes / _MINUTES_PER_HOUR


@traced_engine("earnings_calculator", "1.0", fingerprint_fields=("week",))
def calculate_week_earnings(
    *,
    week: WeekKey,
    days: Mapping[date, DayTasks],
    tables: LookupTables,
    policy: WagePolicy,
) -> WeekEarnings:
    """Compute one employee-week of wages.

    Args:
        week: The ISO week being computed.
        days: ``day -> task_id -> WorkTotals`` for the days of that week.
        tables: Lookup tables for tasks and clients.
        policy: Minimum wage and rest break rules.

    Returns:
        WeekEarnings with every component unrounded.
    """
    currency = policy.currency
    warnings: list[ConfigurationWarning] = []
    touched_clients: dict[str, Client | None] = {}
    day_results: list[DayEarnings] = []

    for work_date in sorted(days):
        task_results: list[TaskEarnings] = []
        for task_id, totals in days[work_date].items():
            task = tables.tasks.get(task_id)
            if task is None:
                # Aggregation only admits known tasks
                continue
            client = tables.client_for(task)
            if task.client_id is not None:
                touched_clients[task.client_id] = client
            earnings, warning = calculate_task_earnings(task, totals, currency)
            if warning is not None and warning not in warnings:
                warnings.append(warning)
            task_results.append(
                TaskEarnings(
                    task=task, client=client,
                    hours=totals.hours, pieces=totals.pieces, earnings=earnings,
                )
            )
        task_results.sort(key=lambda t: (t.task.display_name, t.task.id))
        day_results.append(
            DayEarnings(
                work_date=work_date,
                tasks=tuple(task_results),
                total_hours=sum((t.hours for t in task_results), _ZERO),
                total_earnings=Money.total((t.earnings for t in task_results), currency),
            )
        )

    total_hours = sum((d.total_hours for d in day_results), _ZERO)
    raw_earnings = Money.total((d.total_earnings for d in day_results), currency)
    min_wage = applicable_minimum_wage(touched_clients.values(), policy)

    if total_hours > 0:
        minimum_gross = min_wage * total_hours
        top_up = max(Money.zero(currency), minimum_gross - raw_earnings)
        regular_rate = (raw_earnings + top_up) / total_hours
    else:
        minimum_gross = Money.zero(currency)
        top_up = Money.zero(currency)
        regular_rate = Money.zero(currency)

    break_hours = rest_break_hours(total_hours, policy)
    break_pay = regular_rate * break_hours
    final_pay = raw_earnings + top_up + break_pay

    if top_up.is_positive:
        logger.info(
            "minimum_wage_top_up_applied",
            extra={
                "week": week.label,
                "total_hours": str(total_hours),
                "raw_earnings": str(raw_earnings.amount),
                "applicable_minimum_wage": str(min_wage.amount),
                "top_up": str(top_up.amount),
            },
        )

    return WeekEarnings(
        week=week,
        days=tuple(day_results),
        total_hours=total_hours,
        raw_earnings=raw_earnings,
        applicable_minimum_wage=min_wage,
        minimum_gross=minimum_gross,
        top_up=top_up,
        regular_rate=regular_rate,
        break_hours=break_hours,
        break_pay=break_pay,
        final_pay=final_pay,
        sick_pay=Money.zero(currency),
        warnings=tuple(warnings),
    )


def sick_pay_rate(week: WeekEarnings) -> Money:
    """Hourly rate for sick hours: the regular rate, never below the floor."""
    return max(week.regular_rate, week.applicable_minimum_wage)


def apply_sick_pay(week: WeekEarnings, sick_hours: Decimal) -> WeekEarnings:
    """Add pay for ``sick_hours`` drawn from the balance to a computed week."""
    if sick_hours <= 0:
        return week
    sick_pay = sick_pay_rate(week) * sick_hours
    logger.info(
        "sick_hours_paid",
        extra={
            "week": week.week.label,
            "sick_hours": str(sick_hours),
            "sick_pay": str(sick_pay.amount),
        },
    )
    return replace(
        week,
        sick_hours_paid=sick_hours,
        sick_pay=sick_pay,
        final_pay=week.final_pay + sick_pay,
    )
