"""
Module: payroll_engines.invoicing
Responsibility:
    Client invoice calculator.  Bills a client for the work recorded on
    its tasks at the task's client rate, passes through the minimum-wage
    top-ups and paid rest breaks the crew earned, and adds the client's
    commission.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes the rounded ``ProcessedPayrollData`` produced for the
    client's tasks; it never recomputes employee pay.

Invariants enforced:
    - line cost = hours x client rate (hourly) or pieces x client rate.
    - labor_cost = sum of daily totals.
    - subtotal = labor_cost + minimum_wage_top_up + paid_rest_breaks.
    - commission = subtotal x commission_rate / 100 (0 when absent or
      negative), so total >= subtotal.
    - total = subtotal + commission.
    - A task without a usable client rate bills zero and raises a
      MISSING_CLIENT_RATE warning.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal

from payroll_kernel.domain.records import Client, ClientRateType, PayType, Task
from payroll_kernel.domain.roster import LookupTables
from payroll_kernel.domain.values import Money
from payroll_kernel.logging_config import get_logger
from payroll_engines.earnings import ConfigurationWarning, WarningCode
from payroll_engines.report import DailyBreakdown, ProcessedPayrollData, round2
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.invoicing")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class InvoiceTaskLine:
    task_id: str
    task_name: str
    hours: Decimal
    pieces: Decimal
    client_rate: Decimal
    client_rate_type: ClientRateType | None
    cost: Decimal

    def to_dict(self) -> dict:
        return {
            "taskId": self.task_id,
            "taskName": self.task_name,
            "hours": float(self.hours),
            "pieces": float(self.pieces),
            "clientRate": float(self.client_rate),
            "clientRateType": self.client_rate_type.value if self.client_rate_type else None,
            "cost": float(self.cost),
        }


@dataclass(frozen=True)
class InvoiceDay:
    date: str
    tasks: tuple[InvoiceTaskLine, ...]
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "tasks": [t.to_dict() for t in self.tasks],
            "total": float(self.total),
        }


@dataclass(frozen=True)
class InvoiceEmployeeDetail:
    """Work an employee performed for the client (second invoice page)."""

    employee_id: str
    employee_name: str
    total_hours: Decimal
    total_pieces: Decimal
    daily_work: tuple[DailyBreakdown, ...]

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "totalHours": float(self.total_hours),
            "totalPieces": float(self.total_pieces),
            "dailyWork": [d.to_dict() for d in self.daily_work],
        }


@dataclass(frozen=True)
class ClientInvoice:
    """
    Invoice for one client over a reporting window.

    Guarantees:
        - subtotal == labor_cost + minimum_wage_top_up + paid_rest_breaks
        - total == subtotal + commission
    """

    client_id: str
    client_name: str
    commission_rate: Decimal | None
    start_date: str
    end_date: str
    invoice_date: str
    daily_breakdown: tuple[InvoiceDay, ...]
    labor_cost: Decimal
    minimum_wage_top_up: Decimal
    paid_rest_breaks: Decimal
    subtotal: Decimal
    commission: Decimal
    total: Decimal
    employee_details: tuple[InvoiceEmployeeDetail, ...] = ()
    warnings: tuple[ConfigurationWarning, ...] = ()

    def to_dict(self) -> dict:
        return {
            "client": {
                "id": self.client_id,
                "name": self.client_name,
                "commissionRate": (
                    float(self.commission_rate) if self.commission_rate is not None else None
                ),
            },
            "startDate": self.start_date,
            "endDate": self.end_date,
            "invoiceDate": self.invoice_date,
            "dailyBreakdown": [d.to_dict() for d in self.daily_breakdown],
            "laborCost": float(self.labor_cost),
            "minimumWageTopUp": float(self.minimum_wage_top_up),
            "paidRestBreaks": float(self.paid_rest_breaks),
            "subtotal": float(self.subtotal),
            "commission": float(self.commission),
            "total": float(self.total),
            "employeeDetails": [e.to_dict() for e in self.employee_details],
            "warnings": [w.to_dict() for w in self.warnings],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def billing_basis(task: Task) -> ClientRateType | None:
    """What the client rate multiplies: the explicit rate type, else the pay type."""
    if task.client_rate_type is not None:
        return task.client_rate_type
    if task.employee_pay_type is PayType.HOURLY:
        return ClientRateType.HOURLY
    if task.employee_pay_type is PayType.PIECEWORK:
        return ClientRateType.PIECE
    return None


def bill_task(
    task: Task, hours: Decimal, pieces: Decimal, currency: str,
) -> tuple[Money, ConfigurationWarning | None]:
    basis = billing_basis(task)
    if task.client_rate is None or task.client_rate < 0 or basis is None:
        return Money.zero(currency), ConfigurationWarning(
            WarningCode.MISSING_CLIENT_RATE, task.id,
            f"Task '{task.name}' has no usable clientRate; billed at zero",
        )
    rate = Money.of(task.client_rate, currency)
    quantity = hours if basis is ClientRateType.HOURLY else pieces
    return rate * quantity, None


@traced_engine(
    "client_invoice", "1.0",
    fingerprint_fields=("client", "invoice_date"),
)
def calculate_client_invoice(
    *,
    client: Client,
    report: ProcessedPayrollData,
    tables: LookupTables,
    invoice_date: str | None = None,
    currency: str = "USD",
) -> ClientInvoice:
    """Bill ``client`` for the work in ``report``.

    Args:
        client: The client being invoiced.
        report: Payroll report restricted to the client's tasks.
        tables: Lookup tables used to find each line's task and rates.
        invoice_date: ISO date printed on the invoice; the report's end
            date when omitted.
        currency: Billing currency.

    Returns:
        ClientInvoice with every amount rounded to cents.
    """
    # date -> task_id -> (hours, pieces)
    quantities: dict[str, dict[str, tuple[Decimal, Decimal]]] = {}
    details: list[InvoiceEmployeeDetail] = []
    top_up = _ZERO
    breaks = _ZERO

    for summary in report.employee_summaries:
        worked_for_client = False
        daily_work: list[DailyBreakdown] = []
        for week in summary.weekly_summaries:
            for day in week.daily_breakdown:
                client_tasks = []
                for line in day.tasks:
                    task = tables.tasks.get(line.task_id)
                    if task is None or task.client_id != client.id:
                        continue
                    client_tasks.append(line)
                    by_task = quantities.setdefault(day.date, {})
                    hours, pieces = by_task.get(line.task_id, (_ZERO, _ZERO))
                    by_task[line.task_id] = (hours + line.hours, pieces + line.piecework_count)
                if client_tasks:
                    worked_for_client = True
                    daily_work.append(day)
        if not worked_for_client:
            continue
        top_up += sum((w.minimum_wage_top_up for w in summary.weekly_summaries), _ZERO)
        breaks += sum((w.paid_rest_breaks for w in summary.weekly_summaries), _ZERO)
        details.append(
            InvoiceEmployeeDetail(
                employee_id=summary.employee_id,
                employee_name=summary.employee_name,
                total_hours=sum((d.total_daily_hours for d in daily_work), _ZERO),
                total_pieces=sum(
                    (t.piecework_count for d in daily_work for t in d.tasks), _ZERO,
                ),
                daily_work=tuple(daily_work),
            )
        )

    warnings: dict[str, ConfigurationWarning] = {}
    days: list[InvoiceDay] = []
    for day_date in sorted(quantities):
        lines: list[InvoiceTaskLine] = []
        for task_id, (hours, pieces) in quantities[day_date].items():
            task = tables.tasks[task_id]
            cost, warning = bill_task(task, hours, pieces, currency)
            if warning is not None:
                warnings.setdefault(task_id, warning)
            lines.append(
                InvoiceTaskLine(
                    task_id=task_id,
                    task_name=task.display_name,
                    hours=hours,
                    pieces=pieces,
                    client_rate=task.client_rate if task.client_rate is not None else _ZERO,
                    client_rate_type=billing_basis(task),
                    cost=round2(cost),
                )
            )
        lines.sort(key=lambda l: (l.task_name, l.task_id))
        days.append(
            InvoiceDay(
                date=day_date,
                tasks=tuple(lines),
                total=sum((l.cost for l in lines), _ZERO),
            )
        )

    labor_cost = sum((d.total for d in days), _ZERO)
    subtotal = labor_cost + top_up + breaks
    commission = _ZERO
    if client.commission_rate is not None and client.commission_rate < 0:
        logger.warning(
            "negative_commission_rate_ignored",
            extra={"client_id": client.id, "commission_rate": str(client.commission_rate)},
        )
    elif client.commission_rate:
        commission = round2(subtotal * client.commission_rate / _HUNDRED)
    total = subtotal + commission

    for warning in warnings.values():
        logger.warning(
            "invoice_configuration_warning",
            extra={"warning_code": warning.code.value, "task_id": warning.task_id},
        )

    details.sort(key=lambda d: (d.employee_name, d.employee_id))
    return ClientInvoice(
        client_id=client.id,
        client_name=client.name,
        commission_rate=client.commission_rate,
        start_date=report.start_date,
        end_date=report.end_date,
        invoice_date=invoice_date or report.end_date,
        daily_breakdown=tuple(days),
        labor_cost=round2(labor_cost),
        minimum_wage_top_up=round2(top_up),
        paid_rest_breaks=round2(breaks),
        subtotal=round2(subtotal),
        commission=commission,
        total=round2(total),
        employee_details=tuple(details),
        warnings=tuple(warnings[k] for k in sorted(warnings)),
    )
