"""Tests for the client invoice calculator."""

from datetime import date
from decimal import Decimal

from payroll_engines.aggregation import WorkTotals
from payroll_engines.earnings import WarningCode, calculate_week_earnings
from payroll_engines.invoicing import billing_basis, calculate_client_invoice
from payroll_engines.report import assemble_report
from payroll_engines.weeks import WeekKey
from payroll_kernel.domain.records import ClientRateType, Employee, PayType, Task
from tests.builders import MONDAY, WA_POLICY, client_row, load, task_row


def _tables(commission_rate=None):
    _, tables = load(
        tasks=[
            task_row("task_prune", "Pruning", rate=15, client_rate=25, client_rate_type="hourly"),
            task_row("task_pick", "Picking", pay_type="piecework", rate=1,
                     client_rate="1.5", client_rate_type="piece"),
            task_row("task_norate", "Weeding", rate=17),
            task_row("task_elsewhere", "Tying", client_id="client_2", rate=20, client_rate=30),
        ],
        clients=[
            client_row("client_1", "Valley Orchards", commission_rate=commission_rate),
            client_row("client_2", "Ridge Farms"),
        ],
    )
    return tables


def _report(tables, employee_days):
    employee_weeks = []
    for employee, days in employee_days:
        week = calculate_week_earnings(
            week=WeekKey.for_date(min(days)), days=days, tables=tables, policy=WA_POLICY,
        )
        employee_weeks.append((employee, [week]))
    return assemble_report(
        start_date=date(2025, 6, 2),
        end_date=date(2025, 6, 8),
        pay_date=date(2025, 6, 13),
        employee_weeks=employee_weeks,
        hours_per_sick_hour=Decimal("40"),
    )


def _invoice(tables, employee_days, client_id="client_1"):
    return calculate_client_invoice(
        client=tables.clients[client_id],
        report=_report(tables, employee_days),
        tables=tables,
    )


class TestBillingBasis:

    def test_explicit_rate_type(self):
        task = Task("t", "T", client_rate_type=ClientRateType.PIECE, employee_pay_type=PayType.HOURLY)
        assert billing_basis(task) is ClientRateType.PIECE

    def test_falls_back_to_pay_type(self):
        assert billing_basis(Task("t", "T", employee_pay_type=PayType.PIECEWORK)) is ClientRateType.PIECE
        assert billing_basis(Task("t", "T", employee_pay_type=PayType.HOURLY)) is ClientRateType.HOURLY
        assert billing_basis(Task("t", "T")) is None


class TestClientInvoice:

    def test_labor_breaks_and_commission(self):
        tables = _tables(commission_rate=10)
        invoice = _invoice(tables, [
            (Employee("emp_1", "Ana"), {MONDAY: {
                "task_prune": WorkTotals(hours=Decimal("7")),
                "task_pick": WorkTotals(pieces=Decimal("100")),
            }}),
        ])
        day = invoice.daily_breakdown[0]
        assert [(l.task_id, l.cost) for l in day.tasks] == [
            ("task_pick", Decimal("150.00")),
            ("task_prune", Decimal("175.00")),
        ]
        assert invoice.labor_cost == Decimal("325.00")
        # 205.00 earned over 7 hours: above the floor, one rest break
        assert invoice.minimum_wage_top_up == Decimal("0.00")
        assert invoice.paid_rest_breaks == Decimal("4.88")
        assert invoice.subtotal == Decimal("329.88")
        assert invoice.commission == Decimal("32.99")
        assert invoice.total == Decimal("362.87")

    def test_top_up_passed_through_without_commission(self):
        tables = _tables()
        invoice = _invoice(tables, [
            (Employee("emp_1", "Ana"), {MONDAY: {"task_prune": WorkTotals(hours=Decimal("8"))}}),
        ])
        assert invoice.labor_cost == Decimal("200.00")
        assert invoice.minimum_wage_top_up == Decimal("10.24")
        assert invoice.paid_rest_breaks == Decimal("5.43")
        assert invoice.commission == 0
        assert invoice.total == invoice.subtotal == Decimal("215.67")

    def test_negative_commission_rate_ignored(self, captured_logs):
        tables = _tables(commission_rate=-10)
        invoice = _invoice(tables, [
            (Employee("emp_1", "Ana"), {MONDAY: {"task_prune": WorkTotals(hours=Decimal("8"))}}),
        ])
        assert invoice.commission == 0
        assert invoice.total == invoice.subtotal == Decimal("215.67")
        ignored = [r for r in captured_logs() if r["message"] == "negative_commission_rate_ignored"]
        assert ignored[0]["client_id"] == "client_1"
        assert ignored[0]["commission_rate"] == "-10"

    def test_other_clients_work_not_billed(self):
        tables = _tables()
        invoice = _invoice(tables, [
            (Employee("emp_1", "Ana"), {MONDAY: {"task_elsewhere": WorkTotals(hours=Decimal("8"))}}),
        ])
        assert invoice.daily_breakdown == ()
        assert invoice.employee_details == ()
        assert invoice.total == 0

    def test_missing_client_rate_bills_zero_with_warning(self):
        tables = _tables()
        invoice = _invoice(tables, [
            (Employee("emp_1", "Ana"), {MONDAY: {"task_norate": WorkTotals(hours=Decimal("8"))}}),
        ])
        assert invoice.labor_cost == 0
        assert [w.code for w in invoice.warnings] == [WarningCode.MISSING_CLIENT_RATE]

    def test_employee_details(self):
        tables = _tables()
        invoice = _invoice(tables, [
            (Employee("emp_2", "Luis"), {MONDAY: {"task_pick": WorkTotals(pieces=Decimal("30"))}}),
            (Employee("emp_1", "Ana"), {
                MONDAY: {"task_prune": WorkTotals(hours=Decimal("4"))},
                date(2025, 6, 3): {"task_prune": WorkTotals(hours=Decimal("5"))},
            }),
        ])
        ana, luis = invoice.employee_details
        assert ana.employee_name == "Ana"
        assert ana.total_hours == Decimal("9.00")
        assert len(ana.daily_work) == 2
        assert luis.total_pieces == Decimal("30.00")

    def test_to_dict(self):
        tables = _tables(commission_rate=5)
        invoice = _invoice(tables, [
            (Employee("emp_1", "Ana"), {MONDAY: {"task_prune": WorkTotals(hours=Decimal("8"))}}),
        ])
        data = invoice.to_dict()
        assert data["client"] == {"id": "client_1", "name": "Valley Orchards", "commissionRate": 5.0}
        assert data["invoiceDate"] == "2025-06-08"
        assert data["dailyBreakdown"][0]["tasks"][0]["clientRateType"] == "hourly"
        assert data["total"] == float(invoice.total)
