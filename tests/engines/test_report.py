"""
Tests for the Report Assembler.

Covers rounding at the boundary, ordering, sick leave fields, warning
collection and the camelCase wire shape.
"""

import json
from datetime import date
from decimal import Decimal

from payroll_engines.aggregation import WorkTotals
from payroll_engines.earnings import calculate_week_earnings
from payroll_engines.report import assemble_report, round2, summarize_week
from payroll_engines.weeks import WeekKey
from payroll_kernel.domain.records import Employee
from payroll_kernel.domain.values import Money
from tests.builders import MONDAY, WA_POLICY, client_row, load, task_row

FORTY = Decimal("40")


def _tables():
    _, tables = load(
        tasks=[
            task_row("task_prune", "Pruning", rate=15, ranch="North", block="B7"),
            task_row("task_pick", "Picking", pay_type="piecework", rate=1, variety="Gala"),
            task_row("task_bad", "Thinning", rate=None),
        ],
        clients=[client_row()],
    )
    return tables


def _week(days, tables=None):
    tables = tables or _tables()
    week = WeekKey.for_date(min(days))
    return calculate_week_earnings(week=week, days=days, tables=tables, policy=WA_POLICY)


def _hours(h):
    return WorkTotals(hours=Decimal(str(h)))


def _assemble(employee_weeks, skipped=None):
    return assemble_report(
        start_date=date(2025, 6, 2),
        end_date=date(2025, 6, 15),
        pay_date=date(2025, 6, 20),
        employee_weeks=employee_weeks,
        hours_per_sick_hour=FORTY,
        skipped_records=skipped,
    )


class TestRounding:

    def test_round2_money_and_decimal(self):
        assert round2(Money.of("21.7066", "USD")) == Decimal("21.71")
        assert round2(Decimal("3.335")) == Decimal("3.34")

    def test_round2_money_uses_currency_minor_unit(self):
        assert round2(Money.of("130.245", "MXN")) == Decimal("130.25")

    def test_weekly_summary_rounded(self):
        days = {date(2025, 6, 2 + i): {"task_prune": _hours(7)} for i in range(5)}
        summary = summarize_week(_week(days))
        assert summary.total_hours == Decimal("35.00")
        assert summary.total_earnings == Decimal("525.00")
        assert summary.minimum_wage_top_up == Decimal("44.80")
        assert summary.paid_rest_breaks == Decimal("21.71")
        assert summary.final_pay == Decimal("591.51")
        assert summary.week_number == 23
        assert summary.year == 2025

    def test_shared_piece_count_rounded(self):
        days = {MONDAY: {"task_pick": WorkTotals(pieces=Decimal(10) / Decimal(3))}}
        detail = summarize_week(_week(days)).daily_breakdown[0].tasks[0]
        assert detail.piecework_count == Decimal("3.33")
        assert detail.total_earnings == Decimal("3.33")


class TestAssembly:

    def test_employees_sorted_by_name_then_id(self):
        week = _week({MONDAY: {"task_prune": _hours(8)}})
        report = _assemble([
            (Employee("emp_3", "Zoe"), [week]),
            (Employee("emp_2", "Ana"), [week]),
            (Employee("emp_1", "Ana"), [week]),
        ])
        assert [s.employee_id for s in report.employee_summaries] == ["emp_1", "emp_2", "emp_3"]

    def test_weeks_chronological_and_final_pay_summed(self):
        tables = _tables()
        w24 = _week({date(2025, 6, 9): {"task_prune": _hours(8)}}, tables)
        w23 = _week({MONDAY: {"task_prune": _hours(7)}}, tables)
        report = _assemble([(Employee("emp_1", "Ana"), [w24, w23])])
        summary = report.employee_summaries[0]
        assert [w.week_number for w in summary.weekly_summaries] == [23, 24]
        assert summary.final_pay == sum(w.final_pay for w in summary.weekly_summaries)

    def test_employee_without_weeks_omitted(self):
        report = _assemble([(Employee("emp_1", "Ana"), [])])
        assert report.employee_summaries == ()

    def test_sick_leave_fields(self):
        days = {date(2025, 6, 2 + i): {"task_prune": _hours(8)} for i in range(5)}
        employee = Employee("emp_1", "Ana", sick_hours_balance=Decimal("2.5"))
        summary = _assemble([(employee, [_week(days)])]).employee_summaries[0]
        assert summary.weekly_summaries[0].sick_hours_accrued == Decimal("1.00")
        assert summary.total_sick_hours_accrued == Decimal("1.00")
        assert summary.new_sick_hours_balance == Decimal("3.50")

    def test_warnings_deduplicated_across_employees(self):
        tables = _tables()
        week = _week({MONDAY: {"task_bad": _hours(4)}}, tables)
        report = _assemble([
            (Employee("emp_1", "Ana"), [week]),
            (Employee("emp_2", "Luis"), [week]),
        ])
        assert [(w.task_id, w.code.value) for w in report.warnings] == [
            ("task_bad", "MISSING_EMPLOYEE_RATE"),
        ]


class TestWireShape:

    def test_to_dict_camel_case(self):
        week = _week({MONDAY: {"task_prune": _hours(8), "task_pick": WorkTotals(pieces=Decimal(20))}})
        data = _assemble([(Employee("emp_1", "Ana"), [week])], skipped={"tasks": 1}).to_dict()

        assert data["startDate"] == "2025-06-02"
        assert data["payDate"] == "2025-06-20"
        assert data["skippedRecords"] == {"tasks": 1}
        employee = data["employeeSummaries"][0]
        assert set(employee) == {
            "employeeId", "employeeName", "weeklySummaries", "finalPay",
            "totalSickHoursAccrued", "newSickHoursBalance",
        }
        weekly = employee["weeklySummaries"][0]
        assert weekly["weekNumber"] == 23
        assert "sickHoursAccrued" in weekly
        day = weekly["dailyBreakdown"][0]
        assert day["date"] == "2025-06-02"
        pick, prune = day["tasks"]
        assert pick["taskName"] == "Picking (Gala)"
        assert "ranch" not in pick
        assert prune["ranch"] == "North"
        assert prune["block"] == "B7"
        assert prune["clientName"] == "Valley Orchards"
        assert prune["hours"] == 8.0
        assert day["totalDailyEarnings"] == 140.0

    def test_unknown_client_name(self):
        _, tables = load(tasks=[task_row("task_prune", client_id="client_x")])
        week = _week({MONDAY: {"task_prune": _hours(1)}}, tables)
        detail = summarize_week(week).daily_breakdown[0].tasks[0]
        assert detail.client_name == "Unknown Client"

    def test_json_is_deterministic(self):
        week = _week({MONDAY: {"task_prune": _hours(8)}})
        first = _assemble([(Employee("emp_1", "Ana"), [week])]).to_json()
        second = _assemble([(Employee("emp_1", "Ana"), [week])]).to_json()
        assert first == second
        # 120.00 earned + 10.24 top-up + 2 breaks at 16.28/hr
        assert json.loads(first)["employeeSummaries"][0]["finalPay"] == 135.67
