"""
payroll_services.payroll_report_service -- GeneratePayrollReport orchestration.

Responsibility:
    Run the payroll pipeline for one reporting window:
    parse records -> lookup tables -> Work Aggregator -> Week Grouper ->
    Earnings Calculator (per employee-week) -> sick-leave draws ->
    Report Assembler.

Architecture position:
    Services -- orchestration over engines + kernel.  Reads configuration
    once through ``payroll_config.get_active_config()`` (or receives a
    ``PayrollConfig``) and passes plain policy values to the engines.

Invariants enforced:
    - Lookup tables are built per invocation and passed explicitly;
      concurrent invocations share no mutable state.
    - Identical inputs produce byte-identical ``to_dict()`` output.
    - Only structural failures propagate; malformed rows are skipped and
      counted in ``skippedRecords``.

Failure modes:
    - InvalidPayrollInputError: a collection is missing/not a list, or a
      date cannot be parsed.
    - InvalidReportPeriodError: startDate is after endDate.

Usage:
    from payroll_services.payroll_report_service import generate_payroll_report

    report = generate_payroll_report(
        "2025-06-02", "2025-06-15", "2025-06-20",
        employees=[...], tasks=[...], clients=[...],
        time_entries=[...], piecework=[...],
    )
    report.to_dict()
"""

from __future__ import annotations

import time
from decimal import Decimal
from typing import Any
from uuid import uuid4

from payroll_config import PayrollConfig, get_active_config
from payroll_engines.aggregation import WorkLedger, aggregate_work
from payroll_engines.earnings import (
    WagePolicy,
    WeekEarnings,
    apply_sick_pay,
    calculate_week_earnings,
)
from payroll_engines.report import ProcessedPayrollData, assemble_report
from payroll_engines.sick_leave import compute_sick_leave_accrual, round_hours
from payroll_engines.weeks import group_by_week, hours_by_week
from payroll_kernel.domain.parsing import LoadResult, load_snapshot
from payroll_kernel.domain.period import ReportPeriod
from payroll_kernel.domain.records import Employee
from payroll_kernel.domain.roster import LookupTables
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.payroll_report")


def wage_policy_from_config(config: PayrollConfig) -> WagePolicy:
    return WagePolicy(
        statewide_minimum_wage=config.statewide_minimum_wage,
        rest_break_minutes=config.rest_break_minutes,
        rest_break_interval_hours=config.rest_break_interval_hours,
        currency=config.currency,
    )


class PayrollReportService:
    """
    Generates payroll reports under one payroll policy.

    Contract:
        Receives a ``PayrollConfig`` via constructor injection.
    Guarantees:
        - ``generate`` accepts the raw record-store collections.
        - ``build_report`` accepts an already parsed snapshot.
    Non-goals:
        - Does not persist records or render stubs.
    """

    def __init__(self, config: PayrollConfig):
        self._config = config
        self._policy = wage_policy_from_config(config)

    @property
    def config(self) -> PayrollConfig:
        return self._config

    @property
    def policy(self) -> WagePolicy:
        return self._policy

    def load(
        self,
        *,
        employees: Any,
        tasks: Any,
        clients: Any,
        time_entries: Any,
        piecework: Any,
    ) -> LoadResult:
        """Parse raw collections in the configured timezone."""
        return load_snapshot(
            employees=employees,
            tasks=tasks,
            clients=clients,
            time_entries=time_entries,
            piecework=piecework,
            tz=self._config.tz,
        )

    def generate(
        self,
        *,
        start_date: Any,
        end_date: Any,
        pay_date: Any,
        employees: Any,
        tasks: Any,
        clients: Any,
        time_entries: Any,
        piecework: Any,
    ) -> ProcessedPayrollData:
        period = ReportPeriod.parse(start_date, end_date, pay_date)
        with LogContext.bind(report_id=str(uuid4())):
            loaded = self.load(
                employees=employees,
                tasks=tasks,
                clients=clients,
                time_entries=time_entries,
                piecework=piecework,
            )
            return self.build_report(period, loaded)

    def build_report(self, period: ReportPeriod, loaded: LoadResult) -> ProcessedPayrollData:
        """Run the engines over a parsed snapshot."""
        t0 = time.monotonic()
        logger.info(
            "payroll_report_started",
            extra={
                "start_date": period.start.isoformat(),
                "end_date": period.end.isoformat(),
                "config_id": self._config.config_id,
            },
        )

        snapshot = loaded.snapshot
        tables = LookupTables.build(snapshot)
        ledger = aggregate_work(
            snapshot=snapshot,
            tables=tables,
            period_start=period.start,
            period_end=period.end,
        )

        employee_weeks: list[tuple[Employee, list[WeekEarnings]]] = []
        for employee_id in ledger.employee_ids():
            employee = tables.employees[employee_id]
            with LogContext.bind(employee_id=employee_id):
                weeks = self._employee_weeks(employee, ledger, tables)
            employee_weeks.append((employee, weeks))

        report = assemble_report(
            start_date=period.start,
            end_date=period.end,
            pay_date=period.pay_date,
            employee_weeks=employee_weeks,
            hours_per_sick_hour=self._config.hours_per_sick_hour,
            skipped_records=loaded.skipped,
        )

        logger.info(
            "payroll_report_completed",
            extra={
                "employees": len(report.employee_summaries),
                "warnings": len(report.warnings),
                "skipped_records": loaded.total_skipped,
                "total_final_pay": str(report.total_final_pay),
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return report

    def _employee_weeks(
        self, employee: Employee, ledger: WorkLedger, tables: LookupTables,
    ) -> list[WeekEarnings]:
        """Compute every week the employee worked or claimed sick pay in."""
        work_weeks = group_by_week(ledger.days_for(employee.id))
        sick_weeks = hours_by_week(ledger.sick_claims_for(employee.id))
        weeks = [
            calculate_week_earnings(
                week=week,
                days=work_weeks.get(week, {}),
                tables=tables,
                policy=self._policy,
            )
            for week in sorted(set(work_weeks) | set(sick_weeks))
        ]
        claimed = [round_hours(sick_weeks.get(w.week, Decimal("0"))) for w in weeks]
        accrual = compute_sick_leave_accrual(
            [w.total_hours for w in weeks],
            employee.sick_hours_balance,
            self._config.hours_per_sick_hour,
            claimed,
        )
        requested = sum(claimed, Decimal("0"))
        if requested > accrual.total_used:
            logger.warning(
                "sick_hours_exceed_balance",
                extra={
                    "requested": str(requested),
                    "paid": str(accrual.total_used),
                    "opening_balance": str(employee.sick_hours_balance),
                },
            )
        return [apply_sick_pay(w, used) for w, used in zip(weeks, accrual.weekly_used)]


def generate_payroll_report(
    start_date: Any,
    end_date: Any,
    pay_date: Any,
    employees: Any,
    tasks: Any,
    clients: Any,
    time_entries: Any,
    piecework: Any,
    *,
    config: PayrollConfig | None = None,
) -> ProcessedPayrollData:
    """GeneratePayrollReport: raw collections in, ``ProcessedPayrollData`` out.

    Raises:
        InvalidPayrollInputError: for structurally unreadable input.
        InvalidReportPeriodError: if start_date is after end_date.
    """
    service = PayrollReportService(config or get_active_config())
    return service.generate(
        start_date=start_date,
        end_date=end_date,
        pay_date=pay_date,
        employees=employees,
        tasks=tasks,
        clients=clients,
        time_entries=time_entries,
        piecework=piecework,
    )
