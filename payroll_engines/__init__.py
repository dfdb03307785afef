"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the import surface for
    payroll_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel (and sibling engine modules).
    MUST NOT import payroll_services or payroll_config.

Invariants enforced:
    - Purity: engines never call ``datetime.now()`` or ``date.today()``.
      Report windows and pay dates are explicit parameters.
    - Decimal-only arithmetic; floats appear only in ``to_dict()`` output.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine``
    (see ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records.

Usage:
    from payroll_engines import aggregate_work, group_by_week
    from payroll_engines import calculate_week_earnings, assemble_report
"""

from payroll_engines.aggregation import WorkLedger, WorkTotals, aggregate_work
from payroll_engines.earnings import (
    ConfigurationWarning,
    DayEarnings,
    TaskEarnings,
    WagePolicy,
    WarningCode,
    WeekEarnings,
    applicable_minimum_wage,
    apply_sick_pay,
    calculate_task_earnings,
    calculate_week_earnings,
    rest_break_hours,
)
from payroll_engines.invoicing import (
    ClientInvoice,
    InvoiceDay,
    InvoiceEmployeeDetail,
    InvoiceTaskLine,
    calculate_client_invoice,
)
from payroll_engines.report import (
    DailyBreakdown,
    DailyTaskDetail,
    EmployeePayrollSummary,
    ProcessedPayrollData,
    WeeklySummary,
    assemble_report,
)
from payroll_engines.sick_leave import SickLeaveAccrual, compute_sick_leave_accrual
from payroll_engines.tracer import traced_engine
from payroll_engines.weeks import WeekKey, group_by_week, hours_by_week

__all__ = [
    "ClientInvoice",
    "ConfigurationWarning",
    "DailyBreakdown",
    "DailyTaskDetail",
    "DayEarnings",
    "EmployeePayrollSummary",
    "InvoiceDay",
    "InvoiceEmployeeDetail",
    "InvoiceTaskLine",
    "ProcessedPayrollData",
    "SickLeaveAccrual",
    "TaskEarnings",
    "WagePolicy",
    "WarningCode",
    "WeekEarnings",
    "WeekKey",
    "WeeklySummary",
    "WorkLedger",
    "WorkTotals",
    "aggregate_work",
    "applicable_minimum_wage",
    "apply_sick_pay",
    "assemble_report",
    "calculate_client_invoice",
    "calculate_task_earnings",
    "calculate_week_earnings",
    "compute_sick_leave_accrual",
    "group_by_week",
    "hours_by_week",
    "rest_break_hours",
    "traced_engine",
]
