"""
Payroll kernel domain layer.

Pure values and records; no I/O.  Engines import from here, never the
other way around.
"""

from payroll_kernel.domain.records import (
    Client,
    ClientRateType,
    Employee,
    ParticipantList,
    PayType,
    Piecework,
    RecordSnapshot,
    Task,
    TimeEntry,
)
from payroll_kernel.domain.period import ReportPeriod
from payroll_kernel.domain.roster import LookupTables
from payroll_kernel.domain.values import Currency, Money

__all__ = [
    "Client",
    "ClientRateType",
    "Currency",
    "Employee",
    "LookupTables",
    "Money",
    "ParticipantList",
    "PayType",
    "Piecework",
    "RecordSnapshot",
    "ReportPeriod",
    "Task",
    "TimeEntry",
]
