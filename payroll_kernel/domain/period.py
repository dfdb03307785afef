"""
Period -- The reporting window of a payroll run.

Invariants enforced:
    - start <= end (``InvalidReportPeriodError`` otherwise).
    - The window is date-level and inclusive on both ends.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from payroll_kernel.domain.parsing import parse_iso_date
from payroll_kernel.exceptions import InvalidPayrollInputError, InvalidReportPeriodError


@dataclass(frozen=True)
class ReportPeriod:
    """Inclusive [start, end] window plus the pay date printed on stubs."""

    start: date
    end: date
    pay_date: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidReportPeriodError(self.start.isoformat(), self.end.isoformat())

    @classmethod
    def parse(cls, start_date: Any, end_date: Any, pay_date: Any) -> ReportPeriod:
        """Build a period from ISO date strings.

        Raises:
            InvalidPayrollInputError: if a date cannot be parsed.
            InvalidReportPeriodError: if start_date is after end_date.
        """
        return cls(
            start=_parse_date_field("startDate", start_date),
            end=_parse_date_field("endDate", end_date),
            pay_date=_parse_date_field("payDate", pay_date),
        )


def _parse_date_field(name: str, value: Any) -> date:
    try:
        return parse_iso_date(value)
    except ValueError as e:
        raise InvalidPayrollInputError(name, str(e)) from e
