"""
PayrollConfig schema.

The human-authored payroll policy for one jurisdiction: minimum wage
floor, rest break rule, sick leave accrual ratio, currency and the local
timezone that decides which calendar day a clock-in belongs to.  YAML
files under ``payroll_config/sets`` are parsed into this type by the
loader.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from payroll_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True)
class PayrollConfig:
    """Validated payroll policy. Immutable once loaded."""

    config_id: str
    version: int
    jurisdiction: str
    currency: str
    timezone: str
    statewide_minimum_wage: Decimal
    rest_break_minutes: Decimal = Decimal("10")
    rest_break_interval_hours: Decimal = Decimal("4")
    hours_per_sick_hour: Decimal = Decimal("40")
    effective_from: date | None = None
    checksum: str = ""

    def __post_init__(self) -> None:
        if not self.config_id:
            raise ValueError("config_id is required")
        if self.version < 1:
            raise ValueError(f"version must be >= 1, got {self.version}")
        if not CurrencyRegistry.is_valid(self.currency):
            raise ValueError(f"Unknown currency: {self.currency}")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {self.timezone}") from e
        if self.statewide_minimum_wage <= 0:
            raise ValueError("statewide_minimum_wage must be positive")
        if self.rest_break_minutes < 0:
            raise ValueError("rest_break_minutes cannot be negative")
        if self.rest_break_interval_hours <= 0:
            raise ValueError("rest_break_interval_hours must be positive")
        if self.hours_per_sick_hour <= 0:
            raise ValueError("hours_per_sick_hour must be positive")

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
