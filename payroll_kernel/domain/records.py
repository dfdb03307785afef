"""
Records -- Immutable input records consumed by the payroll engines.

Responsibility:
    Frozen dataclass representations of the five record collections the
    external record store supplies: employees, clients, tasks, time entries
    and piecework tickets.  Produced by ``payroll_kernel.domain.parsing``.

Architecture position:
    Kernel > Domain -- pure data definitions with ZERO I/O.

Invariants enforced:
    - All records are ``frozen=True`` (read-only for a report run).
    - All rates, counts and balances are ``Decimal`` -- never ``float``.
    - Timestamps are timezone-aware and expressed in the payroll's local
      timezone, so ``timestamp.date()`` is the local calendar day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class PayType(Enum):
    """How an employee is paid for a task."""
    HOURLY = "hourly"
    PIECEWORK = "piecework"


class ClientRateType(Enum):
    """How a client is billed for a task."""
    HOURLY = "hourly"
    PIECE = "piece"


@dataclass(frozen=True)
class Employee:
    """A farm worker. Piecework tickets may name them by id or by qr_code."""
    id: str
    name: str
    qr_code: str | None = None
    sick_hours_balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class Client:
    """A grower the crew works for."""
    id: str
    name: str
    minimum_wage: Decimal | None = None  # overrides the statewide floor when higher
    commission_rate: Decimal | None = None  # percent, billing only


@dataclass(frozen=True)
class Task:
    """A unit of work at a ranch/block, paid hourly or per piece."""
    id: str
    name: str
    client_id: str | None = None
    employee_pay_type: PayType | None = None
    employee_rate: Decimal | None = None
    variety: str | None = None
    ranch: str | None = None
    block: str | None = None
    client_rate: Decimal | None = None
    client_rate_type: ClientRateType | None = None

    @property
    def display_name(self) -> str:
        """Task name as printed on pay stubs: ``name (variety)``."""
        if self.variety:
            return f"{self.name} ({self.variety})"
        return self.name


@dataclass(frozen=True)
class TimeEntry:
    """One continuous work interval on one task. ``end_time`` None = still clocked in."""
    employee_id: str
    task_id: str
    timestamp: datetime
    end_time: datetime | None = None
    id: str | None = None
    is_break: bool = False
    is_sick_leave: bool = False
    use_sick_hours_for_payment: bool = False
    sick_hours_used: Decimal | None = None

    @property
    def work_date(self) -> date:
        return self.timestamp.date()

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def duration_hours(self) -> Decimal:
        """Clocked hours; zero for an active entry."""
        if self.end_time is None:
            return Decimal("0")
        delta = self.end_time - self.timestamp
        # Exact: timedelta is integral in microseconds
        micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
        return Decimal(micros) / Decimal(3_600_000_000)

    @property
    def sick_hours_claimed(self) -> Decimal:
        """Hours the worker asks to be paid from the sick balance."""
        if not self.use_sick_hours_for_payment or self.end_time is None:
            return Decimal("0")
        if self.sick_hours_used is not None:
            return self.sick_hours_used
        return max(self.duration_hours, Decimal("0"))


@dataclass(frozen=True)
class ParticipantList:
    """Identifiers (employee ids or qr codes) named on a piecework ticket."""
    identifiers: tuple[str, ...]

    @classmethod
    def parse(cls, raw: str | list | tuple) -> ParticipantList:
        """Split a comma-separated list (or accept a sequence); blanks are dropped."""
        if isinstance(raw, str):
            parts = raw.split(",")
        else:
            parts = [str(p) for p in raw if p is not None]
        return cls(tuple(p.strip() for p in parts if p and p.strip()))

    @property
    def is_shared(self) -> bool:
        return len(self.identifiers) > 1

    def __len__(self) -> int:
        return len(self.identifiers)


@dataclass(frozen=True)
class Piecework:
    """A piece-count ticket, possibly shared among several workers."""
    participants: ParticipantList
    task_id: str
    timestamp: datetime
    piece_count: Decimal
    id: str | None = None

    @property
    def work_date(self) -> date:
        return self.timestamp.date()


@dataclass(frozen=True)
class RecordSnapshot:
    """One consistent snapshot of every collection a report run reads."""
    employees: tuple[Employee, ...] = ()
    tasks: tuple[Task, ...] = ()
    clients: tuple[Client, ...] = ()
    time_entries: tuple[TimeEntry, ...] = ()
    piecework: tuple[Piecework, ...] = ()
