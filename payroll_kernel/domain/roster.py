"""
Roster -- Immutable per-invocation lookup tables.

Responsibility:
    Builds ``id -> record`` tables once per report run and resolves the
    identifiers printed on piecework tickets (employee id or qr code) to
    employees.  The tables are passed explicitly through the pipeline;
    nothing here is module-level state.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - Tables are read-only ``MappingProxyType`` views.
    - An identifier matching an employee id wins over a qr-code match.
    - A participant list resolves one employee per identifier; an employee
      named twice on a ticket takes two shares.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from payroll_kernel.domain.records import (
    Client,
    Employee,
    ParticipantList,
    RecordSnapshot,
    Task,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("domain.roster")


def _index(records, key, kind: str) -> Mapping:
    table: dict = {}
    for record in records:
        k = key(record)
        if not k:
            continue
        if k in table:
            logger.warning(
                "duplicate_record_id",
                extra={"collection": kind, "record_id": k},
            )
            continue
        table[k] = record
    return MappingProxyType(table)


@dataclass(frozen=True)
class LookupTables:
    """Read-only lookup tables for one payroll invocation."""

    employees: Mapping[str, Employee]
    employees_by_qr: Mapping[str, Employee]
    tasks: Mapping[str, Task]
    clients: Mapping[str, Client]

    @classmethod
    def build(cls, snapshot: RecordSnapshot) -> LookupTables:
        return cls(
            employees=_index(snapshot.employees, lambda e: e.id, "employees"),
            employees_by_qr=_index(
                snapshot.employees, lambda e: e.qr_code, "employee_qr_codes",
            ),
            tasks=_index(snapshot.tasks, lambda t: t.id, "tasks"),
            clients=_index(snapshot.clients, lambda c: c.id, "clients"),
        )

    def resolve_employee(self, identifier: str) -> Employee | None:
        """Resolve an employee id or qr code; None when unknown."""
        key = identifier.strip() if identifier else ""
        if not key:
            return None
        employee = self.employees.get(key)
        if employee is not None:
            return employee
        return self.employees_by_qr.get(key)

    def resolve_participants(self, participants: ParticipantList) -> tuple[Employee, ...]:
        """Resolve every identifier on a ticket; unknown ones are dropped.

        One entry per resolving identifier, so repeats are kept.
        """
        resolved = (self.resolve_employee(i) for i in participants.identifiers)
        return tuple(e for e in resolved if e is not None)

    def client_for(self, task: Task) -> Client | None:
        if task.client_id is None:
            return None
        return self.clients.get(task.client_id)
