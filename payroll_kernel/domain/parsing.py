"""
Parsing -- Raw record store rows to domain records.

Responsibility:
    Converts the camelCase dicts delivered by the record store into the
    frozen records of ``payroll_kernel.domain.records``.  Each ``parse_*``
    function either returns a record or raises ``MalformedRecordError``;
    ``load_snapshot`` applies the best-effort policy: a malformed row is
    logged and skipped, the remaining rows are still loaded.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - Numbers become ``Decimal`` via ``str()``; booleans are not numbers.
    - Timestamps become timezone-aware datetimes in the payroll timezone.
      Naive timestamps are read as local wall-clock time.
    - Only a non-list collection is fatal (``InvalidPayrollInputError``).

Failure modes:
    - ``MalformedRecordError`` from ``parse_*`` (absorbed by ``load_snapshot``).
    - ``InvalidPayrollInputError`` from ``load_snapshot`` for a collection
      that is not a list.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any

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
from payroll_kernel.exceptions import InvalidPayrollInputError, MalformedRecordError
from payroll_kernel.logging_config import get_logger

logger = get_logger("domain.parsing")

_CLIENT_RATE_TYPES = {
    "hourly": ClientRateType.HOURLY,
    "piece": ClientRateType.PIECE,
    "piecework": ClientRateType.PIECE,
}


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _record_id(raw: Mapping[str, Any]) -> str | None:
    value = raw.get("id")
    if value is None or value == "":
        return None
    return str(value)


def _required_id(raw: Mapping[str, Any], key: str, collection: str) -> str:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise MalformedRecordError(collection, _record_id(raw), f"missing {key}")
    text = str(value).strip()
    if not text:
        raise MalformedRecordError(collection, _record_id(raw), f"missing {key}")
    return text


def _optional_text(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_decimal(value: Any) -> Decimal | None:
    """Coerce a record-store number to Decimal. None stays None.

    Raises:
        ValueError: for booleans, non-numeric strings and non-finite values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"boolean is not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"not a number: {value!r}") from e
    else:
        raise ValueError(f"not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return result


def _decimal_field(raw: Mapping[str, Any], key: str, collection: str) -> Decimal | None:
    try:
        return parse_decimal(raw.get(key))
    except ValueError as e:
        raise MalformedRecordError(collection, _record_id(raw), f"{key}: {e}") from e


def parse_timestamp(value: Any, tz: tzinfo) -> datetime:
    """Parse an ISO-8601 string or datetime into an aware local datetime.

    Raises:
        ValueError: if the value is not a timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"not a timestamp: {value!r}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def parse_iso_date(value: Any) -> date:
    """Parse a ``YYYY-MM-DD`` string (or date) into a date.

    Raises:
        ValueError: if the value is not an ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        # Accept a full timestamp and keep its calendar day
        return date.fromisoformat(text[:10]) if "T" in text else date.fromisoformat(text)
    raise ValueError(f"not an ISO date: {value!r}")


def _timestamp_field(
    raw: Mapping[str, Any], key: str, collection: str, tz: tzinfo, required: bool = True,
) -> datetime | None:
    value = raw.get(key)
    if value is None and not required:
        return None
    try:
        return parse_timestamp(value, tz)
    except ValueError as e:
        raise MalformedRecordError(collection, _record_id(raw), f"{key}: {e}") from e


def _flag(raw: Mapping[str, Any], key: str) -> bool:
    return raw.get(key) is True


# ---------------------------------------------------------------------------
# Record parsers
# ---------------------------------------------------------------------------


def parse_employee(raw: Mapping[str, Any]) -> Employee:
    employee_id = _required_id(raw, "id", "employees")
    balance = _decimal_field(raw, "sickHoursBalance", "employees")
    if balance is not None and balance < 0:
        logger.warning(
            "negative_sick_balance_reset",
            extra={"employee_id": employee_id, "sick_hours_balance": str(balance)},
        )
        balance = Decimal("0")
    return Employee(
        id=employee_id,
        name=_optional_text(raw, "name") or employee_id,
        qr_code=_optional_text(raw, "qrCode"),
        sick_hours_balance=balance if balance is not None else Decimal("0"),
    )


def parse_client(raw: Mapping[str, Any]) -> Client:
    client_id = _required_id(raw, "id", "clients")
    return Client(
        id=client_id,
        name=_optional_text(raw, "name") or client_id,
        minimum_wage=_decimal_field(raw, "minimumWage", "clients"),
        commission_rate=_decimal_field(raw, "commissionRate", "clients"),
    )


def parse_task(raw: Mapping[str, Any]) -> Task:
    task_id = _required_id(raw, "id", "tasks")

    pay_type_raw = _optional_text(raw, "employeePayType")
    try:
        pay_type = PayType(pay_type_raw.lower()) if pay_type_raw else None
    except ValueError:
        # Unknown pay types are a configuration problem, reported downstream
        pay_type = None

    rate_type_raw = _optional_text(raw, "clientRateType")
    rate_type = _CLIENT_RATE_TYPES.get(rate_type_raw.lower()) if rate_type_raw else None

    return Task(
        id=task_id,
        name=_optional_text(raw, "name") or task_id,
        client_id=_optional_text(raw, "clientId"),
        employee_pay_type=pay_type,
        employee_rate=_decimal_field(raw, "employeeRate", "tasks"),
        variety=_optional_text(raw, "variety"),
        ranch=_optional_text(raw, "ranch"),
        block=_optional_text(raw, "block"),
        client_rate=_decimal_field(raw, "clientRate", "tasks"),
        client_rate_type=rate_type,
    )


def parse_time_entry(raw: Mapping[str, Any], tz: tzinfo) -> TimeEntry:
    record_id = _record_id(raw)
    sick_hours_used = _decimal_field(raw, "sickHoursUsed", "time_entries")
    if sick_hours_used is not None and sick_hours_used < 0:
        raise MalformedRecordError("time_entries", record_id, "negative sickHoursUsed")
    return TimeEntry(
        id=record_id,
        employee_id=_required_id(raw, "employeeId", "time_entries"),
        task_id=_required_id(raw, "taskId", "time_entries"),
        timestamp=_timestamp_field(raw, "timestamp", "time_entries", tz),
        end_time=_timestamp_field(raw, "endTime", "time_entries", tz, required=False),
        is_break=_flag(raw, "isBreak"),
        is_sick_leave=_flag(raw, "isSickLeave"),
        use_sick_hours_for_payment=_flag(raw, "useSickHoursForPayment"),
        sick_hours_used=sick_hours_used,
    )


def parse_piecework(raw: Mapping[str, Any], tz: tzinfo) -> Piecework:
    record_id = _record_id(raw)
    employee_ids = raw.get("employeeId")
    if employee_ids is None:
        employee_ids = raw.get("employeeIds")
    if not isinstance(employee_ids, (str, list, tuple)):
        raise MalformedRecordError("piecework", record_id, "missing employeeId")
    participants = ParticipantList.parse(employee_ids)
    if not participants.identifiers:
        raise MalformedRecordError("piecework", record_id, "missing employeeId")

    piece_count = _decimal_field(raw, "pieceCount", "piecework")
    if piece_count is None:
        raise MalformedRecordError("piecework", record_id, "missing pieceCount")
    if piece_count < 0:
        raise MalformedRecordError("piecework", record_id, "negative pieceCount")

    return Piecework(
        id=record_id,
        participants=participants,
        task_id=_required_id(raw, "taskId", "piecework"),
        timestamp=_timestamp_field(raw, "timestamp", "piecework", tz),
        piece_count=piece_count,
    )


# ---------------------------------------------------------------------------
# Snapshot loader
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadResult:
    """Parsed snapshot plus the number of rows skipped per collection."""
    snapshot: RecordSnapshot
    skipped: dict[str, int] = field(default_factory=dict)

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())


def _parse_collection(
    name: str,
    rows: Any,
    parser: Callable[[Mapping[str, Any]], Any],
    skipped: dict[str, int],
) -> tuple:
    if rows is None:
        raise InvalidPayrollInputError(name, "collection is required")
    if not isinstance(rows, (list, tuple)):
        raise InvalidPayrollInputError(
            name, f"expected a list, got {type(rows).__name__}",
        )

    parsed = []
    for index, row in enumerate(rows):
        try:
            if not isinstance(row, Mapping):
                raise MalformedRecordError(name, None, f"row {index} is not an object")
            parsed.append(parser(row))
        except MalformedRecordError as e:
            skipped[name] = skipped.get(name, 0) + 1
            logger.warning(
                "record_skipped",
                extra={
                    "collection": name,
                    "record_id": e.record_id,
                    "row_index": index,
                    "reason": e.reason,
                },
            )
    return tuple(parsed)


def load_snapshot(
    *,
    employees: Any,
    tasks: Any,
    clients: Any,
    time_entries: Any,
    piecework: Any,
    tz: tzinfo,
) -> LoadResult:
    """Parse every collection, skipping malformed rows.

    Raises:
        InvalidPayrollInputError: if any collection is missing or not a list.
    """
    skipped: dict[str, int] = {}
    snapshot = RecordSnapshot(
        employees=_parse_collection("employees", employees, parse_employee, skipped),
        tasks=_parse_collection("tasks", tasks, parse_task, skipped),
        clients=_parse_collection("clients", clients, parse_client, skipped),
        time_entries=_parse_collection(
            "time_entries", time_entries, lambda r: parse_time_entry(r, tz), skipped,
        ),
        piecework=_parse_collection(
            "piecework", piecework, lambda r: parse_piecework(r, tz), skipped,
        ),
    )
    logger.info(
        "snapshot_loaded",
        extra={
            "employees": len(snapshot.employees),
            "tasks": len(snapshot.tasks),
            "clients": len(snapshot.clients),
            "time_entries": len(snapshot.time_entries),
            "piecework": len(snapshot.piecework),
            "skipped": dict(skipped),
        },
    )
    return LoadResult(snapshot=snapshot, skipped=skipped)
