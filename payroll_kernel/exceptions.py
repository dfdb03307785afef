"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll generation distinguishes errors that abort a report from errors
that only cost one row. Callers must be able to tell them apart by type,
never by parsing messages:

    try:
        report = generate_payroll_report(...)
    except InvalidPayrollInputError as e:
        api_response(code=e.code, field=e.field)

Every exception:
  1. Has a ``code`` class attribute (machine-readable, API-safe)
  2. Carries its context as attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- InputError
    |   +-- InvalidPayrollInputError
    |   +-- InvalidReportPeriodError
    |
    +-- RecordError
    |   +-- MalformedRecordError
    |
    +-- ReferenceDataError
    |   +-- ClientNotFoundError
    |
    +-- CurrencyError
        +-- CurrencyMismatchError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                   | When Raised                       | Fatal
-----------|------------------------|-----------------------------------|------
Input      | INVALID_PAYROLL_INPUT  | Collection not a list, bad dates  | yes
           | INVALID_REPORT_PERIOD  | startDate after endDate           | yes
-----------|------------------------|-----------------------------------|------
Record     | MALFORMED_RECORD       | One row cannot be parsed          | no (row skipped)
-----------|------------------------|-----------------------------------|------
Reference  | CLIENT_NOT_FOUND       | Invoice requested for unknown id  | yes
-----------|------------------------|-----------------------------------|------
Currency   | CURRENCY_MISMATCH      | Money arithmetic across currencies| yes

MalformedRecordError never escapes the loader: it is raised by the record
parsers and absorbed (logged, counted) so that one bad row cannot abort a
payroll run.
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Input-level (structural) exceptions


class InputError(PayrollKernelError):
    """Base exception for structural input failures."""

    code: str = "INPUT_ERROR"


class InvalidPayrollInputError(InputError):
    """The payroll input as a whole is unreadable."""

    code: str = "INVALID_PAYROLL_INPUT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid payroll input '{field}': {reason}")


class InvalidReportPeriodError(InputError):
    """The reporting window is inverted."""

    code: str = "INVALID_REPORT_PERIOD"

    def __init__(self, start_date: str, end_date: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Report start date {start_date} is after end date {end_date}"
        )


# Record-level exceptions


class RecordError(PayrollKernelError):
    """Base exception for individual record failures."""

    code: str = "RECORD_ERROR"


class MalformedRecordError(RecordError):
    """A single record cannot be parsed into its domain type."""

    code: str = "MALFORMED_RECORD"

    def __init__(self, collection: str, record_id: str | None, reason: str):
        self.collection = collection
        self.record_id = record_id
        self.reason = reason
        super().__init__(
            f"Malformed {collection} record {record_id or '<no id>'}: {reason}"
        )


# Reference data exceptions


class ReferenceDataError(PayrollKernelError):
    """Base exception for missing reference data."""

    code: str = "REFERENCE_DATA_ERROR"


class ClientNotFoundError(ReferenceDataError):
    """Client with given ID was not found in the supplied clients."""

    code: str = "CLIENT_NOT_FOUND"

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client not found: {client_id}")


# Currency exceptions


class CurrencyError(PayrollKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class CurrencyMismatchError(CurrencyError):
    """Operation attempted with mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Currency mismatch: expected {expected}, received {received}"
        )
