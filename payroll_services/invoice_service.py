"""
payroll_services.invoice_service -- Client invoice orchestration.

Responsibility:
    Produce a ``ClientInvoice`` for one client: restrict the snapshot to
    the client's tasks, run the payroll pipeline over it, then bill the
    resulting work at the tasks' client rates.

Architecture position:
    Services -- orchestration.  Reuses ``PayrollReportService`` for the
    payroll half so that pass-through top-ups and rest breaks match what
    the crew is paid for this client's work.

Failure modes:
    - ClientNotFoundError: the client id is not in the supplied clients.
    - InvalidPayrollInputError / InvalidReportPeriodError as for payroll.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any
from uuid import uuid4

from payroll_config import PayrollConfig, get_active_config
from payroll_engines.invoicing import ClientInvoice, calculate_client_invoice
from payroll_kernel.domain.parsing import LoadResult
from payroll_kernel.domain.period import ReportPeriod
from payroll_kernel.domain.records import Client, RecordSnapshot
from payroll_kernel.domain.roster import LookupTables
from payroll_kernel.exceptions import ClientNotFoundError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_services.payroll_report_service import PayrollReportService

logger = get_logger("services.invoice")


class InvoiceService:
    """Bills clients for crew work under one payroll policy."""

    def __init__(self, config: PayrollConfig):
        self._payroll = PayrollReportService(config)

    def generate(
        self,
        *,
        client_id: str,
        start_date: Any,
        end_date: Any,
        employees: Any,
        tasks: Any,
        clients: Any,
        time_entries: Any,
        piecework: Any,
        invoice_date: Any = None,
    ) -> ClientInvoice:
        # The invoice date doubles as the pay date of the underlying run
        period = ReportPeriod.parse(
            start_date, end_date, invoice_date if invoice_date is not None else end_date,
        )
        with LogContext.bind(report_id=str(uuid4())):
            loaded = self._payroll.load(
                employees=employees,
                tasks=tasks,
                clients=clients,
                time_entries=time_entries,
                piecework=piecework,
            )
            return self.build_invoice(client_id, period, loaded)

    def build_invoice(
        self, client_id: str, period: ReportPeriod, loaded: LoadResult,
    ) -> ClientInvoice:
        tables = LookupTables.build(loaded.snapshot)
        client = tables.clients.get(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)

        restricted = replace(
            loaded.snapshot,
            tasks=tuple(t for t in loaded.snapshot.tasks if t.client_id == client.id),
        )
        with LogContext.bind(client_id=client.id):
            return self._invoice(client, period, loaded, restricted)

    def _invoice(
        self,
        client: Client,
        period: ReportPeriod,
        loaded: LoadResult,
        restricted: RecordSnapshot,
    ) -> ClientInvoice:
        logger.info(
            "client_invoice_started",
            extra={
                "client_tasks": len(restricted.tasks),
                "start_date": period.start.isoformat(),
                "end_date": period.end.isoformat(),
            },
        )
        report = self._payroll.build_report(
            period, LoadResult(snapshot=restricted, skipped=loaded.skipped),
        )
        invoice = calculate_client_invoice(
            client=client,
            report=report,
            tables=LookupTables.build(restricted),
            invoice_date=period.pay_date.isoformat(),
            currency=self._payroll.config.currency,
        )
        logger.info(
            "client_invoice_completed",
            extra={
                "labor_cost": str(invoice.labor_cost),
                "total": str(invoice.total),
            },
        )
        return invoice


def generate_client_invoice(
    client_id: str,
    start_date: Any,
    end_date: Any,
    employees: Any,
    tasks: Any,
    clients: Any,
    time_entries: Any,
    piecework: Any,
    *,
    invoice_date: Any = None,
    config: PayrollConfig | None = None,
) -> ClientInvoice:
    """Invoice ``client_id`` for work recorded in [start_date, end_date].

    Raises:
        ClientNotFoundError: if ``client_id`` is not among ``clients``.
    """
    service = InvoiceService(config or get_active_config())
    return service.generate(
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        employees=employees,
        tasks=tasks,
        clients=clients,
        time_entries=time_entries,
        piecework=piecework,
        invoice_date=invoice_date,
    )
