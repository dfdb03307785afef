"""
payroll_services -- orchestration of the payroll engines.

Usage:
    from payroll_services import generate_payroll_report, generate_client_invoice
"""

from payroll_services.invoice_service import InvoiceService, generate_client_invoice
from payroll_services.payroll_report_service import (
    PayrollReportService,
    generate_payroll_report,
)

__all__ = [
    "InvoiceService",
    "PayrollReportService",
    "generate_client_invoice",
    "generate_payroll_report",
]
