"""
Pytest fixtures for the payroll test suite.

Provides:
- Structured logging configured for the whole session
- ``captured_logs`` for asserting on JSON log records
- The packaged Washington payroll policy
"""

import json
import logging
from io import StringIO

import pytest

from payroll_config import get_active_config
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_services.payroll_report_service import wage_policy_from_config


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.WARNING)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs (DEBUG and up) as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            generate_payroll_report(...)
            logs = captured_logs()
            assert any(r["message"] == "payroll_report_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Configuration fixtures
# =============================================================================


@pytest.fixture(scope="session")
def wa_config():
    """The packaged Washington State payroll policy."""
    return get_active_config()


@pytest.fixture(scope="session")
def wa_policy(wa_config):
    return wage_policy_from_config(wa_config)
