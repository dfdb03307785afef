"""Tests for the run_payroll_report command-line entry point."""

import json
from pathlib import Path

import pytest

from scripts.run_payroll_report import build_parser, main
from tests.builders import (
    client_row,
    employee_row,
    snapshot_rows,
    task_row,
    week_of_shifts,
)


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    rows = snapshot_rows(
        employees=[employee_row("emp_1", "Ana Lopez")],
        clients=[client_row("client_1", "Valley Orchards", commission_rate=10)],
        tasks=[task_row("task_prune", rate=20, client_rate=30, client_rate_type="hourly")],
        time_entries=week_of_shifts("emp_1", "task_prune", [8, 8]),
    )
    data = {
        "employees": rows["employees"],
        "tasks": rows["tasks"],
        "clients": rows["clients"],
        "timeEntries": rows["time_entries"],
        "piecework": rows["piecework"],
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(data))
    return path


def _args(snapshot: Path, *extra: str) -> list[str]:
    return [
        str(snapshot),
        "--start", "2025-06-02", "--end", "2025-06-08", "--pay-date", "2025-06-13",
        *extra,
    ]


class TestRunPayrollReport:

    def test_report_to_stdout(self, snapshot_file, capsys):
        assert main(_args(snapshot_file)) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["payDate"] == "2025-06-13"
        summary = report["employeeSummaries"][0]
        assert summary["employeeName"] == "Ana Lopez"
        # 16 hours at $20 plus four breaks at $20/hr
        assert summary["finalPay"] == 333.33

    def test_report_to_file(self, snapshot_file, tmp_path, capsys):
        out = tmp_path / "report.json"
        assert main(_args(snapshot_file, "--output", str(out))) == 0
        assert capsys.readouterr().out == ""
        assert out.read_text().endswith("\n")
        assert json.loads(out.read_text())["startDate"] == "2025-06-02"

    def test_invoice_mode(self, snapshot_file, capsys):
        assert main(_args(snapshot_file, "--invoice-client", "client_1")) == 0
        invoice = json.loads(capsys.readouterr().out)
        assert invoice["client"]["name"] == "Valley Orchards"
        assert invoice["laborCost"] == 480.0
        assert invoice["invoiceDate"] == "2025-06-13"

    def test_inverted_period_exits_non_zero(self, snapshot_file, capsys):
        argv = [
            str(snapshot_file),
            "--start", "2025-06-08", "--end", "2025-06-02", "--pay-date", "2025-06-13",
        ]
        assert main(argv) == 1
        assert "INVALID_REPORT_PERIOD" in capsys.readouterr().err

    def test_unknown_invoice_client(self, snapshot_file, capsys):
        assert main(_args(snapshot_file, "--invoice-client", "client_9")) == 1
        assert "CLIENT_NOT_FOUND" in capsys.readouterr().err

    def test_missing_snapshot(self, tmp_path, capsys):
        assert main(_args(tmp_path / "absent.json")) == 1
        assert capsys.readouterr().err.startswith("ERROR:")

    def test_snapshot_must_be_object(self, tmp_path, capsys):
        path = tmp_path / "list.json"
        path.write_text("[]")
        assert main(_args(path)) == 1
        assert "expected a JSON object" in capsys.readouterr().err

    def test_pay_date_required(self, snapshot_file):
        with pytest.raises(SystemExit):
            build_parser().parse_args([str(snapshot_file), "--start", "2025-06-02", "--end", "2025-06-08"])
