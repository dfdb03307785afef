"""
Tests for the Work Aggregator.

Covers inclusion/exclusion of time entries and piecework, the local
calendar day rule and shared piecework splitting.
"""

from datetime import date
from decimal import Decimal

from payroll_engines.aggregation import WorkTotals, aggregate_work
from tests.builders import (
    MONDAY,
    client_row,
    employee_row,
    load,
    piecework_row,
    task_row,
    time_entry_row,
)

END = date(2025, 6, 15)


def _aggregate(time_entries=(), piecework=(), employees=None, start=MONDAY, end=END):
    snapshot, tables = load(
        employees=employees or [
            employee_row("emp_1", "Ana", qr_code="QR-1"),
            employee_row("emp_2", "Luis"),
            employee_row("emp_3", "Rosa"),
        ],
        tasks=[
            task_row("task_prune", "Pruning"),
            task_row("task_pick", "Picking", pay_type="piecework", rate=1),
        ],
        clients=[client_row()],
        time_entries=time_entries,
        piecework=piecework,
    )
    return aggregate_work(snapshot=snapshot, tables=tables, period_start=start, period_end=end)


class TestTimeEntries:

    def test_closed_entry_counted(self):
        ledger = _aggregate([time_entry_row(start="2025-06-02T06:00:00", end="2025-06-02T14:30:00")])
        assert ledger.days_for("emp_1")[MONDAY]["task_prune"].hours == Decimal("8.5")

    def test_entries_same_day_same_task_summed(self):
        ledger = _aggregate([
            time_entry_row(start="2025-06-02T06:00:00", end="2025-06-02T10:00:00"),
            time_entry_row(start="2025-06-02T10:30:00", end="2025-06-02T14:00:00"),
        ])
        assert ledger.days_for("emp_1")[MONDAY]["task_prune"].hours == Decimal("7.5")

    def test_active_entry_excluded(self):
        ledger = _aggregate([time_entry_row(end=None)])
        assert ledger.is_empty
        assert ledger.excluded["active_time_entry"] == 1

    def test_break_and_sick_leave_not_worked(self):
        ledger = _aggregate([
            time_entry_row(is_break=True),
            time_entry_row(is_sick_leave=True),
        ])
        assert ledger.is_empty
        assert ledger.excluded["non_work_time_entry"] == 2

    def test_sick_claim_recorded_apart_from_hours(self):
        ledger = _aggregate([
            time_entry_row("emp_2", is_sick_leave=True, use_sick_hours=True),
            time_entry_row("emp_2", start="2025-06-03T06:00:00", end="2025-06-03T10:00:00",
                           is_sick_leave=True, use_sick_hours=True, sick_hours_used="2.5"),
        ])
        assert ledger.days_for("emp_2") == {}
        assert ledger.sick_claims_for("emp_2") == {
            MONDAY: Decimal("8"),
            date(2025, 6, 3): Decimal("2.5"),
        }
        assert ledger.employee_ids() == ("emp_2",)
        assert not ledger.is_empty

    def test_sick_claim_outside_window_or_zero_dropped(self):
        ledger = _aggregate([
            time_entry_row(start="2025-06-20T06:00:00", end="2025-06-20T14:00:00",
                           use_sick_hours=True),
            time_entry_row(use_sick_hours=True, sick_hours_used=0),
        ])
        assert ledger.is_empty
        assert ledger.excluded["outside_period"] == 1
        assert ledger.excluded["non_positive_duration"] == 1

    def test_unknown_employee_and_task_dropped(self):
        ledger = _aggregate([
            time_entry_row(employee_id="ghost"),
            time_entry_row(task_id="task_missing"),
        ])
        assert ledger.is_empty
        assert ledger.excluded == {"unknown_employee": 1, "unknown_task": 1}

    def test_non_positive_duration_dropped(self):
        ledger = _aggregate([time_entry_row(start="2025-06-02T10:00:00", end="2025-06-02T09:00:00")])
        assert ledger.is_empty
        assert ledger.excluded["non_positive_duration"] == 1

    def test_window_is_inclusive_on_both_ends(self):
        ledger = _aggregate([
            time_entry_row(start="2025-06-02T06:00:00", end="2025-06-02T07:00:00"),
            time_entry_row(start="2025-06-15T06:00:00", end="2025-06-15T07:00:00"),
            time_entry_row(start="2025-06-01T06:00:00", end="2025-06-01T07:00:00"),
            time_entry_row(start="2025-06-16T06:00:00", end="2025-06-16T07:00:00"),
        ])
        assert sorted(ledger.days_for("emp_1")) == [MONDAY, END]
        assert ledger.excluded["outside_period"] == 2

    def test_overnight_shift_counts_on_start_day(self):
        ledger = _aggregate([time_entry_row(start="2025-06-02T22:00:00", end="2025-06-03T02:00:00")])
        days = ledger.days_for("emp_1")
        assert list(days) == [MONDAY]
        assert days[MONDAY]["task_prune"].hours == Decimal("4")

    def test_utc_timestamp_uses_local_day(self):
        # 2025-06-02T03:00Z is Sunday June 1st, 20:00 in Washington
        ledger = _aggregate(
            [time_entry_row(start="2025-06-02T03:00:00Z", end="2025-06-02T05:00:00Z")],
            start=date(2025, 6, 1),
        )
        assert list(ledger.days_for("emp_1")) == [date(2025, 6, 1)]

    def test_entry_by_qr_code_credits_employee(self):
        ledger = _aggregate([time_entry_row(employee_id="QR-1")])
        assert ledger.employee_ids() == ("emp_1",)


class TestPiecework:

    def test_single_worker_ticket(self):
        ledger = _aggregate(piecework=[piecework_row(piece_count=12)])
        assert ledger.days_for("emp_1")[MONDAY]["task_pick"].pieces == Decimal("12")

    def test_shared_ticket_split_evenly(self):
        ledger = _aggregate(piecework=[piecework_row(employee_id="emp_1,emp_2", piece_count=10)])
        assert ledger.days_for("emp_1")[MONDAY]["task_pick"].pieces == Decimal("5")
        assert ledger.days_for("emp_2")[MONDAY]["task_pick"].pieces == Decimal("5")

    def test_unresolvable_participants_ignored_in_split(self):
        ledger = _aggregate(piecework=[piecework_row(employee_id="emp_1,ghost,emp_2", piece_count=10)])
        assert ledger.days_for("emp_1")[MONDAY]["task_pick"].pieces == Decimal("5")

    def test_repeated_participant_takes_a_share_per_mention(self):
        ledger = _aggregate(piecework=[piecework_row(employee_id="emp_1,emp_1,emp_2", piece_count=9)])
        assert ledger.days_for("emp_1")[MONDAY]["task_pick"].pieces == Decimal("6")
        assert ledger.days_for("emp_2")[MONDAY]["task_pick"].pieces == Decimal("3")

    def test_id_and_qr_code_for_same_worker_are_two_mentions(self):
        ledger = _aggregate(piecework=[piecework_row(employee_id="emp_1,QR-1,emp_2", piece_count=9)])
        assert ledger.days_for("emp_1")[MONDAY]["task_pick"].pieces == Decimal("6")

    def test_three_way_split_preserves_total(self):
        ledger = _aggregate(piecework=[piecework_row(employee_id="emp_1,emp_2,emp_3", piece_count=10)])
        total = sum(
            ledger.days_for(e)[MONDAY]["task_pick"].pieces for e in ("emp_1", "emp_2", "emp_3")
        )
        assert abs(total - Decimal("10")) < Decimal("1e-20")

    def test_nobody_resolves(self):
        ledger = _aggregate(piecework=[piecework_row(employee_id="ghost")])
        assert ledger.is_empty
        assert ledger.excluded["unresolved_piecework"] == 1

    def test_ticket_outside_window_dropped(self):
        ledger = _aggregate(piecework=[piecework_row(timestamp="2025-06-20T10:00:00")])
        assert ledger.is_empty

    def test_hours_and_pieces_on_same_task_accumulate_together(self):
        ledger = _aggregate(
            time_entries=[time_entry_row(task_id="task_pick")],
            piecework=[piecework_row(piece_count=40)],
        )
        assert ledger.days_for("emp_1")[MONDAY]["task_pick"] == WorkTotals(Decimal("8"), Decimal("40"))
