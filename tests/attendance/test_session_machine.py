from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from conftest import no_break, session_user
from hr_portal.attendance.model import AttendanceRecord
from hr_portal.attendance.session import AttendanceSessionMachine
from hr_portal.breaks.model import BreakSchedule
from hr_portal.core.enums import AttendanceStatus, SessionState
from hr_portal.core.exceptions import PersistenceError

# Monday
MORNING = datetime(2026, 1, 5, 9, 0, 0)


def lunch_15_to_16(_day):
    return BreakSchedule(day_of_week=1, start_hour=15, end_hour=16)


def make_machine(repo, user, schedule=no_break, **kwargs) -> AttendanceSessionMachine:
    return AttendanceSessionMachine(
        user=session_user(user),
        attendance=repo,
        break_schedule_for=schedule,
        **kwargs,
    )


def run_ticks(machine, n, now=MORNING):
    results = [machine.tick(now) for _ in range(n)]
    return [r for r in results if r is not None]


def test_check_in_creates_active_record_and_attaches_listener(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)

    record = machine.check_in(is_wfh=True, now=MORNING)

    assert record is not None
    assert record.status == AttendanceStatus.ACTIVE
    assert record.is_wfh is True
    assert record.total_working_seconds == 0
    assert machine.state == SessionState.ACTIVE
    assert machine.monitor.is_attached
    assert attendance_repo.records[record.attendance_id].is_active


def test_second_check_in_is_a_no_op(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)

    first = machine.check_in(now=MORNING)
    second = machine.check_in(now=MORNING)

    assert first is not None
    assert second is None
    assert attendance_repo.checkin_calls == 1
    assert len(attendance_repo.list_active_for_date(MORNING.date())) == 1
    assert machine.current_session == first


def test_check_in_is_refused_during_break(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee, schedule=lunch_15_to_16)

    assert machine.check_in(now=MORNING.replace(hour=15, minute=30)) is None

    assert machine.state == SessionState.CHECKED_OUT
    assert attendance_repo.checkin_calls == 0
    assert machine.can_check_in(MORNING.replace(hour=15, minute=30)) is False
    assert machine.can_check_in(MORNING.replace(hour=16)) is True


def test_check_in_reuses_record_already_active_in_store(attendance_repo, employee):
    existing = attendance_repo.seed(
        AttendanceRecord(
            attendance_id=0,
            user_id=employee.user_id,
            user_name=employee.name,
            work_date=MORNING.date(),
            check_in_time=MORNING - timedelta(hours=1),
            check_out_time=None,
            total_working_seconds=0,
            status=AttendanceStatus.ACTIVE,
        )
    )
    machine = make_machine(attendance_repo, employee)

    record = machine.check_in(now=MORNING)

    assert record.attendance_id == existing.attendance_id
    assert attendance_repo.checkin_calls == 0
    assert len(attendance_repo.list_active_for_date(MORNING.date())) == 1


def test_check_in_race_adopts_the_winning_record(attendance_repo, employee, monkeypatch):
    original = attendance_repo.get_active_for_user_and_date
    calls = {"n": 0}

    def racing_lookup(user_id, work_date):
        calls["n"] += 1
        if calls["n"] == 1:
            # another tab inserts between our lookup and our insert
            attendance_repo.seed(
                AttendanceRecord(
                    attendance_id=0,
                    user_id=employee.user_id,
                    user_name=employee.name,
                    work_date=work_date,
                    check_in_time=MORNING,
                    check_out_time=None,
                    total_working_seconds=0,
                    status=AttendanceStatus.ACTIVE,
                )
            )
            return None
        return original(user_id, work_date)

    monkeypatch.setattr(attendance_repo, "get_active_for_user_and_date", racing_lookup)
    machine = make_machine(attendance_repo, employee)

    record = machine.check_in(now=MORNING)

    assert record is not None
    assert machine.state == SessionState.ACTIVE
    assert len(attendance_repo.list_active_for_date(MORNING.date())) == 1


def test_check_in_failure_rolls_back_to_checked_out(attendance_repo, employee):
    attendance_repo.fail_reads = True
    machine = make_machine(attendance_repo, employee)

    with pytest.raises(PersistenceError):
        machine.check_in(now=MORNING)

    assert machine.state == SessionState.CHECKED_OUT
    assert machine.last_error == "database unavailable"
    assert not machine.monitor.is_attached


def test_tick_counts_session_and_idle_seconds(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    machine.check_in(now=MORNING)

    seen = []
    for _ in range(10):
        machine.tick(MORNING)
        seen.append(machine.session_seconds)

    assert seen == sorted(seen)
    assert machine.session_seconds == 10
    assert machine.idle_seconds == 10
    assert machine.today_total_seconds == 10


def test_tick_does_nothing_while_checked_out(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)

    assert machine.tick(MORNING) is None
    assert machine.session_seconds == 0


def test_activity_resets_idle_but_not_session(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    machine.check_in(now=MORNING)
    run_ticks(machine, 500)

    assert machine.monitor.notify("key") is True

    assert machine.idle_seconds == 0
    assert machine.session_seconds == 500


def test_idle_checkout_after_900_seconds_without_activity(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    record = machine.check_in(now=MORNING)

    assert run_ticks(machine, 899) == []
    assert machine.state == SessionState.ACTIVE

    assert machine.tick(MORNING) == AttendanceStatus.IDLE_CHECKOUT

    stored = attendance_repo.records[record.attendance_id]
    assert stored.status == AttendanceStatus.IDLE_CHECKOUT
    assert stored.total_working_seconds == 900
    assert machine.state == SessionState.CHECKED_OUT
    assert machine.current_session is None
    assert not machine.monitor.is_attached
    assert machine.today_total_seconds == 900


def test_system_checkout_at_exactly_eight_hours(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    record = machine.check_in(now=MORNING)

    outcomes = []
    for i in range(28800):
        if i % 600 == 0:
            machine.record_activity()
        outcome = machine.tick(MORNING)
        if outcome is not None:
            outcomes.append((i + 1, outcome))

    assert outcomes == [(28800, AttendanceStatus.SYSTEM_CHECKOUT)]
    stored = attendance_repo.records[record.attendance_id]
    assert stored.status == AttendanceStatus.SYSTEM_CHECKOUT
    assert stored.total_working_seconds == 28800


def test_system_checkout_counts_earlier_sessions_of_the_day(attendance_repo, employee):
    attendance_repo.seed(
        AttendanceRecord(
            attendance_id=0,
            user_id=employee.user_id,
            user_name=employee.name,
            work_date=MORNING.date(),
            check_in_time=MORNING - timedelta(hours=8),
            check_out_time=MORNING - timedelta(minutes=30),
            total_working_seconds=28000,
            status=AttendanceStatus.IDLE_CHECKOUT,
        )
    )
    machine = make_machine(attendance_repo, employee)
    record = machine.check_in(now=MORNING)
    assert machine.today_total_seconds == 28000

    assert run_ticks(machine, 799) == []
    assert machine.tick(MORNING) == AttendanceStatus.SYSTEM_CHECKOUT

    # the record only holds this session's seconds
    assert attendance_repo.records[record.attendance_id].total_working_seconds == 800
    assert machine.today_total_seconds == 28800


def test_break_start_checks_out_without_counting_the_tick(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee, schedule=lunch_15_to_16)
    before_break = MORNING.replace(hour=14, minute=59, second=59)
    record = machine.check_in(now=before_break)

    assert machine.tick(before_break) is None
    assert machine.session_seconds == 1

    assert machine.tick(before_break + timedelta(seconds=1)) == AttendanceStatus.LUNCH_CHECKOUT

    stored = attendance_repo.records[record.attendance_id]
    assert stored.status == AttendanceStatus.LUNCH_CHECKOUT
    assert stored.total_working_seconds == 1


def test_manual_checkout_writes_completed(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    record = machine.check_in(now=MORNING)
    run_ticks(machine, 42)

    closed = machine.check_out(now=MORNING + timedelta(seconds=42))

    assert closed.status == AttendanceStatus.COMPLETED
    assert closed.total_working_seconds == 42
    assert attendance_repo.records[record.attendance_id].status == AttendanceStatus.COMPLETED
    assert machine.state == SessionState.CHECKED_OUT


def test_checkout_without_session_is_a_no_op(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)

    assert machine.check_out(now=MORNING) is None
    assert attendance_repo.checkout_calls == []


def test_checkout_rejects_active_as_reason(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    machine.check_in(now=MORNING)

    with pytest.raises(ValueError):
        machine.check_out(AttendanceStatus.ACTIVE, now=MORNING)


def test_failed_checkout_keeps_session_and_next_tick_retries(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    record = machine.check_in(now=MORNING)
    run_ticks(machine, 899)

    attendance_repo.fail_checkout = True
    assert machine.tick(MORNING) is None

    assert machine.state == SessionState.ACTIVE
    assert machine.current_session == record
    assert machine.session_seconds == 900
    assert machine.last_error == "database unavailable"
    assert machine.monitor.is_attached

    attendance_repo.fail_checkout = False
    assert machine.tick(MORNING) == AttendanceStatus.IDLE_CHECKOUT
    assert attendance_repo.records[record.attendance_id].total_working_seconds == 901
    assert machine.last_error is None


def test_manual_checkout_failure_raises_and_rolls_back(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    machine.check_in(now=MORNING)
    attendance_repo.fail_checkout = True

    with pytest.raises(PersistenceError):
        machine.check_out(now=MORNING)

    assert machine.state == SessionState.ACTIVE


def test_checkout_of_record_closed_elsewhere(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    record = machine.check_in(now=MORNING)
    attendance_repo.records[record.attendance_id] = replace(
        record, status=AttendanceStatus.COMPLETED, check_out_time=MORNING, total_working_seconds=5
    )

    assert machine.check_out(now=MORNING) is None

    assert machine.state == SessionState.CHECKED_OUT
    assert machine.last_error == "Session was already closed elsewhere"
    assert attendance_repo.records[record.attendance_id].total_working_seconds == 5


def test_load_adopts_active_record_and_finished_total(attendance_repo, employee):
    attendance_repo.seed(
        AttendanceRecord(
            attendance_id=0,
            user_id=employee.user_id,
            user_name=employee.name,
            work_date=MORNING.date(),
            check_in_time=MORNING - timedelta(hours=3),
            check_out_time=MORNING - timedelta(hours=2),
            total_working_seconds=3600,
            status=AttendanceStatus.COMPLETED,
        )
    )
    active = attendance_repo.seed(
        AttendanceRecord(
            attendance_id=0,
            user_id=employee.user_id,
            user_name=employee.name,
            work_date=MORNING.date(),
            check_in_time=MORNING - timedelta(minutes=10),
            check_out_time=None,
            total_working_seconds=0,
            status=AttendanceStatus.ACTIVE,
        )
    )
    machine = make_machine(attendance_repo, employee)

    assert machine.load(MORNING.date()) == active

    assert machine.state == SessionState.ACTIVE
    assert machine.today_total_seconds == 3600
    assert machine.monitor.is_attached


def test_totals_reset_on_a_new_day(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee)
    machine.check_in(now=MORNING)
    run_ticks(machine, 30)
    machine.check_out(now=MORNING)
    assert machine.today_total_seconds == 30

    machine.tick(MORNING + timedelta(days=1))

    assert machine.today_total_seconds == 0


def test_snapshot_reports_break_and_limits(attendance_repo, employee):
    machine = make_machine(attendance_repo, employee, schedule=lunch_15_to_16)

    snap = machine.snapshot(MORNING.replace(hour=15, minute=5))

    assert snap["state"] == "checked_out"
    assert snap["is_break_time"] is True
    assert snap["can_check_in"] is False
    assert snap["idle_limit_seconds"] == 900
    assert snap["required_seconds"] == 28800
    assert snap["break_schedule"]["label"] == "15:00 - 16:00"
