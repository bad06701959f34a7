from __future__ import annotations

from datetime import date, datetime, timedelta

from hr_portal.attendance.model import AttendanceRecord
from hr_portal.attendance.service import AttendanceService
from hr_portal.core.enums import AttendanceStatus


def _record(user, day: date, hour: int, seconds: int, status=AttendanceStatus.COMPLETED, wfh=False):
    start = datetime(day.year, day.month, day.day, hour, 0, 0)
    return AttendanceRecord(
        attendance_id=0,
        user_id=user.user_id,
        user_name=user.name,
        work_date=day,
        check_in_time=start,
        check_out_time=None if status == AttendanceStatus.ACTIVE else start + timedelta(seconds=seconds),
        total_working_seconds=seconds,
        status=status,
        is_wfh=wfh,
    )


def test_today_total_sums_all_sessions_of_the_day(attendance_repo, employee):
    day = date(2026, 1, 5)
    attendance_repo.seed(_record(employee, day, 9, 3600))
    attendance_repo.seed(_record(employee, day, 13, 1800, status=AttendanceStatus.LUNCH_CHECKOUT))
    attendance_repo.seed(_record(employee, day - timedelta(days=1), 9, 7200))

    assert AttendanceService(attendance_repo).today_total(employee.user_id, day) == 5400


def test_history_groups_by_day_newest_first(attendance_repo, employee):
    d1, d2 = date(2026, 1, 5), date(2026, 1, 6)
    attendance_repo.seed(_record(employee, d1, 9, 3600, wfh=True))
    attendance_repo.seed(_record(employee, d2, 9, 1800))
    attendance_repo.seed(_record(employee, d2, 14, 1800))

    history = AttendanceService(attendance_repo).history(employee.user_id)

    assert [g.work_date for g in history.days] == [d2, d1]
    assert history.days[0].total_seconds == 3600
    assert history.total_seconds == 7200
    assert history.average_seconds == 2400
    assert history.wfh_count == 1

    data = history.to_dict()
    assert data["total"] == "2h 0m"
    assert data["days"][0]["date"] == "2026-01-06"


def test_history_of_new_user_is_empty(attendance_repo, employee):
    history = AttendanceService(attendance_repo).history(employee.user_id)

    assert history.days == []
    assert history.average_seconds == 0


def test_live_attendance_lists_active_sessions(attendance_repo, employee, hr):
    day = date(2026, 1, 5)
    attendance_repo.seed(_record(employee, day, 9, 0, status=AttendanceStatus.ACTIVE, wfh=True))
    attendance_repo.seed(_record(hr, day, 8, 3600))

    live = AttendanceService(attendance_repo).live_attendance(day)

    assert live == [{"user_id": employee.user_id, "user_name": "Jane Doe", "since": "09:00:00", "location": "WFH"}]
