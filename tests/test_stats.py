from datetime import date
from types import SimpleNamespace

import pytest

from db import AttendanceStatusEnum
from services.stats import aggregate_averaged_over_range, aggregate_single_day, attendance_rate, daily_reports

H = AttendanceStatusEnum.HADIR
T = AttendanceStatusEnum.TERLAMBAT
A = AttendanceStatusEnum.TIDAK_HADIR
I = AttendanceStatusEnum.IZIN

DAY = date(2025, 7, 21)
NEXT_DAY = date(2025, 7, 22)


def _entry(student_id: str, status, day: date = DAY, class_id: str = "1A", class_name: str = "1A"):
    return SimpleNamespace(student_id=student_id, status=status, date=day, class_id=class_id, class_name=class_name)


def test_single_day_counts():
    summary = aggregate_single_day([_entry("s1", H), _entry("s2", T), _entry("s3", A)])
    assert (summary.total_students, summary.present, summary.late, summary.absent, summary.excused) == (3, 1, 1, 1, 0)
    assert summary.attendance_rate == 66.67


@pytest.mark.parametrize(
    "statuses,rate",
    [
        ([H, H, H], 100.0),
        ([A, A], 0.0),
        ([I, I, H, T], 50.0),
    ],
)
def test_attendance_rate_bounds(statuses, rate):
    entries = [_entry(f"s{index}", status) for index, status in enumerate(statuses)]
    assert aggregate_single_day(entries).attendance_rate == rate


def test_empty_entries():
    summary = aggregate_single_day([])
    assert summary.total_students == 0
    assert summary.attendance_rate == 0.0
    assert aggregate_averaged_over_range([]).attendance_rate == 0.0
    assert attendance_rate(0, 0, 0, 0) == 0.0


def test_averaged_over_range():
    entries = [
        _entry("s1", H, DAY),
        _entry("s2", T, DAY),
        _entry("s3", A, DAY),
        _entry("s1", H, NEXT_DAY),
        _entry("s2", A, NEXT_DAY),
        _entry("s3", A, NEXT_DAY),
    ]
    summary = aggregate_averaged_over_range(entries)
    assert summary.days == 2
    assert summary.total_students == 3
    assert (summary.present, summary.late, summary.absent, summary.excused) == (1.0, 0.5, 1.5, 0.0)
    assert summary.attendance_rate == 50.0


def test_averaged_counts_are_rounded():
    entries = [_entry("s1", H, date(2025, 7, day)) for day in (21, 22)] + [_entry("s1", A, date(2025, 7, 23))]
    summary = aggregate_averaged_over_range(entries)
    assert summary.present == 0.67
    assert summary.absent == 0.33


def test_daily_reports_grouped_and_sorted():
    entries = [
        _entry("s4", H, NEXT_DAY, class_id="1B", class_name="1B"),
        _entry("s1", H, NEXT_DAY),
        _entry("s1", A, DAY),
        _entry("s4", T, DAY, class_id="1B", class_name="1B"),
    ]
    reports = daily_reports(entries)
    assert [(report.date, report.class_name) for report in reports] == [
        (DAY, "1A"),
        (DAY, "1B"),
        (NEXT_DAY, "1A"),
        (NEXT_DAY, "1B"),
    ]
    assert reports[0].summary.absent == 1
    assert reports[1].to_dict()["attendanceRate"] == 100.0


def test_averaged_over_range_uses_roster_size():
    summary = aggregate_averaged_over_range([], total_students=3)
    assert (summary.total_students, summary.days, summary.attendance_rate) == (3, 0, 0.0)

    summary = aggregate_averaged_over_range([_entry("s1", H)], total_students=2)
    assert summary.total_students == 2
