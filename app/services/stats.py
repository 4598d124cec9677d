from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Union

from db import AttendanceStatusEnum

Number = Union[int, float]


@dataclass(frozen=True)
class AttendanceSummary:
    total_students: int
    present: Number
    late: Number
    absent: Number
    excused: Number
    attendance_rate: float
    days: int = 1

    def to_dict(self) -> dict:
        return {
            "totalStudents": self.total_students,
            "present": self.present,
            "late": self.late,
            "absent": self.absent,
            "excused": self.excused,
            "attendanceRate": self.attendance_rate,
            "days": self.days,
        }


@dataclass(frozen=True)
class DailyReport:
    date: date
    class_id: str
    class_name: str
    summary: AttendanceSummary

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "classId": self.class_id, "className": self.class_name, **self.summary.to_dict()}


def attendance_rate(present: Number, late: Number, absent: Number, excused: Number) -> float:
    total = present + late + absent + excused
    if not total:
        return 0.0
    return round((present + late) / total * 100, 2)


def _status_counts(entries) -> Counter:
    return Counter(entry.status for entry in entries)


def aggregate_single_day(entries: Iterable) -> AttendanceSummary:
    """Raw counts, as reported for a single day."""
    entries = list(entries)
    counts = _status_counts(entries)
    present = counts[AttendanceStatusEnum.HADIR]
    late = counts[AttendanceStatusEnum.TERLAMBAT]
    absent = counts[AttendanceStatusEnum.TIDAK_HADIR]
    excused = counts[AttendanceStatusEnum.IZIN]
    return AttendanceSummary(
        total_students=len({entry.student_id for entry in entries}),
        present=present,
        late=late,
        absent=absent,
        excused=excused,
        attendance_rate=attendance_rate(present, late, absent, excused),
        days=len({entry.date for entry in entries}),
    )


def aggregate_averaged_over_range(entries: Iterable, total_students: Optional[int] = None) -> AttendanceSummary:
    """
    Per-status counts divided by the number of distinct dates (class summaries over a period).

    total_students is the roster size; without it the count is taken from the entries,
    which is zero for a period without records.
    """
    entries = list(entries)
    if total_students is None:
        total_students = len({entry.student_id for entry in entries})
    days = len({entry.date for entry in entries})
    counts = _status_counts(entries)
    totals = [counts[status] for status in AttendanceStatusEnum]
    present, late, absent, excused = totals

    def per_day(value: int) -> float:
        return round(value / days, 2) if days else 0.0

    return AttendanceSummary(
        total_students=total_students,
        present=per_day(present),
        late=per_day(late),
        absent=per_day(absent),
        excused=per_day(excused),
        attendance_rate=attendance_rate(present, late, absent, excused),
        days=days,
    )


def daily_reports(entries: Iterable) -> list[DailyReport]:
    """Single-day summaries, one per (date, class), ordered by date then class name."""
    groups: dict = {}
    for entry in entries:
        groups.setdefault((entry.date, entry.class_id), []).append(entry)
    reports = [
        DailyReport(date=day, class_id=class_id, class_name=group[0].class_name, summary=aggregate_single_day(group))
        for (day, class_id), group in groups.items()
    ]
    return sorted(reports, key=lambda report: (report.date, report.class_name))
