from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from db import AttendanceStatusEnum

ABSENT_DEFAULT = AttendanceStatusEnum.TIDAK_HADIR


@dataclass(frozen=True)
class ReconciledEntry:
    student_id: str
    student_name: str
    nisn: str
    class_id: str
    class_name: str
    date: date
    status: AttendanceStatusEnum
    check_in_time: Optional[str] = None
    notes: Optional[str] = None
    # False when the status is the absent default rather than a stored record
    recorded: bool = True

    def to_dict(self) -> dict:
        return {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "nisn": self.nisn,
            "classId": self.class_id,
            "className": self.class_name,
            "date": self.date.isoformat(),
            "status": self.status.value,
            "statusLabel": self.status.label,
            "checkInTime": self.check_in_time,
            "notes": self.notes,
            "recorded": self.recorded,
        }


def reconcile(students: Iterable, records: Iterable, dates: Iterable[date]) -> list[ReconciledEntry]:
    """
    One entry per (student, date) over the full date set.

    Records are matched to students by id. A pair with no record becomes an
    unrecorded absent entry; nothing is written back to storage.
    """
    target_dates = sorted(set(dates))
    by_key = {(record.student_id, record.date): record for record in records}
    entries = []
    seen = set()
    for student in students:
        if student.id in seen:
            continue
        seen.add(student.id)
        for day in target_dates:
            record = by_key.get((student.id, day))
            entries.append(
                ReconciledEntry(
                    student_id=student.id,
                    student_name=student.name,
                    nisn=student.nisn,
                    class_id=student.class_id,
                    class_name=student.class_name,
                    date=day,
                    status=record.status if record else ABSENT_DEFAULT,
                    check_in_time=record.check_in_time if record else None,
                    notes=record.notes if record else None,
                    recorded=record is not None,
                )
            )
    return entries
