from datetime import date
from types import SimpleNamespace

import pytest

from db import AttendanceStatusEnum
from services.reconcile import reconcile

DAY = date(2025, 7, 21)
NEXT_DAY = date(2025, 7, 22)


def _student(student_id: str, name: str, class_id: str = "1A"):
    return SimpleNamespace(id=student_id, name=name, nisn=f"00{student_id}", class_id=class_id, class_name=class_id)


def _record(student_id: str, status: AttendanceStatusEnum, day: date = DAY, check_in_time=None):
    return SimpleNamespace(student_id=student_id, date=day, status=status, check_in_time=check_in_time, notes=None)


def test_missing_records_default_to_absent():
    students = [_student("s1", "Andi"), _student("s2", "Budi"), _student("s3", "Citra")]
    records = [
        _record("s1", AttendanceStatusEnum.HADIR, check_in_time="07:00"),
        _record("s2", AttendanceStatusEnum.TERLAMBAT),
    ]

    entries = reconcile(students, records, [DAY])

    assert [(entry.student_id, entry.status) for entry in entries] == [
        ("s1", AttendanceStatusEnum.HADIR),
        ("s2", AttendanceStatusEnum.TERLAMBAT),
        ("s3", AttendanceStatusEnum.TIDAK_HADIR),
    ]
    assert entries[0].check_in_time == "07:00"
    assert entries[2].recorded is False
    assert entries[2].to_dict()["statusLabel"] == "Tidak Hadir"


def test_one_entry_per_student_and_date():
    students = [_student("s1", "Andi"), _student("s1", "Andi"), _student("s2", "Budi")]
    records = [_record("s1", AttendanceStatusEnum.IZIN, day=NEXT_DAY)]

    entries = reconcile(students, records, [NEXT_DAY, DAY, DAY])

    assert [(entry.student_id, entry.date) for entry in entries] == [
        ("s1", DAY),
        ("s1", NEXT_DAY),
        ("s2", DAY),
        ("s2", NEXT_DAY),
    ]
    assert entries[1].status == AttendanceStatusEnum.IZIN


def test_records_match_by_student_id_not_name():
    students = [_student("s1", "Andi"), _student("s2", "Andi")]
    records = [_record("s2", AttendanceStatusEnum.HADIR)]

    entries = reconcile(students, records, [DAY])

    assert [entry.status for entry in entries] == [AttendanceStatusEnum.TIDAK_HADIR, AttendanceStatusEnum.HADIR]


def test_records_outside_dates_are_ignored():
    entries = reconcile([_student("s1", "Andi")], [_record("s1", AttendanceStatusEnum.HADIR, day=NEXT_DAY)], [DAY])
    assert entries[0].status == AttendanceStatusEnum.TIDAK_HADIR


def test_empty_inputs():
    assert reconcile([], [], [DAY]) == []
    assert reconcile([_student("s1", "Andi")], [], []) == []


@pytest.mark.parametrize(
    "value,expected",
    [
        ("HADIR", AttendanceStatusEnum.HADIR),
        ("Tidak Hadir", AttendanceStatusEnum.TIDAK_HADIR),
        ("izin", AttendanceStatusEnum.IZIN),
        (AttendanceStatusEnum.TERLAMBAT, AttendanceStatusEnum.TERLAMBAT),
    ],
)
def test_status_parse(value, expected):
    assert AttendanceStatusEnum.parse(value) == expected


def test_status_parse_rejects_unknown():
    with pytest.raises(ValueError):
        AttendanceStatusEnum.parse("Sakit")
