from datetime import date, datetime
from types import SimpleNamespace

import pytest

from db import AttendanceStatusEnum
from services.reconcile import ReconciledEntry
from services.report import build_print_sheet, csv_filename, filter_table_rows, render_csv, render_print_html
from services.stats import daily_reports

DAY = date(2025, 7, 21)


def _entry(name: str, nisn: str, class_name: str, status: AttendanceStatusEnum) -> ReconciledEntry:
    return ReconciledEntry(
        student_id=nisn,
        student_name=name,
        nisn=nisn,
        class_id=class_name,
        class_name=class_name,
        date=DAY,
        status=status,
    )


ENTRIES = [
    _entry("Dewi", "0004", "1B", AttendanceStatusEnum.HADIR),
    _entry("Budi", "0002", "1A", AttendanceStatusEnum.TERLAMBAT),
    _entry("Andi", "0001", "1A", AttendanceStatusEnum.HADIR),
    _entry("Citra", "0003", "1A", AttendanceStatusEnum.TIDAK_HADIR),
]


def test_render_csv():
    content = render_csv(daily_reports(ENTRIES))
    assert content.split("\n") == [
        "Tanggal,Kelas,Total Siswa,Hadir,Terlambat,Tidak Hadir,Izin,Tingkat Kehadiran (%)",
        "2025-07-21,1A,3,1,1,1,0,66.67",
        "2025-07-21,1B,1,1,0,0,0,100",
    ]


def test_render_csv_without_reports():
    assert render_csv([]) == "Tanggal,Kelas,Total Siswa,Hadir,Terlambat,Tidak Hadir,Izin,Tingkat Kehadiran (%)"


def test_csv_filename():
    assert csv_filename(DAY) == "laporan-absen-2025-07-21.csv"


def test_table_rows_sorted_by_class_then_name():
    rows = filter_table_rows(ENTRIES)
    assert [row.student_name for row in rows] == ["Andi", "Budi", "Citra", "Dewi"]


def test_table_rows_filters():
    assert [row.student_name for row in filter_table_rows(ENTRIES, class_filter="1b")] == ["Dewi"]
    assert [row.student_name for row in filter_table_rows(ENTRIES, status_filter="Tidak Hadir")] == ["Citra"]
    assert [row.student_name for row in filter_table_rows(ENTRIES, status_filter="Semua", search="BUD")] == ["Budi"]
    assert [row.student_name for row in filter_table_rows(ENTRIES, search="0004")] == ["Dewi"]
    assert filter_table_rows(ENTRIES, search="zzz") == []
    with pytest.raises(ValueError):
        filter_table_rows(ENTRIES, status_filter="Sakit")


def _student(student_id: str, name: str):
    return SimpleNamespace(id=student_id, name=name, nisn=f"00{student_id}", class_id="1A", class_name="1A")


def _record(student_id: str, day: date, status: AttendanceStatusEnum):
    return SimpleNamespace(student_id=student_id, date=day, status=status, check_in_time=None, notes=None)


def test_print_sheet_totals():
    students = [_student("1", "Andi"), _student("2", "Budi")]
    records = [
        _record("1", date(2025, 7, 1), AttendanceStatusEnum.HADIR),
        _record("2", date(2025, 7, 2), AttendanceStatusEnum.TERLAMBAT),
        # Saturday, not a school day
        _record("1", date(2025, 7, 5), AttendanceStatusEnum.HADIR),
    ]

    sheet = build_print_sheet("1A", "Bu Sari", students, records, date(2025, 7, 1), date(2025, 8, 31))

    assert sheet.total_students == 2
    assert sheet.total_days == 24
    assert sheet.totals == {"H": 1, "T": 1, "A": 46, "I": 0}
    assert sheet.rows[0].totals["H"] == 1
    assert sheet.rows[1].cells[1] == AttendanceStatusEnum.TERLAMBAT
    assert sheet.attendance_rate == pytest.approx(2 / 48 * 100)


def test_render_print_html():
    students = [_student("1", "Andi")]
    records = [_record("1", DAY, AttendanceStatusEnum.HADIR)]
    sheet = build_print_sheet("1A", "Bu Sari", students, records, DAY, date(2025, 7, 25))

    html = render_print_html(sheet, datetime(2025, 7, 21, 9, 5, 3))

    assert "Kelas 1A - Bu Sari" in html
    assert "Periode: 21/7/2025 - 25/7/2025" in html
    assert "Tanggal Cetak: Senin, 21 Juli 2025, 09.05.03" in html
    assert "20.0%" in html
    assert '<td class="status-H">H</td>' in html


def test_render_print_html_empty_class():
    sheet = build_print_sheet("1A", "Bu Sari", [], [], DAY, DAY)
    html = render_print_html(sheet, datetime(2025, 7, 21, 9, 0))
    assert "Belum ada siswa di kelas ini." in html
    assert "<table>" not in html


def test_print_sheet_without_school_days_keeps_roster():
    students = [_student("1", "Andi"), _student("2", "Budi")]
    sheet = build_print_sheet("1A", "Bu Sari", students, [], date(2025, 7, 26), date(2025, 7, 27))

    assert sheet.total_days == 0
    assert [row.student_name for row in sheet.rows] == ["Andi", "Budi"]
    assert sheet.attendance_rate == 0.0

    html = render_print_html(sheet, datetime(2025, 7, 26, 9, 0))
    assert "Tidak ada hari sekolah pada periode ini." in html
    assert "Belum ada siswa di kelas ini." not in html
