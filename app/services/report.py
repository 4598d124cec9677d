from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from db import AttendanceStatusEnum
from services.reconcile import ReconciledEntry, reconcile
from utils.dates import format_long, format_short, school_days

CSV_HEADER = ["Tanggal", "Kelas", "Total Siswa", "Hadir", "Terlambat", "Tidak Hadir", "Izin", "Tingkat Kehadiran (%)"]
ALL = "Semua"
EMPTY_MESSAGE = "Tidak ada data absensi untuk filter yang dipilih."

_env = Environment(
    loader=FileSystemLoader(Path(__file__).resolve().parent / "templates"),
    autoescape=select_autoescape(["html"]),
)


def _render_template(template_name: str, data: dict) -> str:
    return _env.get_template(template_name).render(**data)


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

def _csv_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_csv(reports: Iterable) -> str:
    # Plain comma join: values are not quoted or escaped.
    lines = [",".join(CSV_HEADER)]
    for report in reports:
        summary = report.summary
        lines.append(",".join([
            report.date.isoformat(),
            report.class_name,
            str(summary.total_students),
            _csv_number(summary.present),
            _csv_number(summary.late),
            _csv_number(summary.absent),
            _csv_number(summary.excused),
            _csv_number(summary.attendance_rate),
        ]))
    return "\n".join(lines)


def csv_filename(today: date) -> str:
    return f"laporan-absen-{today.isoformat()}.csv"


# ---------------------------------------------------------------------------
# Interactive table
# ---------------------------------------------------------------------------

def filter_table_rows(
    entries: Iterable[ReconciledEntry],
    class_filter: Optional[str] = None,
    status_filter: Optional[str] = None,
    search: Optional[str] = None,
) -> list[ReconciledEntry]:
    """Filter by class (id or name) and status, search name/NISN, then sort by class and student name."""
    wanted_status = None
    if status_filter and status_filter != ALL:
        wanted_status = AttendanceStatusEnum.parse(status_filter)
    wanted_class = class_filter.lower() if class_filter and class_filter != ALL else None
    query = (search or "").strip().lower()

    rows = []
    for entry in entries:
        if wanted_class and wanted_class not in (entry.class_id.lower(), entry.class_name.lower()):
            continue
        if wanted_status and entry.status != wanted_status:
            continue
        if query and query not in entry.student_name.lower() and query not in entry.nisn.lower():
            continue
        rows.append(entry)
    return sorted(rows, key=lambda entry: (entry.class_name, entry.student_name))


def render_table_html(rows: list[ReconciledEntry], title: str) -> str:
    return _render_template("attendance_table.html", {"title": title, "rows": rows, "empty_message": EMPTY_MESSAGE})


# ---------------------------------------------------------------------------
# Printable sheet
# ---------------------------------------------------------------------------

@dataclass
class PrintRow:
    number: int
    nisn: str
    student_name: str
    cells: list[AttendanceStatusEnum]
    totals: dict[str, int]


@dataclass
class PrintSheet:
    class_name: str
    teacher_name: str
    start_date: date
    end_date: date
    dates: list[date]
    rows: list[PrintRow] = field(default_factory=list)
    totals: dict[str, int] = field(default_factory=dict)
    attendance_rate: float = 0.0

    @property
    def total_students(self) -> int:
        return len(self.rows)

    @property
    def total_days(self) -> int:
        return len(self.dates)


def build_print_sheet(
    class_name: str,
    teacher_name: str,
    students: list,
    records: list,
    start_date: date,
    end_date: date,
) -> PrintSheet:
    dates = school_days(start_date, end_date)
    sheet = PrintSheet(class_name, teacher_name, start_date, end_date, dates)
    sheet.totals = {status.code: 0 for status in AttendanceStatusEnum}
    by_student: dict[str, list[ReconciledEntry]] = {}
    roster = {}
    for student in students:
        roster.setdefault(student.id, student)
        by_student.setdefault(student.id, [])
    for entry in reconcile(students, records, dates):
        by_student[entry.student_id].append(entry)

    # rows follow the roster even when the period holds no school day
    for number, (student_id, student_entries) in enumerate(by_student.items(), start=1):
        student = roster[student_id]
        cells = [entry.status for entry in student_entries]
        totals = {status.code: cells.count(status) for status in AttendanceStatusEnum}
        for code, count in totals.items():
            sheet.totals[code] += count
        sheet.rows.append(PrintRow(number, student.nisn, student.name, cells, totals))

    slots = sheet.total_students * sheet.total_days
    if slots:
        sheet.attendance_rate = (sheet.totals["H"] + sheet.totals["T"]) / slots * 100
    return sheet


def render_print_html(sheet: PrintSheet, printed_at: datetime) -> str:
    return _render_template(
        "print_sheet.html",
        {
            "sheet": sheet,
            "period": f"{format_short(sheet.start_date)} - {format_short(sheet.end_date)}",
            "printed_on": f"{format_long(printed_at)}, {printed_at.strftime('%H.%M.%S')}",
            "compact": sheet.total_days > 15,
            "statuses": list(AttendanceStatusEnum),
            "empty_message": "Belum ada siswa di kelas ini.",
            "no_days_message": "Tidak ada hari sekolah pada periode ini.",
        },
    )
