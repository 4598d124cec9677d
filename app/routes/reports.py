from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse, Response
from sqlalchemy import and_
from sqlalchemy.orm import Session

from db import AttendanceBase, get_session
from services.attendance import class_entries, class_roster, report_dates, visible_classes
from services.report import build_print_sheet, csv_filename, filter_table_rows, render_csv, render_print_html, render_table_html
from services.stats import aggregate_averaged_over_range, aggregate_single_day, daily_reports
from utils.dates import period_bounds
from utils.security import Principal, get_principal

router = APIRouter(prefix="/reports")


def _resolve_range(startDate: date | None, endDate: date | None, period: str | None) -> tuple[date, date]:
    today = date.today()
    if period and not (startDate or endDate):
        try:
            return period_bounds(period, today)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid period")
    start = startDate or endDate or today
    end = endDate or start
    if start > end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="startDate must not be after endDate")
    return start, end


@router.get("/daily")
def get_daily_report(
    date: date | None = None,
    classId: str | None = None,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    day = date or datetime.now().date()
    reports = []
    for class_row in visible_classes(s, principal, classId):
        summary = aggregate_single_day(class_entries(s, class_row, [day]))
        reports.append({"date": day.isoformat(), "classId": class_row.id, "className": class_row.name, **summary.to_dict()})
    return {"success": True, "reports": reports}


@router.get("/summary")
def get_summary_report(
    classId: str | None = None,
    startDate: date | None = None,
    endDate: date | None = None,
    period: str | None = None,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    start, end = _resolve_range(startDate, endDate, period)
    summaries = []
    for class_row in visible_classes(s, principal, classId):
        dates = report_dates(s, [class_row.id], start, end)
        summary = aggregate_averaged_over_range(
            class_entries(s, class_row, dates),
            total_students=len(class_roster(s, class_row.id)),
        )
        summaries.append({
            "classId": class_row.id,
            "className": class_row.name,
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            **summary.to_dict(),
        })
    return {"success": True, "summaries": summaries}


@router.get("/table")
def get_table_report(
    date: date | None = None,
    classId: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = None,
    format: str = "json",
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    day = date or datetime.now().date()
    entries = []
    for class_row in visible_classes(s, principal, classId):
        entries.extend(class_entries(s, class_row, [day]))
    try:
        rows = filter_table_rows(entries, status_filter=status_filter, search=search)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid attendance status")
    if format == "html":
        return HTMLResponse(render_table_html(rows, f"Daftar Absensi {day.isoformat()}"))
    message = None if rows else "Tidak ada data absensi untuk filter yang dipilih."
    return {"success": True, "date": day.isoformat(), "rows": [row.to_dict() for row in rows], "message": message}


@router.get("/export")
def export_csv(
    classId: str | None = None,
    startDate: date | None = None,
    endDate: date | None = None,
    period: str | None = None,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    start, end = _resolve_range(startDate, endDate, period)
    class_rows = visible_classes(s, principal, classId)
    dates = report_dates(s, [row.id for row in class_rows], start, end)
    entries = []
    for class_row in class_rows:
        entries.extend(class_entries(s, class_row, dates))
    content = render_csv(daily_reports(entries))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename(datetime.now().date())}"'},
    )


@router.get("/print", response_class=HTMLResponse)
def print_sheet(
    classId: str | None = None,
    startDate: date | None = None,
    endDate: date | None = None,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    if principal.is_admin and not classId:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="classId is required for admin")
    start, end = _resolve_range(startDate, endDate, None)
    class_row = visible_classes(s, principal, classId)[0]
    students = class_roster(s, class_row.id)
    records = (
        s.query(AttendanceBase)
        .filter(
            and_(
                AttendanceBase.class_id == class_row.id,
                AttendanceBase.date >= start,
                AttendanceBase.date <= end,
            )
        )
        .all()
    )
    sheet = build_print_sheet(class_row.name, class_row.teacher_name, students, records, start, end)
    return HTMLResponse(render_print_html(sheet, datetime.now()))
