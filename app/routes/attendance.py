from datetime import date

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from db import AttendanceBase, get_session
from models import AttendanceRequest, BulkAttendanceRequest
from services.attendance import (
    AttendanceFilter,
    available_dates,
    bulk_upsert_attendance,
    fetch_attendance,
    upsert_attendance,
)
from utils.security import Principal, get_principal

router = APIRouter()


def record_to_dict(row: AttendanceBase) -> dict:
    student = row.student
    class_row = row.class_group
    return {
        "id": row.id,
        "studentId": row.student_id,
        "studentName": row.student_name,
        "classId": row.class_id,
        "className": row.class_name,
        "date": row.date.isoformat(),
        "status": row.status.value,
        "checkInTime": row.check_in_time,
        "notes": row.notes,
        "reason": row.reason,
        "recordedBy": row.recorded_by,
        "createdAt": row.created_at.isoformat() if row.created_at else None,
        "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
        "student": {
            "id": student.id,
            "name": student.name,
            "nisn": student.nisn,
            "gender": student.gender.value,
            "className": student.class_name,
        } if student else None,
        "class": {
            "id": class_row.id,
            "name": class_row.name,
            "grade": class_row.grade,
            "section": class_row.section,
            "teacherName": class_row.teacher_name,
        } if class_row else None,
    }


@router.get("/attendance")
def get_attendance(
    classId: str | None = None,
    date: date | None = None,
    startDate: date | None = None,
    endDate: date | None = None,
    studentId: str | None = None,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    filters = AttendanceFilter(
        class_id=classId,
        date=date,
        start_date=startDate,
        end_date=endDate,
        student_id=studentId,
    )
    records = fetch_attendance(s, principal, filters)
    return {"success": True, "attendanceRecords": [record_to_dict(row) for row in records]}


@router.post("/attendance", status_code=status.HTTP_201_CREATED)
def post_attendance(
    payload: AttendanceRequest,
    response: Response,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    row, created = upsert_attendance(s, principal, payload)
    if not created:
        response.status_code = status.HTTP_200_OK
    return {
        "success": True,
        "attendanceRecord": record_to_dict(row),
        "message": "Attendance record created" if created else "Attendance record updated",
    }


@router.post("/attendance/bulk")
def post_attendance_bulk(
    payload: BulkAttendanceRequest,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    saved, skipped = bulk_upsert_attendance(s, principal, payload.records)
    return {
        "success": True,
        "saved": [record_to_dict(row) for row in saved],
        "skipped": skipped,
        "message": f"{len(saved)} saved, {len(skipped)} skipped",
    }


@router.get("/attendance/dates")
def get_attendance_dates(
    classId: str | None = None,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    dates = available_dates(s, principal, classId)
    return {"success": True, "dates": [day.isoformat() for day in dates]}
