import logging
from dataclasses import dataclass
import datetime as dt
from datetime import date
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db import AttendanceBase, ClassBase, StudentBase
from models import AttendanceRequest
from services.reconcile import ReconciledEntry, reconcile
from utils.security import Principal, resolve_class_filter

logger = logging.getLogger(__name__)


@dataclass
class AttendanceFilter:
    class_id: Optional[str] = None
    date: Optional[dt.date] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    student_id: Optional[str] = None


def _same_class(column, class_id: str):
    return func.lower(column) == class_id.lower()


def fetch_attendance(s: Session, principal: Principal, filters: AttendanceFilter) -> list[AttendanceBase]:
    class_id = resolve_class_filter(principal, filters.class_id)
    query = s.query(AttendanceBase)
    if class_id:
        query = query.filter(_same_class(AttendanceBase.class_id, class_id))
    if filters.date:
        query = query.filter(AttendanceBase.date == filters.date)
    else:
        if filters.start_date:
            query = query.filter(AttendanceBase.date >= filters.start_date)
        if filters.end_date:
            query = query.filter(AttendanceBase.date <= filters.end_date)
    if filters.student_id:
        query = query.filter(AttendanceBase.student_id == filters.student_id)
    return query.order_by(
        AttendanceBase.date.desc(),
        AttendanceBase.class_name.asc(),
        AttendanceBase.student_name.asc(),
    ).all()


def upsert_attendance(s: Session, principal: Principal, payload: AttendanceRequest) -> tuple[AttendanceBase, bool]:
    """Create or overwrite the record for (studentId, date). Returns the row and whether it was created."""
    if principal.is_teacher and not principal.owns_class(payload.class_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied - can only create attendance for your own class",
        )
    student = s.get(StudentBase, payload.student_id)
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    if principal.is_teacher and not principal.owns_class(student.class_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied - can only create attendance for your own class",
        )
    if payload.class_id.lower() != student.class_id.lower():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Student does not belong to this class")

    row = (
        s.query(AttendanceBase)
        .filter(and_(AttendanceBase.student_id == payload.student_id, AttendanceBase.date == payload.date))
        .first()
    )
    created = row is None
    if created:
        row = AttendanceBase(student_id=student.id, date=payload.date)
        s.add(row)
    # stored names and class always follow the student row
    row.student_name = student.name
    row.class_id = student.class_id
    row.class_name = student.class_name
    row.status = payload.status
    row.check_in_time = payload.check_in_time
    row.notes = payload.notes
    row.reason = payload.reason
    row.recorded_by = principal.user_id
    s.commit()
    s.refresh(row)
    logger.info(
        "%s attendance %s for student %s on %s by %s",
        "Created" if created else "Updated",
        row.status.value,
        row.student_id,
        row.date.isoformat(),
        principal.user_id,
    )
    return row, created


def bulk_upsert_attendance(s: Session, principal: Principal, payloads: list[AttendanceRequest]):
    """Best effort: each record is saved on its own; failures are skipped and logged."""
    saved, skipped = [], []
    for payload in payloads:
        try:
            row, _ = upsert_attendance(s, principal, payload)
        except HTTPException as exc:
            logger.warning("Skipping attendance for student %s: %s", payload.student_id, exc.detail)
            skipped.append({"studentId": payload.student_id, "error": exc.detail})
            continue
        except SQLAlchemyError as exc:
            s.rollback()
            logger.warning("Skipping attendance for student %s: %s", payload.student_id, exc)
            skipped.append({"studentId": payload.student_id, "error": "Failed to save attendance record"})
            continue
        saved.append(row)
    return saved, skipped


def available_dates(s: Session, principal: Principal, class_id: Optional[str]) -> list[date]:
    resolved = resolve_class_filter(principal, class_id)
    query = s.query(AttendanceBase.date).distinct()
    if resolved:
        query = query.filter(_same_class(AttendanceBase.class_id, resolved))
    return [row_date for (row_date,) in query.order_by(AttendanceBase.date.desc()).all()]


def visible_classes(s: Session, principal: Principal, class_id: Optional[str]) -> list[ClassBase]:
    resolved = resolve_class_filter(principal, class_id)
    query = s.query(ClassBase)
    if resolved:
        query = query.filter(_same_class(ClassBase.id, resolved))
    class_rows = query.order_by(ClassBase.grade.asc(), ClassBase.section.asc()).all()
    if resolved and not class_rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return class_rows


def class_roster(s: Session, class_id: str) -> list[StudentBase]:
    return s.query(StudentBase).filter(StudentBase.class_id == class_id).order_by(StudentBase.name.asc()).all()


def report_dates(s: Session, class_ids: list[str], start_date: date, end_date: date) -> list[date]:
    """A single day is always reported; a longer range reports only the dates that have records."""
    if start_date == end_date:
        return [start_date]
    if not class_ids or start_date > end_date:
        return []
    rows = (
        s.query(AttendanceBase.date)
        .filter(
            and_(
                AttendanceBase.class_id.in_(class_ids),
                AttendanceBase.date >= start_date,
                AttendanceBase.date <= end_date,
            )
        )
        .distinct()
        .order_by(AttendanceBase.date.asc())
        .all()
    )
    return [row_date for (row_date,) in rows]


def class_entries(s: Session, class_row: ClassBase, dates: list[date]) -> list[ReconciledEntry]:
    if not dates:
        return []
    students = class_roster(s, class_row.id)
    records = (
        s.query(AttendanceBase)
        .filter(and_(AttendanceBase.class_id == class_row.id, AttendanceBase.date.in_(dates)))
        .all()
    )
    return reconcile(students, records, dates)
