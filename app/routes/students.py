import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from db import AttendanceBase, ClassBase, StudentBase, get_session
from models import CreateStudentRequest, UpdateStudentRequest
from utils.security import Principal, get_principal, require_admin, resolve_class_filter

router = APIRouter()
logger = logging.getLogger(__name__)


def student_to_dict(student: StudentBase) -> dict:
    return {
        "id": student.id,
        "name": student.name,
        "nisn": student.nisn,
        "classId": student.class_id,
        "className": student.class_name,
        "gender": student.gender.value,
        "birthDate": student.birth_date.isoformat(),
        "address": student.address,
        "parentName": student.parent_name,
        "parentPhone": student.parent_phone,
        "enrollmentStatus": student.enrollment_status.value,
        "createdAt": student.created_at.isoformat() if student.created_at else None,
        "updatedAt": student.updated_at.isoformat() if student.updated_at else None,
    }


def _get_student(s: Session, student_id: str) -> StudentBase:
    student = s.get(StudentBase, student_id)
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return student


def _check_class(s: Session, class_id: str) -> ClassBase:
    class_row = s.get(ClassBase, class_id)
    if not class_row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Kelas tidak ditemukan")
    return class_row


def _check_nisn(s: Session, nisn: str, student_id: Optional[str] = None) -> None:
    query = s.query(StudentBase).filter(StudentBase.nisn == nisn)
    if student_id:
        query = query.filter(StudentBase.id != student_id)
    if query.first():
        detail = "NISN sudah terdaftar untuk siswa lain" if student_id else "NISN sudah terdaftar"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get("/students")
def get_students(
    classId: str | None = None,
    principal: Principal = Depends(get_principal),
    s: Session = Depends(get_session),
):
    resolved_class_id = resolve_class_filter(principal, classId)
    query = s.query(StudentBase).join(ClassBase, StudentBase.class_id == ClassBase.id)
    if resolved_class_id:
        query = query.filter(func.lower(StudentBase.class_id) == resolved_class_id.lower())
    students = query.order_by(ClassBase.name.asc(), StudentBase.name.asc()).all()
    return {"success": True, "data": [student_to_dict(student) for student in students]}


@router.get("/students/{student_id}")
def get_student(student_id: str, principal: Principal = Depends(get_principal), s: Session = Depends(get_session)):
    student = _get_student(s, student_id)
    if principal.is_teacher and not principal.owns_class(student.class_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied - can only view your own class")
    return {"success": True, "data": student_to_dict(student)}


@router.post("/students", status_code=status.HTTP_201_CREATED)
def create_student(
    payload: CreateStudentRequest,
    _: Principal = Depends(require_admin),
    s: Session = Depends(get_session),
):
    _check_nisn(s, payload.nisn)
    _check_class(s, payload.class_id)
    student = StudentBase(**payload.model_dump())
    s.add(student)
    s.commit()
    s.refresh(student)
    return {"success": True, "data": student_to_dict(student)}


@router.put("/students/{student_id}")
def update_student(
    student_id: str,
    payload: UpdateStudentRequest,
    _: Principal = Depends(require_admin),
    s: Session = Depends(get_session),
):
    student = _get_student(s, student_id)
    _check_nisn(s, payload.nisn, student_id)
    class_row = _check_class(s, payload.class_id)
    if student.class_id != payload.class_id:
        logger.info("Moving student %s from class %s to %s", student.id, student.class_id, payload.class_id)
    for key, value in payload.model_dump().items():
        setattr(student, key, value)
    student.class_group = class_row
    s.commit()
    s.refresh(student)
    return {"success": True, "data": student_to_dict(student)}


@router.delete("/students/{student_id}")
def delete_student(
    student_id: str,
    _: Principal = Depends(require_admin),
    s: Session = Depends(get_session),
):
    student = _get_student(s, student_id)
    removed = s.query(AttendanceBase).filter(AttendanceBase.student_id == student_id).delete(synchronize_session=False)
    s.delete(student)
    s.commit()
    logger.info("Deleted student %s with %d attendance records", student_id, removed)
    return {"success": True, "message": "Student deleted successfully"}
