from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from db import AttendanceBase, ClassBase, RoleEnum, StudentBase, UserBase, get_session
from models import CreateClassRequest, UpdateClassRequest
from utils.security import Principal, get_principal, require_admin

router = APIRouter()


def _student_counts(s: Session) -> dict[str, int]:
    rows = s.query(StudentBase.class_id, func.count(StudentBase.id)).group_by(StudentBase.class_id).all()
    return {class_id: count for class_id, count in rows}


def class_to_dict(class_row: ClassBase, student_count: int) -> dict:
    teacher = class_row.teacher
    return {
        "id": class_row.id,
        "name": class_row.name,
        "grade": class_row.grade,
        "section": class_row.section,
        "teacherId": class_row.teacher_id,
        "teacherName": class_row.teacher_name,
        "studentCount": student_count,
        "teacher": {
            "id": teacher.id,
            "name": teacher.name,
            "nip": teacher.nip,
            "username": teacher.username,
            "phone": teacher.phone,
            "email": teacher.email,
        } if teacher else None,
        "createdAt": class_row.created_at.isoformat() if class_row.created_at else None,
        "updatedAt": class_row.updated_at.isoformat() if class_row.updated_at else None,
    }


def _get_teacher(s: Session, teacher_id: str) -> UserBase:
    teacher = s.get(UserBase, teacher_id)
    if not teacher or teacher.role != RoleEnum.TEACHER:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return teacher


@router.get("/classes")
def get_classes(principal: Principal = Depends(get_principal), s: Session = Depends(get_session)):
    query = s.query(ClassBase)
    if principal.is_teacher:
        if not principal.class_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        query = query.filter(func.lower(ClassBase.id) == principal.class_id.lower())
    class_rows = query.order_by(ClassBase.grade.asc(), ClassBase.section.asc()).all()
    counts = _student_counts(s)
    return {"success": True, "classes": [class_to_dict(row, counts.get(row.id, 0)) for row in class_rows]}


@router.post("/classes", status_code=status.HTTP_201_CREATED)
def create_class(
    payload: CreateClassRequest,
    _: Principal = Depends(require_admin),
    s: Session = Depends(get_session),
):
    _get_teacher(s, payload.teacher_id)
    existing = (
        s.query(ClassBase)
        .filter(or_(ClassBase.id == payload.id, ClassBase.name == payload.name, ClassBase.teacher_id == payload.teacher_id))
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Class with this ID, name, or teacher already exists",
        )
    class_row = ClassBase(
        id=payload.id,
        name=payload.name,
        grade=payload.grade,
        section=payload.section,
        teacher_id=payload.teacher_id,
    )
    s.add(class_row)
    s.commit()
    s.refresh(class_row)
    return {"success": True, "class": class_to_dict(class_row, 0)}


@router.put("/classes/{class_id}")
def update_class(
    class_id: str,
    payload: UpdateClassRequest,
    _: Principal = Depends(require_admin),
    s: Session = Depends(get_session),
):
    class_row = s.get(ClassBase, class_id)
    if not class_row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    if payload.teacher_id is not None and payload.teacher_id != class_row.teacher_id:
        _get_teacher(s, payload.teacher_id)
        if s.query(ClassBase).filter(ClassBase.teacher_id == payload.teacher_id).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher already has a class")
        class_row.teacher_id = payload.teacher_id
    if payload.name is not None and payload.name != class_row.name:
        if s.query(ClassBase).filter(ClassBase.name == payload.name).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Class name already exists")
        class_row.name = payload.name
    if payload.grade is not None:
        class_row.grade = payload.grade
    if payload.section is not None:
        class_row.section = payload.section
    s.commit()
    s.refresh(class_row)
    return {"success": True, "class": class_to_dict(class_row, _student_counts(s).get(class_row.id, 0))}


@router.delete("/classes/{class_id}")
def delete_class(
    class_id: str,
    _: Principal = Depends(require_admin),
    s: Session = Depends(get_session),
):
    class_row = s.get(ClassBase, class_id)
    if not class_row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    students_count = s.query(StudentBase).filter(StudentBase.class_id == class_id).count()
    attendance_count = s.query(AttendanceBase).filter(AttendanceBase.class_id == class_id).count()
    if students_count or attendance_count:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "Cannot delete class with existing students or attendance records",
                "details": {"studentsCount": students_count, "attendanceRecordsCount": attendance_count},
            },
        )
    s.delete(class_row)
    s.commit()
    return {"success": True, "message": "Class deleted successfully"}
