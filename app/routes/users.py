from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from db import ClassBase, UserBase, get_session
from models import CreateUserRequest
from utils.passwords import hash_password
from utils.security import Principal, require_admin

router = APIRouter()


def user_to_dict(user: UserBase, class_row: Optional[ClassBase] = None) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "nip": user.nip,
        "username": user.username,
        "role": user.role.value,
        "phone": user.phone,
        "email": user.email,
        "subject": user.subject,
        "position": user.position,
        "classId": class_row.id if class_row else None,
        "className": class_row.name if class_row else None,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }


def class_for_teacher(s: Session, user_id: str) -> Optional[ClassBase]:
    return s.query(ClassBase).filter(ClassBase.teacher_id == user_id).first()


@router.get("/users")
def get_users(_: Principal = Depends(require_admin), s: Session = Depends(get_session)):
    users = s.query(UserBase).order_by(UserBase.name.asc()).all()
    class_map = {row.teacher_id: row for row in s.query(ClassBase).all()}
    return {"success": True, "users": [user_to_dict(user, class_map.get(user.id)) for user in users]}


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: CreateUserRequest,
    _: Principal = Depends(require_admin),
    s: Session = Depends(get_session),
):
    clauses = [UserBase.username == payload.username, UserBase.nip == payload.nip]
    if payload.id:
        clauses.append(UserBase.id == payload.id)
    if s.query(UserBase).filter(or_(*clauses)).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this ID, username, or NIP already exists",
        )
    user = UserBase(
        name=payload.name,
        nip=payload.nip,
        username=payload.username,
        password=hash_password(payload.password),
        role=payload.role,
        phone=payload.phone,
        email=payload.email,
        subject=payload.subject,
        position=payload.position,
    )
    if payload.id:
        user.id = payload.id
    s.add(user)
    s.commit()
    s.refresh(user)
    return {"success": True, "user": user_to_dict(user)}
