import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from db import RoleEnum, UserBase, get_session
from models import LoginRequest
from routes.users import class_for_teacher, user_to_dict
from utils.jwt import create_jwt
from utils.passwords import check_password
from utils.security import Principal, get_principal

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/auth/login")
def login(credentials: LoginRequest, s: Session = Depends(get_session)):
    user = s.query(UserBase).filter(UserBase.username == credentials.username).first()
    if not user or not check_password(credentials.password, user.password):
        logger.warning("Failed login for username %s", credentials.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    class_row = class_for_teacher(s, user.id) if user.role == RoleEnum.TEACHER else None
    claims = {"sub": user.id, "username": user.username, "role": user.role.value}
    if class_row:
        claims["classId"] = class_row.id
    token = create_jwt(claims)
    logger.info("User %s logged in as %s", user.username, user.role.value)
    return {"success": True, "user": user_to_dict(user, class_row), "token": token}


@router.post("/auth/logout")
def logout():
    # Tokens are stateless; the client discards its copy.
    return {"success": True, "message": "Logged out successfully"}


@router.get("/auth/me")
def me(principal: Principal = Depends(get_principal), s: Session = Depends(get_session)):
    user = s.get(UserBase, principal.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return {"success": True, "user": user_to_dict(user, class_for_teacher(s, user.id))}
