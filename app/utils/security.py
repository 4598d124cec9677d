from dataclasses import dataclass
from typing import Annotated, Optional

import jwt
from fastapi import Depends, Header, HTTPException, status

from db import RoleEnum
from utils.jwt import decode_jwt

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, decoded once from the bearer token."""

    user_id: str
    role: RoleEnum
    class_id: Optional[str] = None
    username: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleEnum.TEACHER

    def owns_class(self, class_id: Optional[str]) -> bool:
        if not self.class_id or not class_id:
            return False
        return self.class_id.lower() == class_id.lower()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_principal(authorization: AuthHeader = None) -> Principal:
    if not authorization:
        raise _unauthorized("Authentication required")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _unauthorized("Authentication required")
    try:
        payload = decode_jwt(parts[1])
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    if not payload.get("sub"):
        raise _unauthorized("Invalid or expired token")
    try:
        role = RoleEnum(payload.get("role"))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return Principal(
        user_id=str(payload["sub"]),
        role=role,
        class_id=payload.get("classId"),
        username=payload.get("username", ""),
    )


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return principal


def resolve_class_filter(principal: Principal, requested_class_id: Optional[str]) -> Optional[str]:
    """Effective class filter for a read: teachers are pinned to their own class."""
    if principal.is_teacher:
        if not principal.class_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Teacher class not assigned")
        if requested_class_id and not principal.owns_class(requested_class_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied - can only view your own class",
            )
        return principal.class_id
    return requested_class_id or None
