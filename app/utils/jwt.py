import jwt
import os
from datetime import timedelta, datetime, timezone

JWT_SECRET = os.getenv("JWT_SECRET", "secret")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_IN = timedelta(days=int(os.getenv("JWT_EXPIRES_DAYS", "7")))


def create_jwt(data: dict, expire: timedelta = JWT_EXPIRES_IN) -> str:
    payload = dict(data)
    payload["exp"] = datetime.now(timezone.utc) + expire
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
