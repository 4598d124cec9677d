import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin123"

import pytest
from fastapi.testclient import TestClient

import db
from main import app

DAY = "2025-07-21"


@pytest.fixture()
def client():
    db.Base.metadata.drop_all(db.engine)
    db.Base.metadata.create_all(db.engine)
    db.seed_default_admin()
    yield TestClient(app)
    db.Base.metadata.drop_all(db.engine)


def request(client, method: str, path: str, expected_status: int, token: str | None = None, **kwargs):
    headers = kwargs.pop("headers", {})
    if token:
        headers["Authorization"] = f"Bearer {token}"
    response = client.request(method, f"/api/v1{path}", headers=headers, **kwargs)
    assert (
        response.status_code == expected_status
    ), f"{method} {path} returned {response.status_code}, expected {expected_status}. Body: {response.text}"
    return response


def login(client, username: str, password: str) -> str:
    response = request(client, "POST", "/auth/login", 200, json={"username": username, "password": password})
    return response.json()["token"]


def student_payload(name: str, nisn: str, class_id: str) -> dict:
    return {
        "name": name,
        "nisn": nisn,
        "classId": class_id,
        "gender": "L",
        "birthDate": "2015-03-01",
        "address": "Jl. Merdeka 1",
        "parentName": f"Orang tua {name}",
        "parentPhone": "081234567890",
    }


@pytest.fixture()
def school(client):
    """Two classes with their teachers: 1A holds three students, 1B holds one."""
    admin = login(client, "admin", "admin123")
    teachers = {}
    for username, nip in (("guru1a", "1001"), ("guru1b", "1002")):
        created = request(
            client,
            "POST",
            "/users",
            201,
            token=admin,
            json={"name": f"Guru {username}", "nip": nip, "username": username, "password": "rahasia", "role": "TEACHER"},
        )
        teachers[username] = created.json()["user"]["id"]

    for class_id, section, username in (("1A", "A", "guru1a"), ("1B", "B", "guru1b")):
        request(
            client,
            "POST",
            "/classes",
            201,
            token=admin,
            json={"id": class_id, "name": class_id, "grade": 1, "section": section, "teacherId": teachers[username]},
        )

    students = {}
    for name, nisn, class_id in (
        ("Andi", "0001", "1A"),
        ("Budi", "0002", "1A"),
        ("Citra", "0003", "1A"),
        ("Dewi", "0004", "1B"),
    ):
        created = request(client, "POST", "/students", 201, token=admin, json=student_payload(name, nisn, class_id))
        students[name] = created.json()["data"]["id"]

    return {
        "admin": admin,
        "teacher_1a": login(client, "guru1a", "rahasia"),
        "teacher_1b": login(client, "guru1b", "rahasia"),
        "students": students,
    }


def attendance_payload(student_id: str, student_name: str, class_id: str, status: str, day: str = DAY) -> dict:
    return {
        "studentId": student_id,
        "studentName": student_name,
        "classId": class_id,
        "className": class_id,
        "date": day,
        "status": status,
    }
