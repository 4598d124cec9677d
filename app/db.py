from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker
from sqlalchemy import String, Integer, Date, DateTime, Text, create_engine, ForeignKey, Enum, UniqueConstraint, Index
from sqlalchemy.pool import StaticPool
import enum
import os
import logging
import uuid
import datetime as dt
from datetime import date, datetime
from typing import Optional
from dotenv import load_dotenv
from sqlalchemy.exc import OperationalError, ProgrammingError

from utils.passwords import hash_password

load_dotenv('app/.env')
logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class RoleEnum(str, enum.Enum):
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class GenderEnum(str, enum.Enum):
    L = "L"
    P = "P"


class EnrollmentStatusEnum(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class AttendanceStatusEnum(str, enum.Enum):
    HADIR = "HADIR"
    TERLAMBAT = "TERLAMBAT"
    TIDAK_HADIR = "TIDAK_HADIR"
    IZIN = "IZIN"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def code(self) -> str:
        return STATUS_CODES[self]

    @classmethod
    def parse(cls, value) -> "AttendanceStatusEnum":
        """Accepts the stored value ("TIDAK_HADIR") or the display label ("Tidak Hadir")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for status in cls:
            if text.upper() == status.value or text.lower() == status.label.lower():
                return status
        raise ValueError(f"Invalid attendance status: {value}")


STATUS_LABELS = {
    AttendanceStatusEnum.HADIR: "Hadir",
    AttendanceStatusEnum.TERLAMBAT: "Terlambat",
    AttendanceStatusEnum.TIDAK_HADIR: "Tidak Hadir",
    AttendanceStatusEnum.IZIN: "Izin",
}

# Single-letter codes used on the printed sheet.
STATUS_CODES = {
    AttendanceStatusEnum.HADIR: "H",
    AttendanceStatusEnum.TERLAMBAT: "T",
    AttendanceStatusEnum.TIDAK_HADIR: "A",
    AttendanceStatusEnum.IZIN: "I",
}


def _new_id() -> str:
    return uuid.uuid4().hex


class UserBase(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    nip: Mapped[Optional[str]] = mapped_column(String(32), unique=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[RoleEnum] = mapped_column(Enum(RoleEnum), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    subject: Mapped[Optional[str]] = mapped_column(String(120))
    position: Mapped[Optional[str]] = mapped_column(String(120))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)


class ClassBase(Base):
    __tablename__ = "classes"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    grade: Mapped[int] = mapped_column(Integer, nullable=False)
    section: Mapped[str] = mapped_column(String(8), nullable=False)
    # one class per teacher
    teacher_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    teacher: Mapped[UserBase] = relationship()

    @property
    def teacher_name(self) -> str:
        return self.teacher.name if self.teacher else ""


class StudentBase(Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    nisn: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    class_id: Mapped[str] = mapped_column(String(32), ForeignKey("classes.id"), nullable=False, index=True)
    gender: Mapped[GenderEnum] = mapped_column(Enum(GenderEnum), nullable=False)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    parent_name: Mapped[str] = mapped_column(String(120), nullable=False)
    parent_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    enrollment_status: Mapped[EnrollmentStatusEnum] = mapped_column(
        Enum(EnrollmentStatusEnum), nullable=False, default=EnrollmentStatusEnum.ACTIVE
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    class_group: Mapped[ClassBase] = relationship()

    @property
    def class_name(self) -> str:
        return self.class_group.name if self.class_group else "Tidak ada kelas"


class AttendanceBase(Base):
    __tablename__ = "attendance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(String(64), ForeignKey("students.id"), nullable=False)
    student_name: Mapped[str] = mapped_column(String(120), nullable=False)
    class_id: Mapped[str] = mapped_column(String(32), ForeignKey("classes.id"), nullable=False)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[AttendanceStatusEnum] = mapped_column(Enum(AttendanceStatusEnum), nullable=False)
    check_in_time: Mapped[Optional[str]] = mapped_column(String(5))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    recorded_by: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    student: Mapped[StudentBase] = relationship()
    class_group: Mapped[ClassBase] = relationship()

    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
        Index("ix_attendance_class_id_date", "class_id", "date"),
    )


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    username = os.getenv("DB_USER", "absensi")
    password = os.getenv("DB_PASSWORD", "password")
    database = os.getenv("DB_NAME", "absensi")
    sslmode = os.getenv("DB_SSLMODE", "prefer")
    return f"postgresql://{username}:{password}@{host}:{port}/{database}?sslmode={sslmode}"


def _create_engine(url: str):
    echo = os.getenv("DB_ECHO", "false").lower() == "true"
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # in-memory database lives on a single connection
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo, pool_pre_ping=True)


DB_URL = _database_url()
engine = _create_engine(DB_URL)
SessionLocal = sessionmaker(engine, expire_on_commit=False)


def get_session():
    with SessionLocal() as s:
        yield s


def create_db_and_tables() -> None:
    Base.metadata.create_all(engine)


def seed_default_admin() -> None:
    admin_username = os.getenv("ADMIN_USERNAME", "admin")
    admin_password = os.getenv("ADMIN_PASSWORD", "admin123")
    try:
        with SessionLocal() as s:
            existing = s.query(UserBase).filter(UserBase.username == admin_username).first()
            if existing:
                return
            user = UserBase(
                name="Administrator",
                username=admin_username,
                password=hash_password(admin_password),
                role=RoleEnum.ADMIN,
                position="Administrator",
            )
            s.add(user)
            s.commit()
            logger.info("Seeded default admin %s", admin_username)
    except (OperationalError, ProgrammingError):
        # Tables may not exist yet before Alembic migration.
        logger.warning("Skipping admin seed: database schema is not ready")
