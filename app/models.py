# app/models.py
# Request bodies accepted by the API. JSON keys are camelCase.
import datetime as dt
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from db import AttendanceStatusEnum, EnrollmentStatusEnum, GenderEnum, RoleEnum

RequiredStr = Annotated[str, Field(min_length=1)]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class LoginRequest(ApiModel):
    username: RequiredStr
    password: RequiredStr


class CreateUserRequest(ApiModel):
    id: Optional[str] = None
    name: RequiredStr
    nip: RequiredStr
    username: RequiredStr
    password: RequiredStr
    role: RoleEnum
    phone: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    position: Optional[str] = None


class CreateClassRequest(ApiModel):
    id: RequiredStr
    name: RequiredStr
    grade: int = Field(ge=1, le=12)
    section: RequiredStr
    teacher_id: RequiredStr


class UpdateClassRequest(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1)
    grade: Optional[int] = Field(default=None, ge=1, le=12)
    section: Optional[str] = Field(default=None, min_length=1)
    teacher_id: Optional[str] = Field(default=None, min_length=1)


class CreateStudentRequest(ApiModel):
    name: RequiredStr
    nisn: RequiredStr
    class_id: RequiredStr
    gender: GenderEnum
    birth_date: dt.date
    address: RequiredStr
    parent_name: RequiredStr
    parent_phone: RequiredStr
    enrollment_status: EnrollmentStatusEnum = EnrollmentStatusEnum.ACTIVE


class UpdateStudentRequest(CreateStudentRequest):
    pass


class AttendanceRequest(ApiModel):
    student_id: RequiredStr
    student_name: RequiredStr
    class_id: RequiredStr
    class_name: RequiredStr
    date: dt.date
    status: AttendanceStatusEnum
    check_in_time: Optional[str] = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    notes: Optional[str] = None
    reason: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        if value is None or value == "":
            return value
        return AttendanceStatusEnum.parse(value)

    @field_validator("check_in_time", mode="before")
    @classmethod
    def _blank_time(cls, value):
        return value or None


class BulkAttendanceRequest(ApiModel):
    records: list[AttendanceRequest] = Field(min_length=1)
