"""
Student Schemas

Registration, login and eligibility payloads. Registration fields arrive as
loose strings and are checked in the service, which reports one specific
message per failed rule.
"""

from pydantic import BaseModel, ConfigDict, Field

from chenaniah.core.phone import PHONE_LOOKUP_MAX_LENGTH
from chenaniah.modules.students.models import Student


class StudentRegisterRequest(BaseModel):
    """Registration form. Field names follow the public client."""

    model_config = ConfigDict(populate_by_name=True)

    full_name_amharic: str | None = Field(None, alias="fullNameAmharic")
    full_name_english: str | None = Field(None, alias="fullNameEnglish")
    gender: str | None = None
    local_church: str | None = Field(None, alias="localChurch")
    address: str | None = None
    phone: str | None = None
    username: str | None = None
    password: str | None = None


class StudentLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=30)
    password: str = Field(..., min_length=1, max_length=128)


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1, max_length=30)
    phone: str = Field(..., min_length=1, max_length=PHONE_LOOKUP_MAX_LENGTH)
    new_password: str = Field(..., alias="newPassword")


class AppointmentInfo(BaseModel):
    scheduled_date: str = Field(serialization_alias="scheduledDate")
    scheduled_time: str = Field(serialization_alias="scheduledTime")


class EligibilityView(BaseModel):
    """Result of a registration eligibility check."""

    success: bool = True
    eligible: bool
    message: str
    can_login: bool | None = Field(None, serialization_alias="canLogin")
    code: str | None = None
    appointment_info: AppointmentInfo | None = Field(None, serialization_alias="appointmentInfo")


class StudentProfile(BaseModel):
    id: int
    username: str
    full_name_amharic: str = Field(serialization_alias="fullNameAmharic")
    full_name_english: str = Field(serialization_alias="fullNameEnglish")
    phone: str
    profile_complete: bool = Field(serialization_alias="profileComplete")

    @classmethod
    def from_student(cls, student: Student) -> "StudentProfile":
        return cls(
            id=student.id,
            username=student.username,
            full_name_amharic=student.full_name_amharic,
            full_name_english=student.full_name_english,
            phone=student.phone,
            profile_complete=student.profile_complete,
        )


class StudentAuthResponse(BaseModel):
    """Token and profile returned after registration or login."""

    success: bool = True
    token: str
    username: str
    role: str = "student"
    user: StudentProfile
