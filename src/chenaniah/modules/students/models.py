"""
Student Models

A student account is provisioned once per accepted interview appointment.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from chenaniah.core.database import Base

# Constraint names are matched when translating integrity errors
STUDENT_USERNAME_CONSTRAINT = "uq_students_username"
STUDENT_PHONE_CONSTRAINT = "uq_students_phone"
STUDENT_APPOINTMENT_CONSTRAINT = "uq_students_appointment_id"


class Student(Base):
    """
    Registered student.

    ``appointment_id`` is unique: an accepted appointment can back at most
    one account. ``phone`` keeps the format the student registered with.
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Credentials
    username: Mapped[str] = mapped_column(String(30), nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    # Profile
    full_name_amharic: Mapped[str] = mapped_column(String(100), nullable=False)
    full_name_english: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    local_church: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    profile_complete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Interview that qualified this student
    appointment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("appointments.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("username", name=STUDENT_USERNAME_CONSTRAINT),
        UniqueConstraint("phone", name=STUDENT_PHONE_CONSTRAINT),
        UniqueConstraint("appointment_id", name=STUDENT_APPOINTMENT_CONSTRAINT),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, username={self.username})>"
