"""
Student Repository

Database operations for student accounts.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.modules.students.models import Student

logger = logging.getLogger(__name__)


class StudentRepository:
    """Repository for student database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        username: str,
        password_hash: str,
        full_name_amharic: str,
        full_name_english: str,
        gender: str,
        local_church: str,
        address: str,
        phone: str,
        appointment_id: int,
    ) -> Student:
        """
        Create a new student record.

        The row is flushed but not committed, so unique constraint violations
        surface here and the caller decides whether to commit.

        Raises:
            IntegrityError: If username, phone or appointment_id is already taken
        """
        student = Student(
            username=username,
            password_hash=password_hash,
            full_name_amharic=full_name_amharic,
            full_name_english=full_name_english,
            gender=gender,
            local_church=local_church,
            address=address,
            phone=phone,
            appointment_id=appointment_id,
            profile_complete=False,
        )

        db.add(student)
        await db.flush()
        await db.refresh(student)

        logger.info(f"Created student: {student.id} - {student.username}")
        return student

    @staticmethod
    async def get_by_username(db: AsyncSession, username: str) -> Student | None:
        """Get a student by exact username."""
        result = await db.execute(select(Student).where(Student.username == username))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_phone(db: AsyncSession, phone: str) -> Student | None:
        """Get a student whose stored phone equals ``phone`` exactly."""
        result = await db.execute(select(Student).where(Student.phone == phone))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_appointment_id(db: AsyncSession, appointment_id: int) -> Student | None:
        """Get the student account created from an appointment, if any."""
        result = await db.execute(select(Student).where(Student.appointment_id == appointment_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_phones(db: AsyncSession) -> list[str]:
        """Every stored student phone, for normalised duplicate checks."""
        result = await db.execute(select(Student.phone))
        return list(result.scalars().all())

    @staticmethod
    async def update_password_hash(db: AsyncSession, student: Student, password_hash: str) -> None:
        student.password_hash = password_hash
        await db.commit()
