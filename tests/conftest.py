"""
Shared fixtures: a mocked session and factories for real (unsaved) model
instances, so computed properties behave as they do in production.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from chenaniah.core.rate_limit import reset_memory_store
from chenaniah.modules.schedule.models import Appointment, InterviewEvaluation, TimeSlot
from chenaniah.modules.students.models import Student
from chenaniah.modules.submissions.models import Submission

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture(autouse=True)
def clear_rate_limits():
    """Rate limit windows must not leak between tests."""
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
def make_submission():
    def factory(
        id: int = 1,
        name: str = "Abebe Kebede",
        phone: str = "0911234567",
        status: str = "pending",
        reviewer_comments: str | None = None,
    ) -> Submission:
        return Submission(
            id=id,
            user_id=1000 + id,
            name=name,
            phone=phone,
            church="Mekane Yesus",
            address="Addis Ababa, Bole",
            telegram_username="abebe_k",
            status=status,
            reviewer_comments=reviewer_comments,
            submitted_at=NOW,
            updated_at=NOW,
        )

    return factory


@pytest.fixture
def make_appointment():
    def factory(
        id: int = 1,
        phone: str = "0911234567",
        status: str = "scheduled",
        final_decision: str | None = None,
        scheduled_date: str = "2026-03-10",
        scheduled_time: str = "10:00",
        applicant_name: str = "Abebe Kebede",
        decision_made_at: datetime | None = None,
    ) -> Appointment:
        return Appointment(
            id=id,
            applicant_name=applicant_name,
            applicant_email=None,
            applicant_phone=phone,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            status=status,
            notes=None,
            selected_song=None,
            additional_song=None,
            additional_song_singer=None,
            coordinator_verified=False,
            coordinator_verified_at=None,
            coordinator_approved=False,
            coordinator_approved_at=None,
            final_decision=final_decision,
            decision_made_at=decision_made_at,
            created_at=NOW,
            updated_at=NOW,
        )

    return factory


@pytest.fixture
def make_evaluation():
    def factory(
        judge_name: str,
        criteria_name: str,
        rating: int,
        appointment_id: int = 1,
        id: int = 1,
    ) -> InterviewEvaluation:
        return InterviewEvaluation(
            id=id,
            appointment_id=appointment_id,
            judge_name=judge_name,
            criteria_name=criteria_name,
            rating=rating,
            comments=None,
            created_at=NOW,
            updated_at=NOW,
        )

    return factory


@pytest.fixture
def make_time_slot():
    def factory(id: int = 1, date: str = "2026-03-10", time: str = "10:00") -> TimeSlot:
        return TimeSlot(
            id=id,
            date=date,
            time=time,
            label="10:00 AM",
            period="morning",
            location="Main Hall",
            available=True,
            created_at=NOW,
        )

    return factory


@pytest.fixture
def make_student():
    def factory(
        id: int = 1,
        username: str = "abebe_k",
        phone: str = "0911234567",
        appointment_id: int | None = 1,
        password_hash: str = "hashed",
    ) -> Student:
        return Student(
            id=id,
            username=username,
            password_hash=password_hash,
            full_name_amharic="አበበ ከበደ",
            full_name_english="Abebe Kebede",
            gender="male",
            local_church="Mekane Yesus",
            address="Addis Ababa, Bole",
            phone=phone,
            profile_complete=False,
            appointment_id=appointment_id,
            created_at=NOW,
            updated_at=NOW,
        )

    return factory
