"""
Seed Sample Applicants

Creates sample submissions so the review dashboard and the applicant status
flow can be tried locally. Submissions whose phone already exists are skipped.

Usage:
    pip install -e .
    python scripts/seed_applicants.py
"""

import asyncio
from datetime import UTC, datetime

from chenaniah.core.database import async_session_maker, engine
from chenaniah.core.phone import phone_key
from chenaniah.modules.submissions import repository as submission_repository
from chenaniah.modules.submissions.models import Submission, SubmissionStatus

SAMPLE_APPLICANTS = [
    {
        "user_id": 1001,
        "name": "Alemayehu Bekele",
        "address": "Addis Ababa, Bole Sub-city, Woreda 3",
        "phone": "+251911234567",
        "church": "Ethiopian Evangelical Church Mekane Yesus",
        "telegram_username": "alemu_bekele",
        "audio_file_path": "audio_files/2024/11/24/alemayehu_sample.mp3",
        "audio_file_size": 2048576,
        "audio_duration": 120.5,
        "status": SubmissionStatus.PENDING,
    },
    {
        "user_id": 1002,
        "name": "Meron Tadesse",
        "address": "Addis Ababa, Kirkos Sub-city, Woreda 5",
        "phone": "+251922345678",
        "church": "St. Mary Ethiopian Orthodox Church",
        "telegram_username": "meron_t",
        "audio_file_path": "audio_files/2024/11/24/meron_sample.mp3",
        "audio_file_size": 1856432,
        "audio_duration": 98.3,
        "status": SubmissionStatus.APPROVED,
        "reviewer_comments": "Excellent vocal range and clear pronunciation",
    },
    {
        "user_id": 1003,
        "name": "Yonas Getachew",
        "address": "Addis Ababa, Nifas Silk Lafto Sub-city, Woreda 8",
        "phone": "0933456789",
        "church": "Full Gospel Believers Church",
        "telegram_username": "yonas_g",
        "audio_file_path": "audio_files/2024/11/24/yonas_sample.mp3",
        "audio_file_size": 2156789,
        "audio_duration": 135.2,
        "status": SubmissionStatus.APPROVED,
        "reviewer_comments": "Strong worship leader potential",
    },
    {
        "user_id": 1004,
        "name": "Sara Alemayehu",
        "address": "Addis Ababa, Arada Sub-city, Woreda 2",
        "phone": "+251 94 456 7890",
        "church": "Addis Ababa Full Gospel Church",
        "telegram_username": "sara_alem",
        "audio_file_path": "audio_files/2024/11/24/sara_sample.mp3",
        "audio_file_size": 1923456,
        "audio_duration": 110.7,
        "status": SubmissionStatus.REJECTED,
        "reviewer_comments": "Please apply again next intake",
    },
]


async def seed_applicants() -> None:
    """Insert the sample submissions that are not present yet."""

    async with async_session_maker() as db:
        created = 0
        for sample in SAMPLE_APPLICANTS:
            key = phone_key(sample["phone"])
            if await submission_repository.list_by_phone_key(db, key):
                print(f"Skipping {sample['name']}: phone ...{key[-4:]} already exists")
                continue

            status: SubmissionStatus = sample["status"]
            reviewed = status != SubmissionStatus.PENDING

            db.add(
                Submission(
                    user_id=sample["user_id"],
                    name=sample["name"],
                    phone=sample["phone"],
                    church=sample["church"],
                    address=sample["address"],
                    telegram_username=sample["telegram_username"],
                    audio_file_path=sample["audio_file_path"],
                    audio_file_size=sample["audio_file_size"],
                    audio_duration=sample["audio_duration"],
                    status=status.value,
                    reviewer_comments=sample.get("reviewer_comments"),
                    reviewed_by="admin" if reviewed else None,
                    reviewed_at=datetime.now(UTC) if reviewed else None,
                )
            )
            created += 1
            print(f"Added {sample['name']} ({status.value})")

        await db.commit()
        print(f"Seeded {created} applicant(s)")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_applicants())
