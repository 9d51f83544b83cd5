"""
Unit tests for the schedule service.

These tests cover:
- Slot labels, periods and bulk creation
- Booking rules (active appointment, approved submission, slot marking)
- The appointment status workflow
- Evaluation averages and schedule statistics
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from chenaniah.core.phone import InvalidPhoneError
from chenaniah.modules.schedule.models import AppointmentStatus, FinalDecision
from chenaniah.modules.schedule.schemas import (
    AppointmentCreate,
    EvaluationCreate,
    TimeSlotBulkCreate,
    TimeSlotCreate,
)
from chenaniah.modules.schedule.service import (
    ActiveAppointmentExistsError,
    AppointmentNotFoundError,
    ApplicationNotApprovedError,
    InvalidStatusTransitionError,
    SubmissionRequiredError,
    TimeSlotExistsError,
    bulk_create_time_slots,
    compute_criteria_averages,
    create_appointment,
    create_time_slot,
    get_evaluations,
    get_schedule_stats,
    lookup_applicant,
    set_final_decision,
    slot_label,
    slot_period,
    submit_evaluation,
    update_appointment_status,
)

SERVICE = "chenaniah.modules.schedule.service"


def _booking(**overrides) -> AppointmentCreate:
    fields = {
        "applicant_name": "Abebe Kebede",
        "applicant_phone": "0911234567",
        "scheduled_date": "2026-03-10",
        "scheduled_time": "10:00",
    }
    fields.update(overrides)
    return AppointmentCreate(**fields)


class TestSlotLabels:
    @pytest.mark.parametrize(
        ("time", "label"),
        [("09:00", "9:00 AM"), ("12:15", "12:15 PM"), ("14:30", "2:30 PM"), ("00:05", "12:05 AM")],
    )
    def test_label(self, time, label):
        assert slot_label(time) == label

    def test_period(self):
        assert slot_period("09:00") == "morning"
        assert slot_period("13:30") == "morning"
        assert slot_period("14:00") == "afternoon"
        assert slot_period("17:45") == "afternoon"
        assert slot_period("18:00") is None


class TestTimeSlots:
    @pytest.mark.asyncio
    async def test_create_sets_label_and_period(self, mock_db, make_time_slot):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_time_slot = AsyncMock(return_value=None)
            mock_repo.create_time_slot = AsyncMock(return_value=make_time_slot())

            await create_time_slot(
                mock_db, TimeSlotCreate(date="2026-03-10", time="14:30", location="Hall")
            )

        kwargs = mock_repo.create_time_slot.call_args.kwargs
        assert kwargs["label"] == "2:30 PM"
        assert kwargs["period"] == "afternoon"

    @pytest.mark.asyncio
    async def test_create_duplicate(self, mock_db, make_time_slot):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_time_slot = AsyncMock(return_value=make_time_slot())

            with pytest.raises(TimeSlotExistsError) as exc_info:
                await create_time_slot(mock_db, TimeSlotCreate(date="2026-03-10", time="10:00"))

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_bulk_with_interval_skips_existing(self, mock_db, make_time_slot):
        existing = {"09:30"}

        async def get_time_slot(_db, _date, time):
            return make_time_slot(time=time) if time in existing else None

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_time_slot = AsyncMock(side_effect=get_time_slot)
            mock_repo.create_time_slot = AsyncMock(return_value=make_time_slot())

            result = await bulk_create_time_slots(
                mock_db,
                TimeSlotBulkCreate(
                    date="2026-03-10", start_time="09:00", end_time="11:00", location="Hall"
                ),
            )

        assert result.slots_created == 3
        assert result.slots_skipped == 1
        created = [call.kwargs["time"] for call in mock_repo.create_time_slot.call_args_list]
        assert created == ["09:00", "10:00", "10:30"]

    @pytest.mark.asyncio
    async def test_bulk_with_number_of_slots(self, mock_db, make_time_slot):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_time_slot = AsyncMock(return_value=None)
            mock_repo.create_time_slot = AsyncMock(return_value=make_time_slot())

            result = await bulk_create_time_slots(
                mock_db,
                TimeSlotBulkCreate(
                    date="2026-03-10",
                    start_time="14:00",
                    end_time="16:00",
                    location="Hall",
                    number_of_slots=4,
                ),
            )

        assert result.slots_created == 4
        created = [call.kwargs["time"] for call in mock_repo.create_time_slot.call_args_list]
        assert created == ["14:00", "14:30", "15:00", "15:30"]

    def test_bulk_rejects_inverted_range(self):
        with pytest.raises(ValueError):
            TimeSlotBulkCreate(
                date="2026-03-10", start_time="12:00", end_time="09:00", location="Hall"
            )


class TestCreateAppointment:
    @pytest.mark.asyncio
    async def test_success_marks_slot_unavailable(
        self, mock_db, make_submission, make_appointment, make_time_slot
    ):
        slot = make_time_slot()

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(
                f"{SERVICE}.find_latest_by_phone_key",
                AsyncMock(return_value=make_submission(status="Approved")),
            ),
        ):
            mock_repo.list_appointments_by_phone_key = AsyncMock(return_value=[])
            mock_repo.create_appointment = AsyncMock(return_value=make_appointment(id=5))
            mock_repo.get_time_slot = AsyncMock(return_value=slot)
            mock_repo.set_time_slot_availability = AsyncMock(return_value=slot)

            appointment = await create_appointment(mock_db, _booking())

        assert appointment.id == 5
        mock_repo.set_time_slot_availability.assert_called_once_with(mock_db, slot, False)

    @pytest.mark.asyncio
    async def test_active_appointment_blocks_booking(self, mock_db, make_appointment):
        existing = make_appointment(phone="+251911234567", status="scheduled")

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.list_appointments_by_phone_key = AsyncMock(return_value=[existing])
            mock_repo.create_appointment = AsyncMock()

            with pytest.raises(ActiveAppointmentExistsError) as exc_info:
                await create_appointment(mock_db, _booking())

        detail = exc_info.value.to_detail()
        assert detail["existing_appointment"] == {"date": "2026-03-10", "time": "10:00"}
        mock_repo.create_appointment.assert_not_called()

    @pytest.mark.asyncio
    async def test_held_appointments_do_not_block(self, mock_db, make_submission, make_appointment):
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(
                f"{SERVICE}.find_latest_by_phone_key",
                AsyncMock(return_value=make_submission(status="approved")),
            ),
        ):
            mock_repo.list_appointments_by_phone_key = AsyncMock(
                return_value=[make_appointment(status="cancelled")]
            )
            mock_repo.create_appointment = AsyncMock(return_value=make_appointment(id=2))
            mock_repo.get_time_slot = AsyncMock(return_value=None)

            appointment = await create_appointment(mock_db, _booking())

        assert appointment.id == 2

    @pytest.mark.asyncio
    async def test_requires_submission(self, mock_db):
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.find_latest_by_phone_key", AsyncMock(return_value=None)),
        ):
            mock_repo.list_appointments_by_phone_key = AsyncMock(return_value=[])

            with pytest.raises(SubmissionRequiredError):
                await create_appointment(mock_db, _booking())

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "code"),
        [
            ("pending", "APPLICATION_PENDING"),
            ("REJECTED", "APPLICATION_REJECTED"),
            ("on_hold", "APPLICATION_NOT_APPROVED"),
        ],
    )
    async def test_requires_approved_submission(self, mock_db, make_submission, status, code):
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(
                f"{SERVICE}.find_latest_by_phone_key",
                AsyncMock(return_value=make_submission(status=status)),
            ),
        ):
            mock_repo.list_appointments_by_phone_key = AsyncMock(return_value=[])

            with pytest.raises(ApplicationNotApprovedError) as exc_info:
                await create_appointment(mock_db, _booking())

        assert exc_info.value.error_code == code

    @pytest.mark.asyncio
    async def test_short_phone(self, mock_db):
        with pytest.raises(InvalidPhoneError):
            await create_appointment(mock_db, _booking(applicant_phone="12345"))

    def test_blank_email_becomes_none(self):
        assert _booking(applicant_email="").applicant_email is None


class TestLookupApplicant:
    @pytest.mark.asyncio
    async def test_known_applicant(self, mock_db, make_submission):
        with patch(
            f"{SERVICE}.find_latest_by_phone_key", AsyncMock(return_value=make_submission())
        ):
            result = await lookup_applicant(mock_db, "+251 911 234 567")

        assert result.is_applicant is True
        assert result.applicant_name == "Abebe Kebede"

    @pytest.mark.asyncio
    async def test_unknown_applicant(self, mock_db):
        with patch(f"{SERVICE}.find_latest_by_phone_key", AsyncMock(return_value=None)):
            result = await lookup_applicant(mock_db, "0911234567")

        assert result.is_applicant is False


class TestUpdateAppointmentStatus:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("current", "new"),
        [
            ("scheduled", AppointmentStatus.COMPLETED),
            ("scheduled", AppointmentStatus.CANCELLED),
            ("completed", AppointmentStatus.NO_SHOW),
            ("NO_SHOW", AppointmentStatus.COMPLETED),
            ("cancelled", AppointmentStatus.CANCELLED),
        ],
    )
    async def test_allowed(self, mock_db, make_appointment, current, new):
        appointment = make_appointment(status=current)

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=appointment)
            mock_repo.update_status = AsyncMock(return_value=appointment)

            await update_appointment_status(mock_db, 1, new)

        mock_repo.update_status.assert_called_once_with(mock_db, appointment, new)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("current", "new"),
        [
            ("cancelled", AppointmentStatus.SCHEDULED),
            ("completed", AppointmentStatus.SCHEDULED),
            ("no_show", AppointmentStatus.CANCELLED),
        ],
    )
    async def test_rejected(self, mock_db, make_appointment, current, new):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=make_appointment(status=current))
            mock_repo.update_status = AsyncMock()

            with pytest.raises(InvalidStatusTransitionError) as exc_info:
                await update_appointment_status(mock_db, 1, new)

        assert exc_info.value.status_code == 409
        mock_repo.update_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_status_change_keeps_decision(self, mock_db, make_appointment):
        appointment = make_appointment(status="completed", final_decision="accepted")

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=appointment)
            mock_repo.update_status = AsyncMock(return_value=appointment)
            mock_repo.set_final_decision = AsyncMock()

            await update_appointment_status(mock_db, 1, AppointmentStatus.NO_SHOW)

        mock_repo.set_final_decision.assert_not_called()
        assert appointment.final_decision == "accepted"

    @pytest.mark.asyncio
    async def test_missing_appointment(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(AppointmentNotFoundError) as exc_info:
                await update_appointment_status(mock_db, 99, AppointmentStatus.COMPLETED)

        assert exc_info.value.error_code == "APPOINTMENT_NOT_FOUND"


class TestFinalDecision:
    @pytest.mark.asyncio
    async def test_records_decision(self, mock_db, make_appointment):
        appointment = make_appointment(status="completed")

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=appointment)
            mock_repo.set_final_decision = AsyncMock(return_value=appointment)

            await set_final_decision(mock_db, 1, FinalDecision.REJECTED, "admin")

        mock_repo.set_final_decision.assert_called_once_with(mock_db, appointment, "rejected")


class TestEvaluations:
    def test_averages_per_criterion(self, make_evaluation):
        evaluations = [
            make_evaluation("judge1", "Voice", 3),
            make_evaluation("judge2", "Voice", 4),
            make_evaluation("judge3", "Voice", 5),
            make_evaluation("judge1", "Pitch", 2),
        ]

        averages = compute_criteria_averages(evaluations)

        assert averages == {"Voice": 4.0, "Pitch": 2.0}
        assert "Rhythm" not in averages

    def test_no_evaluations(self):
        assert compute_criteria_averages([]) == {}

    @pytest.mark.asyncio
    async def test_get_evaluations(self, mock_db, make_evaluation):
        evaluations = [make_evaluation("judge1", "Voice", 4)]

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.list_evaluations = AsyncMock(return_value=evaluations)

            result, averages = await get_evaluations(mock_db, 1)

        assert result == evaluations
        assert averages == {"Voice": 4.0}

    @pytest.mark.asyncio
    async def test_submit_trims_names(self, mock_db, make_appointment):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=make_appointment())
            mock_repo.upsert_evaluation = AsyncMock()

            await submit_evaluation(
                mock_db,
                1,
                EvaluationCreate(judge_name=" judge1 ", criteria_name="Voice ", rating=5),
            )

        kwargs = mock_repo.upsert_evaluation.call_args.kwargs
        assert kwargs["judge_name"] == "judge1"
        assert kwargs["criteria_name"] == "Voice"
        assert kwargs["comments"] is None

    @pytest.mark.asyncio
    async def test_submit_for_missing_appointment(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)
            mock_repo.upsert_evaluation = AsyncMock()

            with pytest.raises(AppointmentNotFoundError):
                await submit_evaluation(
                    mock_db, 1, EvaluationCreate(judge_name="j", criteria_name="c", rating=1)
                )

        mock_repo.upsert_evaluation.assert_not_called()

    @pytest.mark.parametrize("rating", [-1, 6, "3", 2.5])
    def test_rating_bounds(self, rating):
        with pytest.raises(ValueError):
            EvaluationCreate(judge_name="j", criteria_name="c", rating=rating)


class TestScheduleStats:
    @pytest.mark.asyncio
    async def test_counts_follow_decision_rule(self, mock_db):
        rows = [
            ("scheduled", None),
            ("Completed", None),
            ("completed", "rejected"),
            ("no_show", None),
            ("cancelled", None),
            ("scheduled", "accepted"),
        ]

        with patch(f"{SERVICE}.repository", MagicMock()) as mock_repo:
            mock_repo.list_status_and_decisions = AsyncMock(return_value=rows)

            stats = await get_schedule_stats(mock_db)

        assert stats.total_appointments == 6
        assert stats.scheduled == 2
        assert stats.cancelled == 1
        assert stats.accepted == 2
        assert stats.rejected == 2
