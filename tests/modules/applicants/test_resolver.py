"""
Unit tests for the applicant lifecycle resolver.

These tests cover:
- Per-appointment decision derivation
- Newest-first scanning and the first decisive appointment
- Overall status precedence
- The fixed-shape status view built by the named constructors
"""

from datetime import UTC, datetime

from chenaniah.modules.applicants.resolver import (
    AppointmentResolution,
    OverallStatus,
    derive_decision,
    derive_overall_status,
    resolve_appointments,
    status_message,
)
from chenaniah.modules.applicants.schemas import StatusView
from chenaniah.modules.schedule.models import FinalDecision


class TestDeriveDecision:
    """Tests for the outcome of a single appointment."""

    def test_completed_infers_accepted(self, make_appointment):
        assert derive_decision(make_appointment(status="completed")) == FinalDecision.ACCEPTED

    def test_no_show_infers_rejected(self, make_appointment):
        assert derive_decision(make_appointment(status="no_show")) == FinalDecision.REJECTED

    def test_scheduled_and_cancelled_are_undecided(self, make_appointment):
        assert derive_decision(make_appointment(status="scheduled")) is None
        assert derive_decision(make_appointment(status="cancelled")) is None

    def test_explicit_decision_overrides_status(self, make_appointment):
        appointment = make_appointment(status="completed", final_decision="rejected")
        assert derive_decision(appointment) == FinalDecision.REJECTED

        appointment = make_appointment(status="no_show", final_decision="accepted")
        assert derive_decision(appointment) == FinalDecision.ACCEPTED

    def test_mixed_case_values(self, make_appointment):
        assert derive_decision(make_appointment(status="COMPLETED")) == FinalDecision.ACCEPTED
        appointment = make_appointment(status="scheduled", final_decision="Rejected")
        assert derive_decision(appointment) == FinalDecision.REJECTED

    def test_unknown_explicit_value_falls_back_to_status(self, make_appointment):
        appointment = make_appointment(status="completed", final_decision="maybe")
        assert derive_decision(appointment) == FinalDecision.ACCEPTED


class TestResolveAppointments:
    """Tests for scanning an applicant's appointments newest first."""

    def test_no_appointments(self):
        resolution = resolve_appointments([])
        assert resolution == AppointmentResolution()
        assert resolution.current_status is None

    def test_first_decisive_appointment_wins(self, make_appointment):
        decided_at = datetime(2026, 3, 5, tzinfo=UTC)
        newest = make_appointment(id=3, status="cancelled", scheduled_date="2026-03-20")
        decisive = make_appointment(
            id=2,
            status="completed",
            final_decision="accepted",
            scheduled_date="2026-03-10",
            decision_made_at=decided_at,
        )
        older = make_appointment(id=1, status="no_show", scheduled_date="2026-03-01")

        resolution = resolve_appointments([newest, decisive, older])

        assert resolution.final_decision == FinalDecision.ACCEPTED
        assert resolution.decision_made_at == decided_at
        assert resolution.appointment is decisive
        assert resolution.appointment_date == "2026-03-10"
        assert resolution.is_accepted

    def test_undecided_keeps_newest_as_current(self, make_appointment):
        newest = make_appointment(id=2, status="scheduled", scheduled_date="2026-03-20")
        older = make_appointment(id=1, status="cancelled", scheduled_date="2026-03-01")

        resolution = resolve_appointments([newest, older])

        assert resolution.final_decision is None
        assert resolution.appointment is newest
        assert resolution.current_status == "scheduled"
        assert resolution.appointment_time == "10:00"

    def test_name_taken_from_first_named_appointment(self, make_appointment):
        unnamed = make_appointment(id=2, applicant_name="")
        named = make_appointment(id=1, applicant_name="Meron Tadesse")

        assert resolve_appointments([unnamed, named]).applicant_name == "Meron Tadesse"

    def test_resolution_is_idempotent(self, make_appointment):
        appointments = [
            make_appointment(id=2, status="scheduled"),
            make_appointment(id=1, status="no_show"),
        ]

        assert resolve_appointments(appointments) == resolve_appointments(appointments)


class TestDeriveOverallStatus:
    """Tests for combining the interview outcome with the submission review."""

    def test_decision_beats_submission(self, make_submission):
        resolution = AppointmentResolution(final_decision=FinalDecision.ACCEPTED)
        submission = make_submission(status="rejected")

        assert derive_overall_status(resolution, submission) == OverallStatus.ACCEPTED

    def test_rejected_decision(self, make_submission):
        resolution = AppointmentResolution(final_decision=FinalDecision.REJECTED)
        submission = make_submission(status="approved")

        assert derive_overall_status(resolution, submission) == OverallStatus.REJECTED

    def test_submission_status_without_decision(self, make_submission):
        resolution = AppointmentResolution()

        assert (
            derive_overall_status(resolution, make_submission(status="Approved"))
            == OverallStatus.APPROVED
        )
        assert (
            derive_overall_status(resolution, make_submission(status="rejected"))
            == OverallStatus.REJECTED
        )
        assert (
            derive_overall_status(resolution, make_submission(status="pending"))
            == OverallStatus.PENDING
        )

    def test_appointment_only_scheduled_counts_as_approved(self, make_appointment):
        resolution = resolve_appointments([make_appointment(status="scheduled")])
        assert derive_overall_status(resolution, None) == OverallStatus.APPROVED

    def test_appointment_only_cancelled_is_pending(self, make_appointment):
        resolution = resolve_appointments([make_appointment(status="cancelled")])
        assert derive_overall_status(resolution, None) == OverallStatus.PENDING


class TestStatusMessage:
    def test_appointment_only_scheduled_interview(self):
        assert status_message(OverallStatus.APPROVED, AppointmentResolution(), None) == (
            "Your interview has been scheduled."
        )

    def test_approved_submission(self, make_submission):
        message = status_message(
            OverallStatus.APPROVED, AppointmentResolution(), make_submission(status="approved")
        )
        assert message == (
            "Your application has been approved. "
            "Interview scheduling will be available soon."
        )

    def test_approved_submission_with_scheduled_interview(
        self, make_submission, make_appointment
    ):
        resolution = resolve_appointments([make_appointment(status="scheduled")])
        view = StatusView.from_both(make_submission(status="approved"), resolution)

        assert view.overall_status == OverallStatus.APPROVED
        assert "Interview scheduling will be available soon" in view.status_message

    def test_rejected_submission(self, make_submission):
        message = status_message(
            OverallStatus.REJECTED, AppointmentResolution(), make_submission(status="rejected")
        )
        assert message == "Your application was not approved at this time."

    def test_final_rejection_overrides_review_wording(self, make_submission):
        resolution = AppointmentResolution(final_decision=FinalDecision.REJECTED)
        message = status_message(
            OverallStatus.REJECTED, resolution, make_submission(status="rejected")
        )
        assert message.startswith("Unfortunately")

    def test_accepted(self):
        message = status_message(OverallStatus.ACCEPTED, AppointmentResolution(), None)
        assert message.startswith("Congratulations")


class TestStatusView:
    """Tests for the named constructors."""

    def test_not_found(self):
        view = StatusView.not_found()

        assert view.success is True
        assert view.is_applicant is False
        assert view.message == "Phone number not found in our system"
        assert view.overall_status is None

    def test_submission_only(self, make_submission):
        view = StatusView.from_submission_only(
            make_submission(status="approved", reviewer_comments="Great voice")
        )

        assert view.is_applicant is True
        assert view.applicant_name == "Abebe Kebede"
        assert view.overall_status == OverallStatus.APPROVED
        assert view.submission_status == "approved"
        assert view.reviewer_comments == "Great voice"
        assert view.final_decision is None
        assert view.appointment_date is None

    def test_appointment_only_defaults_name(self, make_appointment):
        resolution = resolve_appointments([make_appointment(applicant_name="")])
        view = StatusView.from_appointment_only(resolution)

        assert view.applicant_name == "Applicant"
        assert view.overall_status == OverallStatus.APPROVED
        assert view.submission_status is None

    def test_both_uses_submission_name_and_decision(self, make_submission, make_appointment):
        resolution = resolve_appointments(
            [make_appointment(status="completed", applicant_name="Other Name")]
        )
        view = StatusView.from_both(make_submission(status="pending"), resolution)

        assert view.applicant_name == "Abebe Kebede"
        assert view.overall_status == OverallStatus.ACCEPTED
        assert view.final_decision == FinalDecision.ACCEPTED
        assert view.appointment_date == "2026-03-10"

    def test_every_branch_has_the_same_fields(self, make_submission, make_appointment):
        resolution = resolve_appointments([make_appointment()])
        views = [
            StatusView.not_found(),
            StatusView.from_submission_only(make_submission()),
            StatusView.from_appointment_only(resolution),
            StatusView.from_both(make_submission(), resolution),
        ]

        keys = {tuple(sorted(view.model_dump().keys())) for view in views}
        assert len(keys) == 1
