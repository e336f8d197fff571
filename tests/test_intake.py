"""
Tests for queue message intake.
"""
import pytest

from disputepilot.exceptions import ReclamationValidationError
from disputepilot.intake import handle_reclamation_event, parse_reclamation_event
from disputepilot.models import ComplainantRole, ReclamationStatus, ReclamationType

from tests.helpers import BOOKING_ID, GUEST_ID, HOST_ID


def event(**overrides):
    payload = {
        "bookingId": BOOKING_ID,
        "userId": GUEST_ID,
        "complainantRole": "GUEST",
        "reclamationType": "CLEANLINESS",
        "title": "Dirty kitchen",
        "description": "Dishes left in the sink",
    }
    payload.update(overrides)
    return payload


class TestParse:

    def test_camel_case_message(self):
        parsed = parse_reclamation_event(event())

        assert parsed.booking_id == BOOKING_ID
        assert parsed.user_id == GUEST_ID
        assert parsed.complainant_role is ComplainantRole.GUEST
        assert parsed.reclamation_type is ReclamationType.CLEANLINESS

    def test_snake_case_accepted(self):
        parsed = parse_reclamation_event({
            "booking_id": 1,
            "user_id": 2,
            "complainant_role": "HOST",
            "reclamation_type": "PROPERTY_DAMAGE",
        })
        assert parsed.complainant_role is ComplainantRole.HOST
        assert parsed.title == ""

    @pytest.mark.parametrize("overrides", [
        {"bookingId": 0},
        {"userId": -3},
        {"complainantRole": "PLATFORM"},
        {"reclamationType": "NOISE"},
    ])
    def test_malformed_rejected(self, overrides):
        with pytest.raises(ReclamationValidationError) as exc_info:
            parse_reclamation_event(event(**overrides))
        assert exc_info.value.details["errors"]

    def test_missing_field_rejected(self):
        payload = event()
        del payload["bookingId"]
        with pytest.raises(ReclamationValidationError):
            parse_reclamation_event(payload)


class TestHandle:

    def test_files_reclamation(self, world):
        rec = handle_reclamation_event(world.service, event())

        assert rec.status is ReclamationStatus.OPEN
        assert rec.target_user_id == HOST_ID
        assert world.service.get(rec.id).title == "Dirty kitchen"

    def test_blank_title_rejected_by_service(self, world):
        with pytest.raises(ReclamationValidationError):
            handle_reclamation_event(world.service, event(title=""))
        assert world.service.list_all() == []
