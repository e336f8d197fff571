"""
Reclamation Event Intake

Translates an inbound "reclamation" queue message into a
create_reclamation call. The queue client itself lives elsewhere.

Message shape:

    {
        "bookingId": 7,
        "userId": 3,
        "complainantRole": "GUEST",
        "reclamationType": "CLEANLINESS",
        "title": "Dirty kitchen",
        "description": "Dishes left in the sink"
    }
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ReclamationValidationError
from .models import ComplainantRole, Reclamation, ReclamationType

if TYPE_CHECKING:
    from .engine import ReclamationService

logger = logging.getLogger(__name__)


class ReclamationEvent(BaseModel):
    """A reclamation filed through the message queue."""
    booking_id: int = Field(..., alias="bookingId", gt=0, description="Disputed booking")
    user_id: int = Field(..., alias="userId", gt=0, description="Filer")
    complainant_role: ComplainantRole = Field(..., alias="complainantRole")
    reclamation_type: ReclamationType = Field(..., alias="reclamationType")
    title: str = Field("", description="Short summary")
    description: str = Field("", description="Full complaint text")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "bookingId": 7,
                    "userId": 3,
                    "complainantRole": "GUEST",
                    "reclamationType": "CLEANLINESS",
                    "title": "Dirty kitchen",
                    "description": "Dishes left in the sink",
                }
            ]
        },
    }


def parse_reclamation_event(payload: Mapping[str, Any]) -> ReclamationEvent:
    """
    Raises:
        ReclamationValidationError: Missing or malformed fields
    """
    try:
        return ReclamationEvent.model_validate(dict(payload))
    except ValidationError as e:
        raise ReclamationValidationError(
            message=f"Malformed reclamation event: {e.error_count()} errors",
            details={"errors": e.errors(include_url=False)},
        ) from e


def handle_reclamation_event(
    service: ReclamationService,
    payload: Mapping[str, Any],
) -> Reclamation:
    """Parse a queue message and file the reclamation it describes."""
    event = parse_reclamation_event(payload)
    logger.info(
        "Reclamation event for booking %s from user %s",
        event.booking_id, event.user_id,
        extra={"booking_id": event.booking_id, "user_id": event.user_id},
    )
    return service.create_reclamation(
        booking_id=event.booking_id,
        complainant_id=event.user_id,
        role=event.complainant_role,
        type=event.reclamation_type,
        title=event.title,
        description=event.description,
    )
