from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.custom_fields.features.submit_responses.router import get_guest_identity_read_model
from src.custom_fields.repository.read_models import (
    CustomFieldReadModel,
    GuestIdentityReadModel,
    SqlCustomFieldReadModel,
)
from src.custom_fields.schemas import FieldDefinitionResponse, SavedAnswerResponse
from src.custom_fields.urls import RSVP_CUSTOM_FIELDS_URL

router = APIRouter()


class RSVPCustomFieldsResponse(BaseModel):
    fields: list[FieldDefinitionResponse]
    responses: list[SavedAnswerResponse]
    # field id -> option -> number of guests holding it
    signup_claims: dict[UUID, dict[str, int]]


def get_custom_field_read_model() -> CustomFieldReadModel:
    """Dependency to get custom field read model instance."""
    return SqlCustomFieldReadModel()


@router.get(RSVP_CUSTOM_FIELDS_URL, response_model=RSVPCustomFieldsResponse)
async def get_rsvp_custom_fields(
    token: str,
    identity_read_model: GuestIdentityReadModel = Depends(get_guest_identity_read_model),
    read_model: CustomFieldReadModel = Depends(get_custom_field_read_model),
) -> RSVPCustomFieldsResponse:
    """
    Get the custom questions for the RSVP form, prefilled with the guest's
    previous answers and the current signup availability.
    """
    guest = await identity_read_model.get_guest_by_token(token)
    if guest is None:
        raise HTTPException(status_code=404, detail="Invalid or expired RSVP link")

    rsvp_fields = await read_model.get_rsvp_custom_fields(guest)
    return RSVPCustomFieldsResponse(
        fields=[FieldDefinitionResponse.from_dto(f) for f in rsvp_fields.fields],
        responses=[SavedAnswerResponse.from_dto(r) for r in rsvp_fields.responses],
        signup_claims=rsvp_fields.signup_claims,
    )
