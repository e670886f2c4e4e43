from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.custom_fields.dtos import PersistenceError
from src.custom_fields.features.submit_responses.write_model import (
    CustomResponseWriteModel,
    SqlCustomResponseWriteModel,
)
from src.custom_fields.repository.read_models import (
    GuestIdentityReadModel,
    SqlGuestIdentityReadModel,
)
from src.custom_fields.schemas import SavedAnswerResponse, ValidationErrorResponse
from src.custom_fields.urls import RSVP_CUSTOM_FIELDS_URL

router = APIRouter()


class SubmitCustomResponsesRequest(BaseModel):
    custom_responses: Any = []


class SubmitCustomResponsesResponse(BaseModel):
    valid: bool = True
    errors: list[str] = []
    responses: list[SavedAnswerResponse]


def get_guest_identity_read_model() -> GuestIdentityReadModel:
    """Dependency to get guest identity read model instance."""
    return SqlGuestIdentityReadModel()


def get_custom_response_write_model() -> CustomResponseWriteModel:
    """Dependency to get custom response write model instance."""
    return SqlCustomResponseWriteModel()


@router.post(
    RSVP_CUSTOM_FIELDS_URL,
    response_model=SubmitCustomResponsesResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
async def submit_custom_responses(
    token: str,
    request: SubmitCustomResponsesRequest,
    identity_read_model: GuestIdentityReadModel = Depends(get_guest_identity_read_model),
    write_model: CustomResponseWriteModel = Depends(get_custom_response_write_model),
):
    """
    Save the guest's answers to the event's custom fields.
    All answers are saved together or none are; a 400 lists every problem,
    taken signup options included.
    """
    guest = await identity_read_model.get_guest_by_token(token)
    if guest is None:
        raise HTTPException(status_code=404, detail="Invalid or expired RSVP link")

    try:
        result = await write_model.submit_responses(guest, request.custom_responses)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=e.message)

    if not result.valid:
        return JSONResponse(
            status_code=400,
            content=ValidationErrorResponse(errors=result.errors).model_dump(),
        )

    return SubmitCustomResponsesResponse(
        responses=[SavedAnswerResponse.from_dto(response) for response in result.responses],
    )
