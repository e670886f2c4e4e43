from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.custom_fields.dtos import PersistenceError
from src.custom_fields.features.sync_fields.write_model import (
    CustomFieldWriteModel,
    SqlCustomFieldWriteModel,
)
from src.custom_fields.schemas import FieldDefinitionResponse, ValidationErrorResponse
from src.custom_fields.urls import SYNC_CUSTOM_FIELDS_URL

router = APIRouter()


class SyncCustomFieldsRequest(BaseModel):
    # checked item by item by the field validator so every problem is reported
    fields: Any


class SyncCustomFieldsResponse(BaseModel):
    valid: bool = True
    errors: list[str] = []
    fields: list[FieldDefinitionResponse]


def get_custom_field_write_model() -> CustomFieldWriteModel:
    """Dependency to get custom field write model instance."""
    return SqlCustomFieldWriteModel()


@router.put(
    SYNC_CUSTOM_FIELDS_URL,
    response_model=SyncCustomFieldsResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
async def sync_custom_fields(
    event_id: UUID,
    request: SyncCustomFieldsRequest,
    write_model: CustomFieldWriteModel = Depends(get_custom_field_write_model),
):
    """
    Replace the event's custom fields with the submitted set.
    Fields with a known id are updated, new ones created, missing ones deleted
    together with their answers.
    """
    try:
        result = await write_model.sync_fields(event_id, request.fields)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=e.message)

    if result is None:
        raise HTTPException(status_code=404, detail="Event not found")

    if not result.valid:
        return JSONResponse(
            status_code=400,
            content=ValidationErrorResponse(errors=result.errors).model_dump(),
        )

    return SyncCustomFieldsResponse(
        fields=[FieldDefinitionResponse.from_dto(f) for f in result.fields],
    )
