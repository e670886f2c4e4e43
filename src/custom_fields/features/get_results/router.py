from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from src.custom_fields.features.get_rsvp_custom_fields.router import get_custom_field_read_model
from src.custom_fields.repository.read_models import CustomFieldReadModel
from src.custom_fields.schemas import PrivateResultsResponse
from src.custom_fields.urls import GET_RESULTS_URL

router = APIRouter()


@router.get(GET_RESULTS_URL, response_model=PrivateResultsResponse)
async def get_results(
    event_id: UUID,
    read_model: CustomFieldReadModel = Depends(get_custom_field_read_model),
) -> PrivateResultsResponse:
    """
    Host dashboard: poll tallies, signup claims with who claimed what, and
    every text answer.
    """
    results = await read_model.get_private_results(event_id)
    if results is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return PrivateResultsResponse.from_dto(results)
