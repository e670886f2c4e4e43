from fastapi import APIRouter, Depends, HTTPException

from src.custom_fields.features.get_rsvp_custom_fields.router import get_custom_field_read_model
from src.custom_fields.repository.read_models import CustomFieldReadModel
from src.custom_fields.schemas import PublicResultsResponse
from src.custom_fields.urls import GET_PUBLIC_RESULTS_URL

router = APIRouter()


@router.get(GET_PUBLIC_RESULTS_URL, response_model=PublicResultsResponse)
async def get_public_results(
    slug: str,
    read_model: CustomFieldReadModel = Depends(get_custom_field_read_model),
) -> PublicResultsResponse:
    """
    Poll tallies and signup availability for a public event page.
    No guest names and no text answers.
    """
    results = await read_model.get_public_results(slug)
    if results is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return PublicResultsResponse.from_dto(results)
