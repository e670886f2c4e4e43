from fastapi import APIRouter

from .features.get_public_results.router import router as get_public_results_router
from .features.get_results.router import router as get_results_router
from .features.get_rsvp_custom_fields.router import router as get_rsvp_custom_fields_router
from .features.submit_responses.router import router as submit_responses_router
from .features.sync_fields.router import router as sync_fields_router

router = APIRouter()

# the public route goes first so "public" is never parsed as an event id
router.include_router(get_public_results_router)
router.include_router(get_results_router)
router.include_router(sync_fields_router)
router.include_router(get_rsvp_custom_fields_router)
router.include_router(submit_responses_router)
