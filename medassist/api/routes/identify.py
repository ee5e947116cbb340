"""
Pill Scanner Route - identify a medicine from a photo.
"""
from fastapi import APIRouter, Request, Response

from medassist.api.deps import client_identifier, enforce_rate_limit
from medassist.core.logging_config import get_logger
from medassist.models.chat import ErrorResponse, PillIdentificationRequest, PillIdentificationResponse
from medassist.services.pill_service import get_pill_service

logger = get_logger(__name__)

router = APIRouter(
    prefix="/identify-pill",
    tags=["Pill Scanner"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid image"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    }
)


@router.post(
    "",
    response_model=PillIdentificationResponse,
    summary="Identify a pill from a photo",
    description="""
    Returns the most likely medicine name, a short description and typical
    dosage. Non-medical and unreadable images get fixed explanatory answers.
    """
)
def identify_pill(request: PillIdentificationRequest, http_request: Request, response: Response):
    enforce_rate_limit(client_identifier(http_request), response)

    result = get_pill_service().identify(request.image_data_uri)
    return PillIdentificationResponse(**result.to_dict())
