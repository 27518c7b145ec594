"""REST controller for submitting and reading survey responses."""

import logging
from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query

from survey_service.api.dependencies import get_response_service
from survey_service.models import StoredResponse, SubmitResponseRequest
from survey_service.services import ResponseService, ResponseValidationError, SurveyNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/responses", tags=["responses"])


def response_to_dict(response: StoredResponse) -> Dict[str, Any]:
    return {
        "id": response.id,
        "survey_id": response.survey_id,
        "email": response.email,
        "name": response.name,
        "answers": [answer.model_dump() for answer in response.answers],
        "created_at": response.created_at.isoformat(),
    }


@router.post("", status_code=201)
def submit_response(
    request: SubmitResponseRequest,
    service: ResponseService = Depends(get_response_service),
) -> Dict[str, Any]:
    """Store a response to one survey version."""
    try:
        stored = service.submit_response(request)
    except SurveyNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ResponseValidationError as e:
        logger.info(f"Rejected response to survey {request.survey_id}: {e}")
        raise HTTPException(
            status_code=400,
            detail={"message": "Invalid response data", "errors": e.errors},
        ) from e

    return {"message": "Response submitted successfully", "response": response_to_dict(stored)}


@router.get("/survey/{survey_id}")
def list_responses(
    survey_id: str,
    service: ResponseService = Depends(get_response_service),
) -> List[Dict[str, Any]]:
    """List raw responses to a survey version, newest first."""
    return [response_to_dict(response) for response in service.get_responses_by_survey(survey_id)]


@router.get("/survey/{survey_id}/formatted")
def list_formatted_responses(
    survey_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: ResponseService = Depends(get_response_service),
) -> Dict[str, Any]:
    """List one page of responses with question and option texts."""
    try:
        responses, pagination = service.get_formatted_responses(survey_id, page, limit)
    except SurveyNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return {
        "responses": [
            {**asdict(response), "submitted_at": response.submitted_at.isoformat()}
            for response in responses
        ],
        "pagination": asdict(pagination),
    }
