"""REST controller for reading surveys."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from survey_service.api.dependencies import get_survey_repository
from survey_service.models import SurveyRecord
from survey_service.services import SurveyRepository

router = APIRouter(prefix="/surveys", tags=["surveys"])


def survey_to_dict(survey: SurveyRecord) -> Dict[str, Any]:
    return {
        "id": survey.id,
        "title": survey.title,
        "description": survey.description,
        "sections": [section.to_dict() for section in survey.sections],
        "is_active": survey.is_active,
        "created_at": survey.created_at.isoformat(),
        "updated_at": survey.updated_at.isoformat(),
    }


@router.get("")
def list_surveys(
    repository: SurveyRepository = Depends(get_survey_repository),
) -> List[Dict[str, Any]]:
    """List active surveys, newest first."""
    return [survey_to_dict(survey) for survey in repository.list_active_surveys()]


@router.get("/{survey_id}")
def get_survey(
    survey_id: str,
    repository: SurveyRepository = Depends(get_survey_repository),
) -> Dict[str, Any]:
    """Get one survey version, including superseded ones."""
    survey = repository.get_survey(survey_id)
    if survey is None:
        raise HTTPException(status_code=404, detail="Survey not found")
    return survey_to_dict(survey)
