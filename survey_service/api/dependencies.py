"""Shared services for the API, opened lazily from configuration."""

from typing import Optional

from survey_service.config import get_config
from survey_service.services import ResponseService, SurveyRepository

_survey_repository: Optional[SurveyRepository] = None
_response_service: Optional[ResponseService] = None


def get_survey_repository() -> SurveyRepository:
    """Get the survey repository singleton."""
    global _survey_repository
    if _survey_repository is None:
        _survey_repository = SurveyRepository(get_config().database.path)
    return _survey_repository


def get_response_service() -> ResponseService:
    """Get the response service singleton."""
    global _response_service
    if _response_service is None:
        _response_service = ResponseService(get_survey_repository())
    return _response_service


def close_services() -> None:
    """Close open database connections."""
    global _survey_repository, _response_service
    if _response_service is not None:
        _response_service.close()
        _response_service = None
    if _survey_repository is not None:
        _survey_repository.close()
        _survey_repository = None
