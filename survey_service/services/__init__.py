"""Service layer for surveys and responses."""

from survey_service.services.survey_repository import SurveyRepository
from survey_service.services.response_service import (
    ResponseService,
    ResponseValidationError,
    SurveyNotFoundError,
)

__all__ = [
    "SurveyRepository",
    "ResponseService",
    "ResponseValidationError",
    "SurveyNotFoundError",
]
