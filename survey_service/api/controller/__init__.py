"""API controllers."""

from survey_service.api.controller.response_controller import router as response_router
from survey_service.api.controller.survey_controller import router as survey_router

__all__ = ["response_router", "survey_router"]
