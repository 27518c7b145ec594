"""Data models module."""

from survey_service.models.survey import Option, Question, QuestionType, RangeLabels, Section
from survey_service.models.survey_unit import SourceFile, SurveyFileGroup, SurveyUnit
from survey_service.models.survey_record import (
    ReconcileAction,
    ReconciliationReport,
    SurveyIndexEntry,
    SurveyRecord,
    UnitOutcome,
    split_source_file,
)
from survey_service.models.survey_response import (
    Answer,
    FormattedAnswer,
    FormattedResponse,
    MultipleChoiceAnswer,
    Pagination,
    RangeAnswer,
    SingleChoiceAnswer,
    StoredResponse,
    SubmitResponseRequest,
    TextAnswer,
    decode_answers,
    encode_answers,
)

__all__ = [
    "Option",
    "Question",
    "QuestionType",
    "RangeLabels",
    "Section",
    "SourceFile",
    "SurveyFileGroup",
    "SurveyUnit",
    "ReconcileAction",
    "ReconciliationReport",
    "SurveyIndexEntry",
    "SurveyRecord",
    "UnitOutcome",
    "split_source_file",
    "Answer",
    "FormattedAnswer",
    "FormattedResponse",
    "MultipleChoiceAnswer",
    "Pagination",
    "RangeAnswer",
    "SingleChoiceAnswer",
    "StoredResponse",
    "SubmitResponseRequest",
    "TextAnswer",
    "decode_answers",
    "encode_answers",
]
