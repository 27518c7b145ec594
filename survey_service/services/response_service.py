"""Response service for storing and reporting survey responses."""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import List, Tuple

from ..clients import SqliteClient
from ..models import (
    FormattedAnswer,
    FormattedResponse,
    Pagination,
    StoredResponse,
    SubmitResponseRequest,
    SurveyRecord,
    decode_answers,
    encode_answers,
)
from ..models.survey_response import UNKNOWN_QUESTION
from .survey_repository import SurveyRepository

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS survey_responses (
    id TEXT PRIMARY KEY,
    survey_id TEXT NOT NULL REFERENCES surveys(id),
    email TEXT NOT NULL,
    name TEXT,
    answers TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_responses_survey_id ON survey_responses(survey_id)
"""


class SurveyNotFoundError(Exception):
    """Raised when a response references a survey that does not exist."""

    def __init__(self, survey_id: str):
        super().__init__(f"Survey {survey_id} not found")
        self.survey_id = survey_id


class ResponseValidationError(Exception):
    """Raised when submitted answers do not fit the survey they answer."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class ResponseService:
    """Stores responses linked to the exact survey version that was answered."""

    def __init__(self, survey_repository: SurveyRepository):
        self._surveys = survey_repository
        self._sqlite_client = SqliteClient(survey_repository.db_path)
        self._sqlite_client.execute_query(CREATE_TABLE_SQL)
        self._sqlite_client.execute_query(CREATE_INDEX_SQL)

    def submit_response(self, request: SubmitResponseRequest) -> StoredResponse:
        """Validate and store a response.

        Args:
            request: The submitted response.

        Returns:
            The stored response.

        Raises:
            SurveyNotFoundError: If the survey id is unknown.
            ResponseValidationError: If answers do not match the survey's questions.
        """
        survey = self._surveys.get_survey(request.survey_id)
        if survey is None:
            raise SurveyNotFoundError(request.survey_id)

        errors = validate_answers(survey, request)
        if errors:
            raise ResponseValidationError(errors)

        now = datetime.now(timezone.utc)
        response_id = str(uuid.uuid4())

        self._sqlite_client.execute_query(
            """INSERT INTO survey_responses (id, survey_id, email, name, answers, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                response_id,
                survey.id,
                request.email,
                request.name,
                encode_answers(request.answers),
                now.isoformat(),
            ),
        )

        logger.info(f"Stored response {response_id} for survey '{survey.title}' ({survey.id})")

        return StoredResponse(
            id=response_id,
            survey_id=survey.id,
            email=request.email,
            name=request.name,
            answers=list(request.answers),
            created_at=now,
        )

    def get_responses_by_survey(self, survey_id: str) -> List[StoredResponse]:
        """Get all responses for a survey version, newest first."""
        rows = self._sqlite_client.execute_query(
            """SELECT id, survey_id, email, name, answers, created_at
               FROM survey_responses WHERE survey_id = ?
               ORDER BY created_at DESC, rowid DESC""",
            (survey_id,),
        )
        return [_response_from_row(row) for row in rows]

    def get_formatted_responses(
        self,
        survey_id: str,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[FormattedResponse], Pagination]:
        """Get one page of responses rendered with question and option texts.

        Raises:
            SurveyNotFoundError: If the survey id is unknown.
        """
        survey = self._surveys.get_survey(survey_id)
        if survey is None:
            raise SurveyNotFoundError(survey_id)

        total = self._sqlite_client.execute_query(
            "SELECT COUNT(*) FROM survey_responses WHERE survey_id = ?", (survey_id,)
        )[0][0]
        rows = self._sqlite_client.execute_query(
            """SELECT id, survey_id, email, name, answers, created_at
               FROM survey_responses WHERE survey_id = ?
               ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?""",
            (survey_id, limit, (page - 1) * limit),
        )

        formatted = [format_response(survey, _response_from_row(row)) for row in rows]
        pagination = Pagination(
            total_items=total,
            total_pages=math.ceil(total / limit),
            current_page=page,
            page_size=limit,
        )
        return formatted, pagination

    def close(self) -> None:
        """Close the database connection."""
        self._sqlite_client.close()


def validate_answers(survey: SurveyRecord, request: SubmitResponseRequest) -> List[str]:
    """Check submitted answers against the survey's questions.

    Returns:
        Error messages, empty when the answers are valid.
    """
    errors: List[str] = []
    answered = set()

    for answer in request.answers:
        question = survey.find_question(answer.question_id)
        if question is None:
            errors.append(f"Unknown question {answer.question_id}")
            continue
        if answer.question_id in answered:
            errors.append(f"Question {answer.question_id} answered more than once")
            continue
        answered.add(answer.question_id)

        if answer.question_type is not question.type:
            errors.append(
                f"Question {question.id} expects a {question.type.value} answer, "
                f"got {answer.kind}"
            )
            continue

        errors.extend(answer.problems(question))
        if question.required and answer.is_empty():
            errors.append(f"Question {question.id} is required")

    for question in survey.iter_questions():
        if question.required and question.id not in answered:
            errors.append(f"Question {question.id} is required")

    return errors


def format_response(survey: SurveyRecord, response: StoredResponse) -> FormattedResponse:
    """Render a stored response with question and option texts."""
    answers: List[FormattedAnswer] = []
    for answer in response.answers:
        question = survey.find_question(answer.question_id)
        if question is None:
            answers.append(
                FormattedAnswer(question=UNKNOWN_QUESTION, question_type=None, answer=answer.raw())
            )
            continue
        answers.append(
            FormattedAnswer(
                question=question.text,
                question_type=question.type.value,
                answer=answer.render(question),
            )
        )

    return FormattedResponse(
        id=response.id,
        survey_title=survey.title,
        name=response.name or "Anonymous",
        email=response.email,
        answers=answers,
        submitted_at=response.created_at,
    )


def _response_from_row(row) -> StoredResponse:
    return StoredResponse(
        id=row[0],
        survey_id=row[1],
        email=row[2],
        name=row[3],
        answers=decode_answers(row[4]),
        created_at=datetime.fromisoformat(row[5]),
    )
