"""Tests for survey responses.

These tests verify:
- Answers are checked against the exact survey version answered
- Invalid answers are rejected with every problem listed
- Formatted responses show question and option texts with fallbacks
- Answer payloads decode into the right answer kind
"""

import pytest
from pydantic import ValidationError

from survey_service.models import (
    MultipleChoiceAnswer,
    RangeAnswer,
    SingleChoiceAnswer,
    StoredResponse,
    SubmitResponseRequest,
    TextAnswer,
    decode_answers,
    encode_answers,
)
from survey_service.models.survey_response import UNKNOWN_OPTION, UNKNOWN_QUESTION
from survey_service.services import ResponseService, ResponseValidationError, SurveyNotFoundError
from survey_service.services.response_service import format_response

from conftest import make_unit

FULL_SURVEY_MD = """# Experience
1. How did you hear about us?
- Search engine
- A friend
2. Which channels do you use?
-- multiple
- Email
- Phone
- Chat
3. How likely are you to come back?
- 0 (Not likely) → 10 (Very likely)
4. Anything else?
-- text
"""


@pytest.fixture
def survey(repository):
    """Stored survey with one question of each type."""
    return repository.create_survey(make_unit("Experience", FULL_SURVEY_MD))


@pytest.fixture
def response_service(repository):
    """Create a ResponseService sharing the repository database."""
    service = ResponseService(repository)
    yield service
    service.close()


def _questions(survey):
    return survey.sections[0].questions


def _valid_answers(survey):
    single, multiple, scale, text = _questions(survey)
    return [
        SingleChoiceAnswer(question_id=single.id, option_id=single.options[1].id),
        MultipleChoiceAnswer(
            question_id=multiple.id,
            option_ids=[multiple.options[0].id, multiple.options[2].id],
        ),
        RangeAnswer(question_id=scale.id, value=8),
        TextAnswer(question_id=text.id, text="Great service"),
    ]


def _request(survey, answers, **kwargs):
    return SubmitResponseRequest(
        survey_id=survey.id,
        email=kwargs.pop("email", "user@example.com"),
        answers=answers,
        **kwargs,
    )


class TestSubmitResponse:
    """Test storing valid responses."""

    def test_submit_valid_response(self, survey, response_service):
        """Test that a complete response is stored and linked to the survey."""
        stored = response_service.submit_response(_request(survey, _valid_answers(survey), name="Ada"))

        assert isinstance(stored, StoredResponse)
        assert stored.survey_id == survey.id
        assert stored.name == "Ada"

        loaded = response_service.get_responses_by_survey(survey.id)
        assert [response.id for response in loaded] == [stored.id]
        assert loaded[0].answers == stored.answers

        print(f"Stored response {stored.id} with {len(stored.answers)} answers")

    def test_responses_listed_newest_first(self, survey, response_service):
        """Test response ordering."""
        first = response_service.submit_response(_request(survey, _valid_answers(survey)))
        second = response_service.submit_response(_request(survey, _valid_answers(survey)))

        loaded = response_service.get_responses_by_survey(survey.id)

        assert [response.id for response in loaded] == [second.id, first.id]

    def test_inactive_survey_still_accepts_responses(self, survey, repository, response_service):
        """Test that answering a superseded version still works."""
        repository.set_active(survey.id, False)

        stored = response_service.submit_response(_request(survey, _valid_answers(survey)))

        assert stored.survey_id == survey.id

    def test_unknown_survey(self, survey, response_service):
        """Test that a response to an unknown survey is rejected."""
        request = SubmitResponseRequest(
            survey_id="missing",
            email="user@example.com",
            answers=_valid_answers(survey),
        )

        with pytest.raises(SurveyNotFoundError):
            response_service.submit_response(request)


class TestValidation:
    """Test rejection of answers that do not fit the survey."""

    def _errors(self, response_service, survey, answers):
        with pytest.raises(ResponseValidationError) as excinfo:
            response_service.submit_response(_request(survey, answers))
        return excinfo.value.errors

    def test_kind_must_match_question_type(self, survey, response_service):
        """Test that a text answer to a choice question is rejected."""
        answers = _valid_answers(survey)
        answers[0] = TextAnswer(question_id=_questions(survey)[0].id, text="Search engine")

        errors = self._errors(response_service, survey, answers)

        assert len(errors) == 1
        assert "expects a single answer" in errors[0]

    def test_unknown_option(self, survey, response_service):
        """Test that option ids must belong to the question."""
        answers = _valid_answers(survey)
        answers[0] = SingleChoiceAnswer(question_id=_questions(survey)[0].id, option_id="bogus")

        errors = self._errors(response_service, survey, answers)

        assert any("Unknown option bogus" in error for error in errors)

    def test_range_value_out_of_bounds(self, survey, response_service):
        """Test that range values must stay within the question bounds."""
        answers = _valid_answers(survey)
        answers[2] = RangeAnswer(question_id=_questions(survey)[2].id, value=11)

        errors = self._errors(response_service, survey, answers)

        assert errors == [f"Value 11 for question {_questions(survey)[2].id} is outside 0..10"]

    def test_missing_required_answer(self, survey, response_service):
        """Test that every required question must be answered."""
        answers = _valid_answers(survey)[:3]

        errors = self._errors(response_service, survey, answers)

        assert errors == [f"Question {_questions(survey)[3].id} is required"]

    def test_empty_text_counts_as_missing(self, survey, response_service):
        """Test that blank text does not satisfy a required question."""
        answers = _valid_answers(survey)
        answers[3] = TextAnswer(question_id=_questions(survey)[3].id, text="   ")

        errors = self._errors(response_service, survey, answers)

        assert errors == [f"Question {_questions(survey)[3].id} is required"]

    def test_unknown_question_and_duplicates(self, survey, response_service):
        """Test that all problems are reported together."""
        answers = _valid_answers(survey)
        answers.append(TextAnswer(question_id="nope", text="?"))
        answers.append(answers[3])

        errors = self._errors(response_service, survey, answers)

        assert "Unknown question nope" in errors
        assert any("answered more than once" in error for error in errors)
        assert response_service.get_responses_by_survey(survey.id) == []


class TestRequestModel:
    """Test parsing of submitted payloads."""

    def test_answers_decode_by_kind(self):
        """Test that each payload becomes its answer variant."""
        request = SubmitResponseRequest.model_validate(
            {
                "survey_id": "s1",
                "email": "user@example.com",
                "answers": [
                    {"kind": "single", "question_id": "q1", "option_id": "o1"},
                    {"kind": "multiple", "question_id": "q2", "option_ids": ["o2", "o3"]},
                    {"kind": "range", "question_id": "q3", "value": 4},
                    {"kind": "text", "question_id": "q4", "text": "hi"},
                ],
            }
        )

        kinds = [type(answer) for answer in request.answers]
        assert kinds == [SingleChoiceAnswer, MultipleChoiceAnswer, RangeAnswer, TextAnswer]

    def test_unknown_kind_is_rejected(self):
        """Test that the answer kind is required and checked."""
        with pytest.raises(ValidationError):
            SubmitResponseRequest.model_validate(
                {
                    "survey_id": "s1",
                    "email": "user@example.com",
                    "answers": [{"kind": "essay", "question_id": "q1", "text": "hi"}],
                }
            )

    def test_invalid_email_is_rejected(self):
        """Test the email format check."""
        with pytest.raises(ValidationError):
            SubmitResponseRequest(
                survey_id="s1",
                email="not-an-email",
                answers=[TextAnswer(question_id="q1", text="hi")],
            )

    def test_at_least_one_answer(self):
        """Test that empty responses are rejected."""
        with pytest.raises(ValidationError):
            SubmitResponseRequest(survey_id="s1", email="user@example.com", answers=[])

    def test_stored_payload_keeps_kinds(self):
        """Test that stored answers come back as the same variants."""
        answers = [
            RangeAnswer(question_id="q1", value=3),
            MultipleChoiceAnswer(question_id="q2", option_ids=["a"]),
        ]

        assert decode_answers(encode_answers(answers)) == answers


class TestFormattedResponses:
    """Test human-readable response reports."""

    def test_formats_question_and_option_texts(self, survey, response_service):
        """Test rendering of every answer kind."""
        response_service.submit_response(_request(survey, _valid_answers(survey)))

        responses, pagination = response_service.get_formatted_responses(survey.id)

        assert pagination.total_items == 1
        formatted = responses[0]
        assert formatted.survey_title == "Experience"
        assert formatted.name == "Anonymous"
        assert [answer.answer for answer in formatted.answers] == [
            "A friend",
            ["Email", "Chat"],
            8,
            "Great service",
        ]
        assert formatted.answers[1].question == "Which channels do you use?"
        assert formatted.answers[1].question_type == "multiple"

    def test_unknown_ids_fall_back(self, survey):
        """Test placeholders for questions and options the survey lacks."""
        single = _questions(survey)[0]
        response = StoredResponse(
            id="r1",
            survey_id=survey.id,
            email="user@example.com",
            name="Ada",
            answers=[
                SingleChoiceAnswer(question_id=single.id, option_id="gone"),
                TextAnswer(question_id="removed", text="raw text"),
            ],
            created_at=survey.created_at,
        )

        formatted = format_response(survey, response)

        assert formatted.answers[0].answer == UNKNOWN_OPTION
        assert formatted.answers[1].question == UNKNOWN_QUESTION
        assert formatted.answers[1].question_type is None
        assert formatted.answers[1].answer == "raw text"

    def test_pagination(self, survey, response_service):
        """Test page slicing and the pagination block."""
        for _ in range(5):
            response_service.submit_response(_request(survey, _valid_answers(survey)))

        first_page, pagination = response_service.get_formatted_responses(survey.id, page=1, limit=2)
        last_page, _ = response_service.get_formatted_responses(survey.id, page=3, limit=2)

        assert len(first_page) == 2
        assert len(last_page) == 1
        assert pagination.total_items == 5
        assert pagination.total_pages == 3
        assert pagination.current_page == 1
        assert pagination.page_size == 2

        print(f"Pagination: {pagination}")

    def test_unknown_survey(self, response_service):
        """Test that formatting responses of an unknown survey fails."""
        with pytest.raises(SurveyNotFoundError):
            response_service.get_formatted_responses("missing")
