"""Survey response models.

Answers are a tagged union discriminated by ``kind``; each variant knows
which question type it answers, how to check itself against that question
and how to render itself for reporting.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from survey_service.models.survey import Question, QuestionType

UNKNOWN_OPTION = "Unknown option"
UNKNOWN_QUESTION = "Unknown question"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SingleChoiceAnswer(BaseModel):
    """Answer to a ``single`` question: one option id."""

    kind: Literal["single"] = "single"
    question_id: str
    option_id: str

    @property
    def question_type(self) -> QuestionType:
        return QuestionType.SINGLE

    def is_empty(self) -> bool:
        return not self.option_id

    def problems(self, question: Question) -> List[str]:
        if self.option_id and question.option_text(self.option_id) is None:
            return [f"Unknown option {self.option_id} for question {question.id}"]
        return []

    def raw(self) -> str:
        return self.option_id

    def render(self, question: Question) -> str:
        return question.option_text(self.option_id) or UNKNOWN_OPTION


class MultipleChoiceAnswer(BaseModel):
    """Answer to a ``multiple`` question: the selected option ids."""

    kind: Literal["multiple"] = "multiple"
    question_id: str
    option_ids: List[str] = Field(default_factory=list)

    @property
    def question_type(self) -> QuestionType:
        return QuestionType.MULTIPLE

    def is_empty(self) -> bool:
        return not self.option_ids

    def problems(self, question: Question) -> List[str]:
        errors = []
        unknown = [option_id for option_id in self.option_ids if question.option_text(option_id) is None]
        if unknown:
            errors.append(f"Unknown options {unknown} for question {question.id}")
        if len(set(self.option_ids)) != len(self.option_ids):
            errors.append(f"Duplicate options for question {question.id}")
        return errors

    def raw(self) -> List[str]:
        return list(self.option_ids)

    def render(self, question: Question) -> List[str]:
        return [question.option_text(option_id) or UNKNOWN_OPTION for option_id in self.option_ids]


class TextAnswer(BaseModel):
    """Answer to a ``text`` question."""

    kind: Literal["text"] = "text"
    question_id: str
    text: str

    @property
    def question_type(self) -> QuestionType:
        return QuestionType.TEXT

    def is_empty(self) -> bool:
        return not self.text.strip()

    def problems(self, question: Question) -> List[str]:
        return []

    def raw(self) -> str:
        return self.text

    def render(self, question: Question) -> str:
        return self.text


class RangeAnswer(BaseModel):
    """Answer to a ``range`` question: a value between the question's bounds."""

    kind: Literal["range"] = "range"
    question_id: str
    value: int

    @property
    def question_type(self) -> QuestionType:
        return QuestionType.RANGE

    def is_empty(self) -> bool:
        return False

    def problems(self, question: Question) -> List[str]:
        if not question.range_min <= self.value <= question.range_max:
            return [
                f"Value {self.value} for question {question.id} is outside "
                f"{question.range_min}..{question.range_max}"
            ]
        return []

    def raw(self) -> int:
        return self.value

    def render(self, question: Question) -> int:
        return self.value


Answer = Annotated[
    Union[SingleChoiceAnswer, MultipleChoiceAnswer, TextAnswer, RangeAnswer],
    Field(discriminator="kind"),
]

answer_list_adapter = TypeAdapter(List[Answer])


def encode_answers(answers: List[Answer]) -> str:
    """Serialize answers to the JSON stored with a response."""
    return answer_list_adapter.dump_json(answers).decode("utf-8")


def decode_answers(payload: str) -> List[Answer]:
    """Parse answers stored with a response."""
    return answer_list_adapter.validate_json(payload)


class SubmitResponseRequest(BaseModel):
    """Incoming survey response from the client."""

    survey_id: str
    email: str = Field(pattern=EMAIL_PATTERN)
    name: Optional[str] = None
    answers: List[Answer] = Field(min_length=1)


@dataclass(frozen=True)
class StoredResponse:
    """A submitted response, linked to the exact survey version answered."""

    id: str
    survey_id: str
    email: str
    name: Optional[str]
    answers: List[Answer]
    created_at: datetime


@dataclass(frozen=True)
class FormattedAnswer:
    """An answer rendered with question and option texts."""

    question: str
    question_type: Optional[str]
    answer: Union[str, List[str], int]


@dataclass(frozen=True)
class FormattedResponse:
    """A response rendered for human reading."""

    id: str
    survey_title: str
    name: str
    email: str
    answers: List[FormattedAnswer]
    submitted_at: datetime


@dataclass(frozen=True)
class Pagination:
    """Pagination block returned with formatted responses."""

    total_items: int
    total_pages: int
    current_page: int
    page_size: int
