"""Survey content models: sections, questions and options."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class QuestionType(str, Enum):
    """Kinds of question a survey section can contain."""

    SINGLE = "single"
    MULTIPLE = "multiple"
    TEXT = "text"
    RANGE = "range"


@dataclass(frozen=True)
class Option:
    """A selectable answer of a single or multiple choice question."""

    id: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Option":
        return cls(id=data["id"], text=data["text"])


@dataclass(frozen=True)
class RangeLabels:
    """Captions shown at both ends of a range question."""

    min: str
    max: str


@dataclass(frozen=True)
class Question:
    """A single survey question.

    Only ``single`` and ``multiple`` questions carry options. ``range``
    questions carry ``range_min < range_max`` and both boundary labels.
    """

    id: str
    text: str
    type: QuestionType = QuestionType.SINGLE
    required: bool = True
    options: List[Option] = field(default_factory=list)
    range_min: Optional[int] = None
    range_max: Optional[int] = None
    range_labels: Optional[RangeLabels] = None

    def option_text(self, option_id: str) -> Optional[str]:
        for option in self.options:
            if option.id == option_id:
                return option.text
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "required": self.required,
            "options": [option.to_dict() for option in self.options],
        }
        if self.type is QuestionType.RANGE:
            data["range_min"] = self.range_min
            data["range_max"] = self.range_max
            if self.range_labels is not None:
                data["range_labels"] = {
                    "min": self.range_labels.min,
                    "max": self.range_labels.max,
                }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        labels = data.get("range_labels")
        return cls(
            id=data["id"],
            text=data["text"],
            type=QuestionType(data.get("type", QuestionType.SINGLE.value)),
            required=bool(data.get("required", True)),
            options=[Option.from_dict(option) for option in data.get("options") or []],
            range_min=data.get("range_min"),
            range_max=data.get("range_max"),
            range_labels=RangeLabels(min=labels["min"], max=labels["max"]) if labels else None,
        )


@dataclass(frozen=True)
class Section:
    """One page of a survey, produced from one markdown file."""

    id: str
    title: str
    questions: List[Question] = field(default_factory=list)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "questions": [question.to_dict() for question in self.questions],
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Section":
        return cls(
            id=data["id"],
            title=data["title"],
            questions=[Question.from_dict(question) for question in data.get("questions") or []],
            description=data.get("description"),
        )
