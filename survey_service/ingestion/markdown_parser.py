"""Markdown parser turning one survey file into one survey section.

File layout::

    # Section title
    1. Question text
    -- multiple
    - First option
    - Second option
    2. How much do you agree?
    - 1 (Strongly disagree) → 5 (Strongly agree)

Malformed content never raises: unknown lines are ignored and a missing
heading falls back to a placeholder title.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from survey_service.models import Option, Question, QuestionType, RangeLabels, Section

logger = logging.getLogger(__name__)

UNTITLED_SECTION = "Untitled Section"

HEADING_RE = re.compile(r"^#\s+(.+)$")
QUESTION_RE = re.compile(r"^(\d+)\.\s+(.+)$")
OPTION_RE = re.compile(r"^-\s+(.+)$")
DIRECTIVE_RE = re.compile(r"^--\s+(.+)$")
RANGE_RE = re.compile(r"^(-?\d+)\s*\((.+?)\)\s*(?:→|->)\s*(-?\d+)\s*\((.+?)\)$")

# Checked in order, first keyword contained in the directive wins
TYPE_KEYWORDS = (
    ("single", QuestionType.SINGLE),
    ("multiple", QuestionType.MULTIPLE),
    ("text", QuestionType.TEXT),
    ("range", QuestionType.RANGE),
)

DEFAULT_RANGE_MIN = 1
DEFAULT_RANGE_MAX = 5


class ParserState(Enum):
    """Whether a question is currently being accumulated."""

    NO_QUESTION = "no_question"
    ACCUMULATING = "accumulating"


@dataclass
class _QuestionDraft:
    text: str
    type: QuestionType = QuestionType.SINGLE
    required: bool = True
    options: List[Option] = field(default_factory=list)
    range_min: Optional[int] = None
    range_max: Optional[int] = None
    range_labels: Optional[RangeLabels] = None

    def build(self, source: str) -> Question:
        question_id = str(uuid.uuid4())

        if self.type is QuestionType.TEXT:
            return Question(id=question_id, text=self.text, type=self.type, required=self.required)

        if self.type is QuestionType.RANGE:
            if self.range_min is None:
                logger.warning(
                    f"Range question '{self.text}' in {source} has no bounds, "
                    f"using {DEFAULT_RANGE_MIN}..{DEFAULT_RANGE_MAX}"
                )
                self.range_min = DEFAULT_RANGE_MIN
                self.range_max = DEFAULT_RANGE_MAX
                self.range_labels = RangeLabels(min=str(DEFAULT_RANGE_MIN), max=str(DEFAULT_RANGE_MAX))
            return Question(
                id=question_id,
                text=self.text,
                type=self.type,
                required=self.required,
                range_min=self.range_min,
                range_max=self.range_max,
                range_labels=self.range_labels,
            )

        return Question(
            id=question_id,
            text=self.text,
            type=self.type,
            required=self.required,
            options=list(self.options),
        )


class SectionParser:
    """Line-by-line state machine collecting the questions of one section.

    Transitions:
        NO_QUESTION --numbered line--> ACCUMULATING
        ACCUMULATING --numbered line--> flush, ACCUMULATING
        ACCUMULATING --option / range / directive line--> ACCUMULATING
        NO_QUESTION --option / range / directive line--> NO_QUESTION (ignored)
        any --end of input--> flush, NO_QUESTION
    """

    def __init__(self, source: str = "<text>"):
        self._source = source
        self._state = ParserState.NO_QUESTION
        self._draft: Optional[_QuestionDraft] = None
        self._questions: List[Question] = []

    @property
    def state(self) -> ParserState:
        return self._state

    def feed(self, line: str) -> None:
        """Classify one non-blank line and apply it."""
        question_match = QUESTION_RE.match(line)
        if question_match:
            self.flush()
            self._draft = _QuestionDraft(text=question_match.group(2).strip())
            self._state = ParserState.ACCUMULATING
            return

        if self._state is ParserState.NO_QUESTION:
            if OPTION_RE.match(line) or DIRECTIVE_RE.match(line):
                logger.debug(f"Ignoring line before first question in {self._source}: {line}")
            return

        option_match = OPTION_RE.match(line)
        if option_match:
            self._add_option(option_match.group(1).strip())
            return

        directive_match = DIRECTIVE_RE.match(line)
        if directive_match:
            self._apply_directive(directive_match.group(1))

    def _add_option(self, text: str) -> None:
        range_match = RANGE_RE.match(text)
        if range_match:
            try:
                low, high = int(range_match.group(1)), int(range_match.group(3))
            except ValueError:
                # Bounds too long for int conversion
                logger.warning(f"Range '{text[:80]}' in {self._source} has unreadable bounds, keeping it as an option")
                self._draft.options.append(Option(id=str(uuid.uuid4()), text=text))
                return
            if low < high:
                self._draft.type = QuestionType.RANGE
                self._draft.range_min = low
                self._draft.range_max = high
                self._draft.range_labels = RangeLabels(
                    min=range_match.group(2).strip(),
                    max=range_match.group(4).strip(),
                )
                self._draft.options = []
                return
            logger.warning(
                f"Range '{text}' in {self._source} does not go from low to high, "
                f"keeping it as an option"
            )

        self._draft.options.append(Option(id=str(uuid.uuid4()), text=text))

    def _apply_directive(self, directive: str) -> None:
        lowered = directive.lower()
        for keyword, question_type in TYPE_KEYWORDS:
            if keyword in lowered:
                self._draft.type = question_type
                break

        if self._draft.type is QuestionType.TEXT:
            self._draft.options = []

    def flush(self) -> None:
        """Close the question being accumulated, if any."""
        if self._draft is not None:
            self._questions.append(self._draft.build(self._source))
        self._draft = None
        self._state = ParserState.NO_QUESTION

    def finish(self) -> List[Question]:
        self.flush()
        return list(self._questions)


def parse_markdown_section(markdown: str, source: str = "<text>") -> Section:
    """
    Parse the text of one markdown file into a section.

    Args:
        markdown: File content.
        source: Name used in log messages.

    Returns:
        Section with freshly generated section, question and option ids.
    """
    lines = [line.strip() for line in markdown.splitlines() if line.strip()]
    if not lines:
        logger.warning(f"No content in {source}")
        return Section(id=str(uuid.uuid4()), title=UNTITLED_SECTION)

    heading_match = HEADING_RE.match(lines[0])
    if heading_match:
        title = heading_match.group(1).strip()
    else:
        logger.warning(f"No heading on the first line of {source}, using '{UNTITLED_SECTION}'")
        title = UNTITLED_SECTION

    parser = SectionParser(source)
    for line in lines[1:]:
        parser.feed(line)

    return Section(id=str(uuid.uuid4()), title=title, questions=parser.finish())


def parse_markdown_file(path: Path) -> Section:
    """Read a UTF-8 markdown file and parse it into a section."""
    path = Path(path)
    return parse_markdown_section(path.read_text(encoding="utf-8-sig"), source=path.name)
