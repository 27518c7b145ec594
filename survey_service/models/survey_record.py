"""Persisted survey models for change detection and version management."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from survey_service.models.survey import Question, Section
from survey_service.models.survey_unit import SOURCE_FILE_SEPARATOR


def split_source_file(source_file: Optional[str]) -> Tuple[str, ...]:
    """Split a stored comma-joined source file value into file names."""
    if not source_file:
        return ()
    return tuple(
        name.strip() for name in source_file.split(SOURCE_FILE_SEPARATOR) if name.strip()
    )


@dataclass(frozen=True)
class SurveyIndexEntry:
    """Attributes of a stored survey needed to reconcile it with the markdown files."""

    id: str
    title: str
    source_file: Optional[str]  # Comma-joined file names, None for surveys not seeded from files
    is_active: bool
    file_hash: Optional[str]  # Unit fingerprint at last write
    created_at: datetime

    @property
    def source_files(self) -> Tuple[str, ...]:
        return split_source_file(self.source_file)


@dataclass(frozen=True)
class SurveyRecord:
    """A stored survey version.

    Content is never edited in place: only ``is_active`` changes after creation.
    """

    id: str
    title: str
    description: Optional[str]
    sections: List[Section]
    is_active: bool
    source_file: Optional[str]
    file_hash: Optional[str]
    created_at: datetime
    updated_at: datetime

    @property
    def source_files(self) -> Tuple[str, ...]:
        return split_source_file(self.source_file)

    def find_question(self, question_id: str) -> Optional[Question]:
        for section in self.sections:
            for question in section.questions:
                if question.id == question_id:
                    return question
        return None

    def iter_questions(self):
        for section in self.sections:
            yield from section.questions


class ReconcileAction(str, Enum):
    """Outcome of reconciling one survey unit against stored surveys."""

    CREATED = "created"
    SKIPPED = "skipped"
    SUPERSEDED = "superseded"
    CONSOLIDATED = "consolidated"
    REACTIVATED = "reactivated"
    FAILED = "failed"


@dataclass(frozen=True)
class UnitOutcome:
    """What happened to one survey unit during a reconciliation run."""

    key: str
    title: str
    action: ReconcileAction
    survey_id: Optional[str] = None  # Id of the record that is active afterwards
    deactivated_ids: Tuple[str, ...] = ()
    error: Optional[str] = None


@dataclass
class ReconciliationReport:
    """Summary of one reconciliation run."""

    outcomes: List[UnitOutcome] = field(default_factory=list)
    swept_ids: List[str] = field(default_factory=list)  # Deactivated because files vanished
    ignored_files: List[str] = field(default_factory=list)  # Lone part files, names with separators

    def count(self, action: ReconcileAction) -> int:
        return sum(1 for outcome in self.outcomes if outcome.action is action)

    @property
    def created(self) -> int:
        return (
            self.count(ReconcileAction.CREATED)
            + self.count(ReconcileAction.SUPERSEDED)
            + self.count(ReconcileAction.CONSOLIDATED)
        )

    @property
    def skipped(self) -> int:
        return self.count(ReconcileAction.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(ReconcileAction.FAILED)

    @property
    def deactivated(self) -> int:
        unit_deactivations = sum(len(outcome.deactivated_ids) for outcome in self.outcomes)
        return unit_deactivations + len(self.swept_ids)

    @property
    def writes(self) -> int:
        """Number of create and update calls issued to the store."""
        return (
            self.created
            + self.deactivated
            + self.count(ReconcileAction.REACTIVATED)
        )

    def summary(self) -> str:
        return (
            f"{self.created} created, {self.skipped} unchanged, "
            f"{self.deactivated} deactivated, {self.failed} failed"
        )
