"""In-memory survey units assembled from markdown files before persistence."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from survey_service.models.survey import Section

SOURCE_FILE_SEPARATOR = ","


@dataclass(frozen=True)
class SourceFile:
    """A markdown file read during one ingestion run. Never persisted."""

    file_name: str
    content: bytes
    content_hash: str  # MD5 hash of the raw file bytes

    @property
    def text(self) -> str:
        return self.content.decode("utf-8-sig")


@dataclass(frozen=True)
class SurveyFileGroup:
    """File names that together make up one survey, before any file is read."""

    key: str  # Multi-section prefix or the single file name
    title: str
    description: Optional[str]
    file_names: Tuple[str, ...]  # Ascending file-name order
    is_multi_section: bool


@dataclass(frozen=True)
class SurveyUnit:
    """A parsed survey ready to be written as a new survey record."""

    title: str
    description: Optional[str]
    sections: List[Section]
    source_files: Tuple[str, ...]
    fingerprint: str  # File hash, or hash of member hashes for multi-file units

    @property
    def source_file(self) -> str:
        """Comma-joined source file names as stored on the survey record."""
        return SOURCE_FILE_SEPARATOR.join(self.source_files)
