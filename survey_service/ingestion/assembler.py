"""Grouping of markdown files into surveys and assembly of survey units."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence

from survey_service.ingestion.fingerprint import compute_content_hash, compute_unit_fingerprint
from survey_service.ingestion.markdown_parser import parse_markdown_section
from survey_service.models import SourceFile, SurveyFileGroup, SurveyUnit
from survey_service.models.survey_unit import SOURCE_FILE_SEPARATOR

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
EXCLUDED_FILES = {"README.md"}
PART_FILE_RE = re.compile(r"^(.+?)_Part\d+\.md$", re.IGNORECASE)


@dataclass(frozen=True)
class SurveyGrouping:
    """Survey file groups found in a directory listing."""

    groups: List[SurveyFileGroup] = field(default_factory=list)
    ignored_files: List[str] = field(default_factory=list)  # Lone part files, names with separators


def list_markdown_files(directory: Path) -> List[str]:
    """List survey markdown file names in a directory, README.md excluded."""
    return sorted(
        path.name
        for path in Path(directory).iterdir()
        if path.is_file() and path.name.endswith(MARKDOWN_SUFFIX) and path.name not in EXCLUDED_FILES
    )


def _title_from_name(name: str) -> str:
    return name.replace("_", " ")


def group_survey_files(file_names: Iterable[str]) -> SurveyGrouping:
    """
    Group markdown file names into surveys.

    ``<prefix>_Part<N>.md`` files sharing a prefix become one multi-section
    survey when there are at least two of them. A part file without siblings
    is left out entirely, as is any name containing the source file
    separator. Every other file is a single-section survey.

    Args:
        file_names: Markdown file names, in any order.

    Returns:
        SurveyGrouping with groups in file-name order.
    """
    ignored_files: List[str] = []
    names = []
    for name in sorted(set(file_names)):
        # Stored source_file values are separator-joined
        if SOURCE_FILE_SEPARATOR in name:
            logger.warning(f"Skipping {name}: file names must not contain '{SOURCE_FILE_SEPARATOR}'")
            ignored_files.append(name)
            continue
        names.append(name)

    prefix_map = {}
    for name in names:
        part_match = PART_FILE_RE.match(name)
        if part_match:
            prefix_map.setdefault(part_match.group(1), []).append(name)

    groups: List[SurveyFileGroup] = []
    grouped = set()
    for prefix, related_files in prefix_map.items():
        if len(related_files) < 2:
            continue
        groups.append(
            SurveyFileGroup(
                key=prefix,
                title=_title_from_name(prefix),
                description=(
                    f"Multi-section survey created from {len(related_files)} files "
                    f'with prefix "{prefix}"'
                ),
                file_names=tuple(related_files),
                is_multi_section=True,
            )
        )
        grouped.update(related_files)

    for name in names:
        if name in grouped:
            continue
        if PART_FILE_RE.match(name):
            logger.warning(f"Skipping {name}: part file without sibling parts")
            ignored_files.append(name)
            continue
        groups.append(
            SurveyFileGroup(
                key=name,
                title=_title_from_name(name[: -len(MARKDOWN_SUFFIX)]),
                description=f"Survey created from {name}",
                file_names=(name,),
                is_multi_section=False,
            )
        )

    return SurveyGrouping(groups=groups, ignored_files=ignored_files)


def load_source_files(directory: Path, group: SurveyFileGroup) -> List[SourceFile]:
    """Read and fingerprint every file of a group.

    Raises:
        OSError: If a file cannot be read.
    """
    source_files = []
    for name in group.file_names:
        content = (Path(directory) / name).read_bytes()
        source_files.append(
            SourceFile(file_name=name, content=content, content_hash=compute_content_hash(content))
        )
    return source_files


def assemble_survey(group: SurveyFileGroup, source_files: Sequence[SourceFile]) -> SurveyUnit:
    """
    Parse the files of a group into a survey unit.

    Args:
        group: The file group.
        source_files: The group's files as read by load_source_files.

    Returns:
        SurveyUnit with one section per file, in file-name order.

    Raises:
        UnicodeDecodeError: If a file is not valid UTF-8.
    """
    ordered = sorted(source_files, key=lambda source: source.file_name)
    sections = [parse_markdown_section(source.text, source=source.file_name) for source in ordered]

    if group.is_multi_section:
        for source, section in zip(ordered, sections):
            logger.debug(f"Added section '{section.title}' from {source.file_name}")

    return SurveyUnit(
        title=group.title,
        description=group.description,
        sections=sections,
        source_files=tuple(source.file_name for source in ordered),
        fingerprint=compute_unit_fingerprint(ordered),
    )
