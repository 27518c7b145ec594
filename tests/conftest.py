"""Shared fixtures for survey service tests."""

import os
import tempfile
from pathlib import Path

import pytest

from survey_service.ingestion import parse_markdown_section
from survey_service.models import SurveyUnit
from survey_service.services import SurveyRepository

SATISFACTION_MD = """# Greeting
1. How satisfied are you?
-- single
- Very satisfied
- Not satisfied
2. Comments?
-- text
"""


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def repository(temp_db_path):
    """Create a SurveyRepository with temporary database."""
    repo = SurveyRepository(temp_db_path)
    yield repo
    repo.close()


@pytest.fixture
def markdown_dir(tmp_path) -> Path:
    """Empty directory for survey markdown files."""
    directory = tmp_path / "markdown"
    directory.mkdir()
    return directory


def write_markdown(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


def make_unit(title: str, *markdown: str, source_files=None, fingerprint: str = "hash") -> SurveyUnit:
    """Build a survey unit from markdown section texts."""
    sections = [parse_markdown_section(text) for text in markdown]
    if source_files is None:
        source_files = (f"{title.replace(' ', '_')}.md",)
    return SurveyUnit(
        title=title,
        description=None,
        sections=sections,
        source_files=tuple(source_files),
        fingerprint=fingerprint,
    )
