"""Markdown survey ingestion."""

from survey_service.ingestion.markdown_parser import (
    UNTITLED_SECTION,
    SectionParser,
    parse_markdown_file,
    parse_markdown_section,
)
from survey_service.ingestion.fingerprint import (
    compute_content_hash,
    compute_unit_fingerprint,
)
from survey_service.ingestion.assembler import (
    SurveyGrouping,
    assemble_survey,
    group_survey_files,
    list_markdown_files,
    load_source_files,
)
from survey_service.ingestion.reconciler import (
    SurveyIngestionError,
    SurveyReconciler,
    SurveySeedError,
    build_source_index,
    seed_surveys_from_directory,
)

__all__ = [
    # Parsing
    "UNTITLED_SECTION",
    "SectionParser",
    "parse_markdown_file",
    "parse_markdown_section",
    # Fingerprints
    "compute_content_hash",
    "compute_unit_fingerprint",
    # Assembly
    "SurveyGrouping",
    "assemble_survey",
    "group_survey_files",
    "list_markdown_files",
    "load_source_files",
    # Reconciliation
    "SurveyIngestionError",
    "SurveyReconciler",
    "SurveySeedError",
    "build_source_index",
    "seed_surveys_from_directory",
]
