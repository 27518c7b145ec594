"""Reconciliation of survey markdown files with stored surveys.

Each run compares the markdown directory with every stored survey version:
- Skip surveys whose files are unchanged (same fingerprint)
- Supersede changed surveys (deactivate the old version, create a new one)
- Consolidate files that used to belong to different surveys into one
- Deactivate surveys whose source files disappeared

Surveys are never deleted, so responses stay linked to the version answered.
Running twice over an unchanged directory writes nothing the second time.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

from survey_service.config import get_config
from survey_service.ingestion.assembler import (
    assemble_survey,
    group_survey_files,
    list_markdown_files,
    load_source_files,
)
from survey_service.ingestion.fingerprint import compute_unit_fingerprint
from survey_service.models import (
    ReconcileAction,
    ReconciliationReport,
    SourceFile,
    SurveyFileGroup,
    SurveyIndexEntry,
    UnitOutcome,
)
from survey_service.services.survey_repository import SurveyRepository

logger = logging.getLogger(__name__)


class SurveySeedError(Exception):
    """Fatal ingestion failure: the whole run is aborted."""

    pass


class SurveyIngestionError(Exception):
    """Failure limited to one survey unit: the run continues."""

    pass


def build_source_index(entries: Sequence[SurveyIndexEntry]) -> Dict[str, List[SurveyIndexEntry]]:
    """Map every source file name to the stored surveys built from it."""
    index: Dict[str, List[SurveyIndexEntry]] = {}
    for entry in entries:
        for file_name in entry.source_files:
            index.setdefault(file_name, []).append(entry)
    return index


class SurveyReconciler:
    """Brings stored surveys in line with a directory of markdown files."""

    def __init__(self, repository: SurveyRepository):
        self._repository = repository

    def reconcile(self, directory: Path) -> ReconciliationReport:
        """
        Run one reconciliation pass over a markdown directory.

        Args:
            directory: Directory holding the survey markdown files.

        Returns:
            ReconciliationReport describing every decision taken.

        Raises:
            SurveySeedError: If the directory or the store cannot be read.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise SurveySeedError(f"Directory does not exist: {directory}")

        try:
            file_names = list_markdown_files(directory)
        except OSError as e:
            raise SurveySeedError(f"Failed to list {directory}: {e}") from e

        try:
            entries = self._repository.list_survey_index()
        except sqlite3.Error as e:
            raise SurveySeedError(f"Failed to read stored surveys: {e}") from e

        logger.info(
            f"Found {len(file_names)} markdown files in {directory}, "
            f"{len(entries)} stored surveys"
        )

        # Built fresh every run, the store is the source of truth
        source_index = build_source_index(entries)
        deactivated: Set[str] = set()

        grouping = group_survey_files(file_names)
        report = ReconciliationReport(ignored_files=list(grouping.ignored_files))

        for group in grouping.groups:
            # Deactivations stay counted when the unit fails afterwards
            deactivated_ids: List[str] = []
            try:
                outcome = self._reconcile_group(
                    directory, group, source_index, deactivated, deactivated_ids
                )
            except SurveyIngestionError as e:
                logger.error(
                    f"Failed to ingest survey '{group.title}' from {', '.join(group.file_names)}: {e}"
                )
                outcome = UnitOutcome(
                    key=group.key,
                    title=group.title,
                    action=ReconcileAction.FAILED,
                    deactivated_ids=tuple(deactivated_ids),
                    error=str(e),
                )
            report.outcomes.append(outcome)

        report.swept_ids.extend(self._sweep_removed(entries, set(file_names), deactivated))

        logger.info(f"Reconciliation complete: {report.summary()}")
        return report

    def _reconcile_group(
        self,
        directory: Path,
        group: SurveyFileGroup,
        source_index: Dict[str, List[SurveyIndexEntry]],
        deactivated: Set[str],
        deactivated_ids: List[str],
    ) -> UnitOutcome:
        try:
            return self._apply_group(directory, group, source_index, deactivated, deactivated_ids)
        except SurveyIngestionError:
            raise
        except Exception as e:
            raise SurveyIngestionError(f"Unexpected error in {', '.join(group.file_names)}: {e}") from e

    def _apply_group(
        self,
        directory: Path,
        group: SurveyFileGroup,
        source_index: Dict[str, List[SurveyIndexEntry]],
        deactivated: Set[str],
        deactivated_ids: List[str],
    ) -> UnitOutcome:
        try:
            source_files = load_source_files(directory, group)
        except OSError as e:
            raise SurveyIngestionError(f"Failed to read {', '.join(group.file_names)}: {e}") from e

        fingerprint = compute_unit_fingerprint(source_files)

        matches = {
            name: _resolve_file(source_index.get(name, []), deactivated)
            for name in group.file_names
        }
        implicated: Dict[str, SurveyIndexEntry] = {}
        for candidates in matches.values():
            for entry in candidates:
                implicated[entry.id] = entry

        if not implicated:
            survey_id = self._create(group, source_files)
            return UnitOutcome(group.key, group.title, ReconcileAction.CREATED, survey_id)

        fully_mapped = all(matches.values())
        if fully_mapped and len(implicated) == 1:
            entry = next(iter(implicated.values()))
            same_files = set(entry.source_files) == set(group.file_names)
            if same_files and entry.file_hash == fingerprint and entry.id not in deactivated:
                if entry.is_active:
                    logger.debug(f"Skipping unchanged survey '{entry.title}' ({entry.id})")
                    return UnitOutcome(group.key, group.title, ReconcileAction.SKIPPED, entry.id)

                logger.info(f"Source files of survey '{entry.title}' ({entry.id}) are back, reactivating")
                self._set_active(entry, True)
                return UnitOutcome(group.key, group.title, ReconcileAction.REACTIVATED, entry.id)

        action = ReconcileAction.CONSOLIDATED if len(implicated) > 1 else ReconcileAction.SUPERSEDED
        logger.info(
            f"Survey '{group.title}' changed ({action.value}), "
            f"replacing {', '.join(implicated)}"
        )

        for entry in implicated.values():
            if entry.is_active and entry.id not in deactivated:
                self._set_active(entry, False)
                deactivated.add(entry.id)
                deactivated_ids.append(entry.id)

        survey_id = self._create(group, source_files)
        return UnitOutcome(group.key, group.title, action, survey_id, tuple(deactivated_ids))

    def _create(self, group: SurveyFileGroup, source_files: List[SourceFile]) -> str:
        try:
            unit = assemble_survey(group, source_files)
        except UnicodeDecodeError as e:
            raise SurveyIngestionError(f"{', '.join(group.file_names)} is not valid UTF-8: {e}") from e

        try:
            return self._repository.create_survey(unit).id
        except sqlite3.Error as e:
            raise SurveyIngestionError(f"Failed to store survey '{unit.title}': {e}") from e

    def _set_active(self, entry: SurveyIndexEntry, is_active: bool) -> None:
        try:
            self._repository.set_active(entry.id, is_active)
        except (sqlite3.Error, ValueError) as e:
            raise SurveyIngestionError(
                f"Failed to update survey '{entry.title}' ({entry.id}): {e}"
            ) from e

    def _sweep_removed(
        self,
        entries: Sequence[SurveyIndexEntry],
        present_files: Set[str],
        deactivated: Set[str],
    ) -> List[str]:
        swept = []
        for entry in entries:
            if not entry.is_active or entry.id in deactivated or not entry.source_files:
                continue
            missing = [name for name in entry.source_files if name not in present_files]
            if not missing:
                continue

            logger.info(
                f"Deactivating survey '{entry.title}' ({entry.id}): "
                f"missing {', '.join(missing)}"
            )
            try:
                self._set_active(entry, False)
            except SurveyIngestionError as e:
                logger.error(str(e))
                continue
            deactivated.add(entry.id)
            swept.append(entry.id)
        return swept


def _resolve_file(
    candidates: List[SurveyIndexEntry],
    deactivated: Set[str],
) -> List[SurveyIndexEntry]:
    """Pick the stored surveys a file currently belongs to.

    Every active survey built from the file, or else its most recent version.
    """
    active = [entry for entry in candidates if entry.is_active and entry.id not in deactivated]
    if active:
        return active
    if candidates:
        return [max(candidates, key=lambda entry: entry.created_at)]
    return []


def seed_surveys_from_directory(
    directory: Path,
    repository: Optional[SurveyRepository] = None,
) -> ReconciliationReport:
    """
    Reconcile stored surveys with a markdown directory.

    Args:
        directory: Directory holding the survey markdown files.
        repository: Store to reconcile; opened from configuration when omitted.

    Returns:
        ReconciliationReport for the run.

    Raises:
        SurveySeedError: On fatal failure; per-survey failures are only logged.
    """
    if repository is not None:
        return SurveyReconciler(repository).reconcile(directory)

    config = get_config()
    try:
        store = SurveyRepository(config.database.path)
    except sqlite3.Error as e:
        raise SurveySeedError(f"Cannot open survey database {config.database.path}: {e}") from e

    with store:
        return SurveyReconciler(store).reconcile(directory)


# --- Entry Point ---

if __name__ == "__main__":
    config = get_config()
    logging.basicConfig(level=config.logging.level)
    report = seed_surveys_from_directory(Path(config.ingestion.markdown_dir))
    print(f"Seeding complete: {report.summary()}")
