"""Survey repository for survey versions seeded from markdown files.

Stores every survey version ever created:
- New content is always written as a new record with a fresh id
- Superseded or removed surveys are only flagged inactive, never deleted
- Source file names and fingerprints are kept for change detection
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from ..clients import SqliteClient
from ..models import Section, SurveyIndexEntry, SurveyRecord, SurveyUnit

logger = logging.getLogger(__name__)

# SQL statements
CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS surveys (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    sections TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    source_file TEXT,
    file_hash TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_surveys_source_file ON surveys(source_file)
"""

SELECT_RECORD_SQL = """
SELECT id, title, description, sections, is_active, source_file,
       file_hash, created_at, updated_at
FROM surveys
"""


class SurveyRepository:
    """Persistence for survey records on SQLite."""

    def __init__(self, db_path: str = "surveys.db"):
        """Initialize the survey repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = db_path
        self._sqlite_client = SqliteClient(db_path)
        self._ensure_table_exists()

    @property
    def db_path(self) -> str:
        return self._db_path

    def _ensure_table_exists(self) -> None:
        """Create the surveys table if it doesn't exist."""
        self._sqlite_client.execute_query(CREATE_TABLE_SQL)
        self._sqlite_client.execute_query(CREATE_INDEX_SQL)
        logger.debug("Survey table initialized")

    def list_survey_index(self) -> List[SurveyIndexEntry]:
        """Return the reconciliation attributes of every stored survey.

        Inactive versions are included.

        Returns:
            Index entries ordered by creation time, oldest first.
        """
        rows = self._sqlite_client.execute_query(
            """SELECT id, title, source_file, is_active, file_hash, created_at
               FROM surveys ORDER BY created_at, rowid"""
        )

        return [
            SurveyIndexEntry(
                id=row[0],
                title=row[1],
                source_file=row[2],
                is_active=bool(row[3]),
                file_hash=row[4],
                created_at=datetime.fromisoformat(row[5]),
            )
            for row in rows
        ]

    def create_survey(self, unit: SurveyUnit) -> SurveyRecord:
        """Store a survey unit as a new active survey.

        Args:
            unit: Parsed survey unit.

        Returns:
            The created SurveyRecord.
        """
        now = datetime.now(timezone.utc)
        survey_id = str(uuid.uuid4())
        sections_json = json.dumps([section.to_dict() for section in unit.sections])

        self._sqlite_client.execute_query(
            """INSERT INTO surveys
               (id, title, description, sections, is_active, source_file, file_hash, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                survey_id,
                unit.title,
                unit.description,
                sections_json,
                1,
                unit.source_file,
                unit.fingerprint,
                now.isoformat(),
                now.isoformat(),
            ),
        )

        logger.info(
            f"Created survey '{unit.title}' ({survey_id}) with "
            f"{len(unit.sections)} section(s) from {unit.source_file}"
        )

        return SurveyRecord(
            id=survey_id,
            title=unit.title,
            description=unit.description,
            sections=list(unit.sections),
            is_active=True,
            source_file=unit.source_file,
            file_hash=unit.fingerprint,
            created_at=now,
            updated_at=now,
        )

    def set_active(self, survey_id: str, is_active: bool) -> None:
        """Flip the active flag of a stored survey.

        Args:
            survey_id: Survey identifier.
            is_active: New value of the flag.

        Raises:
            ValueError: If no survey has the given id.
        """
        if not self._sqlite_client.execute_query(
            "SELECT 1 FROM surveys WHERE id = ?", (survey_id,)
        ):
            raise ValueError(f"Survey {survey_id} not found")

        self._sqlite_client.execute_query(
            "UPDATE surveys SET is_active = ?, updated_at = ? WHERE id = ?",
            (1 if is_active else 0, datetime.now(timezone.utc).isoformat(), survey_id),
        )

        logger.info(f"Marked survey {survey_id} {'active' if is_active else 'inactive'}")

    def get_survey(self, survey_id: str) -> Optional[SurveyRecord]:
        """Get a stored survey by its ID, active or not.

        Args:
            survey_id: Survey identifier.

        Returns:
            SurveyRecord if found, None otherwise.
        """
        result = self._sqlite_client.execute_query(
            SELECT_RECORD_SQL + " WHERE id = ?",
            (survey_id,),
        )

        if not result:
            return None
        return _record_from_row(result[0])

    def list_active_surveys(self) -> List[SurveyRecord]:
        """Get every active survey, newest first."""
        rows = self._sqlite_client.execute_query(
            SELECT_RECORD_SQL + " WHERE is_active = 1 ORDER BY created_at DESC, rowid DESC"
        )
        return [_record_from_row(row) for row in rows]

    def count_surveys(self) -> int:
        """Count stored surveys, active and inactive."""
        return self._sqlite_client.execute_query("SELECT COUNT(*) FROM surveys")[0][0]

    def close(self) -> None:
        """Close the database connection."""
        self._sqlite_client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False


def _record_from_row(row) -> SurveyRecord:
    return SurveyRecord(
        id=row[0],
        title=row[1],
        description=row[2],
        sections=[Section.from_dict(section) for section in json.loads(row[3])],
        is_active=bool(row[4]),
        source_file=row[5],
        file_hash=row[6],
        created_at=datetime.fromisoformat(row[7]),
        updated_at=datetime.fromisoformat(row[8]),
    )
