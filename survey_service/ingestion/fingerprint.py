"""Content fingerprints used to detect changed survey files."""

import hashlib
from typing import Sequence

from survey_service.models import SourceFile


def compute_content_hash(data: bytes) -> str:
    """Compute MD5 hash of raw file content for change detection.

    Args:
        data: Raw file bytes.

    Returns:
        MD5 hash as hexadecimal string.
    """
    return hashlib.md5(data).hexdigest()


def compute_unit_fingerprint(source_files: Sequence[SourceFile]) -> str:
    """Compute the fingerprint of a survey unit.

    A single file keeps its own hash. For several files the member hashes
    are concatenated in ascending file-name order and hashed again, so the
    result does not depend on directory listing order.

    Raises:
        ValueError: If no source file is given.
    """
    if not source_files:
        raise ValueError("Cannot fingerprint a survey without source files")
    if len(source_files) == 1:
        return source_files[0].content_hash

    ordered = sorted(source_files, key=lambda source: source.file_name)
    combined = "".join(source.content_hash for source in ordered)
    return compute_content_hash(combined.encode("utf-8"))
