"""Tests for survey content fingerprints."""

import hashlib

import pytest

from survey_service.ingestion.fingerprint import compute_content_hash, compute_unit_fingerprint
from survey_service.models import SourceFile


def _source(name: str, content: bytes) -> SourceFile:
    return SourceFile(file_name=name, content=content, content_hash=compute_content_hash(content))


class TestComputeContentHash:
    """Test hashing of raw file content."""

    def test_hash_is_md5_hex(self):
        """Test hash format and value."""
        content_hash = compute_content_hash(b"# Survey\n")

        assert content_hash == hashlib.md5(b"# Survey\n").hexdigest()
        assert len(content_hash) == 32

    def test_hash_is_deterministic(self):
        """Test that identical bytes hash identically."""
        assert compute_content_hash(b"same") == compute_content_hash(b"same")

    def test_hash_changes_with_content(self):
        """Test that any byte change changes the hash."""
        assert compute_content_hash(b"1. Question") != compute_content_hash(b"1. Question ")


class TestComputeUnitFingerprint:
    """Test fingerprints of single and multi-file survey units."""

    def test_single_file_keeps_its_hash(self):
        """Test that a one-file unit is fingerprinted by the file hash."""
        source = _source("Survey.md", b"# Survey\n")

        assert compute_unit_fingerprint([source]) == source.content_hash

    def test_multi_file_hashes_member_hashes(self):
        """Test the hash-of-hashes for multi-file units."""
        part1 = _source("Feedback_Part1.md", b"# One\n")
        part2 = _source("Feedback_Part2.md", b"# Two\n")

        expected = hashlib.md5((part1.content_hash + part2.content_hash).encode("utf-8")).hexdigest()
        assert compute_unit_fingerprint([part1, part2]) == expected

        print(f"Unit fingerprint: {expected}")

    def test_multi_file_ignores_input_order(self):
        """Test that listing order does not change the fingerprint."""
        part1 = _source("Feedback_Part1.md", b"# One\n")
        part2 = _source("Feedback_Part2.md", b"# Two\n")

        assert compute_unit_fingerprint([part2, part1]) == compute_unit_fingerprint([part1, part2])

    def test_multi_file_changes_when_one_member_changes(self):
        """Test that editing one part changes the unit fingerprint."""
        part1 = _source("Feedback_Part1.md", b"# One\n")
        before = compute_unit_fingerprint([part1, _source("Feedback_Part2.md", b"# Two\n")])
        after = compute_unit_fingerprint([part1, _source("Feedback_Part2.md", b"# Two!\n")])

        assert before != after

    def test_empty_unit_raises(self):
        """Test that a unit needs at least one file."""
        with pytest.raises(ValueError):
            compute_unit_fingerprint([])
