"""Tests for the internal notes log."""

from datetime import datetime

import pytest

from warranty_claims.lifecycle import engine, notes
from warranty_claims.lifecycle.notes import LegacyNote, RawNote, StructuredNote
from warranty_claims.models.claim import ClaimInput

MORNING = datetime(2025, 3, 1, 9, 5)
AFTERNOON = datetime(2025, 3, 1, 15, 42)


@pytest.fixture
def claim():
    return engine.build_claim(
        ClaimInput(
            title="Loose railing",
            description="Stair railing wobbles.",
            category="Carpentry",
            address="3 Birch Rd",
            homeowner_name="Alex",
            homeowner_email="alex@example.com",
        ),
        MORNING,
        claim_number="CLM-3003",
    )


def test_format_note_entry():
    assert notes.format_note_entry("Called homeowner", "Jane", MORNING) == (
        "03/01/2025 at 9:05 AM by Jane\nCalled homeowner"
    )
    assert notes.format_note_timestamp(AFTERNOON) == "03/01/2025 at 3:42 PM"
    assert notes.format_note_timestamp(datetime(2025, 3, 1, 0, 7)) == "03/01/2025 at 12:07 AM"


def test_add_note_to_empty_blob(claim):
    result = notes.add_internal_note(claim, "First note", "Jane", MORNING)
    assert result.internal_notes == "03/01/2025 at 9:05 AM by Jane\nFirst note"
    assert claim.internal_notes == ""


def test_add_note_separates_with_blank_line(claim):
    c = notes.add_internal_note(claim, "First", "Jane", MORNING)
    c = notes.add_internal_note(c, "Second", "Omar", AFTERNOON)
    assert c.internal_notes == (
        "03/01/2025 at 9:05 AM by Jane\nFirst\n\n03/01/2025 at 3:42 PM by Omar\nSecond"
    )


def test_add_note_is_append_only(claim):
    c = claim.model_copy(update={"internal_notes": "[2/1/2025, 10:00:00 AM] legacy entry"})
    before = notes.count_note_entries(c.internal_notes)
    for i in range(3):
        previous = c.internal_notes
        c = notes.add_internal_note(c, f"note {i}\n\n\nwith gap", "Jane", MORNING)
        assert c.internal_notes.startswith(previous)
    assert notes.count_note_entries(c.internal_notes) == before + 3


def test_add_note_requires_text(claim):
    with pytest.raises(ValueError):
        notes.add_internal_note(claim, "   ", "Jane", MORNING)


def test_add_note_defaults_author(claim):
    c = notes.add_internal_note(claim, "No author given", "", MORNING)
    assert "by Admin\n" in c.internal_notes


def test_parse_legacy_and_structured_blocks():
    blob = (
        "[2/14/2025, 10:30:00 AM] Spoke with builder about the leak\n\n"
        "03/01/2025 at 9:05 AM by Jane\nScheduled plumber\nBring extra parts"
    )
    entries = notes.parse_notes(blob)
    assert len(entries) == 2
    legacy, structured = entries
    assert isinstance(legacy, LegacyNote)
    assert legacy.timestamp == "2/14/2025, 10:30:00 AM"
    assert legacy.text == "Spoke with builder about the leak"
    assert legacy.recorded_at == datetime(2025, 2, 14, 10, 30)
    assert isinstance(structured, StructuredNote)
    assert structured.author == "Jane"
    assert structured.timestamp == "03/01/2025 at 9:05 AM"
    assert structured.text == "Scheduled plumber\nBring extra parts"
    assert structured.recorded_at == datetime(2025, 3, 1, 9, 5)


def test_parse_unrecognized_block_is_raw_text():
    blob = "just some text somebody typed\n\n[unterminated bracket note"
    entries = notes.parse_notes(blob)
    assert entries == [
        RawNote(text="just some text somebody typed"),
        RawNote(text="[unterminated bracket note"),
    ]


def test_parse_legacy_with_unparseable_timestamp():
    entries = notes.parse_notes("[sometime last week] text here")
    assert entries == [LegacyNote(timestamp="sometime last week", text="text here", recorded_at=None)]


@pytest.mark.parametrize("blob", [None, "", "   \n\n  "])
def test_parse_empty(blob):
    assert notes.parse_notes(blob) == []


def test_roundtrip_of_added_notes(claim):
    c = notes.add_internal_note(claim, "Alpha", "Jane", MORNING)
    c = notes.add_internal_note(c, "Beta", "Omar", AFTERNOON)
    entries = notes.parse_notes(c.internal_notes)
    assert [(e.author, e.text) for e in entries] == [("Jane", "Alpha"), ("Omar", "Beta")]


@pytest.mark.parametrize("trailing", ["\n", "\n\n", "  \n \n"])
def test_add_note_after_blob_with_trailing_newlines(claim, trailing):
    imported = claim.model_copy(update={"internal_notes": f"[3/1/2025, 9:05:00 AM] legacy{trailing}"})
    c = notes.add_internal_note(imported, "new note", "Jane", MORNING)
    entries = notes.parse_notes(c.internal_notes)
    assert len(entries) == 2
    assert isinstance(entries[0], LegacyNote)
    assert entries[1] == StructuredNote(
        timestamp="03/01/2025 at 9:05 AM",
        author="Jane",
        text="new note",
        recorded_at=datetime(2025, 3, 1, 9, 5),
    )


@pytest.mark.parametrize("author", ["Jane\n\nDoe", "Jane\nDoe", "  Jane \t Doe\x07 "])
def test_author_cannot_split_an_entry(claim, author):
    c = notes.add_internal_note(claim, "body", "Omar", MORNING)
    c = notes.add_internal_note(c, "body", author, AFTERNOON)
    entries = notes.parse_notes(c.internal_notes)
    assert notes.count_note_entries(c.internal_notes) == 2
    assert (entries[1].author, entries[1].text) == ("Jane Doe", "body")
