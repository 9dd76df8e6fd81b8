"""Tests for header field parsing."""

from datetime import datetime

from keynote_file.core.parser.header import (
    apply_header_field,
    format_bookmark,
    parse_bookmark,
    parse_created,
    parse_flags,
)
from keynote_file.models.note import Bookmark, Document, DocumentFlags, FileVersion


def test_parse_flags_in_fixed_order() -> None:
    """Flag bits map to fields in their fixed order."""
    flags = parse_flags("1010")
    assert flags == DocumentFlags(
        read_only=True, show_icons=False, saved_with_richedit3=True, no_multi_backup=False
    )
    assert flags is not None and flags.to_bitstring() == "1010"


def test_short_flag_string_keeps_defaults() -> None:
    """Flag strings shorter than four bits are ignored."""
    assert parse_flags("01") is None

    doc = Document()
    apply_header_field(doc, "^11")
    assert doc.flags == DocumentFlags()
    assert doc.read_only is False


def test_read_only_flag_marks_document_read_only() -> None:
    """The first flag bit makes the document read-only."""
    doc = Document()
    apply_header_field(doc, "^1000")
    assert doc.read_only is True


def test_parse_created_round_trips_format() -> None:
    """Creation dates use day-month-year order."""
    assert parse_created("31-12-2020 23:59:58") == datetime(2020, 12, 31, 23, 59, 58)


def test_malformed_created_falls_back_to_now() -> None:
    """An unreadable creation date becomes the current time."""
    before = datetime.now().replace(microsecond=0)
    value = parse_created("yesterday-ish")
    assert value >= before


def test_bookmark_line_round_trip() -> None:
    """A formatted bookmark line parses back to the same bookmark."""
    bookmark = Bookmark(name="Todo | later", note_id=4, position=120)
    parsed = parse_bookmark(format_bookmark(3, bookmark))
    assert parsed == (3, bookmark)


def test_malformed_bookmark_is_ignored() -> None:
    """Bookmark lines that do not parse leave the table empty."""
    assert parse_bookmark("x|1|2|name") is None
    doc = Document()
    apply_header_field(doc, "Bnot a bookmark")
    assert doc.bookmarks == [None] * 10


def test_out_of_range_bookmark_header_is_dropped() -> None:
    """Bookmark indexes past the last slot are dropped."""
    doc = Document()
    apply_header_field(doc, "B10|1|0|overflow")
    assert doc.bookmarks == [None] * 10


def test_description_comment_and_author_fields() -> None:
    """Description and comment set the description; author is ignored."""
    doc = Document()
    apply_header_field(doc, "D  first ")
    assert doc.description == "first"
    apply_header_field(doc, "/second")
    assert doc.description == "second"
    apply_header_field(doc, "?someone")
    assert doc.description == "second"


def test_active_note_and_version_fields() -> None:
    """Active note and version header fields are applied."""
    doc = Document()
    apply_header_field(doc, "$3")
    apply_header_field(doc, "!GFKNT 1.5")
    assert doc.active_note == 3
    assert doc.version == FileVersion(1, 5)


def test_non_numeric_active_note_is_ignored() -> None:
    """A non-numeric active note keeps the default."""
    doc = Document()
    apply_header_field(doc, "$abc")
    assert doc.active_note == -1


def test_too_short_field_is_ignored() -> None:
    """A field code without a value changes nothing."""
    doc = Document()
    apply_header_field(doc, "D")
    assert doc == Document(created=doc.created)
