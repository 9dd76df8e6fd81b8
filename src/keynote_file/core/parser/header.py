"""Parse '#' header lines into document fields."""

import re
from datetime import datetime

from loguru import logger

from keynote_file.core.bookmarks import set_bookmark
from keynote_file.core.format.markers import (
    DATE_FORMAT,
    HDR_ACTIVE_NOTE,
    HDR_AUTHOR,
    HDR_BOOKMARK,
    HDR_COMMENT,
    HDR_CREATED,
    HDR_DESCRIPTION,
    HDR_FLAGS,
    HDR_FORMAT,
    HDR_VERSION,
)
from keynote_file.models.note import Bookmark, Document, DocumentFlags, FileVersion

_VERSION_RE = re.compile(r"(\d+)\.(\d+)")

FLAG_COUNT = 4


def parse_flags(bits: str) -> DocumentFlags | None:
    """Parse a fixed-order '0'/'1' flag string.

    Returns None for strings shorter than the four known flags; callers keep
    their defaults in that case.
    """
    bits = bits.strip()
    if len(bits) < FLAG_COUNT:
        return None
    return DocumentFlags(
        read_only=bits[0] == "1",
        show_icons=bits[1] == "1",
        saved_with_richedit3=bits[2] == "1",
        no_multi_backup=bits[3] == "1",
    )


def parse_created(value: str) -> datetime:
    """Parse 'dd-mm-YYYY HH:MM:SS', falling back to the current time."""
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT)
    except ValueError:
        logger.warning("Malformed creation date {!r}, using current time", value)
        return datetime.now().replace(microsecond=0)


def format_created(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)


def parse_bookmark(value: str) -> tuple[int, Bookmark] | None:
    """Parse 'index|note_id|position|name'; None if the fields are not numbers."""
    parts = value.split("|", 3)
    if len(parts) != 4:
        return None
    try:
        index, note_id, position = int(parts[0]), int(parts[1]), int(parts[2])
    except ValueError:
        return None
    return index, Bookmark(name=parts[3], note_id=note_id, position=position)


def format_bookmark(index: int, bookmark: Bookmark) -> str:
    return f"{index}|{bookmark.note_id}|{bookmark.position}|{bookmark.name}"


def apply_header_field(doc: Document, field: str) -> None:
    """Apply one header line (without its leading '#') to the document.

    Unknown codes are ignored. Malformed values are logged and skipped; header
    fields are display hints and never abort a load.
    """
    if len(field) < 2:
        return
    code = field[0]
    value = field[1:].strip()

    if code in (HDR_DESCRIPTION, HDR_COMMENT):
        doc.description = value
    elif code == HDR_AUTHOR:
        pass
    elif code == HDR_ACTIVE_NOTE:
        try:
            doc.active_note = int(value)
        except ValueError:
            logger.warning("Ignoring non-numeric active note index {!r}", value)
    elif code == HDR_CREATED:
        doc.created = parse_created(value)
    elif code == HDR_FLAGS:
        flags = parse_flags(value)
        if flags is not None:
            doc.flags = flags
    elif code == HDR_FORMAT:
        doc.format_settings = value
    elif code == HDR_BOOKMARK:
        parsed = parse_bookmark(value)
        if parsed is None:
            logger.warning("Ignoring malformed bookmark line {!r}", value)
        else:
            index, bookmark = parsed
            set_bookmark(doc.bookmarks, index, bookmark)
    elif code == HDR_VERSION:
        match = _VERSION_RE.search(value)
        if match:
            doc.version = FileVersion(int(match.group(1)), int(match.group(2)))
