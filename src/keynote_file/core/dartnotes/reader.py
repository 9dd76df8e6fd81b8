"""Read the DartNotes binary container into the KeyNote document model.

The container is a sequence of blocks, each a decimal ASCII length on its
own line followed by exactly that many bytes::

    <len>\\n  _DART_ID \\0 version \\0 reserved \\0 last-tab-index   header record
    <len>\\n  name \\0 created \\0 ...                               note header
    <len>\\n  raw note content                                     note body
    ...

Reading stops at end of stream or at a length of zero or less.
"""

from typing import BinaryIO

from loguru import logger

from keynote_file.core.format.markers import DART_FIELD_SEPARATOR, DART_SIGNATURE
from keynote_file.core.format.text import decode_text
from keynote_file.errors import InvalidContainerHeaderError, MalformedRecordError
from keynote_file.models.note import Document, FileFormat, Note, NoteKind, Section
from keynote_file.protocols import NullObserver, ParseObserver


def _read_length(stream: BinaryIO) -> int | None:
    """Read a length line; None at end of stream."""
    line = stream.readline()
    if not line.strip():
        return None
    try:
        return int(line.strip())
    except ValueError:
        msg = f"DartNotes length prefix is not a number: {line[:32]!r}"
        raise MalformedRecordError(msg, {"offset": stream.tell()}) from None


def _read_block(stream: BinaryIO, length: int) -> bytes:
    data = stream.read(length)
    if len(data) < length:
        msg = f"DartNotes block truncated: expected {length} bytes, got {len(data)}"
        raise MalformedRecordError(msg, {"expected": length, "actual": len(data)})
    return data


def _read_header(stream: BinaryIO) -> list[bytes]:
    try:
        length = _read_length(stream)
        if length is None or length <= 0:
            msg = "DartNotes header record is missing"
            raise InvalidContainerHeaderError(msg)
        record = _read_block(stream, length)
    except MalformedRecordError as e:
        msg = f"Invalid DartNotes header: {e.message}"
        raise InvalidContainerHeaderError(msg, e.context) from e

    if DART_SIGNATURE not in record:
        msg = "Invalid DartNotes header: signature token not found"
        raise InvalidContainerHeaderError(msg)
    return record.split(DART_FIELD_SEPARATOR)


def _read_note(stream: BinaryIO) -> Note | None:
    length = _read_length(stream)
    if length is None or length <= 0:
        return None
    fields = _read_block(stream, length).split(DART_FIELD_SEPARATOR)

    note = Note(name=decode_text(fields[0]).strip())
    if len(fields) >= 2:
        note.created = decode_text(fields[1]).strip()

    content_length = _read_length(stream)
    if content_length is not None and content_length > 0:
        content = decode_text(_read_block(stream, content_length))
        note.add_section(Section(content=content))
    return note


def read_dartnotes(stream: BinaryIO, *, observer: ParseObserver | None = None) -> Document:
    """Parse a DartNotes container.

    Raises:
        InvalidContainerHeaderError: If the header record is missing, truncated or unsigned.
        MalformedRecordError: If a later length prefix is not a number or a block is short.
    """
    observer = observer or NullObserver()
    fields = _read_header(stream)

    doc = Document(file_format=FileFormat.DARTNOTES)
    if len(fields) >= 4:
        try:
            doc.active_note = int(fields[3].strip() or b"-1")
        except ValueError:
            logger.warning("Ignoring non-numeric DartNotes last-tab index {!r}", fields[3])
    if len(fields) >= 2:
        logger.debug("DartNotes container version {!r}", decode_text(fields[1]))

    while True:
        note = _read_note(stream)
        if note is None:
            break
        observer.note_started(NoteKind.FLAT)
        doc.notes.append(note)
        observer.note_finished(note)
    return doc
