"""Serialize a Document to the plain KeyNote line format.

The output is what SectionParser reads back. The format has no escaping:
content lines that are themselves markers (a bare '%%', a sentinel line)
cannot be represented and are written as-is.
"""

import io

from keynote_file.core.bookmarks import iter_bookmarks
from keynote_file.core.format.markers import (
    CONTENT_BEGIN,
    END_OF_FILE,
    HDR_ACTIVE_NOTE,
    HDR_BOOKMARK,
    HDR_CREATED,
    HDR_DESCRIPTION,
    HDR_FLAGS,
    HDR_FORMAT,
    HEADER_PREFIX,
    NODE_BEGIN,
    NODE_END,
    NODE_VIRTUAL,
    NOTE_BEGIN,
    PROP_CREATED,
    PROP_FLAGS,
    PROP_ID,
    PROP_LEVEL,
    PROP_NAME,
    PROP_TITLE,
    PROP_VIRTUAL_MODE,
    PROP_VIRTUAL_SOURCE,
    SECTION_BEGIN,
    TAG_PLAIN,
    TREE_NOTE_SENTINEL,
)
from keynote_file.core.parser.header import format_bookmark, format_created
from keynote_file.models.note import AnyNote, Document, Note, TreeNode, TreeNote


def _content(out: io.StringIO, content: str) -> None:
    out.write(f"{CONTENT_BEGIN}\n")
    if content:
        out.write(content)
        out.write("\n")


def _note_properties(out: io.StringIO, note: AnyNote) -> None:
    if note.name:
        out.write(f"{PROP_NAME}={note.name}\n")
    out.write(f"{PROP_ID}={note.id}\n")
    if note.level:
        out.write(f"{PROP_LEVEL}={note.level}\n")
    if note.created:
        out.write(f"{PROP_CREATED}={note.created}\n")
    if note.flags:
        out.write(f"{PROP_FLAGS}={note.flags}\n")
    for code, value in note.extra.items():
        out.write(f"{code}={value}\n")


def _write_flat(out: io.StringIO, note: Note) -> None:
    out.write(f"{NOTE_BEGIN}\n")
    _note_properties(out, note)
    for section in note.sections:
        out.write(f"{SECTION_BEGIN}\n")
        if section.title:
            out.write(f"{PROP_TITLE}={section.title}\n")
        _content(out, section.content)


def _write_node(out: io.StringIO, node: TreeNode) -> None:
    out.write(f"{NODE_BEGIN}\n")
    if node.name:
        out.write(f"{PROP_NAME}={node.name}\n")
    out.write(f"{PROP_LEVEL}={node.level}\n")
    if node.is_virtual:
        out.write(f"{NODE_VIRTUAL}\n")
        out.write(f"{PROP_VIRTUAL_MODE}={node.virtual_mode.value}\n")
        out.write(f"{PROP_VIRTUAL_SOURCE}={node.virtual_source}\n")
    for code, value in node.extra.items():
        out.write(f"{code}={value}\n")
    _content(out, node.content)
    out.write(f"{NODE_END}\n")


def _write_tree(out: io.StringIO, note: TreeNote) -> None:
    out.write(f"{TREE_NOTE_SENTINEL}\n")
    _note_properties(out, note)
    # Nodes are written flat, in pre-order, each with an explicit level.
    for node in note.walk():
        _write_node(out, node)


def serialize_document(doc: Document) -> str:
    """Render the document as KeyNote text, header first."""
    out = io.StringIO()
    out.write(f"{HEADER_PREFIX}{TAG_PLAIN.decode('ascii')} {doc.version}\n")
    if doc.description:
        out.write(f"#{HDR_DESCRIPTION} {doc.description}\n")
    out.write(f"#{HDR_CREATED} {format_created(doc.created)}\n")
    if doc.active_note >= 0:
        out.write(f"#{HDR_ACTIVE_NOTE}{doc.active_note}\n")
    out.write(f"#{HDR_FLAGS}{doc.flags.to_bitstring()}\n")
    if doc.format_settings:
        out.write(f"#{HDR_FORMAT}{doc.format_settings}\n")
    for index, bookmark in iter_bookmarks(doc.bookmarks):
        out.write(f"#{HDR_BOOKMARK}{format_bookmark(index, bookmark)}\n")

    for note in doc.notes:
        if isinstance(note, TreeNote):
            _write_tree(out, note)
        else:
            _write_flat(out, note)

    out.write(f"{END_OF_FILE}\n")
    return out.getvalue()
