"""Line-oriented state machine turning a KeyNote text stream into notes.

Markers are matched against the stripped line:

    %-   start a new note          %+   start a new section
    %:   content follows           %%   end of file (also #!EOF!#)
    #!RTF!# / #!TRE!#              next note is flat / a tree
    #!BeginNode!# / #!EndNode!#    open / close a tree node
    #!VirtualNode!#                current tree node is virtual

Lines starting with '#' before the first marker are header fields. Embedded
RTF blocks are consumed whole, so marker-looking lines inside them stay
content. The format tolerates a missing end marker and unclosed RTF at the
end of the stream.
"""

import io
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from keynote_file.core.format.markers import (
    COMMENT,
    CONTENT_BEGIN,
    END_OF_FILE,
    EOF_SENTINEL,
    FLAT_NOTE_SENTINEL,
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
    SENTINELS,
    TREE_NOTE_SENTINEL,
)
from keynote_file.core.parser.header import apply_header_field
from keynote_file.core.parser.rtf_block import RtfBlockExtractor, starts_rtf
from keynote_file.core.parser.tree_builder import build_forest
from keynote_file.errors import MalformedRecordError
from keynote_file.models.note import (
    AnyNote,
    Document,
    Note,
    NoteKind,
    Section,
    TreeNode,
    TreeNote,
    VirtualMode,
)
from keynote_file.protocols import NullObserver, ParseObserver

_PROPERTY_RE = re.compile(r"^([A-Z]{2})=(.*)$")

_MARKERS = frozenset({NOTE_BEGIN, SECTION_BEGIN, CONTENT_BEGIN, END_OF_FILE})


class ParserState(Enum):
    HEADER = "header"
    AWAITING_NOTE = "awaiting_note"
    IN_PROPERTIES = "in_properties"
    IN_CONTENT = "in_content"
    IN_EMBEDDED_RTF = "in_embedded_rtf"
    DONE = "done"


def _parse_int(code: str, value: str, line_no: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        msg = f"Line {line_no}: {code}= expects an integer, got {value!r}"
        raise MalformedRecordError(msg, {"line": line_no, "code": code}) from None


def _join_content(lines: list[str]) -> str:
    return "\n".join(lines).rstrip("\r\n")


@dataclass
class _SectionBuilder:
    title: str = ""
    lines: list[str] = field(default_factory=list)

    def build(self) -> Section:
        return Section(title=self.title, content=_join_content(self.lines))


@dataclass
class _NodeBuilder:
    depth: int
    name: str = ""
    level: int | None = None
    virtual: bool = False
    mode: VirtualMode | None = None
    source: str = ""
    lines: list[str] = field(default_factory=list)
    extra: dict[str, str] = field(default_factory=dict)

    def build(self) -> tuple[TreeNode, int]:
        mode = self.mode
        if mode is None:
            mode = VirtualMode.LINKED if self.virtual else VirtualMode.NONE
        node = TreeNode(
            name=self.name,
            content=_join_content(self.lines),
            virtual_mode=mode,
            virtual_source=self.source,
            extra=self.extra,
        )
        return node, self.depth if self.level is None else self.level


@dataclass
class _NoteBuilder:
    kind: NoteKind
    name: str = ""
    id: int = 0
    level: int = 0
    created: str = ""
    flags: str = ""
    extra: dict[str, str] = field(default_factory=dict)
    sections: list[Section] = field(default_factory=list)
    section: _SectionBuilder | None = None
    nodes: list[_NodeBuilder] = field(default_factory=list)
    # Tree nodes opened with #!BeginNode!# and not yet closed.
    open_nodes: list[_NodeBuilder] = field(default_factory=list)
    touched: bool = False

    @property
    def node(self) -> _NodeBuilder | None:
        return self.open_nodes[-1] if self.open_nodes else None

    def build(self) -> AnyNote:
        common = dict(
            name=self.name,
            id=self.id,
            level=self.level,
            created=self.created,
            flags=self.flags,
            extra=self.extra,
        )
        if self.kind is NoteKind.TREE:
            return TreeNote(**common, roots=build_forest([n.build() for n in self.nodes]))
        return Note(**common, sections=list(self.sections))


class SectionParser:
    """Parse KeyNote lines into a Document.

    The parser fills the notes and header fields of the document. Id
    assignment and other whole-document checks are left to the caller.
    """

    def __init__(self, observer: ParseObserver | None = None) -> None:
        self.observer: ParseObserver = observer or NullObserver()
        self.state = ParserState.HEADER
        self._doc = Document()
        self._note: _NoteBuilder | None = None
        self._rtf: RtfBlockExtractor | None = None
        self._resume_state = ParserState.IN_PROPERTIES
        self._line_no = 0

    def parse(self, lines: Iterable[str], doc: Document | None = None) -> Document:
        """Consume lines (with or without line endings) and return the document."""
        if doc is not None:
            self._doc = doc
        for line in lines:
            self._line_no += 1
            self.feed(line)
            if self.state is ParserState.DONE:
                break
        self.close()
        return self._doc

    def parse_text(self, text: str, doc: Document | None = None) -> Document:
        return self.parse(io.StringIO(text), doc)

    def feed(self, line: str) -> None:
        raw = line.rstrip("\r\n")
        stripped = raw.strip()

        if self.state is ParserState.DONE:
            return
        if self.state is ParserState.IN_EMBEDDED_RTF:
            self._feed_rtf(raw)
            return
        if stripped in SENTINELS:
            self._sentinel(stripped)
            return
        if stripped in _MARKERS:
            self._marker(stripped)
            return

        if self.state is ParserState.HEADER:
            if not stripped:
                return
            if stripped.startswith(COMMENT):
                apply_header_field(self._doc, stripped[len(COMMENT) :])
                return
            self.state = ParserState.AWAITING_NOTE

        if self.state is ParserState.AWAITING_NOTE:
            if not stripped:
                return
            logger.debug("Line {}: content before any note marker, starting a note", self._line_no)
            self._start_note(NoteKind.FLAT)

        if self.state is ParserState.IN_PROPERTIES:
            if not stripped:
                return
            match = _PROPERTY_RE.match(stripped)
            if match:
                self._property(match.group(1), match.group(2))
                return
        self._content(raw)

    def close(self) -> None:
        """Finish the stream, finalizing whatever is still open."""
        if self.state is ParserState.IN_EMBEDDED_RTF and self._rtf is not None:
            logger.warning("Unclosed RTF block at end of stream, keeping it as-is")
            self._append(self._rtf.text)
            self._rtf = None
        if self.state is not ParserState.DONE:
            self._finish_note()
            self.state = ParserState.DONE

    # --- markers ---

    def _marker(self, marker: str) -> None:
        if marker == END_OF_FILE:
            self._finish_note()
            self.state = ParserState.DONE
            return

        if marker == NOTE_BEGIN:
            if self._note is None or self._note.touched:
                self._finish_note()
                self._start_note(NoteKind.FLAT)
            self.state = ParserState.IN_PROPERTIES
            return

        note = self._ensure_note()
        self._touch(note)
        if marker == SECTION_BEGIN:
            if note.kind is NoteKind.TREE:
                depth = len(note.open_nodes)
                if note.open_nodes:
                    note.open_nodes.pop()
                    depth -= 1
                self._open_node(note, depth)
            else:
                self._finish_section()
                note.section = _SectionBuilder()
            self.state = ParserState.IN_PROPERTIES
        elif marker == CONTENT_BEGIN:
            if note.kind is NoteKind.TREE:
                if note.node is None:
                    self._open_node(note, 0)
            elif note.section is None:
                note.section = _SectionBuilder()
            self.state = ParserState.IN_CONTENT

    def _sentinel(self, sentinel: str) -> None:
        if sentinel == EOF_SENTINEL:
            self._marker(END_OF_FILE)
            return

        if sentinel in (FLAT_NOTE_SENTINEL, TREE_NOTE_SENTINEL):
            kind = NoteKind.TREE if sentinel == TREE_NOTE_SENTINEL else NoteKind.FLAT
            if self._note is not None and not self._note.touched:
                self._note.kind = kind
            else:
                self._finish_note()
                self._start_note(kind)
            self.state = ParserState.IN_PROPERTIES
            return

        note = self._ensure_note()
        if note.kind is not NoteKind.TREE:
            if note.touched:
                logger.warning("Line {}: tree node marker in a flat note, ignored", self._line_no)
                return
            note.kind = NoteKind.TREE
        self._touch(note)

        if sentinel == NODE_BEGIN:
            self._open_node(note, len(note.open_nodes))
        elif sentinel == NODE_END:
            if note.open_nodes:
                note.open_nodes.pop()
            else:
                logger.warning("Line {}: unmatched end-node marker", self._line_no)
        elif sentinel == NODE_VIRTUAL:
            node = note.node or self._open_node(note, 0)
            node.virtual = True
        self.state = ParserState.IN_PROPERTIES

    # --- lines ---

    def _property(self, code: str, value: str) -> None:
        note = self._ensure_note()
        self._touch(note)

        node = note.node if note.kind is NoteKind.TREE else None
        if node is not None:
            if code in (PROP_NAME, PROP_TITLE):
                node.name = value.strip()
            elif code == PROP_LEVEL:
                node.level = _parse_int(code, value, self._line_no)
            elif code == PROP_VIRTUAL_MODE:
                node.mode = VirtualMode.parse(value)
            elif code == PROP_VIRTUAL_SOURCE:
                node.source = value.strip()
            else:
                node.extra[code] = value
            return

        if code == PROP_TITLE:
            if note.section is not None:
                note.section.title = value.strip()
            else:
                note.name = value.strip()
        elif code == PROP_NAME:
            note.name = value.strip()
        elif code == PROP_ID:
            note.id = _parse_int(code, value, self._line_no)
        elif code == PROP_LEVEL:
            note.level = _parse_int(code, value, self._line_no)
        elif code == PROP_CREATED:
            note.created = value.strip()
        elif code == PROP_FLAGS:
            note.flags = value.strip()
        else:
            note.extra[code] = value

    def _content(self, raw: str) -> None:
        if starts_rtf(raw):
            self._rtf = RtfBlockExtractor(raw)
            if self._rtf.closed:
                self._append(self._rtf.text)
                self._rtf = None
            else:
                self._resume_state = self.state
                self.state = ParserState.IN_EMBEDDED_RTF
            return
        self._append(raw)
        if self.state is ParserState.IN_PROPERTIES:
            self.state = ParserState.IN_CONTENT

    def _feed_rtf(self, raw: str) -> None:
        if self._rtf is None:
            msg = "RTF state without an open block"
            raise RuntimeError(msg)
        if self._rtf.feed(raw):
            self._append(self._rtf.text)
            self._rtf = None
            self.state = self._resume_state

    def _append(self, text: str) -> None:
        note = self._ensure_note()
        self._touch(note)
        if note.kind is NoteKind.TREE:
            node = note.node or self._open_node(note, 0)
            node.lines.append(text)
            return
        if note.section is None:
            note.section = _SectionBuilder()
        note.section.lines.append(text)

    # --- builders ---

    def _ensure_note(self) -> _NoteBuilder:
        if self._note is None:
            self._start_note(NoteKind.FLAT)
        assert self._note is not None
        return self._note

    def _start_note(self, kind: NoteKind) -> None:
        self._note = _NoteBuilder(kind=kind)
        self.state = ParserState.IN_PROPERTIES

    def _touch(self, note: _NoteBuilder) -> None:
        # The kind is fixed once a note has content, so the start event waits until then.
        if not note.touched:
            note.touched = True
            self.observer.note_started(note.kind)

    def _open_node(self, note: _NoteBuilder, depth: int) -> _NodeBuilder:
        node = _NodeBuilder(depth=depth)
        note.nodes.append(node)
        note.open_nodes.append(node)
        return node

    def _finish_section(self) -> None:
        note = self._note
        if note is None or note.section is None:
            return
        section = note.section.build()
        note.sections.append(section)
        note.section = None
        self.observer.section_finished(section)

    def _finish_note(self) -> None:
        note = self._note
        if note is None:
            return
        self._finish_section()
        self._note = None
        if not note.touched:
            return
        built = note.build()
        self._doc.notes.append(built)
        self.observer.note_finished(built)


def parse_lines(lines: Iterable[str], *, observer: ParseObserver | None = None) -> Document:
    """Parse a KeyNote line stream into a Document (no id verification)."""
    return SectionParser(observer).parse(lines)
