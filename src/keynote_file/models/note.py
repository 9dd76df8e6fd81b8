"""Domain models for KeyNote documents."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from keynote_file.config import BOOKMARK_SLOTS, SUPPORTED_VERSION_MAJOR, SUPPORTED_VERSION_MINOR
from keynote_file.core.parser.rtf_block import starts_rtf

if TYPE_CHECKING:
    from keynote_file.protocols import VirtualResolver


class FileFormat(Enum):
    """Outer container of a note file."""

    KEYNOTE = "keynote"
    KEYNOTE_ENCRYPTED = "encrypted"
    DARTNOTES = "dartnotes"


class NoteKind(Enum):
    """Body layout of a note."""

    FLAT = "rtf"
    TREE = "tree"


class VirtualMode(Enum):
    """How a tree node relates to content stored elsewhere."""

    NONE = "none"
    LINKED = "linked"
    MIRROR = "mirror"

    @classmethod
    def parse(cls, value: str) -> "VirtualMode":
        """Map a stored mode name to a member; unknown names mean linked."""
        value = value.strip().lower()
        if not value or value == cls.NONE.value:
            return cls.NONE
        if value == cls.MIRROR.value:
            return cls.MIRROR
        return cls.LINKED


@dataclass(frozen=True)
class FileVersion:
    """A major.minor format version."""

    major: int = SUPPORTED_VERSION_MAJOR
    minor: int = SUPPORTED_VERSION_MINOR

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class DocumentFlags:
    """File-level option flags, stored as a '0'/'1' string in fixed order."""

    read_only: bool = False
    show_icons: bool = False
    saved_with_richedit3: bool = False
    no_multi_backup: bool = False

    def to_bitstring(self) -> str:
        bits = (self.read_only, self.show_icons, self.saved_with_richedit3, self.no_multi_backup)
        return "".join("1" if b else "0" for b in bits)


@dataclass(frozen=True)
class Section:
    """A titled block of note content."""

    title: str = ""
    content: str = ""

    @property
    def is_rtf(self) -> bool:
        return starts_rtf(self.content)


@dataclass(frozen=True)
class Bookmark:
    """A named position inside a note."""

    name: str
    note_id: int
    position: int = 0


@dataclass
class BaseNote(ABC):
    """Fields shared by flat and tree notes."""

    name: str = ""
    id: int = 0
    level: int = 0
    created: str = ""
    flags: str = ""
    # Property codes the parser does not recognize, kept for round-trip.
    extra: dict[str, str] = field(default_factory=dict)

    @property
    @abstractmethod
    def kind(self) -> NoteKind: ...


@dataclass
class Note(BaseNote):
    """A flat note: an ordered list of sections."""

    sections: list[Section] = field(default_factory=list)

    @property
    def kind(self) -> NoteKind:
        return NoteKind.FLAT

    @property
    def is_rtf(self) -> bool:
        return any(s.is_rtf for s in self.sections)

    def add_section(self, section: Section) -> None:
        self.sections.append(section)


@dataclass
class TreeNode:
    """A node of a tree note.

    Children are owned by their parent. The parent is referenced by id only and
    resolved through the owning TreeNote.
    """

    name: str = ""
    content: str = ""
    level: int = 0
    virtual_mode: VirtualMode = VirtualMode.NONE
    virtual_source: str = ""
    children: list["TreeNode"] = field(default_factory=list)
    node_id: int = 0
    parent_id: int | None = None
    extra: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.set_virtual(self.virtual_mode, self.virtual_source)

    def set_virtual(self, mode: VirtualMode, source: str = "") -> None:
        """Link this node to external content, or unlink it with VirtualMode.NONE."""
        # A virtual node without a source has nothing to point at.
        if mode is VirtualMode.NONE or not source.strip():
            self.virtual_mode = VirtualMode.NONE
            self.virtual_source = ""
            return
        self.virtual_mode = mode
        self.virtual_source = source

    @property
    def is_virtual(self) -> bool:
        return self.virtual_mode is not VirtualMode.NONE and bool(self.virtual_source)

    def add_child(self, child: "TreeNode") -> None:
        child.parent_id = self.node_id
        child.level = self.level + 1
        self.children.append(child)

    def walk(self) -> Iterator["TreeNode"]:
        """Yield this node and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def effective_content(self, resolver: "VirtualResolver | None" = None) -> str:
        """Content to display, asking the resolver for virtual nodes.

        Falls back to the stored content when there is no resolver or the
        resolver cannot supply the source.
        """
        if resolver is None or not self.is_virtual:
            return self.content
        resolved = resolver.resolve(self.virtual_source)
        return self.content if resolved is None else resolved


@dataclass
class TreeNote(BaseNote):
    """A note whose body is a forest of tree nodes."""

    roots: list[TreeNode] = field(default_factory=list)

    @property
    def kind(self) -> NoteKind:
        return NoteKind.TREE

    def add_root(self, node: TreeNode) -> None:
        node.parent_id = None
        node.level = 0
        self.roots.append(node)

    def walk(self) -> Iterator[TreeNode]:
        """Yield all nodes in pre-order."""
        for root in self.roots:
            yield from root.walk()

    def find_node(self, node_id: int) -> TreeNode | None:
        for node in self.walk():
            if node.node_id == node_id:
                return node
        return None

    def parent_of(self, node: TreeNode) -> TreeNode | None:
        if node.parent_id is None:
            return None
        return self.find_node(node.parent_id)

    def find_node_by_name(self, name: str) -> TreeNode | None:
        """Case-insensitive lookup over all nodes."""
        folded = name.casefold()
        for node in self.walk():
            if node.name.casefold() == folded:
                return node
        return None

    def virtual_nodes(self) -> list[TreeNode]:
        return [n for n in self.walk() if n.is_virtual]


AnyNote = Note | TreeNote


def _empty_bookmarks() -> list[Bookmark | None]:
    return [None] * BOOKMARK_SLOTS


def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


@dataclass
class Document:
    """A loaded note file."""

    file_format: FileFormat = FileFormat.KEYNOTE
    version: FileVersion = field(default_factory=FileVersion)
    created: datetime = field(default_factory=_now)
    description: str = ""
    active_note: int = -1
    flags: DocumentFlags = field(default_factory=DocumentFlags)
    # Format settings are not interpreted, only carried through a save.
    format_settings: str = ""
    notes: list[AnyNote] = field(default_factory=list)
    bookmarks: list[Bookmark | None] = field(default_factory=_empty_bookmarks)
    crypt_method: str = ""

    @property
    def is_encrypted(self) -> bool:
        return self.file_format is FileFormat.KEYNOTE_ENCRYPTED

    @property
    def read_only(self) -> bool:
        """The read-only bit of the file flags."""
        return self.flags.read_only

    @read_only.setter
    def read_only(self, value: bool) -> None:
        self.flags = replace(self.flags, read_only=value)
