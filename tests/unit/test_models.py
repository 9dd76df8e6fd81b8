"""Tests for domain models and collaborator protocols."""

import pytest
from loguru import logger

from keynote_file.models.note import (
    BaseNote,
    Bookmark,
    Document,
    DocumentFlags,
    FileFormat,
    FileVersion,
    Note,
    NoteKind,
    Section,
    TreeNode,
    TreeNote,
    VirtualMode,
)
from keynote_file.protocols import (
    EnvPassphraseProvider,
    LoggingObserver,
    NullObserver,
    ParseObserver,
    PassphraseProvider,
    StaticPassphrase,
    VirtualResolver,
)
from tests.unit.fakes import FakePassphraseProvider, FakeResolver, RecordingObserver


def test_section_is_frozen() -> None:
    """Sections are immutable."""
    section = Section(title="t", content="c")
    with pytest.raises(AttributeError):
        section.title = "changed"  # type: ignore[misc]


def test_bookmark_is_frozen() -> None:
    """Bookmarks are immutable."""
    mark = Bookmark(name="b", note_id=1)
    with pytest.raises(AttributeError):
        mark.position = 3  # type: ignore[misc]


def test_file_version_str() -> None:
    """Versions print as major.minor."""
    assert str(FileVersion()) == "2.0"
    assert str(FileVersion(1, 5)) == "1.5"


def test_default_document() -> None:
    """A new document is plain KeyNote with no active note."""
    doc = Document()

    assert doc.file_format is FileFormat.KEYNOTE
    assert doc.active_note == -1
    assert doc.bookmarks == [None] * 10
    assert doc.flags == DocumentFlags()
    assert doc.created.microsecond == 0
    assert not doc.is_encrypted


def test_note_kinds() -> None:
    """Each note class reports its kind."""
    assert Note().kind is NoteKind.FLAT
    assert TreeNote().kind is NoteKind.TREE


def test_note_is_rtf() -> None:
    """A note is RTF when any section holds RTF."""
    note = Note(sections=[Section(content="plain"), Section(content=" {\\rtf1 x}")])
    assert note.is_rtf
    assert not Note(sections=[Section(content="plain")]).is_rtf


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("", VirtualMode.NONE),
        ("none", VirtualMode.NONE),
        ("Mirror", VirtualMode.MIRROR),
        ("linked", VirtualMode.LINKED),
        ("something-new", VirtualMode.LINKED),
    ],
)
def test_virtual_mode_parse(value: str, expected: VirtualMode) -> None:
    """Stored mode names map to modes; unknown names mean linked."""
    assert VirtualMode.parse(value) is expected


def test_virtual_node_needs_a_source() -> None:
    """A virtual mode without a source is dropped on creation."""
    node = TreeNode(name="v", virtual_mode=VirtualMode.LINKED, virtual_source="  ")
    assert node.virtual_mode is VirtualMode.NONE
    assert not node.is_virtual


def test_set_virtual_applies_the_same_rule() -> None:
    """Linking an existing node without a source leaves it a plain node."""
    node = TreeNode(name="n")

    node.set_virtual(VirtualMode.MIRROR, "notes/a.txt")
    assert node.is_virtual
    assert (node.virtual_mode, node.virtual_source) == (VirtualMode.MIRROR, "notes/a.txt")

    node.set_virtual(VirtualMode.LINKED, "")
    assert not node.is_virtual
    assert (node.virtual_mode, node.virtual_source) == (VirtualMode.NONE, "")


def test_base_note_cannot_be_instantiated() -> None:
    """Only concrete note kinds can be created."""
    with pytest.raises(TypeError):
        BaseNote()  # type: ignore[abstract]


def test_document_read_only_follows_flags() -> None:
    """read_only is a view of the first flag bit."""
    doc = Document(flags=DocumentFlags(read_only=True, show_icons=True))
    assert doc.read_only

    doc.read_only = False
    assert doc.flags == DocumentFlags(show_icons=True)


def test_tree_structure_helpers() -> None:
    """Tree helpers walk, find and resolve parents."""
    tree = TreeNote(name="T")
    root = TreeNode(name="Root", node_id=1)
    tree.add_root(root)
    child = TreeNode(name="Child", node_id=2, level=7)
    root.add_child(child)
    grandchild = TreeNode(name="Grandchild", node_id=3)
    child.add_child(grandchild)

    assert child.level == 1
    assert grandchild.level == 2
    assert [n.name for n in tree.walk()] == ["Root", "Child", "Grandchild"]
    assert tree.find_node(3) is grandchild
    assert tree.find_node(42) is None
    assert tree.parent_of(grandchild) is child
    assert tree.parent_of(root) is None
    assert tree.find_node_by_name("CHILD") is child


def test_effective_content() -> None:
    """Virtual nodes use resolved content when the resolver has it."""
    node = TreeNode(content="stored", virtual_mode=VirtualMode.MIRROR, virtual_source="f.txt")
    plain = TreeNode(content="plain")

    assert node.effective_content() == "stored"
    assert node.effective_content(FakeResolver({"f.txt": "fresh"})) == "fresh"
    assert node.effective_content(FakeResolver({})) == "stored"
    assert plain.effective_content(FakeResolver({"f.txt": "fresh"})) == "plain"


def test_fakes_and_builtins_satisfy_protocols() -> None:
    """Fakes and stock implementations match the runtime protocols."""
    assert isinstance(RecordingObserver(), ParseObserver)
    assert isinstance(NullObserver(), ParseObserver)
    assert isinstance(LoggingObserver(), ParseObserver)
    assert isinstance(FakeResolver({}), VirtualResolver)
    assert isinstance(FakePassphraseProvider("x"), PassphraseProvider)
    assert isinstance(StaticPassphrase("x"), PassphraseProvider)
    assert isinstance(EnvPassphraseProvider(), PassphraseProvider)


def test_env_passphrase_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    """The environment provider reads KEYNOTE_PASSPHRASE."""
    assert EnvPassphraseProvider().get_passphrase() is None
    monkeypatch.setenv("KEYNOTE_PASSPHRASE", "from-env")
    assert EnvPassphraseProvider().get_passphrase() == "from-env"


def test_logging_observer_emits_debug_messages() -> None:
    """LoggingObserver logs each parse event at debug level."""
    messages: list[str] = []
    logger.enable("keynote_file")
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    try:
        observer = LoggingObserver()
        observer.note_started(NoteKind.TREE)
        observer.note_finished(Note(name="n", id=4))
        observer.section_finished(Section())
    finally:
        logger.remove(handler_id)
        logger.disable("keynote_file")

    assert [m.strip() for m in messages] == [
        "Starting new tree note",
        "Finished note 'n' (id 4)",
        "Finished section 'Untitled'",
    ]
