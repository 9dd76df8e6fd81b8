"""Read and write KeyNote (.knt) note files."""

from loguru import logger

from keynote_file.errors import (
    DecryptionFailedError,
    IncompatibleVersionError,
    InvalidContainerHeaderError,
    KeyNoteError,
    MalformedRecordError,
    NoteFileNotFoundError,
    PassphraseRequiredError,
    UnrecognizedFormatError,
)
from keynote_file.models.note import (
    Bookmark,
    Document,
    FileFormat,
    Note,
    Section,
    TreeNode,
    TreeNote,
    VirtualMode,
)
from keynote_file.note_file import NoteFile, load_document, parse_text
from keynote_file.protocols import (
    EnvPassphraseProvider,
    ParseObserver,
    PassphraseProvider,
    StaticPassphrase,
    VirtualResolver,
)

logger.disable("keynote_file")

__all__ = [
    "Bookmark",
    "DecryptionFailedError",
    "Document",
    "EnvPassphraseProvider",
    "FileFormat",
    "IncompatibleVersionError",
    "InvalidContainerHeaderError",
    "KeyNoteError",
    "MalformedRecordError",
    "Note",
    "NoteFile",
    "NoteFileNotFoundError",
    "ParseObserver",
    "PassphraseProvider",
    "PassphraseRequiredError",
    "Section",
    "StaticPassphrase",
    "TreeNode",
    "TreeNote",
    "UnrecognizedFormatError",
    "VirtualMode",
    "load_document",
    "parse_text",
]
