"""Load and save KeyNote note files."""

import io
from pathlib import Path
from typing import BinaryIO

from loguru import logger

from keynote_file.config import CIPHER_NAME
from keynote_file.core.bookmarks import (
    clear_bookmarks,
    drop_bookmarks_for_note,
    get_bookmark,
    set_bookmark,
)
from keynote_file.core.crypto.container import seal, unseal
from keynote_file.core.dartnotes.reader import read_dartnotes
from keynote_file.core.format.sniffer import sniff
from keynote_file.core.format.text import decode_text, encode_text
from keynote_file.core.ids import assign_note_id, verify_note_ids
from keynote_file.core.parser.section_parser import SectionParser
from keynote_file.core.write.serializer import serialize_document
from keynote_file.errors import NoteFileNotFoundError
from keynote_file.models.note import (
    AnyNote,
    Bookmark,
    Document,
    FileFormat,
    TreeNote,
)
from keynote_file.protocols import ParseObserver, PassphraseProvider
from keynote_file.writer import AtomicFileWriter


def finish_document(doc: Document) -> Document:
    """Whole-document fixups after parsing: note ids and the active-note index."""
    verify_note_ids(doc.notes)
    if not 0 <= doc.active_note < len(doc.notes):
        if doc.active_note != -1:
            logger.warning(
                "Active note index {} out of range for {} notes, clearing it",
                doc.active_note, len(doc.notes),
            )
        doc.active_note = -1
    return doc


def parse_text(text: str, *, observer: ParseObserver | None = None) -> Document:
    """Parse KeyNote text (already decrypted and decoded) into a finished Document."""
    return finish_document(SectionParser(observer).parse_text(text))


def _parse_keynote(data: bytes, observer: ParseObserver | None) -> Document:
    doc = SectionParser(observer).parse_text(decode_text(data))
    doc.file_format = FileFormat.KEYNOTE
    return doc


def _resolve_passphrase(passphrase: str | None, provider: PassphraseProvider | None) -> str | None:
    if passphrase:
        return passphrase
    if provider is not None:
        return provider.get_passphrase()
    return None


class _RememberingProvider:
    """Asks the wrapped provider at most once and keeps the answer."""

    def __init__(self, passphrase: str | None, provider: PassphraseProvider | None) -> None:
        self.passphrase = passphrase or None
        self._provider = provider

    def get_passphrase(self) -> str | None:
        if self.passphrase is None and self._provider is not None:
            self.passphrase = self._provider.get_passphrase()
            self._provider = None
        return self.passphrase


def read_document(
    stream: BinaryIO,
    *,
    passphrase: str | None = None,
    passphrase_provider: PassphraseProvider | None = None,
    observer: ParseObserver | None = None,
) -> Document:
    """Read a complete note file from a binary stream.

    The stream is read to the end; closing it is the caller's job.

    Raises:
        UnrecognizedFormatError, IncompatibleVersionError, PassphraseRequiredError,
        DecryptionFailedError, InvalidContainerHeaderError, MalformedRecordError.
    """
    data = stream.read()
    result = sniff(data)

    if result.file_format is FileFormat.KEYNOTE_ENCRYPTED:
        plaintext = unseal(data, _resolve_passphrase(passphrase, passphrase_provider))
        inner = sniff(plaintext)
        doc = _parse_keynote(plaintext, observer)
        del plaintext
        doc.file_format = FileFormat.KEYNOTE_ENCRYPTED
        doc.crypt_method = CIPHER_NAME
        if inner.version is not None:
            doc.version = inner.version
    elif result.file_format is FileFormat.KEYNOTE:
        doc = _parse_keynote(data, observer)
        if result.version is not None:
            doc.version = result.version
    else:
        doc = read_dartnotes(io.BytesIO(data), observer=observer)

    return finish_document(doc)


def load_document(
    path: str | Path,
    *,
    passphrase: str | None = None,
    passphrase_provider: PassphraseProvider | None = None,
    observer: ParseObserver | None = None,
) -> Document:
    """Open and read a note file.

    Raises:
        NoteFileNotFoundError: If the path does not exist.
    """
    try:
        f = open(path, "rb")  # noqa: SIM115
    except FileNotFoundError as e:
        msg = f"Cannot open {str(path)!r}: File not found"
        raise NoteFileNotFoundError(msg, {"path": str(path)}) from e
    with f:
        return read_document(
            f,
            passphrase=passphrase,
            passphrase_provider=passphrase_provider,
            observer=observer,
        )


def dump_document(doc: Document, *, passphrase: str | None = None) -> bytes:
    """Serialize a document to file bytes.

    The result is encrypted when the document is an encrypted one or a
    passphrase is given; encrypting without a passphrase raises
    PassphraseRequiredError.
    """
    verify_note_ids(doc.notes)
    plaintext = encode_text(serialize_document(doc))
    if passphrase is not None or doc.is_encrypted:
        return seal(plaintext, passphrase, doc.version)
    return plaintext


class NoteFile:
    """A KeyNote document together with where it came from.

    Keeps the passphrase in memory for re-saving; it is never written out.
    """

    def __init__(
        self,
        document: Document | None = None,
        *,
        filename: str | Path | None = None,
        passphrase: str | None = None,
    ) -> None:
        self.document = document if document is not None else Document()
        self.filename = str(filename) if filename is not None else None
        self._passphrase = passphrase
        self.modified = False

    @property
    def passphrase(self) -> str | None:
        return self._passphrase

    @classmethod
    def load(
        cls,
        path: str | Path,
        *,
        passphrase: str | None = None,
        passphrase_provider: PassphraseProvider | None = None,
        observer: ParseObserver | None = None,
    ) -> "NoteFile":
        remembered = _RememberingProvider(passphrase, passphrase_provider)
        doc = load_document(path, passphrase_provider=remembered, observer=observer)
        logger.debug("Loaded {!r}: {} notes", str(path), len(doc.notes))
        return cls(doc, filename=path, passphrase=remembered.passphrase)

    @classmethod
    def loads(
        cls,
        data: bytes,
        *,
        passphrase: str | None = None,
        passphrase_provider: PassphraseProvider | None = None,
        observer: ParseObserver | None = None,
    ) -> "NoteFile":
        remembered = _RememberingProvider(passphrase, passphrase_provider)
        doc = read_document(io.BytesIO(data), passphrase_provider=remembered, observer=observer)
        return cls(doc, passphrase=remembered.passphrase)

    def dumps(self, *, passphrase: str | None = None) -> bytes:
        return dump_document(self.document, passphrase=passphrase or self._encrypt_passphrase())

    def save(
        self,
        path: str | Path | None = None,
        *,
        passphrase: str | None = None,
        writer: AtomicFileWriter | None = None,
    ) -> str:
        """Write the document, encrypted if it is an encrypted one or a passphrase is given.

        DartNotes documents are saved in KeyNote format.

        Returns:
            The writer's action ("create", "update" or "same").
        """
        target = path if path is not None else self.filename
        if target is None:
            msg = "No filename to save to"
            raise ValueError(msg)

        doc = self.document
        if passphrase:
            self._passphrase = passphrase
            doc.file_format = FileFormat.KEYNOTE_ENCRYPTED
        elif doc.file_format is FileFormat.DARTNOTES:
            doc.file_format = FileFormat.KEYNOTE
        if doc.is_encrypted:
            doc.crypt_method = CIPHER_NAME

        data = self.dumps()
        action = (writer or AtomicFileWriter()).write_bytes(target, data)
        self.filename = str(target)
        self.modified = False
        return action

    def _encrypt_passphrase(self) -> str | None:
        return self._passphrase if self.document.is_encrypted else None

    # --- notes ---

    @property
    def notes(self) -> list[AnyNote]:
        return self.document.notes

    @property
    def note_count(self) -> int:
        return len(self.document.notes)

    def get_note(self, index: int) -> AnyNote | None:
        if 0 <= index < len(self.document.notes):
            return self.document.notes[index]
        return None

    def get_note_by_id(self, note_id: int) -> AnyNote | None:
        for note in self.document.notes:
            if note.id == note_id:
                return note
        return None

    def find_note_by_name(self, name: str) -> AnyNote | None:
        """Case-insensitive lookup by note name."""
        folded = name.casefold()
        for note in self.document.notes:
            if note.name.casefold() == folded:
                return note
        return None

    def add_note(self, note: AnyNote) -> int:
        """Append a note, giving it the next free id if it has none.

        Returns:
            Index of the added note.
        """
        if note.id > 0 and self.get_note_by_id(note.id) is not None:
            msg = f"Note id {note.id} is already in use"
            raise ValueError(msg)
        assign_note_id(self.document.notes, note)
        self.document.notes.append(note)
        self.modified = True
        return len(self.document.notes) - 1

    def delete_note(self, note_id: int) -> bool:
        """Remove the first note with note_id; return whether one was removed."""
        for index, note in enumerate(self.document.notes):
            if note.id == note_id:
                del self.document.notes[index]
                drop_bookmarks_for_note(self.document.bookmarks, note_id)
                doc = self.document
                if doc.active_note == index:
                    doc.active_note = -1
                elif doc.active_note > index:
                    doc.active_note -= 1
                self.modified = True
                return True
        return False

    def has_tree_notes(self) -> bool:
        return any(isinstance(n, TreeNote) for n in self.document.notes)

    def has_virtual_nodes(self) -> bool:
        return any(
            isinstance(n, TreeNote) and n.virtual_nodes() for n in self.document.notes
        )

    def has_virtual_node_for_source(self, source: str, *, exclude: object = None) -> bool:
        """Whether any virtual node other than `exclude` points at source."""
        for note in self.document.notes:
            if not isinstance(note, TreeNote):
                continue
            for node in note.virtual_nodes():
                if node.virtual_source == source and node is not exclude:
                    return True
        return False

    # --- bookmarks ---

    def set_bookmark(self, index: int, name: str, note_id: int, position: int = 0) -> bool:
        """Store a bookmark; indexes outside 0..9 are ignored (returns False)."""
        stored = set_bookmark(
            self.document.bookmarks, index, Bookmark(name=name, note_id=note_id, position=position)
        )
        self.modified = self.modified or stored
        return stored

    def get_bookmark(self, index: int) -> Bookmark | None:
        return get_bookmark(self.document.bookmarks, index)

    def clear_bookmarks(self) -> None:
        clear_bookmarks(self.document.bookmarks)
        self.modified = True
