"""Protocols for the collaborators a note file load talks to."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from loguru import logger

from keynote_file.config import resolve_passphrase

if TYPE_CHECKING:
    from keynote_file.models.note import AnyNote, NoteKind, Section


@runtime_checkable
class PassphraseProvider(Protocol):
    """Supplies the passphrase for an encrypted file."""

    def get_passphrase(self) -> str | None:
        """Return the passphrase, or None if none is available."""
        ...


@runtime_checkable
class VirtualResolver(Protocol):
    """Supplies effective content for virtual tree nodes."""

    def resolve(self, source: str) -> str | None:
        """Return replacement content for a virtual source, or None if unavailable."""
        ...


@runtime_checkable
class ParseObserver(Protocol):
    """Receives parse events from the section parser."""

    def note_started(self, kind: "NoteKind") -> None: ...

    def note_finished(self, note: "AnyNote") -> None: ...

    def section_finished(self, section: "Section") -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def note_started(self, kind: "NoteKind") -> None:
        pass

    def note_finished(self, note: "AnyNote") -> None:
        pass

    def section_finished(self, section: "Section") -> None:
        pass


class LoggingObserver:
    """Observer that reports parse events through loguru at debug level."""

    def note_started(self, kind: "NoteKind") -> None:
        logger.debug("Starting new {} note", kind.value)

    def note_finished(self, note: "AnyNote") -> None:
        logger.debug("Finished note {!r} (id {})", note.name, note.id)

    def section_finished(self, section: "Section") -> None:
        logger.debug("Finished section {!r}", section.title or "Untitled")


class StaticPassphrase:
    """Passphrase provider backed by a fixed value."""

    def __init__(self, passphrase: str | None) -> None:
        self._passphrase = passphrase

    def get_passphrase(self) -> str | None:
        return self._passphrase or None


class EnvPassphraseProvider:
    """Passphrase provider reading the KEYNOTE_PASSPHRASE environment variable."""

    def get_passphrase(self) -> str | None:
        return resolve_passphrase()
