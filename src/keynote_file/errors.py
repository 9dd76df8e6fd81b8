"""Exception hierarchy for KeyNote file handling.

Every error raised to callers derives from KeyNoteError, so a driver can catch
one type. Input the format explicitly tolerates (missing trailing markers,
short flag strings, unclosed RTF at end of stream) never raises.
"""

from typing import Any


class KeyNoteError(Exception):
    """Base exception for all KeyNote file errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


class NoteFileNotFoundError(KeyNoteError, FileNotFoundError):
    """The input path or stream does not exist."""


class UnrecognizedFormatError(KeyNoteError):
    """The first bytes match none of the known containers."""


class IncompatibleVersionError(KeyNoteError):
    """The file's major version is newer than this implementation supports."""


class PassphraseRequiredError(KeyNoteError):
    """An encrypted file was opened without a passphrase."""


class DecryptionFailedError(KeyNoteError):
    """Wrong passphrase, truncated ciphertext or otherwise undecryptable payload."""


class InvalidContainerHeaderError(KeyNoteError):
    """DartNotes header record is missing or lacks its signature token."""


class MalformedRecordError(KeyNoteError):
    """A structurally impossible value, e.g. a length prefix that is not a number."""
