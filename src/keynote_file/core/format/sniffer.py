"""Detect the container format and version from the first bytes of a file."""

import re
from dataclasses import dataclass

from loguru import logger

from keynote_file.config import SNIFF_WINDOW, SUPPORTED_VERSION_MAJOR
from keynote_file.core.format.markers import (
    DART_SIGNATURE,
    TAG_ENCRYPTED,
    TAG_PLAIN,
    TAG_PLAIN_LEGACY,
)
from keynote_file.errors import IncompatibleVersionError, UnrecognizedFormatError
from keynote_file.models.note import FileFormat, FileVersion

_VERSION_RE = re.compile(rb"(\d+)\.(\d+)")
# DartNotes files open with a decimal block length on its own line.
_DART_LENGTH_RE = re.compile(rb"^\d+\r?\n")


@dataclass(frozen=True)
class SniffResult:
    """Outcome of format detection."""

    file_format: FileFormat
    version: FileVersion | None = None


def detect_format(head: bytes) -> FileFormat:
    """Classify a file by its leading bytes.

    Raises:
        UnrecognizedFormatError: If no known container matches.
    """
    window = head[:SNIFF_WINDOW]
    if TAG_PLAIN in window or TAG_PLAIN_LEGACY in window:
        return FileFormat.KEYNOTE
    if TAG_ENCRYPTED in window:
        return FileFormat.KEYNOTE_ENCRYPTED
    if _DART_LENGTH_RE.match(window) or DART_SIGNATURE in window:
        return FileFormat.DARTNOTES
    msg = f"Unrecognized file format (leading bytes {window!r})"
    raise UnrecognizedFormatError(msg, {"head": window})


def extract_version(head: bytes) -> FileVersion | None:
    """Return the first major.minor token in the window, if any."""
    match = _VERSION_RE.search(head[:SNIFF_WINDOW])
    if match is None:
        return None
    return FileVersion(int(match.group(1)), int(match.group(2)))


def check_version(version: FileVersion | None) -> None:
    """Reject files written by a newer major version.

    An absent version token is treated as compatible.
    """
    if version is None:
        logger.debug("No version token in header, assuming compatible")
        return
    if version.major > SUPPORTED_VERSION_MAJOR:
        msg = (
            f"Incompatible file version {version}: "
            f"newest supported major version is {SUPPORTED_VERSION_MAJOR}"
        )
        raise IncompatibleVersionError(msg, {"version": str(version)})


def sniff(head: bytes) -> SniffResult:
    """Detect the format and, for plain KeyNote files, validate the version."""
    file_format = detect_format(head)
    version: FileVersion | None = None
    if file_format is FileFormat.KEYNOTE:
        version = extract_version(head)
        check_version(version)
    logger.debug("Detected {} file (version {})", file_format.value, version)
    return SniffResult(file_format=file_format, version=version)
