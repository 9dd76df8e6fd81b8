"""Configuration constants for keynote-file."""

import os

# Highest file format version this implementation reads and writes.
SUPPORTED_VERSION_MAJOR: int = 2
SUPPORTED_VERSION_MINOR: int = 0

# Number of bytes inspected by the format sniffer.
SNIFF_WINDOW: int = 12

# Whole-file encryption. The salt is fixed by the format, not per file.
CIPHER_NAME: str = "AES-256-CBC"
KDF_SALT: bytes = b"keynote"
KDF_ITERATIONS: int = 10_000
KEY_SIZE: int = 32

# Named bookmark slots, indexed 0..BOOKMARK_SLOTS - 1.
BOOKMARK_SLOTS: int = 10

# Streams are written as UTF-8. Legacy files that are not valid UTF-8 are read as cp1252.
TEXT_ENCODING: str = "utf-8"
LEGACY_TEXT_ENCODING: str = "cp1252"

# Environment variable consulted for a passphrase when none is given explicitly.
PASSPHRASE_ENV_VAR: str = "KEYNOTE_PASSPHRASE"


def resolve_passphrase() -> str | None:
    """Return the passphrase from the environment, or None if unset or empty."""
    return os.environ.get(PASSPHRASE_ENV_VAR) or None
