"""Byte/text conversion for note file streams."""

from loguru import logger

from keynote_file.config import LEGACY_TEXT_ENCODING, TEXT_ENCODING


def decode_text(data: bytes) -> str:
    """Decode a stream as UTF-8 (BOM tolerated), falling back to the legacy codepage."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("Stream is not valid UTF-8, decoding as {}", LEGACY_TEXT_ENCODING)
        return data.decode(LEGACY_TEXT_ENCODING, errors="replace")


def encode_text(text: str) -> bytes:
    return text.encode(TEXT_ENCODING)
