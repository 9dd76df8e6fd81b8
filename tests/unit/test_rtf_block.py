"""Tests for RTF block extent detection."""

import pytest

from keynote_file.core.parser.rtf_block import RtfBlockExtractor, starts_rtf


def test_starts_rtf() -> None:
    """Only lines starting with the RTF signature open a block."""
    assert starts_rtf("{\\rtf1\\ansi")
    assert starts_rtf("   {\\rtf1")
    assert not starts_rtf("plain {\\rtf1")


def test_single_line_block_closes_immediately() -> None:
    """A balanced first line closes the block."""
    block = RtfBlockExtractor("{\\rtf1 {\\b bold} text}")
    assert block.closed
    assert block.depth == 0


def test_multi_line_block_tracks_depth() -> None:
    """Marker lines inside an open block are plain text."""
    block = RtfBlockExtractor("{\\rtf1\\ansi")
    assert not block.feed("{\\fonttbl{\\f0 Arial;}}")
    assert block.depth == 1
    assert not block.feed("%%")
    assert block.feed("end}")
    assert block.text == "{\\rtf1\\ansi\n{\\fonttbl{\\f0 Arial;}}\n%%\nend}"


def test_feeding_closed_block_raises() -> None:
    """A closed block accepts no more lines."""
    block = RtfBlockExtractor("{\\rtf1}")
    with pytest.raises(RuntimeError):
        block.feed("more")
