"""Fixed-capacity bookmark table.

The table is a list with one slot per bookmark index; empty slots are None.
"""

from collections.abc import Iterator

from loguru import logger

from keynote_file.config import BOOKMARK_SLOTS
from keynote_file.models.note import Bookmark


def _in_range(index: int) -> bool:
    return 0 <= index < BOOKMARK_SLOTS


def set_bookmark(bookmarks: list[Bookmark | None], index: int, bookmark: Bookmark) -> bool:
    """Store a bookmark in a slot.

    Out-of-range indexes leave the table unchanged and return False.
    """
    if not _in_range(index):
        # TODO: raise once callers stop relying on the silent no-op.
        logger.debug("Rejected bookmark index {} (valid: 0..{})", index, BOOKMARK_SLOTS - 1)
        return False
    bookmarks[index] = bookmark
    return True


def get_bookmark(bookmarks: list[Bookmark | None], index: int) -> Bookmark | None:
    if not _in_range(index):
        return None
    return bookmarks[index]


def clear_bookmarks(bookmarks: list[Bookmark | None]) -> None:
    bookmarks[:] = [None] * BOOKMARK_SLOTS


def iter_bookmarks(bookmarks: list[Bookmark | None]) -> Iterator[tuple[int, Bookmark]]:
    """Yield (index, bookmark) for occupied slots."""
    for index, bookmark in enumerate(bookmarks):
        if bookmark is not None:
            yield index, bookmark


def drop_bookmarks_for_note(bookmarks: list[Bookmark | None], note_id: int) -> int:
    """Empty every slot pointing at note_id; return how many were cleared."""
    cleared = 0
    for index, bookmark in iter_bookmarks(list(bookmarks)):
        if bookmark.note_id == note_id:
            bookmarks[index] = None
            cleared += 1
    return cleared
