"""Note identifier assignment."""

from collections.abc import Iterable

from loguru import logger

from keynote_file.models.note import AnyNote


def highest_note_id(notes: Iterable[AnyNote]) -> int:
    return max((n.id for n in notes), default=0)


def verify_note_ids(notes: list[AnyNote]) -> int:
    """Give every note without a usable id the next free id.

    Notes are processed in document order. A note needs a new id when its id
    is not positive or an earlier note already holds it. Each assignment bumps
    the running maximum, so new ids never collide with each other or with
    existing ones.

    Returns:
        The number of ids assigned.
    """
    highest = max(highest_note_id(notes), 0)
    seen: set[int] = set()
    assigned = 0
    for note in notes:
        if note.id in seen:
            logger.warning("Duplicate note id {} on note {!r}, reassigning", note.id, note.name)
        if note.id <= 0 or note.id in seen:
            highest += 1
            note.id = highest
            assigned += 1
        seen.add(note.id)
    if assigned:
        logger.debug("Assigned {} note id(s), highest is now {}", assigned, highest)
    return assigned


def assign_note_id(notes: Iterable[AnyNote], note: AnyNote) -> int:
    """Give a single note the next id after the current maximum, unless it already has one."""
    if note.id <= 0:
        note.id = max(highest_note_id(notes), 0) + 1
    return note.id
