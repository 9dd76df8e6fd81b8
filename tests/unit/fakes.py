"""Fake collaborators for testing note file loading."""

from keynote_file.models.note import AnyNote, NoteKind, Section


class RecordingObserver:
    """ParseObserver that records every event for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def note_started(self, kind: NoteKind) -> None:
        self.events.append(("note_started", kind))

    def note_finished(self, note: AnyNote) -> None:
        self.events.append(("note_finished", note.name))

    def section_finished(self, section: Section) -> None:
        self.events.append(("section_finished", section.title))

    def names(self, event: str) -> list[object]:
        """Payloads of all events of one type, in order."""
        return [payload for name, payload in self.events if name == event]


class FakeResolver:
    """VirtualResolver backed by a dict of source -> content."""

    def __init__(self, contents: dict[str, str]) -> None:
        self.contents = contents
        self.calls: list[str] = []

    def resolve(self, source: str) -> str | None:
        self.calls.append(source)
        return self.contents.get(source)


class FakePassphraseProvider:
    """PassphraseProvider returning a fixed answer and counting how often it is asked."""

    def __init__(self, passphrase: str | None) -> None:
        self.passphrase = passphrase
        self.calls = 0

    def get_passphrase(self) -> str | None:
        self.calls += 1
        return self.passphrase
