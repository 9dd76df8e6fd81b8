"""CLI for KeyNote note files (show, info, convert)."""

from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from keynote_file.config import PASSPHRASE_ENV_VAR
from keynote_file.core.tree.render import render_note
from keynote_file.errors import KeyNoteError
from keynote_file.logging_config import configure_logging
from keynote_file.models.note import Document, FileFormat, TreeNote
from keynote_file.note_file import NoteFile
from keynote_file.protocols import LoggingObserver

app = typer.Typer(help="KeyNote note files: inspect and convert .knt files.")

PassphraseOption = Annotated[
    str | None,
    typer.Option(
        "--passphrase",
        "-p",
        envvar=PASSPHRASE_ENV_VAR,
        help="Passphrase for encrypted files (prompted for if needed)",
    ),
]


class PromptPassphrase:
    """Ask for the passphrase on the terminal."""

    def get_passphrase(self) -> str | None:
        return typer.prompt("Passphrase", hide_input=True) or None


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _load(path: Path, passphrase: str | None) -> NoteFile:
    try:
        return NoteFile.load(
            path,
            passphrase=passphrase,
            passphrase_provider=PromptPassphrase(),
            observer=LoggingObserver(),
        )
    except KeyNoteError as e:
        logger.error("{}", e.message)
        raise typer.Exit(1) from e


def _echo_info(doc: Document) -> None:
    typer.echo(f"Format:      {doc.file_format.value} {doc.version}")
    if doc.crypt_method:
        typer.echo(f"Encryption:  {doc.crypt_method}")
    if doc.description:
        typer.echo(f"Description: {doc.description}")
    typer.echo(f"Created:     {doc.created:%Y-%m-%d %H:%M:%S}")
    typer.echo(f"Read-only:   {'yes' if doc.read_only else 'no'}")
    typer.echo(f"Notes:       {len(doc.notes)}")
    if 0 <= doc.active_note < len(doc.notes):
        typer.echo(f"Active note: {doc.notes[doc.active_note].name}")
    for index, bookmark in enumerate(doc.bookmarks):
        if bookmark is not None:
            typer.echo(f"Bookmark {index}:  {bookmark.name} (note {bookmark.note_id})")


@app.command()
def info(
    path: Path = typer.Argument(..., help="Note file to inspect"),
    passphrase: PassphraseOption = None,
) -> None:
    """Print the file header: format, description, counts and bookmarks."""
    _echo_info(_load(path, passphrase).document)


@app.command()
def show(
    path: Path = typer.Argument(..., help="Note file to print"),
    note: Annotated[
        str | None,
        typer.Option("--note", "-n", help="Only print the note with this name"),
    ] = None,
    passphrase: PassphraseOption = None,
) -> None:
    """Print the file header and every note as plain text."""
    nf = _load(path, passphrase)
    notes = nf.notes
    if note is not None:
        found = nf.find_note_by_name(note)
        if found is None:
            typer.echo(f"Note '{note}' not found.")
            raise typer.Exit(1)
        notes = [found]
    else:
        _echo_info(nf.document)

    for n in notes:
        kind = "tree" if isinstance(n, TreeNote) else "note"
        typer.echo(f"\n# {n.name or '(untitled)'}  [{kind}, id={n.id}]\n")
        typer.echo(render_note(n), nl=False)


@app.command()
def convert(
    src: Path = typer.Argument(..., help="Note file to read (KeyNote or DartNotes)"),
    dst: Path = typer.Argument(..., help="KeyNote file to write"),
    encrypt: bool = typer.Option(False, "--encrypt", "-e", help="Write an encrypted file"),
    decrypt: bool = typer.Option(False, "--decrypt", "-d", help="Write a plain file"),
    passphrase: PassphraseOption = None,
) -> None:
    """Load a note file and save it again in KeyNote format."""
    if encrypt and decrypt:
        logger.error("--encrypt and --decrypt are mutually exclusive")
        raise typer.Exit(1)

    nf = _load(src, passphrase)
    doc = nf.document
    new_passphrase: str | None = None
    if decrypt:
        doc.file_format = FileFormat.KEYNOTE
        doc.crypt_method = ""
    elif encrypt:
        new_passphrase = passphrase or nf.passphrase or PromptPassphrase().get_passphrase()

    try:
        action = nf.save(dst, passphrase=new_passphrase)
    except (KeyNoteError, ValueError) as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    typer.echo(f"{action}: {dst} ({len(doc.notes)} notes, {doc.file_format.value})")
