"""Render notes as plain text for display."""

import io
import re

from keynote_file.core.parser.rtf_block import starts_rtf
from keynote_file.models.note import AnyNote, Note, TreeNode, TreeNote
from keynote_file.protocols import VirtualResolver

_RTF_TOKEN_RE = re.compile(
    r"\\([a-z]{1,32})(-?\d{1,10})? ?|\\'([0-9a-f]{2})|\\([^a-z])|([{}])|[\r\n]+|(.)",
    re.IGNORECASE | re.DOTALL,
)

# Destination groups whose text is never shown.
_HIDDEN_DESTINATIONS = frozenset(
    {
        "colortbl", "datastore", "fonttbl", "footer", "generator", "header", "info",
        "latentstyles", "listoverridetable", "listtable", "object", "pict", "rsidtbl",
        "stylesheet", "themedata", "xmlnstbl",
    }
)

_CONTROL_TEXT = {
    "par": "\n",
    "line": "\n",
    "sect": "\n\n",
    "page": "\n\n",
    "row": "\n",
    "cell": " ",
    "tab": "\t",
    "emdash": "\u2014",
    "endash": "\u2013",
    "bullet": "\u2022",
    "lquote": "\u2018",
    "rquote": "\u2019",
    "ldblquote": "\u201c",
    "rdblquote": "\u201d",
}

_RTF_HEADER = "{\\rtf1\\ansi\\deff0\\deflang1033 "


def strip_rtf(rtf: str) -> str:
    """Reduce an RTF block to its visible text.

    Only what a reader needs: paragraph breaks, tabs, escaped characters and
    unicode escapes. Formatting is dropped. Non-RTF input is returned stripped.
    """
    if not starts_rtf(rtf):
        return rtf.strip()

    out: list[str] = []
    stack: list[tuple[int, bool]] = []
    hidden = False
    uc_skip = 1
    pending_skip = 0

    for m in _RTF_TOKEN_RE.finditer(rtf):
        word, arg, hexcode, symbol, brace, char = m.groups()
        if brace:
            pending_skip = 0
            if brace == "{":
                stack.append((uc_skip, hidden))
            elif stack:
                uc_skip, hidden = stack.pop()
        elif symbol:
            pending_skip = 0
            if symbol == "*":
                hidden = True
            elif hidden:
                continue
            elif symbol == "~":
                out.append("\xa0")
            elif symbol in "\\{}":
                out.append(symbol)
        elif word:
            pending_skip = 0
            if word in _HIDDEN_DESTINATIONS:
                hidden = True
            elif hidden:
                continue
            elif word in _CONTROL_TEXT:
                out.append(_CONTROL_TEXT[word])
            elif word == "uc":
                uc_skip = int(arg or 1)
            elif word == "u" and arg:
                code = int(arg)
                out.append(chr(code + 0x10000 if code < 0 else code))
                pending_skip = uc_skip
        elif hexcode:
            if pending_skip > 0:
                pending_skip -= 1
            elif not hidden:
                out.append(bytes([int(hexcode, 16)]).decode("cp1252", errors="replace"))
        elif char:
            if pending_skip > 0:
                pending_skip -= 1
            elif not hidden:
                out.append(char)

    return "".join(out).strip()


def plain_to_rtf(text: str) -> str:
    """Wrap plain text in a minimal RTF document."""
    out = io.StringIO()
    out.write(_RTF_HEADER)
    for ch in text:
        if ch in "\\{}":
            out.write("\\" + ch)
        elif ch == "\n":
            out.write("\\par\n")
        elif ch == "\t":
            out.write("\\tab ")
        elif ord(ch) > 127:
            code = ord(ch)
            out.write(f"\\u{code - 0x10000 if code > 0x7FFF else code}?")
        else:
            out.write(ch)
    out.write("}")
    return out.getvalue()


def formatted_content(content: str) -> str:
    """Content as RTF: stored RTF unchanged, plain text wrapped."""
    return content if starts_rtf(content) else plain_to_rtf(content)


def _write_text(out: io.StringIO, text: str, indent: str) -> None:
    for line in strip_rtf(text).split("\n"):
        out.write(f"{indent}{line}\n" if line else "\n")


def _write_node(
    out: io.StringIO,
    node: TreeNode,
    *,
    depth: int,
    max_depth: int | None,
    include_content: bool,
    resolver: VirtualResolver | None,
) -> None:
    indent = "    " * depth
    label = node.name or "(untitled)"
    if node.is_virtual:
        label += f"  [{node.virtual_mode.value}: {node.virtual_source}]"
    out.write(f"{indent}- {label}\n")

    if include_content:
        content = node.effective_content(resolver)
        if content:
            _write_text(out, content, indent + "  ")

    if max_depth is not None and depth >= max_depth:
        if node.children:
            noun = "child" if len(node.children) == 1 else "children"
            out.write(f"{indent}    - ... ({len(node.children)} more {noun})\n")
        return
    for child in node.children:
        _write_node(
            out, child, depth=depth + 1, max_depth=max_depth,
            include_content=include_content, resolver=resolver,
        )


def render_tree(
    note: TreeNote,
    *,
    max_depth: int | None = None,
    include_content: bool = True,
    resolver: VirtualResolver | None = None,
) -> str:
    """Render a tree note as an indented bullet outline.

    Args:
        note: The tree note to render.
        max_depth: Deepest level to show (None = unlimited). Cut-off children
            are summarized on one line.
        include_content: Whether to print node content under each bullet.
        resolver: Optional source of content for virtual nodes.
    """
    out = io.StringIO()
    for root in note.roots:
        _write_node(
            out, root, depth=0, max_depth=max_depth,
            include_content=include_content, resolver=resolver,
        )
    return out.getvalue()


def render_flat(note: Note) -> str:
    out = io.StringIO()
    for section in note.sections:
        if section.title:
            out.write(f"## {section.title}\n")
        if section.content:
            _write_text(out, section.content, "")
        out.write("\n")
    return out.getvalue()


def render_note(note: AnyNote, *, resolver: VirtualResolver | None = None) -> str:
    if isinstance(note, TreeNote):
        return render_tree(note, resolver=resolver)
    return render_flat(note)
