"""Find the extent of an embedded RTF block inside the line stream."""

from keynote_file.core.format.markers import RTF_SIGNATURE


def starts_rtf(line: str) -> bool:
    return line.lstrip().startswith(RTF_SIGNATURE)


class RtfBlockExtractor:
    """Accumulate lines of one RTF block by tracking brace depth.

    Every '{' and '}' on a line counts. The block closes as soon as the depth
    is back to zero on a line that contains a '}'.
    """

    def __init__(self, first_line: str) -> None:
        self._lines: list[str] = []
        self.depth = 0
        self.closed = False
        self.feed(first_line)

    def feed(self, line: str) -> bool:
        """Add a line; return True once the block is closed."""
        if self.closed:
            msg = "RTF block already closed"
            raise RuntimeError(msg)
        self._lines.append(line)
        self.depth += line.count("{") - line.count("}")
        if self.depth == 0 and "}" in line:
            self.closed = True
        return self.closed

    @property
    def text(self) -> str:
        return "\n".join(self._lines)
