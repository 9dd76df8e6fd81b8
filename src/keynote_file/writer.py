"""Atomic file writer for saving note files."""

import os
import tempfile
from pathlib import Path

from loguru import logger


class AtomicFileWriter:
    """Write files in a smart way.

    - Do not touch a file whose contents are already the same.
    - Write to a temporary file next to the target, then rename it over the
      target, so readers never see a half-written note file.
    """

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run
        # (action, path) for every write, in order.
        self.updates: list[tuple[str, str]] = []

    def write_bytes(self, path: str | Path, data: bytes) -> str:
        """Write data to path atomically.

        Returns:
            The action taken: "create", "update" or "same".
        """
        target = Path(path)
        if not target.parent.is_dir():
            msg = f"Directory {str(target.parent)!r} not found"
            raise ValueError(msg)

        action = "create"
        if target.exists():
            if target.read_bytes() == data:
                logger.debug("Unchanged, not writing {!r}", str(target))
                return "same"
            action = "update"

        self.updates.append((action, str(target)))
        if self.dry_run:
            logger.info("dry-run: would {} {!r}", action, str(target))
            return action

        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote ({}) {!r}, {} bytes", action, str(target), len(data))
        return action
