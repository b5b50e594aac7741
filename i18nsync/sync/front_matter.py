"""Front-matter metadata store — the synchronization record of a localized page.

Each localized page records, in the ``---`` delimited block at its start,
the default-language commit it was last synchronized to and, optionally,
whether it has drifted since::

    ---
    title: Getting started
    default_lang_commit: 8f3e2a1
    drifted_from_default: true
    ---

Edits go through ``FrontMatter``, an ordered model of the block's lines:
keys are looked up and rewritten individually, every other line (unknown
keys, comments, nested values) is kept verbatim and in order. Files are
rewritten through a temporary file and an atomic rename.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from i18nsync.config import SiteSettings
from i18nsync.errors import FrontMatterError, PreconditionError
from i18nsync.models.drift import DriftedStatus, KeyChange

logger = logging.getLogger(__name__)

DELIMITER = "---"

_HEX_PREFIX_RE = re.compile(r"^[0-9a-fA-F]+")


def _key_re(key: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(key)}:(?:\s+(?P<value>.*?))?\s*$")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


@dataclass
class FrontMatter:
    """Parsed front-matter block plus the rest of the document."""

    lines: list[str] = field(default_factory=list)
    """Lines between the delimiters, line endings stripped."""

    body: str = ""
    has_block: bool = False
    newline: str = "\n"

    @classmethod
    def parse(cls, text: str) -> FrontMatter:
        """Split a document into its front-matter lines and body.

        Raises:
            FrontMatterError: If the opening delimiter has no closing match.
        """
        raw_lines = text.splitlines(keepends=True)
        if not raw_lines or raw_lines[0].rstrip("\r\n") != DELIMITER:
            return cls(body=text, newline=_detect_newline(text))

        newline = "\r\n" if raw_lines[0].endswith("\r\n") else "\n"
        for index in range(1, len(raw_lines)):
            if raw_lines[index].rstrip("\r\n") == DELIMITER:
                closing = raw_lines[index]
                # A closing delimiter on the last line may lack a newline
                trailer = closing[len(DELIMITER):]
                return cls(
                    lines=[line.rstrip("\r\n") for line in raw_lines[1:index]],
                    body=trailer + "".join(raw_lines[index + 1:]),
                    has_block=True,
                    newline=newline,
                )
        raise FrontMatterError("front matter is missing its closing '---' delimiter")

    def render(self) -> str:
        """Serialize back to document text."""
        if not self.has_block:
            if not self.lines:
                return self.body
            # First write to a page without front matter creates the block
            header = self.newline.join([DELIMITER, *self.lines, DELIMITER])
            return header + self.newline + self.body

        header = self.newline.join([DELIMITER, *self.lines, DELIMITER])
        return header + self.body

    def _find(self, key: str) -> list[int]:
        pattern = _key_re(key)
        return [i for i, line in enumerate(self.lines) if pattern.match(line)]

    def get(self, key: str) -> str | None:
        """Return the value of a top-level key, or None if absent or empty."""
        pattern = _key_re(key)
        for line in self.lines:
            match = pattern.match(line)
            if match:
                value = _unquote((match.group("value") or "").strip())
                return value or None
        return None

    def set(self, key: str, value: str, after: str | None = None) -> KeyChange:
        """Set a key, replacing it in place or inserting it.

        A new key goes right after the ``after`` key when that key exists,
        otherwise right after the opening delimiter. Later duplicates of
        ``key`` are dropped.
        """
        entry = f"{key}: {value}"
        indexes = self._find(key)
        if not indexes:
            anchors = self._find(after) if after else []
            position = anchors[0] + 1 if anchors else 0
            self.lines.insert(position, entry)
            return KeyChange.ADDED

        first, duplicates = indexes[0], indexes[1:]
        if self.lines[first] == entry and not duplicates:
            return KeyChange.UNCHANGED
        self.lines[first] = entry
        for index in reversed(duplicates):
            del self.lines[index]
        return KeyChange.UPDATED

    def delete(self, key: str) -> KeyChange:
        """Remove every occurrence of a key."""
        indexes = self._find(key)
        for index in reversed(indexes):
            del self.lines[index]
        return KeyChange.REMOVED if indexes else KeyChange.UNCHANGED


def _detect_newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def baseline_commit(value: str | None) -> str:
    """Extract the hex commit id a stored sync value points at.

    Drops a ``+N`` suffix and anything else after the hex prefix; a value
    without a hex prefix yields an empty baseline.
    """
    if not value:
        return ""
    match = _HEX_PREFIX_RE.match(value)
    return match.group(0).lower() if match else ""


class FrontMatterStore:
    """Reads and writes the synchronization keys of localized pages."""

    def __init__(self, settings: SiteSettings | None = None):
        settings = settings or SiteSettings()
        self.commit_key = settings.commit_key
        self.drifted_key = settings.drifted_key

    def read(self, path: str | Path) -> FrontMatter:
        # newline="" keeps CRLF pages CRLF when they are written back
        try:
            with open(path, encoding="utf-8", newline="") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise FrontMatterError(f"{path}: not valid UTF-8") from e
        return FrontMatter.parse(text)

    def get_sync_commit(self, path: str | Path) -> str | None:
        return self.read(path).get(self.commit_key)

    def set_sync_commit(self, path: str | Path, commit: str) -> KeyChange:
        """Record ``commit`` as the page's baseline.

        Idempotent: writing the current value again leaves the file untouched.
        """
        matter = self.read(path)
        change = matter.set(self.commit_key, commit)
        if change.written:
            _write_atomic(Path(path), matter.render())
        return change

    def get_drifted(self, path: str | Path) -> DriftedStatus | None:
        value = self.read(path).get(self.drifted_key)
        if value is None:
            return None
        try:
            return DriftedStatus(value.lower())
        except ValueError:
            logger.warning("%s: unrecognized %s value '%s'", path, self.drifted_key, value)
            return None

    def set_drifted(self, path: str | Path, status: DriftedStatus) -> KeyChange:
        """Record the page's drift status.

        ``FALSE`` removes the key: on disk, absence means not drifted. Any
        other status is written right after the baseline commit key.

        Raises:
            PreconditionError: If a drifted status is set on a page without a
                baseline commit. The file is left unmodified.
        """
        matter = self.read(path)
        if status is DriftedStatus.FALSE:
            change = matter.delete(self.drifted_key)
        else:
            if matter.get(self.commit_key) is None:
                raise PreconditionError(
                    f"{self.commit_key} key is missing. "
                    f"Cannot set {self.drifted_key} in {path}"
                )
            change = matter.set(self.drifted_key, status.value, after=self.commit_key)

        if change.written:
            _write_atomic(Path(path), matter.render())
        return change


def _write_atomic(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` via a temp file in the same directory."""
    mode = path.stat().st_mode & 0o7777
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("rewrote front matter of %s", path)
