"""Data models for drift classification results.

A ``FileResult`` is computed fresh for every localized page on each run and
never persisted; the only durable state is the page's front matter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from i18nsync.config import ListKind


class Classification(Enum):
    """Synchronization state of a localized page."""

    IN_SYNC = "in_sync"
    DRIFTED = "drifted"
    NEW = "new"  # No baseline commit recorded yet
    ORPHANED = "orphaned"  # Default-language page was removed or renamed
    ERROR = "error"  # git diff failed, e.g. unknown baseline commit
    STAMPED = "stamped"  # Bulk re-baselining, no classification done


class DriftedStatus(Enum):
    """Values of the drifted front-matter key."""

    TRUE = "true"
    FALSE = "false"
    FILE_NOT_FOUND = "file not found"


class KeyChange(Enum):
    """Effect of a front-matter write on a single key."""

    ADDED = "ADDED"
    UPDATED = "UPDATED"
    REMOVED = "REMOVED"
    UNCHANGED = "UNCHANGED"

    @property
    def written(self) -> bool:
        return self is not KeyChange.UNCHANGED


class DiffDetail(Enum):
    """How much of a diff the adapter returns."""

    NUMSTAT = "numstat"
    FULL = "full"


@dataclass
class DiffResult:
    """Outcome of diffing a default-language page against a baseline."""

    has_changes: bool
    summary: str = ""
    status: int = 0  # 0 no changes, 1 changes, >1 git error

    @property
    def failed(self) -> bool:
        return self.status > 1


@dataclass
class FileResult:
    """Classification of one localized page and the metadata it received."""

    path: Path
    classification: Classification
    language: str | None = None  # Language directory of the page
    counterpart: Path | None = None
    baseline: str = ""  # Baseline commit read from the page, suffix stripped
    diff: DiffResult | None = None
    stamped_hash: str = ""
    commit_change: KeyChange | None = None
    drifted_status: DriftedStatus | None = None
    drifted_change: KeyChange | None = None

    @property
    def stamped(self) -> bool:
        return self.commit_change is not None


@dataclass
class CheckRun:
    """Aggregate of a whole checker run."""

    list_kind: ListKind
    commit_hash: str = ""  # Resolved stamp hash, empty when not stamping
    results: list[FileResult] = field(default_factory=list)
    file_count: int = 0
    processed_count: int = 0
    diff_error_status: int = 0
    exit_status: int = 0

    @property
    def errors(self) -> list[FileResult]:
        return [r for r in self.results if r.classification is Classification.ERROR]

    def by_classification(self, classification: Classification) -> list[FileResult]:
        return [r for r in self.results if r.classification is classification]

    def languages(self) -> dict[str, int]:
        """Count the reported pages per language directory."""
        counts: dict[str, int] = {}
        for result in self.results:
            if result.language:
                counts[result.language] = counts.get(result.language, 0) + 1
        return dict(sorted(counts.items()))

    def summary(self) -> str:
        return (
            f"{self.list_kind.value} files: "
            f"{self.processed_count} out of {self.file_count}"
        )
