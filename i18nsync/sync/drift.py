"""Drift classification — decide whether a localized page is in sync.

A localized page drifts when its default-language counterpart changed after
the commit recorded in the page's front matter. Classification per page:

1. ALL mode with a stamp hash: re-baseline the page, nothing is diffed
2. NEW mode: only pages without a baseline, optionally stamped
3. DRIFTED mode (also ALL without a stamp hash):
   - counterpart missing: ORPHANED
   - no baseline yet: NEW
   - git diff failed: ERROR
   - counterpart changed since the baseline: DRIFTED
   - otherwise: IN_SYNC
"""

from __future__ import annotations

import logging
from pathlib import Path

from i18nsync.config import CheckConfig, ListKind
from i18nsync.errors import NotOnDefaultBranchError
from i18nsync.models.drift import (
    Classification,
    DiffDetail,
    DriftedStatus,
    FileResult,
)
from i18nsync.sync.front_matter import FrontMatterStore, baseline_commit
from i18nsync.utils.file_scanner import counterpart_path, page_language
from i18nsync.utils.git_ops import GitAdapter

logger = logging.getLogger(__name__)


class DriftClassifier:
    """Classifies localized pages and applies the requested metadata writes.

    Args:
        git: Adapter for the repository holding the site.
        config: Validated run options.
        commit_hash: Stamp hash with ``head`` already resolved, or empty
            when pages are only reported.
        store: Front-matter store; built from the config's settings if omitted.
    """

    def __init__(
        self,
        git: GitAdapter,
        config: CheckConfig,
        commit_hash: str = "",
        store: FrontMatterStore | None = None,
    ):
        self.git = git
        self.config = config
        self.settings = config.settings
        self.commit_hash = commit_hash
        self.store = store or FrontMatterStore(self.settings)
        self._verified_hashes: set[str] = set()

    def classify(self, path: str | Path) -> FileResult | None:
        """Classify one page.

        Returns None when the page does not match the active list kind
        (a page with a baseline in NEW mode).

        Raises:
            NotOnDefaultBranchError: If a drifted page would be re-stamped
                with a hash outside the default branch.
            PreconditionError: If a drifted status has to be written to a
                page without a baseline.
        """
        path = Path(path)
        baseline = baseline_commit(self.store.get_sync_commit(path))
        kind = self.config.list_kind

        if kind is ListKind.ALL and self.commit_hash:
            result = FileResult(
                path=path,
                classification=Classification.STAMPED,
                language=page_language(path, self.settings),
                baseline=baseline,
            )
            self._stamp(result)
            return result

        if kind is ListKind.NEW:
            if baseline:
                return None
            result = FileResult(
                path=path,
                classification=Classification.NEW,
                language=page_language(path, self.settings),
            )
            if self.commit_hash:
                self._stamp(result)
            return result

        return self._classify_drift(path, baseline)

    def _classify_drift(self, path: Path, baseline: str) -> FileResult:
        counterpart = counterpart_path(path, self.settings)
        result = FileResult(
            path=path,
            classification=Classification.IN_SYNC,
            language=page_language(path, self.settings),
            counterpart=counterpart,
            baseline=baseline,
        )

        if not counterpart.exists():
            result.classification = Classification.ORPHANED
            self._set_drifted(result, DriftedStatus.FILE_NOT_FOUND)
            return result

        if not baseline:
            # An empty baseline is never reported as in sync
            result.classification = Classification.NEW
            if self.commit_hash:
                self._stamp(result)
            self._set_drifted(result, DriftedStatus.FALSE)
            return result

        detail = DiffDetail.FULL if self.config.diff_details else DiffDetail.NUMSTAT
        result.diff = self.git.diff(baseline, "HEAD", counterpart, detail)

        if result.diff.failed:
            logger.debug("git diff failed for %s with status %d", path, result.diff.status)
            result.classification = Classification.ERROR
            return result

        if result.diff.has_changes:
            result.classification = Classification.DRIFTED
            if self.commit_hash:
                self._verify_on_default_branch(self.commit_hash, path)
                self._stamp(result)
                self._set_drifted(result, DriftedStatus.TRUE, force=True)
            else:
                self._set_drifted(result, DriftedStatus.TRUE)
            return result

        self._set_drifted(result, DriftedStatus.FALSE)
        return result

    def _stamp(self, result: FileResult) -> None:
        result.stamped_hash = self.commit_hash
        result.commit_change = self.store.set_sync_commit(result.path, self.commit_hash)

    def _set_drifted(self, result: FileResult, status: DriftedStatus, force: bool = False) -> None:
        if not (force or self.config.set_drifted_status):
            return
        result.drifted_status = status
        result.drifted_change = self.store.set_drifted(result.path, status)

    def _verify_on_default_branch(self, commit: str, path: Path) -> None:
        if commit in self._verified_hashes:
            return
        branch = self.settings.default_branch
        if not self.git.is_on_branch(commit, branch):
            raise NotOnDefaultBranchError(
                f"hash isn't on the default branch ({branch}), aborting: {commit} - {path}"
            )
        self._verified_hashes.add(commit)
