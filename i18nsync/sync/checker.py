"""Batch checking — run the drift classifier over a set of target paths."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from i18nsync.config import HEAD_ALIAS, CheckConfig, ListKind
from i18nsync.models.drift import CheckRun, Classification, FileResult
from i18nsync.sync.drift import DriftClassifier
from i18nsync.sync.front_matter import FrontMatterStore
from i18nsync.utils.file_scanner import resolve_targets
from i18nsync.utils.git_ops import GitAdapter

logger = logging.getLogger(__name__)


class LocalizationChecker:
    """Lists, and optionally updates, the localized pages under target paths."""

    def __init__(
        self,
        config: CheckConfig,
        git: GitAdapter | None = None,
        store: FrontMatterStore | None = None,
    ):
        self.config = config
        self.git = git or GitAdapter()
        self.store = store or FrontMatterStore(config.settings)

    def resolve_targets(self, target_paths: list[str | Path] | None = None) -> list[Path]:
        """Expand target paths into pages; defaults to the content root."""
        paths = list(target_paths) if target_paths else [self.config.settings.content_root]
        return resolve_targets(paths, self.config.settings)

    def resolve_commit_hash(self) -> str:
        """Return the stamp hash, with ``head`` mapped to the default branch tip."""
        commit_hash = self.config.commit_hash or ""
        if commit_hash == HEAD_ALIAS:
            commit_hash = self.git.resolve(self.config.settings.default_branch)
            logger.debug("resolved %s to %s", HEAD_ALIAS, commit_hash)
        return commit_hash

    def run(
        self,
        target_paths: list[str | Path] | None = None,
        on_result: Callable[[FileResult], None] | None = None,
    ) -> CheckRun:
        """Classify every target page in order and aggregate the outcome.

        Args:
            target_paths: Files or directories; the content root when empty.
            on_result: Called with each page's result as soon as it is known.

        Returns:
            The run aggregate, including its exit status.

        Raises:
            I18nSyncError: Any fatal error aborts the run; metadata already
                written to earlier pages stays written.
        """
        targets = self.resolve_targets(target_paths)
        commit_hash = self.resolve_commit_hash()
        classifier = DriftClassifier(self.git, self.config, commit_hash, self.store)
        run = CheckRun(list_kind=self.config.list_kind, commit_hash=commit_hash)

        for path in targets:
            run.file_count += 1
            result = classifier.classify(path)
            if result is None:
                continue

            run.results.append(result)
            if self._is_listed(result):
                run.processed_count += 1
            if result.classification is Classification.ERROR and result.diff:
                run.diff_error_status = result.diff.status

            if on_result:
                on_result(result)

        run.exit_status = self._exit_status(run)
        logger.debug("%s (exit status %d)", run.summary(), run.exit_status)
        return run

    def _is_listed(self, result: FileResult) -> bool:
        if result.classification is not Classification.IN_SYNC:
            return True
        return self.config.list_kind is ListKind.ALL or self.config.verbose

    def _exit_status(self, run: CheckRun) -> int:
        if run.diff_error_status:
            return run.diff_error_status
        if self.config.fail_on_list and run.processed_count > 0 and not run.commit_hash:
            return 1
        return 0
