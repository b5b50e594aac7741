"""Git operations — resolve references, diff pages, inspect branches."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from git import Repo
from git.exc import BadName, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from i18nsync.errors import VcsError
from i18nsync.models.drift import DiffDetail, DiffResult

logger = logging.getLogger(__name__)


@dataclass
class BranchHashes:
    """Commits of the default branch that are useful as stamp hashes."""

    branch: str
    merge_base: str
    """Commit at which the current branch joins the default branch."""

    tip: str
    """Commit of the default branch at its head."""


def strip_suffix(commit: str) -> str:
    """Drop the ``+N`` suffix a stamped hash may carry."""
    return commit.split("+", 1)[0]


class GitAdapter:
    """Read-only queries against the repository holding the site.

    Nothing is retried: every failure is raised (or, for diffs, returned as
    a status) to the caller immediately.
    """

    def __init__(self, repo_path: str | Path = "."):
        try:
            self.repo = Repo(repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise VcsError(f"not a git repository: {repo_path}")

    def resolve(self, ref: str) -> str:
        """Resolve a reference to a full commit id.

        Raises:
            VcsError: If the reference does not name a commit.
        """
        try:
            return self.repo.commit(ref).hexsha
        except (BadName, ValueError, GitCommandError) as e:
            raise VcsError(f"cannot resolve '{ref}': {e}") from e

    def merge_base(self, ref_a: str, ref_b: str) -> str:
        """Return the best common ancestor of two references.

        Raises:
            VcsError: If either reference is unresolvable or the histories
                share no commit.
        """
        try:
            bases = self.repo.merge_base(ref_a, ref_b)
        except (BadName, ValueError, GitCommandError) as e:
            raise VcsError(f"no merge base for '{ref_a}' and '{ref_b}': {e}") from e
        if not bases:
            raise VcsError(f"'{ref_a}' and '{ref_b}' have no common ancestor")
        return bases[0].hexsha

    def diff(
        self,
        commit: str,
        ref: str,
        path: str | Path,
        detail: DiffDetail = DiffDetail.NUMSTAT,
    ) -> DiffResult:
        """Diff ``path`` between the merge base of ``commit`` and ``ref``, and ``ref``.

        Runs ``git diff --exit-code <commit>...<ref> -- <path>``. The git exit
        status is passed through untouched: 0 means no changes, 1 changes,
        anything higher is a git error (e.g. an unknown commit) whose stderr
        becomes the summary.
        """
        args = ["--exit-code"]
        if detail is DiffDetail.NUMSTAT:
            args.append("--numstat")
        args += [f"{commit}...{ref}", "--", os.path.abspath(path)]

        logger.debug("git diff %s", " ".join(args))
        status, stdout, stderr = self.repo.git.diff(
            *args, with_extended_output=True, with_exceptions=False
        )

        if status > 1:
            return DiffResult(has_changes=False, summary=stderr or stdout, status=status)
        return DiffResult(
            has_changes=status == 1 or bool(stdout.strip()),
            summary=stdout,
            status=status,
        )

    def branches_containing(self, commit: str) -> set[str]:
        """Return the local branches whose history contains ``commit``.

        Raises:
            VcsError: If git cannot evaluate the commit.
        """
        try:
            output = self.repo.git.branch(
                "--contains", commit, "--format=%(refname:short)"
            )
        except GitCommandError as e:
            raise VcsError(f"cannot list branches containing '{commit}': {e}") from e
        return {line.strip() for line in output.splitlines() if line.strip()}

    def is_on_branch(self, commit: str, branch: str) -> bool:
        """Check whether ``commit`` (``+N`` suffix allowed) is in ``branch``'s history."""
        return branch in self.branches_containing(strip_suffix(commit))

    def default_branch_hashes(self, branch: str) -> BranchHashes:
        """Return the merge base of ``branch`` with HEAD and the tip of ``branch``."""
        return BranchHashes(
            branch=branch,
            merge_base=self.merge_base(branch, "HEAD"),
            tip=self.resolve(branch),
        )

    def describe_branches(self) -> str:
        """Return ``git branch -vv`` output for display."""
        return self.repo.git.branch("-vv")
