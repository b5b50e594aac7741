"""Tests for the git query adapter, run against a real temporary repository."""

import pytest

from conftest import page
from i18nsync.errors import VcsError
from i18nsync.models.drift import DiffDetail
from i18nsync.utils.git_ops import GitAdapter, strip_suffix


def test_resolve_and_merge_base(site):
    base = site.repo.head.commit.hexsha
    git = GitAdapter()
    assert git.resolve("main") == base
    assert git.resolve(base[:7]) == base
    assert git.merge_base("main", "HEAD") == base


def test_resolve_unknown_ref(site):
    with pytest.raises(VcsError):
        GitAdapter().resolve("no-such-branch")


def test_merge_base_unknown_ref(site):
    with pytest.raises(VcsError):
        GitAdapter().merge_base("main", "no-such-branch")


def test_not_a_repository(tmp_path):
    with pytest.raises(VcsError):
        GitAdapter(tmp_path)


def test_default_branch_hashes_on_feature_branch(site):
    joined = site.repo.head.commit.hexsha
    site.checkout("feature", create=True)
    site.commit("Feature work", {"content/en/page.md": page("Page v2")})

    hashes = GitAdapter().default_branch_hashes("main")
    assert hashes.merge_base == joined
    assert hashes.tip == joined


def test_diff_statuses(site):
    first = site.repo.head.commit.hexsha
    git = GitAdapter()

    unchanged = git.diff(first, "HEAD", "content/en/page.md")
    assert unchanged.status == 0
    assert not unchanged.has_changes

    site.commit("Update page", {"content/en/page.md": page("Page", body="New body.\n")})
    changed = git.diff(first, "HEAD", "content/en/page.md")
    assert changed.status == 1
    assert changed.has_changes
    assert "content/en/page.md" in changed.summary

    full = git.diff(first, "HEAD", "content/en/page.md", DiffDetail.FULL)
    assert "+New body." in full.summary

    other = git.diff(first, "HEAD", "content/en/other.md")
    assert not other.has_changes


def test_diff_error_status_is_propagated(site):
    result = GitAdapter().diff("deadbeef", "HEAD", "content/en/page.md")
    assert result.status > 1
    assert result.failed
    assert not result.has_changes
    assert result.summary


def test_branches_containing(site):
    base = site.repo.head.commit.hexsha
    site.checkout("feature", create=True)
    feature_commit = site.commit("Feature work", {"content/en/page.md": page("Page v2")})
    site.checkout("main")

    git = GitAdapter()
    assert git.branches_containing(base) == {"main", "feature"}
    assert git.branches_containing(feature_commit) == {"feature"}
    assert git.is_on_branch(base[:7] + "+2", "main")
    assert not git.is_on_branch(feature_commit, "main")


def test_branches_containing_unknown_commit(site):
    with pytest.raises(VcsError):
        GitAdapter().branches_containing("deadbeef")


def test_strip_suffix():
    assert strip_suffix("abc1234+12") == "abc1234"
    assert strip_suffix("abc1234") == "abc1234"
