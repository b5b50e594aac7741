"""Tests for the i18n-sync command line."""

import pytest
from click.testing import CliRunner

from conftest import page
from i18nsync.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def drifted_site(site):
    base = site.repo.head.commit.hexsha
    site.write("content/ja/page.md", page("Page ja", f"default_lang_commit: {base}\n"))
    site.write("content/ja/new.md", page("New ja"))
    site.write("content/en/new.md", page("New"))
    site.commit("Update page", {"content/en/page.md": page("Page", body="Changed.\n")})
    return site


def test_help(runner):
    result = runner.invoke(main, ["-h"])
    assert result.exit_code == 0
    assert "TARGET_PATH" in result.output


def test_default_run_lists_drifted_and_new(runner, drifted_site):
    result = runner.invoke(main, [])
    assert result.exit_code == 0, result.output
    assert "Processing paths: content" in result.output
    assert "> Drifted file: content/ja/page.md" in result.output
    assert "New i18n file - content/ja/new.md" in result.output
    assert "DRIFTED files: 2 out of 2" in result.output


def test_new_mode_output(runner, drifted_site):
    result = runner.invoke(main, ["-n", "content/ja"])
    assert result.exit_code == 0
    assert "content/ja/new.md - has no default_lang_commit front-matter key" in result.output
    assert "NEW files: 1 out of 2" in result.output


def test_verbose_shows_diff_summary(runner, drifted_site):
    result = runner.invoke(main, ["-v", "content/ja/page.md"])
    assert result.exit_code == 0
    assert "INFO: local branches" in result.output
    assert "diff summary:" in result.output
    assert "content/en/page.md" in result.output


def test_diff_details(runner, drifted_site):
    result = runner.invoke(main, ["-d", "content/ja/page.md"])
    assert result.exit_code == 0
    assert "+Changed." in result.output


def test_fail_on_list_quiet(runner, drifted_site):
    result = runner.invoke(main, ["-q", "-x"])
    assert result.exit_code == 1
    assert "Processing paths" not in result.output
    assert "files:" not in result.output


def test_stamp_with_head(runner, drifted_site):
    head = drifted_site.repo.head.commit.hexsha
    result = runner.invoke(main, ["-c", "HEAD", "content/ja/page.md"])
    assert result.exit_code == 0, result.output
    assert "key UPDATED" in result.output
    text = (drifted_site.root / "content/ja/page.md").read_text()
    assert f"default_lang_commit: {head}\ndrifted_from_default: true\n" in text


def test_stamp_all_requires_confirmation(runner, drifted_site):
    result = runner.invoke(main, ["-a", "-c", "head"], input="n\n")
    assert result.exit_code == 1
    assert "Aborting" in result.output
    assert "default_lang_commit" not in (drifted_site.root / "content/ja/new.md").read_text()


def test_stamp_all_with_yes(runner, drifted_site):
    result = runner.invoke(main, ["-a", "-y", "-c", "head"])
    assert result.exit_code == 0, result.output
    assert "ALL files: 2 out of 2" in result.output
    assert "default_lang_commit" in (drifted_site.root / "content/ja/new.md").read_text()


def test_drifted_status_flag(runner, drifted_site):
    result = runner.invoke(main, ["-D", "-v", "content/ja/page.md"])
    assert result.exit_code == 0, result.output
    assert "drifted_from_default key set to true" in result.output
    assert "drifted_from_default: true" in (drifted_site.root / "content/ja/page.md").read_text()


def test_info(runner, drifted_site):
    head = drifted_site.repo.head.commit.hexsha
    result = runner.invoke(main, ["-i"])
    assert result.exit_code == 0
    assert f"{head} - hash at which current branch joins 'main'" in result.output
    assert f"{head} - hash of 'main' at HEAD" in result.output


def test_guard_failure_aborts(runner, drifted_site):
    drifted_site.checkout("feature", create=True)
    feature_commit = drifted_site.commit("Feature", {"content/en/other.md": page("Other v2")})
    drifted_site.checkout("main")

    result = runner.invoke(main, ["-c", feature_commit, "content/ja/page.md"])
    assert result.exit_code == 1
    assert "isn't on the default branch" in result.output


@pytest.mark.parametrize(
    "args",
    [
        ["-c", "abc1234", "-d"],
        ["-q", "-v"],
        ["-q", "-a"],
        ["-c", "not-a-hash"],
        ["--no-such-option"],
    ],
)
def test_usage_errors_exit_1(runner, site, args):
    result = runner.invoke(main, args)
    assert result.exit_code == 1


def test_missing_target_exits_2(runner, site):
    result = runner.invoke(main, ["content/ko"])
    assert result.exit_code == 2
    assert "path not found" in result.output


def test_config_file(runner, drifted_site):
    drifted_site.write("i18n.yaml", "content_root: content\ndefault_branch: trunk\n")
    result = runner.invoke(main, ["--config", "i18n.yaml", "-i"])
    assert result.exit_code == 1
    assert "trunk" in result.output


def test_report_lines_keep_tabs(runner, drifted_site):
    drifted_site.commit("Remove English page", remove=["content/en/page.md"])
    result = runner.invoke(main, ["content/ja/page.md"])
    assert result.exit_code == 0, result.output
    assert "File not found:\tcontent/ja/page.md - en page was removed or renamed" in result.output


def test_verbose_lists_languages(runner, drifted_site):
    result = runner.invoke(main, ["-v"])
    assert result.exit_code == 0, result.output
    assert "Languages: ja (2)" in result.output


def test_page_with_invalid_utf8_is_reported(runner, drifted_site):
    (drifted_site.root / "content/ja/page.md").write_bytes(b"---\ntitle: caf\xe9\n---\n")
    result = runner.invoke(main, ["content/ja/page.md"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "not valid UTF-8" in result.output


def test_malformed_config_file(runner, drifted_site):
    drifted_site.write("bad.yaml", "content_root: [unclosed\n")
    result = runner.invoke(main, ["--config", "bad.yaml"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "invalid settings file" in result.output
