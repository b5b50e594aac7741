"""Shared fixtures: a throwaway documentation site under git."""

from pathlib import Path

import pytest
from git import Actor, Repo

AUTHOR = Actor("Docs Bot", "docs-bot@example.com")


class SiteRepo:
    """A git repository holding a ``content/`` tree, rooted at the cwd."""

    def __init__(self, root: Path):
        self.root = root
        self.repo = Repo.init(root)
        with self.repo.config_writer() as cw:
            cw.set_value("user", "name", AUTHOR.name)
            cw.set_value("user", "email", AUTHOR.email)

    def write(self, rel_path: str, text: str) -> Path:
        path = self.root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    def commit(self, message: str, files: dict[str, str] | None = None, remove=()) -> str:
        """Write ``files``, delete ``remove``, commit everything, return the commit id."""
        for rel_path, text in (files or {}).items():
            self.write(rel_path, text)
            self.repo.index.add([rel_path])
        for rel_path in remove:
            self.repo.index.remove([rel_path], working_tree=True)
        commit = self.repo.index.commit(message, author=AUTHOR, committer=AUTHOR)
        return commit.hexsha

    def checkout(self, branch: str, create: bool = False) -> None:
        if create:
            self.repo.git.checkout("-b", branch)
        else:
            self.repo.git.checkout(branch)


def page(title: str, extra: str = "", body: str = "Body text.\n") -> str:
    """Render a markdown page with front matter."""
    return f"---\ntitle: {title}\n{extra}---\n\n{body}"


@pytest.fixture
def site(tmp_path, monkeypatch) -> SiteRepo:
    """A repo on branch ``main`` with two English pages, cwd set to its root."""
    monkeypatch.chdir(tmp_path)
    repo = SiteRepo(tmp_path)
    repo.commit(
        "Add English pages",
        {
            "content/en/page.md": page("Page"),
            "content/en/other.md": page("Other"),
        },
    )
    repo.repo.git.branch("-M", "main")
    return repo
