"""File scanner — discover localized pages and their default-language counterparts."""

from __future__ import annotations

import re
from pathlib import Path

from i18nsync.config import SiteSettings
from i18nsync.errors import NoTargetsError, TargetNotFoundError

# Language directories are 2 to 5 characters: ja, pt-br, zh-cn, ...
LANG_SEGMENT = r"[^/]{2,5}"


def scan_localized_pages(directory: Path, settings: SiteSettings) -> list[Path]:
    """Recursively find localized pages under ``directory``.

    Skips anything inside a default-language directory.
    """
    files = []
    for item in directory.rglob(f"*{settings.extension}"):
        if item.is_file() and _is_localized(item, settings):
            files.append(item)
    return sorted(files)


def _is_localized(path: Path, settings: SiteSettings) -> bool:
    return settings.default_lang not in path.parts


def resolve_targets(target_paths: list[str | Path], settings: SiteSettings) -> list[Path]:
    """Expand target arguments into the list of pages to check.

    A file is taken as-is; a directory is scanned for localized pages.

    Raises:
        TargetNotFoundError: If a target path does not exist.
        NoTargetsError: If a directory contains no localized pages.
    """
    targets: list[Path] = []
    for raw in target_paths:
        path = Path(raw)
        if path.is_file():
            targets.append(path)
        elif path.is_dir():
            found = scan_localized_pages(path, settings)
            if not found:
                raise NoTargetsError(
                    f"target directory contains no {settings.extension} files: '{raw}'"
                )
            targets.extend(found)
        else:
            raise TargetNotFoundError(f"path not found: '{raw}'")

    # A file may be named explicitly and also found in a scanned directory
    seen: set[Path] = set()
    unique = []
    for path in targets:
        if path not in seen:
            seen.add(path)
            unique.append(path)
    return unique


def counterpart_path(path: str | Path, settings: SiteSettings) -> Path:
    """Map a localized page to its default-language page.

    ``content/ja/docs/page.md`` becomes ``content/en/docs/page.md``. Paths
    without a language directory under the content root come back unchanged.
    """
    root = re.escape(settings.content_root.strip("/"))
    posix = Path(path).as_posix()
    mapped = re.sub(
        rf"(^|/){root}/{LANG_SEGMENT}/",
        lambda m: f"{m.group(1)}{settings.content_root.strip('/')}/{settings.default_lang}/",
        posix,
        count=1,
    )
    return Path(mapped)


def page_language(path: str | Path, settings: SiteSettings) -> str | None:
    """Return the language directory of a page under the content root, if any."""
    root = re.escape(settings.content_root.strip("/"))
    match = re.search(rf"(?:^|/){root}/({LANG_SEGMENT})/", Path(path).as_posix())
    return match.group(1) if match else None
