"""Run configuration — site settings and validated command options.

Site settings describe the documentation layout (content root, default
language, front-matter keys) and can be loaded from a YAML file. The run
options are collected into an immutable ``CheckConfig`` by ``build_config``,
which is the single place where flag combinations are validated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path

import yaml

from i18nsync.errors import UsageError, ValidationError

SETTINGS_FILE = ".i18n-sync.yaml"
HEAD_ALIAS = "head"

_HASH_RE = re.compile(r"^[0-9a-f]{7,40}(\+[0-9]+)?$", re.IGNORECASE)


class ListKind(Enum):
    """Which localized pages are listed and processed."""

    DRIFTED = "DRIFTED"  # Pages out of sync with their default-language page
    NEW = "NEW"  # Pages without a baseline commit
    ALL = "ALL"  # Every page under the target paths


@dataclass(frozen=True)
class SiteSettings:
    """Layout of the documentation site."""

    content_root: str = "content"
    default_lang: str = "en"
    default_branch: str = "main"
    extension: str = ".md"
    commit_key: str = "default_lang_commit"
    drifted_key: str = "drifted_from_default"


@dataclass(frozen=True)
class CheckConfig:
    """Immutable options for a single checker run."""

    list_kind: ListKind = ListKind.DRIFTED
    commit_hash: str | None = None  # Lowercased hex hash or "head"
    diff_details: bool = False
    set_drifted_status: bool = False
    quiet: bool = False
    verbose: bool = False
    fail_on_list: bool = False
    settings: SiteSettings = field(default_factory=SiteSettings)


def validate_hash(value: str) -> str:
    """Validate a stamp hash argument and return it lowercased.

    Accepts a 7 to 40 character hex commit id with an optional ``+N``
    suffix, or the literal ``head`` in any case.

    Raises:
        ValidationError: If the value is empty or malformed.
    """
    value = value.strip().lower()
    if not value:
        raise ValidationError("empty hash argument")
    if value == HEAD_ALIAS:
        return value
    if not _HASH_RE.match(value):
        raise ValidationError(f"invalid hash '{value}'")
    return value


def build_config(
    list_kind: ListKind = ListKind.DRIFTED,
    commit_hash: str | None = None,
    diff_details: bool = False,
    set_drifted_status: bool = False,
    quiet: bool = False,
    verbose: bool = False,
    fail_on_list: bool = False,
    settings: SiteSettings | None = None,
) -> CheckConfig:
    """Validate an option combination and freeze it into a ``CheckConfig``.

    Raises:
        ValidationError: If ``commit_hash`` is malformed.
        UsageError: If mutually exclusive options are combined.
    """
    if commit_hash is not None:
        commit_hash = validate_hash(commit_hash)

    if sum([commit_hash is not None, diff_details, set_drifted_status]) > 1:
        raise UsageError(
            "you can't use -c, -d, and -D at the same time; choose one"
        )
    if quiet and diff_details:
        raise UsageError("use -d or -q not both")
    if quiet and (list_kind is ListKind.ALL or verbose):
        raise UsageError("-q flag ignored when -a or -v is used")

    return CheckConfig(
        list_kind=list_kind,
        commit_hash=commit_hash,
        diff_details=diff_details,
        set_drifted_status=set_drifted_status,
        quiet=quiet,
        verbose=verbose,
        fail_on_list=fail_on_list,
        settings=settings or SiteSettings(),
    )


def load_settings(path: str | Path | None = None) -> SiteSettings:
    """Load site settings from YAML.

    With no ``path``, ``.i18n-sync.yaml`` in the working directory is used
    when it exists; otherwise the defaults apply.
    """
    if path is None:
        default = Path(SETTINGS_FILE)
        if not default.is_file():
            return SiteSettings()
        path = default

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ValidationError(f"invalid settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError(f"settings file must hold a mapping: {path}")

    known = {f.name for f in fields(SiteSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationError(
            f"unknown settings in {path}: {', '.join(unknown)}"
        )

    values = {}
    for key, value in data.items():
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"setting '{key}' must be a non-empty string")
        values[key] = value.strip()

    settings = SiteSettings(**values)
    if not settings.extension.startswith("."):
        raise ValidationError(f"extension must start with '.': {settings.extension}")
    return settings
