"""Exceptions raised by the localization checker.

Every error carries the process exit status the CLI should use when it
aborts the run because of it.
"""


class I18nSyncError(Exception):
    """Base exception for all checker errors."""

    exit_code = 1


class UsageError(I18nSyncError):
    """Conflicting or malformed command-line options."""

    pass


class ValidationError(I18nSyncError):
    """A commit hash or settings value failed validation."""

    pass


class VcsError(I18nSyncError):
    """A git reference could not be resolved or a git query failed."""

    pass


class NotOnDefaultBranchError(I18nSyncError):
    """The stamp hash is not reachable from the default branch."""

    pass


class PreconditionError(I18nSyncError):
    """Drift status was set on a file that has no baseline commit."""

    pass


class FrontMatterError(I18nSyncError):
    """A file's front-matter block is opened but never closed."""

    pass


class NoTargetsError(I18nSyncError):
    """A target directory holds no localized pages."""

    pass


class TargetNotFoundError(I18nSyncError):
    """A target path does not exist."""

    exit_code = 2
