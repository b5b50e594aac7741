"""i18n-sync CLI — list, and optionally update, localized pages that drifted."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from i18nsync import __version__
from i18nsync.config import CheckConfig, ListKind, build_config, load_settings
from i18nsync.errors import I18nSyncError
from i18nsync.models.drift import Classification, FileResult
from i18nsync.sync.checker import LocalizationChecker
from i18nsync.utils.git_ops import GitAdapter

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


class CheckFailed(click.ClickException):
    """Surfaces a checker error with the exit status it calls for."""

    def __init__(self, error: I18nSyncError):
        super().__init__(str(error))
        self.exit_code = error.exit_code


class _CheckCommand(click.Command):
    # Bad options exit with 1, leaving 2 for missing target paths
    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


class _Reporter:
    """Prints one line (or a diff) per page result as the run progresses."""

    def __init__(self, config: CheckConfig):
        self.config = config

    def __call__(self, result: FileResult) -> None:
        config = self.config
        path = result.path
        kind = result.classification

        if kind is Classification.STAMPED:
            self._stamp("-\t-", result)

        elif kind is Classification.NEW:
            if result.stamped:
                self._stamp("" if config.list_kind is ListKind.NEW else "New i18n file", result)
            elif config.quiet:
                pass
            elif config.list_kind is ListKind.NEW:
                self._print(f"{path} - has no {config.settings.commit_key} front-matter key")
            else:
                self._print(f"New i18n file - {path}")

        elif kind is Classification.ORPHANED:
            if not config.quiet:
                lang = config.settings.default_lang
                self._print(
                    f"File not found:\t{path} - {lang} page was removed or renamed",
                    fg="red",
                )

        elif kind is Classification.ERROR:
            status = result.diff.status if result.diff else 0
            self._print(
                f"HASH\tERROR\t{path}: git diff error ({status}) or invalid hash "
                f"{result.baseline}. For details, use -v.",
                fg="red",
                bold=True,
            )
            if config.verbose and result.diff:
                self._print(result.diff.summary)

        elif kind is Classification.DRIFTED:
            if config.diff_details and result.diff:
                self._print(result.diff.summary)
            elif result.stamped:
                self._stamp("Drifted", result)
            elif not config.quiet:
                line = f"> Drifted file: {path}"
                if config.verbose and result.diff:
                    line += f"; diff summary: {result.diff.summary}"
                self._print(line, fg="yellow")

        elif config.list_kind is ListKind.ALL or config.verbose:
            self._print(f"File is in sync\t{path} - {result.baseline}", fg="green")

        if result.drifted_status and config.verbose:
            self._print(
                f"\t{path} {config.settings.drifted_key} key set to {result.drifted_status.value}"
            )

    def _stamp(self, prefix: str, result: FileResult) -> None:
        if self.config.quiet or result.commit_change is None:
            return
        self._print(
            f"{prefix}\t{result.path} {result.stamped_hash} key {result.commit_change.value}"
        )

    @staticmethod
    def _print(text: str, fg: str | None = None, bold: bool = False) -> None:
        # Report lines keep their tab separators
        click.secho(text, fg=fg, bold=bold)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
    )


@click.command(cls=_CheckCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.argument("target_paths", nargs=-1, type=click.Path())
@click.option("-a", "--all", "list_kind", flag_value="ALL",
              help="List/process all localization pages under the target paths.")
@click.option("-n", "--new", "list_kind", flag_value="NEW",
              help="List/process only pages without a baseline commit key.")
@click.option("--drifted", "list_kind", flag_value="DRIFTED",
              help="List/process only pages that drifted (default).")
@click.option("-c", "--commit", "commit_hash", metavar="HASH", default=None,
              help="Set the baseline commit key to HASH ('head' for the default branch tip).")
@click.option("-d", "--diff-details", is_flag=True, help="Output diff details.")
@click.option("-D", "--drifted-status", is_flag=True,
              help="Update or add the drifted key on all target pages.")
@click.option("-i", "--info", is_flag=True,
              help="Print default-branch hashes that are useful with -c, then exit.")
@click.option("-q", "--quiet", is_flag=True, help="Do not list processed files.")
@click.option("-v", "--verbose", is_flag=True, help="List all processed files and their status.")
@click.option("-x", "--fail-on-list", is_flag=True,
              help="Exit non-zero if files were listed or hashes are missing.")
@click.option("-y", "--yes", is_flag=True, help="Do not ask before stamping all targets.")
@click.option("--config", "config_path", default=None,
              type=click.Path(exists=True, dir_okay=False),
              help="Site settings file (default: .i18n-sync.yaml if present).")
@click.option("--log-level", default="WARNING",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.pass_context
def main(
    ctx: click.Context,
    target_paths: tuple[str, ...],
    list_kind: str | None,
    commit_hash: str | None,
    diff_details: bool,
    drifted_status: bool,
    info: bool,
    quiet: bool,
    verbose: bool,
    fail_on_list: bool,
    yes: bool,
    config_path: str | None,
    log_level: str,
):
    """List, and optionally update, target localization pages (TLP).

    By default only pages that drifted from their default-language
    counterpart are listed. TARGET_PATH can be a single page, such as
    'content/ja/_index.md', or a directory of localized pages, such as
    'content/ja'. The default is the content root.
    """
    _configure_logging(log_level)

    try:
        settings = load_settings(config_path)
        config = build_config(
            list_kind=ListKind(list_kind) if list_kind else ListKind.DRIFTED,
            commit_hash=commit_hash,
            diff_details=diff_details,
            set_drifted_status=drifted_status,
            quiet=quiet,
            verbose=verbose,
            fail_on_list=fail_on_list,
            settings=settings,
        )
    except I18nSyncError as e:
        raise CheckFailed(e) from e

    if config.list_kind is ListKind.ALL and config.commit_hash and not yes:
        if not click.confirm("CAUTION! Set hash for all targets?", default=False):
            console.print("Aborting")
            ctx.exit(1)

    try:
        git = GitAdapter()

        if info:
            hashes = git.default_branch_hashes(settings.default_branch)
            console.print(
                f"{hashes.merge_base} - hash at which current branch joins '{hashes.branch}'"
            )
            console.print(f"{hashes.tip} - hash of '{hashes.branch}' at HEAD")
            return

        paths = list(target_paths) or [settings.content_root]
        if verbose:
            console.print("INFO: local branches")
            console.print(git.describe_branches(), markup=False)
            console.print()
        if not quiet:
            console.print(f"Processing paths: {' '.join(paths)}", markup=False)

        checker = LocalizationChecker(config, git=git)
        run = checker.run(paths, on_result=_Reporter(config))
    except I18nSyncError as e:
        raise CheckFailed(e) from e

    if not config.quiet or not config.fail_on_list:
        console.print(run.summary())
    if config.verbose and run.results:
        languages = ", ".join(f"{lang} ({count})" for lang, count in run.languages().items())
        console.print(f"Languages: {languages}", markup=False)

    ctx.exit(run.exit_status)


if __name__ == "__main__":
    main()
