"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import asyncio
import json

import click

from .._exclude import PatternFilter
from ..exceptions import ConfigurationError, RemoteOperationError
from ..rename import RenameMapping, parse_mapping
from ..selection import SelectionMap, SelectionState
from ..tree import Tree, load_tree


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _store_token(ctx, param, value):
    """Click callback: store --token value in the context."""
    ctx.ensure_object(dict)
    if value is not None:
        ctx.obj["token"] = value
    return value


def _token_option(f):
    """Shared --token/-t option decorator for all commands."""
    return click.option(
        "--token", "-t", type=click.Path(), envvar="TREECOPY_TOKEN",
        help="Authorized-user Google token JSON (or set TREECOPY_TOKEN).",
        expose_value=False, callback=_store_token, is_eager=True,
    )(f)


def _get_client(ctx):
    """Return the storage client: an injected ``ctx.obj["client"]`` or Drive."""
    client = ctx.obj.get("client")
    if client is not None:
        return client
    token = ctx.obj.get("token")
    if not token:
        raise click.ClickException(
            "No Google token specified. Use --token or set TREECOPY_TOKEN."
        )
    try:
        from ..drive import GoogleDriveClient
    except ImportError:
        raise click.ClickException(
            "Google Drive support requires the 'drive' extra.\n"
            "Install it with:  pip install treecopy[drive]"
        )
    try:
        client = GoogleDriveClient.from_token_file(token)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    ctx.obj["client"] = client
    return client


def _run(coro):
    """Run *coro* to completion, turning treecopy errors into ClickExceptions."""
    try:
        return asyncio.run(coro)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    except RemoteOperationError as exc:
        msg = str(exc)
        if exc.report is not None and exc.report.actions:
            msg += (f" ({len(exc.report.actions)} item(s) were created before the "
                    f"failure and have been left in place)")
        raise click.ClickException(msg)


def _require_id(value: str | None, what: str, envvar: str) -> str:
    if not value:
        raise click.ClickException(f"No {what} folder id given. Pass it or set {envvar}.")
    return value


def _load_source(ctx, client, source: str) -> Tree:
    _status(ctx, f"Loading folder structure of {source}...")
    tree = _run(load_tree(client, source))
    for warning in tree.warnings:
        click.echo(f"Warning: {warning}", err=True)
    _status(ctx, f"Loaded {len(tree)} items")
    return tree


def _parse_mappings(values) -> list[RenameMapping]:
    try:
        return [parse_mapping(v) for v in values]
    except ValueError as exc:
        raise click.ClickException(str(exc))


def _read_selection_file(path: str) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as exc:
        raise click.ClickException(f"Invalid selection file {path}: {exc}")
    if not isinstance(data, dict):
        raise click.ClickException(
            f"Invalid selection file {path}: expected a JSON object of id → state"
        )
    return data


def _build_selection(ctx, tree: Tree, *, select=(), folder_only=(), exclude=(),
                     select_from=None, select_all=False, selection_file=None) -> SelectionMap:
    """Apply selection options in a fixed order: file, --all, select, folder-only, exclude."""
    selection = SelectionMap(tree)
    if selection_file:
        n = selection.load(_read_selection_file(selection_file))
        _status(ctx, f"Loaded {n} selection entries from {selection_file}")
    if select_all:
        selection.set_all(SelectionState.ALL)
    if select or select_from:
        selection.select_matching(
            PatternFilter(patterns=select, patterns_from=select_from), SelectionState.ALL)
    if folder_only:
        selection.select_matching(
            PatternFilter(patterns=folder_only), SelectionState.FOLDER_ONLY)
    if exclude:
        selection.select_matching(PatternFilter(patterns=exclude), SelectionState.NONE)
    return selection


# ---------------------------------------------------------------------------
# Option decorators
# ---------------------------------------------------------------------------

def _selection_options(f):
    """Shared options that build the selection."""
    f = click.option("--selection", "selection_file", type=click.Path(exists=True),
                     help="JSON file of {node_id: state} to start from.")(f)
    f = click.option("--all", "select_all", is_flag=True, default=False,
                     help="Select everything.")(f)
    f = click.option("--exclude", multiple=True,
                     help="Deselect items matching pattern (gitignore syntax, repeatable).")(f)
    f = click.option("--folder-only", "folder_only", multiple=True,
                     help="Select matching folders without their contents (repeatable).")(f)
    f = click.option("--select-from", "select_from", type=click.Path(exists=True),
                     help="Read --select patterns from file.")(f)
    f = click.option("--select", multiple=True,
                     help="Select items matching pattern with all their contents "
                          "(gitignore syntax, repeatable).")(f)
    return f


def _format_option(f):
    return click.option("--format", "fmt", type=click.Choice(["text", "json"]),
                        default="text", help="Output format.")(f)


def _dry_run_option(f):
    return click.option("-n", "--dry-run", is_flag=True, default=False,
                        help="Show what would be done without making changes.")(f)


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--token", "-t", type=click.Path(), envvar="TREECOPY_TOKEN",
              help="Authorized-user Google token JSON (or set TREECOPY_TOKEN).",
              expose_value=False, callback=_store_token, is_eager=True)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, verbose):
    """treecopy: copy a selected part of a cloud folder tree.

    Select any subset of a source folder's hierarchy and replicate it,
    with optional name rewriting, under a destination folder.

    \b
    Quick start:
      treecopy ls SOURCE_ID --select 'Reports/'
      treecopy cp SOURCE_ID DEST_ID --select 'Reports/' --exclude '*.tmp'
      treecopy cp SOURCE_ID DEST_ID --all --rename '2023=2024' -n

    \b
    Patterns use gitignore syntax: 'docs/' matches folders named docs,
    '/top' only matches at the top level, '*.tmp' matches at any depth.
    Set TREECOPY_TOKEN, TREECOPY_SOURCE and TREECOPY_DEST to avoid
    repeating them.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
