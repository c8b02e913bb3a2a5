"""The cp command."""

from __future__ import annotations

import json

import click

from ..copy import ActionKind, EventKind, copy_selection
from ._helpers import (
    main,
    _build_selection,
    _dry_run_option,
    _format_option,
    _get_client,
    _load_source,
    _parse_mappings,
    _require_id,
    _run,
    _selection_options,
    _status,
    _token_option,
)


@main.command()
@_token_option
@click.argument("source", required=False, envvar="TREECOPY_SOURCE")
@click.argument("dest", required=False, envvar="TREECOPY_DEST")
@_selection_options
@click.option("--rename", "renames", multiple=True, metavar="FROM=TO",
              help="Replace FROM with TO in every name written; '=TO' prepends TO. "
                   "Applied in order (repeatable).")
@_dry_run_option
@_format_option
@click.pass_context
def cp(ctx, source, dest, select, folder_only, exclude, select_from, select_all,
       selection_file, renames, dry_run, fmt):
    """Copy the selected part of SOURCE into DEST.

    SOURCE and DEST are folder ids.  Folders are recreated at the
    destination as needed to keep each item's relative position.  The run
    stops at the first failed call; anything already created is left in
    place.

    \b
    Examples:
        treecopy cp SRC DEST --all
        treecopy cp SRC DEST --select 'Reports/' --exclude '*.tmp'
        treecopy cp SRC DEST --folder-only 'Archive/' --select 'Archive/2024/'
        treecopy cp SRC DEST --all --rename 'Draft=Final' --rename '=2024 ' -n
    """
    source = _require_id(source, "source", "TREECOPY_SOURCE")
    dest = _require_id(dest, "destination", "TREECOPY_DEST")
    mappings = _parse_mappings(renames)

    client = _get_client(ctx)
    tree = _load_source(ctx, client, source)
    selection = _build_selection(
        ctx, tree, select=select, folder_only=folder_only, exclude=exclude,
        select_from=select_from, select_all=select_all, selection_file=selection_file,
    )
    if not selection.work_items():
        raise click.ClickException(
            "Nothing selected. Use --select, --folder-only, --all or --selection."
        )

    def observer(event):
        if event.kind == EventKind.FOLDER_CREATED:
            _status(ctx, f"+ {event.node.path}/ as {event.name!r}")
        elif event.kind == EventKind.FILE_COPIED:
            _status(ctx, f"+ {event.node.path} as {event.name!r}")
        elif event.kind == EventKind.PARENT_MISSING:
            click.echo(f"Warning: parent of {event.node.path} not found; "
                       f"placed in destination root", err=True)

    def progress(processed, total):
        pct = processed * 100 // total if total else 100
        _status(ctx, f"[{pct:3d}%] {processed}/{total}")

    report = _run(copy_selection(
        client, selection, dest, mappings,
        observer=observer, progress=progress, dry_run=dry_run,
    ))

    if fmt == "json":
        click.echo(json.dumps(report.to_dict()))
        return

    if dry_run:
        for action in report.actions:
            if action.kind == ActionKind.MKDIR:
                click.echo(f"mkdir {action.dest_path}/")
            else:
                click.echo(f"copy  {action.source_path} -> {action.dest_path}")
    click.echo(
        f"{'Would process' if dry_run else 'Processed'} {report.processed} of "
        f"{report.total} items: {len(report.folders)} folders, {len(report.files)} files"
    )
