"""The ls command."""

from __future__ import annotations

import json

import click

from ..selection import SelectionMap, SelectionState
from ._helpers import (
    main,
    _build_selection,
    _format_option,
    _get_client,
    _load_source,
    _require_id,
    _selection_options,
    _token_option,
)

_MARKERS = {
    SelectionState.NONE: "[ ]",
    SelectionState.ALL: "[x]",
    SelectionState.FOLDER_ONLY: "[f]",
    SelectionState.PARTIAL: "[-]",
}


def _tree_json(selection: SelectionMap) -> list[dict]:
    """Nested node dicts with a ``state`` key on every node."""
    roots = selection.tree.to_dicts()
    stack = list(roots)
    while stack:
        d = stack.pop()
        d["state"] = selection.get(d["id"]).value
        stack.extend(d["children"])
    return roots


@main.command()
@_token_option
@click.argument("source", required=False, envvar="TREECOPY_SOURCE")
@_selection_options
@click.option("--ids", "show_ids", is_flag=True, default=False,
              help="Show node ids next to names.")
@_format_option
@click.pass_context
def ls(ctx, source, select, folder_only, exclude, select_from, select_all,
       selection_file, show_ids, fmt):
    """List the folder tree under SOURCE with selection markers.

    \b
    Markers:
      [x]  selected with all contents
      [f]  folder only, contents not selected
      [-]  partially selected
      [ ]  not selected

    \b
    Examples:
        treecopy ls SOURCE_ID
        treecopy ls SOURCE_ID --select 'Reports/' --exclude '*.tmp'
        treecopy ls SOURCE_ID --format json > tree.json
    """
    source = _require_id(source, "source", "TREECOPY_SOURCE")
    client = _get_client(ctx)
    tree = _load_source(ctx, client, source)
    selection = _build_selection(
        ctx, tree, select=select, folder_only=folder_only, exclude=exclude,
        select_from=select_from, select_all=select_all, selection_file=selection_file,
    )
    count = selection.item_count()

    if fmt == "json":
        click.echo(json.dumps({"items_selected": count, "tree": _tree_json(selection)}))
        return

    depths: dict[str, int] = {}
    for node, state in selection.items():
        parent = tree.parent(node)
        depth = depths[node.id] = 0 if parent is None else depths[parent.id] + 1
        name = node.name + ("/" if node.is_folder else "")
        suffix = f"  ({node.id})" if show_ids else ""
        click.echo(f"{'    ' * depth}{_MARKERS[state]} {name}{suffix}")
    click.echo(f"{count} items selected")
