"""Rich output formatting for the delta CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

import json
from collections import Counter
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.tree import Tree

from delta_engine.diff.delta_serializer import value_to_tree
from delta_engine.models.delta import ChangeEntry, ChangeKind, Delta

# ---------------------------------------------------------------------------
# Change kind styling
# ---------------------------------------------------------------------------

_KIND_STYLES: dict[ChangeKind, str] = {
    ChangeKind.ADD: "green",
    ChangeKind.DEL: "red",
    ChangeKind.MOD: "yellow",
}

_KIND_MARKERS: dict[ChangeKind, str] = {
    ChangeKind.ADD: "+",
    ChangeKind.DEL: "-",
    ChangeKind.MOD: "~",
}


def _styled_kind(kind: ChangeKind) -> str:
    """Return a Rich markup string with the change kind colour-coded."""
    style = _KIND_STYLES[kind]
    return f"[{style}]{_KIND_MARKERS[kind]} {kind.value}[/{style}]"


def _format_value(value: Any) -> str:
    return escape(json.dumps(value_to_tree(value), sort_keys=True, ensure_ascii=False, default=str))


def count_changes(delta: Delta) -> Counter[ChangeKind]:
    """Count leaf changes (entries without a nested delta) by kind."""
    counts: Counter[ChangeKind] = Counter()
    for entry in delta.values():
        if entry.value is not None:
            counts.update(count_changes(entry.value))
        else:
            counts[entry.kind] += 1
    return counts


# ---------------------------------------------------------------------------
# Delta tree
# ---------------------------------------------------------------------------


def _entry_label(key: str, entry: ChangeEntry) -> str:
    label = f"[bold]{escape(key)}[/bold]  {_styled_kind(entry.kind)}"
    if entry.value is not None:
        return label
    if entry.has_old and entry.has_new:
        return f"{label}  {_format_value(entry.old_value)} [dim]->[/dim] {_format_value(entry.new_value)}"
    if entry.has_new:
        return f"{label}  {_format_value(entry.new_value)}"
    return f"{label}  {_format_value(entry.old_value)}"


def _add_branch(tree: Tree, delta: Delta) -> None:
    for key, entry in delta.items():
        node = tree.add(_entry_label(key, entry))
        if entry.value is not None:
            _add_branch(node, entry.value)


def display_delta(console: Console, delta: Delta, title: str = "Delta") -> None:
    """Render a delta as a tree followed by a per-kind summary.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    delta:
        The comparison result.
    title:
        Panel title, usually the compared type name.
    """
    if delta.is_empty():
        console.print("[green]No differences.[/green]")
        return

    tree = Tree(f"[bold yellow]{escape(title)}[/bold yellow]", guide_style="dim")
    _add_branch(tree, delta)
    console.print(Panel(tree, title="Changes", border_style="yellow"))

    counts = count_changes(delta)
    console.print(
        f"[green]{counts[ChangeKind.ADD]}[/green] added, "
        f"[red]{counts[ChangeKind.DEL]}[/red] removed, "
        f"[yellow]{counts[ChangeKind.MOD]}[/yellow] modified"
    )
