from __future__ import annotations

import copy
from typing import Optional, Set

from nbformat import NotebookNode

from .utils import _norm_text

_HIDDEN_INPUT_TAGS = {"hide-input", "remove-input", "hide_input", "remove_input"}
_HIDDEN_OUTPUT_TAGS = {"hide-output", "remove-output", "hide_output", "remove_output"}
_REMOVE_CELL_TAGS = {"remove-cell", "hide-cell", "remove_cell", "hide_cell"}


def _tags(cell: NotebookNode) -> Set[str]:
    md = cell.get("metadata") or {}
    return set(md.get("tags") or [])


def _flag(cell: NotebookNode, name: str, tags: Set[str]) -> bool:
    md = cell.get("metadata") or {}
    jup = md.get("jupyter") if isinstance(md.get("jupyter"), dict) else {}
    return bool(jup.get(name)) or bool(md.get(name)) or bool(_tags(cell) & tags)


def _is_empty(cell: NotebookNode) -> bool:
    if _norm_text(cell.get("source", "")).strip():
        return False
    if cell.get("cell_type") == "markdown":
        return not cell.get("attachments")
    if cell.get("cell_type") == "code":
        return not cell.get("outputs")
    return True


def visible_cell(cell: NotebookNode) -> Optional[NotebookNode]:
    """
    Return a copy of `cell` with hidden parts blanked, or None to drop it.

    Markdown cells with hidden source disappear entirely; code cells lose
    their source and/or outputs.
    """
    if _tags(cell) & _REMOVE_CELL_TAGS:
        return None

    kind = cell.get("cell_type")
    c = copy.deepcopy(cell)

    if _flag(cell, "source_hidden", _HIDDEN_INPUT_TAGS):
        if kind == "markdown":
            return None
        if kind == "code":
            c["source"] = ""

    if kind == "code" and _flag(cell, "outputs_hidden", _HIDDEN_OUTPUT_TAGS):
        c["outputs"] = []
        c["execution_count"] = None

    if _is_empty(c):
        return None
    return c


def filter_and_apply_visibility(nb: NotebookNode) -> None:
    nb.cells = [c for c in map(visible_cell, nb.cells) if c is not None]
