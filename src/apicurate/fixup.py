"""Recording and replaying manual fixups.

A fixup is the structural diff between a canonical document as the
pipeline produced it and the same document after a human edited it. It is
stored next to the document as a JSON list of ``dictdiffer`` instructions
and replayed after patching on every rebuild.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from typing import TYPE_CHECKING, Any

import dictdiffer
import typer

from apicurate.errors import EditorAbortedError, FixupConflictError
from apicurate.origin import artifact_path

if TYPE_CHECKING:
    from apicurate.store import SpecStore

logger = logging.getLogger(__name__)

EDITOR_EXTENSION = ".fixup.txt"

# What dictdiffer raises when an instruction targets a node that is gone
_CONFLICTS = (KeyError, IndexError, TypeError, ValueError)

# The edited document follows the "??? Swagger <url> ???" banner and ends at
# the first line holding only a closing brace.
_EDITED_SWAGGER = re.compile(r"\?+ Swagger.*$((?:.|\n)*?^}$)", re.MULTILINE)


def compute_fixup(before: dict[str, Any], after: dict[str, Any]) -> list[Any]:
    """Diff two documents into a JSON-serializable instruction list."""
    return [list(change) for change in dictdiffer.diff(before, after, dot_notation=False)]


def apply_fixup(doc: dict[str, Any], fixup: list[Any] | None) -> dict[str, Any]:
    """Replay ``fixup`` on ``doc``.

    Returns:
        A patched copy of ``doc`` (``doc`` itself when there is no fixup).

    Raises:
        FixupConflictError: If the document drifted so far from the one the
            fixup was recorded against that an instruction can not be applied.
    """
    if not fixup:
        return doc
    try:
        patched: dict[str, Any] = dictdiffer.patch(fixup, doc)
    except _CONFLICTS as e:
        raise FixupConflictError(f"Fixup no longer applies: {type(e).__name__} {e}") from e
    return patched


def record_fixup(
    store: SpecStore,
    pre_edit: dict[str, Any],
    post_edit: dict[str, Any],
    replace: bool = False,
) -> str | None:
    """Persist the difference between ``pre_edit`` and ``post_edit``.

    ``pre_edit`` already has any existing fixup applied, so that fixup is
    reverted first and the new diff is taken against the unfixed document.
    Repeated edits therefore accumulate into one fixup. With ``replace`` the
    existing fixup is discarded instead (it no longer applied to
    ``pre_edit``).

    Returns:
        Collection-relative path of the written fixup, or None if the edit
        changed nothing.
    """
    path = artifact_path(pre_edit, store.config.fixup_filename)
    existing = None if replace else store.read_json(path)

    base = dictdiffer.revert(existing, pre_edit) if existing else copy.deepcopy(pre_edit)
    changes = compute_fixup(base, post_edit)
    if not changes:
        logger.info("Edit produced no changes, %s left alone", path)
        return None

    store.write_json(path, changes)
    return path


def extract_edited_swagger(text: str) -> dict[str, Any]:
    """Pull the edited canonical document out of an editor buffer.

    Raises:
        EditorAbortedError: If no document can be found or parsed.
    """
    match = _EDITED_SWAGGER.search(text)
    if match is None or not match.group(1).strip():
        raise EditorAbortedError("Can not match edited Swagger")

    try:
        doc = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise EditorAbortedError(f"Edited Swagger is not valid JSON: {e}") from e

    if not isinstance(doc, dict):
        raise EditorAbortedError("Edited Swagger is not a JSON object")
    return doc


def edit_text(text: str) -> str:
    """Open ``text`` in the user's editor and return the saved result.

    Raises:
        EditorAbortedError: If the editor was closed without saving.
    """
    edited = typer.edit(text, extension=EDITOR_EXTENSION, require_save=True)
    if edited is None:
        raise EditorAbortedError("Editor closed without saving")
    return edited
