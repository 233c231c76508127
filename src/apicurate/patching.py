"""Curated patch handling.

Two merge flavours live here:

* ``merge`` applies a patch to a canonical document and is strictly
  additive: a patch may add properties but never delete or override one.
  A conflict means the source started to provide a value the curators also
  patch in, and must be resolved by hand.
* ``compose_patch`` is plain JSON merge-patch (RFC 7386) and is only used to
  combine patch layers with each other.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from apicurate.errors import OverwriteError, ProtectedFieldError, TypeKindError

if TYPE_CHECKING:
    from apicurate.store import SpecStore

logger = logging.getLogger(__name__)


def _kind(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


def merge(target: dict[str, Any], patch: dict[str, Any] | None, _prefix: str = "") -> dict[str, Any]:
    """Merge ``patch`` into ``target`` in place, adding properties only.

    Args:
        target: Mapping receiving the patch.
        patch: Sparse patch document. ``None`` is a no-op.

    Returns:
        The mutated ``target``.

    Raises:
        TypeKindError: If ``target`` (or a nested node the patch descends
            into) is not a mapping.
        ProtectedFieldError: If the patch holds a ``None`` value.
        OverwriteError: If the patch sets a property ``target`` already has.
    """
    if not isinstance(target, dict):
        raise TypeKindError(_prefix, _kind(target))

    if patch is None:
        return target

    if not isinstance(patch, dict):
        raise TypeKindError(_prefix, _kind(patch))

    for key, value in patch.items():
        name = f"{_prefix}.{key}" if _prefix else str(key)

        if value is None:
            raise ProtectedFieldError(name)

        if isinstance(target.get(key), dict):
            if not isinstance(value, dict):
                raise OverwriteError(name)
            merge(target[key], value, name)
            continue

        if key in target:
            raise OverwriteError(name)

        target[key] = copy.deepcopy(value)

    return target


def compose_patch(base: Any, overlay: Any) -> Any:
    """Combine two patch documents with JSON merge-patch semantics.

    ``overlay`` wins on leaf conflicts and a ``None`` value inside it removes
    the property from the result. A missing (``None``) overlay leaves ``base``
    unchanged. Neither argument is mutated.
    """
    if overlay is None:
        return copy.deepcopy(base)

    if not isinstance(overlay, dict):
        return copy.deepcopy(overlay)

    result = copy.deepcopy(base) if isinstance(base, dict) else {}
    for key, value in overlay.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = compose_patch(result.get(key), value)
    return result


def collect_patch(
    store: SpecStore,
    components: Sequence[str],
    extra_patch: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the effective patch for a document.

    Starts from ``extra_patch`` and layers every persisted patch file found
    along ``components`` on top of it, outermost directory first, so the
    most specific layer wins.

    Args:
        store: Collection file store.
        components: Identity path components (provider, service?, version).
        extra_patch: Caller supplied patch.

    Returns:
        The composed patch (never ``None``).
    """
    patch: dict[str, Any] = compose_patch({}, extra_patch)

    directory: list[str] = []
    for component in components:
        directory.append(component)
        layer_path = "/".join([*directory, store.config.patch_filename])
        layer = store.read_json(layer_path)
        if layer is not None:
            logger.debug("Applying patch layer %s", layer_path)
            patch = compose_patch(patch, layer)

    return patch


def update_patch_file(store: SpecStore, patch_path: str, add_patch: dict[str, Any]) -> bool:
    """Fold ``add_patch`` into the persisted patch file at ``patch_path``.

    The file is only rewritten when its content actually changes.

    Returns:
        True if the file was written.
    """
    existing = store.read_json(patch_path)
    updated = compose_patch(existing, add_patch)

    if existing == updated:
        return False

    store.write_json(patch_path, updated)
    return True
