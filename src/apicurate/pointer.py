"""Helpers for addressing nodes inside document trees.

Paths are sequences of segments (mapping keys or sequence indexes), the
shape validators report error locations in.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

Segment = str | int


def to_pointer(path: Sequence[Segment]) -> str:
    """Render a path as an RFC 6901 JSON pointer."""
    if not path:
        return ""
    escaped = (str(segment).replace("~", "~0").replace("/", "~1") for segment in path)
    return "/" + "/".join(escaped)


def _step(node: Any, segment: Segment) -> Any:
    if isinstance(node, dict):
        return node[segment]
    if isinstance(node, list):
        return node[int(segment)]
    raise KeyError(segment)


def resolve(doc: Any, path: Sequence[Segment]) -> Any:
    """Return the node at ``path``.

    Raises:
        LookupError: If any segment does not exist.
    """
    node = doc
    for segment in path:
        try:
            node = _step(node, segment)
        except (KeyError, IndexError, ValueError, TypeError) as e:
            raise LookupError(f"No node at {to_pointer(path)}") from e
    return node


def set_value(doc: Any, path: Sequence[Segment], value: Any) -> None:
    """Install ``value`` at ``path``, replacing whatever was there.

    An empty path replaces the content of ``doc`` itself, which must be a
    mapping.

    Raises:
        LookupError: If the parent of ``path`` does not exist.
    """
    if not path:
        if not isinstance(doc, dict) or not isinstance(value, dict):
            raise LookupError("Only a mapping can replace the document root")
        replacement = dict(value)
        doc.clear()
        doc.update(replacement)
        return

    parent = resolve(doc, path[:-1])
    key = path[-1]
    if isinstance(parent, dict):
        parent[key] = value
    elif isinstance(parent, list):
        parent[int(key)] = value
    else:
        raise LookupError(f"No container at {to_pointer(path[:-1])}")


def get_dotted(doc: Any, dotted: str, default: Any = None) -> Any:
    """Look up a dot-separated path, returning ``default`` when absent."""
    node = doc
    for segment in dotted.split("."):
        if not isinstance(node, dict) or segment not in node:
            return default
        node = node[segment]
    return node
