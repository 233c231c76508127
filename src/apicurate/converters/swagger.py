"""Native loader for sources that are already Swagger 2.0."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from apicurate.converters.base import CANONICAL_FORMAT, CanonicalWrapper, SourceSpec
from apicurate.errors import ConversionError
from apicurate.fetch import DEFAULT_TIMEOUT, get_resource, is_url


def load_document(source: str | dict[str, Any], timeout: float = DEFAULT_TIMEOUT) -> dict[str, Any]:
    """Load a JSON or YAML document from a URL, a local path or memory.

    Args:
        source: URL, filesystem path or an already parsed mapping.
        timeout: HTTP timeout for URL sources.

    Returns:
        The parsed document (a copy when ``source`` is a mapping).

    Raises:
        ConversionError: If the document cannot be read or is not a mapping.
    """
    if isinstance(source, dict):
        return copy.deepcopy(source)

    if is_url(source):
        text = get_resource(source, timeout=timeout).text
    else:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise ConversionError(f"Can not read {source}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConversionError(f"Can not parse {source}: {e}") from e

    if not isinstance(data, dict):
        raise ConversionError(f"Source is not a document object: {source}")
    return data


@dataclass
class SwaggerSource(SourceSpec):
    """A Swagger 2.0 source; conversion is a copy."""

    def convert_to(self, type_name: str) -> CanonicalWrapper:
        if type_name != CANONICAL_FORMAT:
            raise ConversionError(f"Can not convert {self.type} to {type_name}")

        version = str(self.spec.get("swagger", "")) if isinstance(self.spec, dict) else ""
        if version != "2.0":
            raise ConversionError(f"Not a Swagger 2.0 document (swagger: {version or 'missing'})")

        return CanonicalWrapper(spec=copy.deepcopy(self.spec))
