"""Core types of the dialect conversion boundary.

A source is first loaded as a ``SourceSpec`` in its own dialect and then
converted into the canonical format (Swagger 2.0), wrapped in a
``CanonicalWrapper``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from apicurate.errors import ConversionError

CANONICAL_FORMAT = "swagger_2"

# type name -> (format name, format version)
TYPES: dict[str, tuple[str, str]] = {
    "swagger_1": ("swagger", "1.2"),
    "swagger_2": ("swagger", "2.0"),
    "google": ("google", "v1"),
    "raml": ("raml", "0.8"),
    "wadl": ("wadl", "1.0"),
    "api_blueprint": ("api_blueprint", "1A"),
    "io_docs": ("io_docs", "1.0"),
}


def get_type_name(format_name: str, version: str) -> str:
    """Map a (format, version) pair back to a converter type name.

    Swagger 1.x versions all map to ``swagger_1``.

    Raises:
        ConversionError: If no type matches.
    """
    if format_name == "swagger" and version.startswith("1."):
        return "swagger_1"

    for type_name, (fmt, ver) in TYPES.items():
        if fmt == format_name and ver == version:
            return type_name

    raise ConversionError(f"Unknown source format: {format_name} {version}")


@dataclass
class CanonicalWrapper:
    """A document converted into the canonical format.

    Attributes:
        spec: The canonical document tree.
        format_name: Canonical format name ("swagger").
        format_version: Canonical format version ("2.0").
    """

    spec: dict[str, Any]
    format_name: str = "swagger"
    format_version: str = "2.0"

    def get_format_version(self) -> str:
        return self.format_version


@dataclass
class SourceSpec(ABC):
    """A source API description in its own dialect.

    Attributes:
        source: Where the description came from (URL or path).
        type: Converter type name (e.g., "swagger_2", "google").
        spec: Parsed source document, if the dialect is parsed locally.
        sub_resources: Additional documents the source refers to.
    """

    source: str
    type: str
    spec: Any = None
    sub_resources: dict[str, Any] = field(default_factory=dict)

    @property
    def format_name(self) -> str:
        return TYPES[self.type][0]

    def get_format_version(self) -> str:
        return TYPES[self.type][1]

    @abstractmethod
    def convert_to(self, type_name: str) -> CanonicalWrapper:
        """Convert this source into ``type_name``.

        Raises:
            ConversionError: If the conversion is not possible.
        """
