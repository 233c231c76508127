"""Source dialect loading and conversion into the canonical format."""

from __future__ import annotations

from apicurate.converters.base import (
    CANONICAL_FORMAT,
    TYPES,
    CanonicalWrapper,
    SourceSpec,
    get_type_name,
)
from apicurate.converters.dialect import DialectConverter
from apicurate.converters.external import ExternalSource
from apicurate.converters.swagger import SwaggerSource, load_document

__all__ = [
    # Base types
    "CANONICAL_FORMAT",
    "TYPES",
    "CanonicalWrapper",
    "SourceSpec",
    "get_type_name",
    # Sources
    "ExternalSource",
    "SwaggerSource",
    "load_document",
    # Entry point
    "DialectConverter",
]
