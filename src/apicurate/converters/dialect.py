"""Entry point for turning a source reference into a ``SourceSpec``."""

from __future__ import annotations

from typing import Any

from apicurate.converters.base import CANONICAL_FORMAT, TYPES, SourceSpec
from apicurate.converters.external import ExternalSource
from apicurate.converters.swagger import SwaggerSource, load_document
from apicurate.errors import ConversionError
from apicurate.fetch import DEFAULT_TIMEOUT


class DialectConverter:
    """Loads sources of any supported dialect.

    Swagger 2.0 sources are parsed in-process; every other dialect is
    delegated to the external converter command.
    """

    def __init__(self, command: str = "api-spec-converter", timeout: float = DEFAULT_TIMEOUT) -> None:
        self.command = command
        self.timeout = timeout

    def get_spec(self, source: str | dict[str, Any], type_name: str) -> SourceSpec:
        """Load ``source`` as a ``type_name`` document.

        Raises:
            ConversionError: If the type is unknown or the source unreadable.
        """
        if type_name not in TYPES:
            raise ConversionError(f"Unknown source type: {type_name}")

        if type_name == CANONICAL_FORMAT:
            name = source if isinstance(source, str) else "<inline>"
            return SwaggerSource(
                source=name,
                type=type_name,
                spec=load_document(source, timeout=self.timeout),
            )

        if not isinstance(source, str):
            raise ConversionError(f"{type_name} sources must be given as a URL or path")

        return ExternalSource(
            source=source,
            type=type_name,
            command=self.command,
            timeout=self.timeout,
        )
