"""Conversion of non-canonical dialects through the api-spec-converter tool."""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass

from apicurate.converters.base import CanonicalWrapper, SourceSpec
from apicurate.errors import ConversionError

logger = logging.getLogger(__name__)


@dataclass
class ExternalSource(SourceSpec):
    """A source handed to an external converter command.

    The command is invoked as
    ``<command> --from=<type> --to=<target> <source>`` and must print the
    converted JSON document on stdout.

    Attributes:
        command: Converter executable.
        timeout: Seconds the converter may run.
    """

    command: str = "api-spec-converter"
    timeout: float = 60.0

    def convert_to(self, type_name: str) -> CanonicalWrapper:
        args = [self.command, f"--from={self.type}", f"--to={type_name}", self.source]
        logger.debug("Running %s", " ".join(args))

        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ConversionError(f"Converter command not found: {self.command}") from e
        except (subprocess.SubprocessError, OSError) as e:
            raise ConversionError(f"Converter failed for {self.source}: {e}") from e

        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise ConversionError(f"Converter failed for {self.source}: {detail}")

        try:
            spec = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ConversionError(f"Converter produced invalid JSON for {self.source}: {e}") from e

        if not isinstance(spec, dict):
            raise ConversionError(f"Converter produced no document for {self.source}")

        return CanonicalWrapper(spec=spec)
