"""Diagnostic dumps for documents that failed to build.

The dump frames every section with a banner naming the source, so a run
over the whole collection can be read (and edited, for fixups) per
document.
"""

from __future__ import annotations

import traceback
from typing import TYPE_CHECKING, Any

from apicurate.convergence import REASON_FIX_CAP
from apicurate.converters.base import CANONICAL_FORMAT
from apicurate.store import json_to_string
from apicurate.validators.base import ValidationError

if TYPE_CHECKING:
    from apicurate.convergence import WriteResult


def begin_banner(url: str) -> str:
    return f"{'+' * 26} Begin {url} {'+' * 25}\n"


def swagger_banner(url: str) -> str:
    return f"{'?' * 20} Swagger {url} {'?' * 28}\n"


def errors_banner(url: str) -> str:
    return f"{'!' * 20} Errors {url} {'!' * 30}\n"


def warnings_banner(url: str) -> str:
    return f"{'*' * 20} Warnings {url} {'*' * 30}\n"


def end_banner(url: str) -> str:
    return f"{'-' * 25} End {url} {'-' * 28}\n"


def file_banner(filename: str) -> str:
    """Banner printed before each document during collection validation."""
    return f"{'=' * 24} {filename} {'=' * 16}\n"


def records_to_string(records: list[ValidationError]) -> str:
    return json_to_string([record.to_dict() for record in records])


def _errors_to_string(errors: Any) -> str:
    if isinstance(errors, BaseException):
        return "".join(traceback.format_exception(errors))
    if isinstance(errors, list):
        return records_to_string(errors)
    return f"{errors}\n"


def error_to_string(result: WriteResult) -> str:
    """Render the diagnostic dump of a failed (or edited) build.

    The source document is included when it is not already canonical, or
    when conversion never produced a canonical document.
    """
    spec = result.spec
    url = result.source
    text = begin_banner(url)

    if spec is not None and (spec.type != CANONICAL_FORMAT or result.swagger is None):
        text += json_to_string(spec.spec)
        if spec.sub_resources:
            text += json_to_string(spec.sub_resources)

    if result.swagger is not None:
        text += swagger_banner(url)
        text += json_to_string(result.swagger)

    if result.errors:
        text += errors_banner(url)
        if result.reason == REASON_FIX_CAP:
            text += f"Autofix gave up after {result.passes} validation passes ({result.reason})\n"
        text += _errors_to_string(result.errors)

    if result.warnings:
        text += warnings_banner(url)
        text += records_to_string(result.warnings)

    text += end_banner(url)
    return text
