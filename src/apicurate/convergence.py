"""The convert, patch, validate and autofix loop.

``SpecWriter.write_spec`` turns one source API description into a
persisted canonical document:

1. Convert the source into the canonical format and stamp its provenance.
2. Apply the curated patch layers strictly, then replay the fixup.
3. Validate. While errors remain and the autofixer makes progress, fix
   and validate again, up to ``max_fix_passes`` fixing steps.
4. Persist the document at its identity path, or report the failure.

Per-document failures (conversion, fixup replay, validation) come back as
a ``Failed`` result. Patch conflicts and metadata violations raise, since
they mean the curated state of the collection is broken.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from apicurate.config import CurateConfig
from apicurate.converters import CANONICAL_FORMAT, DialectConverter, SourceSpec
from apicurate.errors import ConversionError, FixupConflictError, MissingMetadataError
from apicurate.fixers import AutoFixer
from apicurate.fixup import apply_fixup
from apicurate.origin import artifact_path, identity, provider_name
from apicurate.patching import collect_patch, compose_patch, merge
from apicurate.pointer import get_dotted
from apicurate.store import SpecStore
from apicurate.validators import BaseValidator, SwaggerValidator, ValidationError

logger = logging.getLogger(__name__)


class WriteState(str, Enum):
    """Terminal states of one ``write_spec`` run."""

    DONE = "Done"
    FAILED = "Failed"


# Failure reasons
REASON_CONVERSION = "conversion"
REASON_VALIDATION = "validation"
REASON_FIX_CAP = "fix_cap_exceeded"
REASON_FIXUP = "fixup"


@dataclass
class WriteResult:
    """Outcome of building one document.

    Attributes:
        state: Done or Failed.
        source: The source reference the build started from.
        spec: Loaded source spec, None if loading failed.
        swagger: Canonical document so far, None if conversion failed.
        errors: Validation errors, or the conversion or fixup exception.
        warnings: Validation warnings.
        path: Where the document was persisted (Done only).
        passes: Number of validation passes run.
        reason: Why the build failed, None when Done.
    """

    state: WriteState
    source: str
    spec: SourceSpec | None = None
    swagger: dict[str, Any] | None = None
    errors: list[ValidationError] | Exception | None = None
    warnings: list[ValidationError] | None = None
    path: str | None = None
    passes: int = 0
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is WriteState.DONE


def remove_empty(node: Any) -> None:
    """Recursively drop empty strings, mappings and lists from ``node``."""
    if isinstance(node, dict):
        for key in list(node):
            remove_empty(node[key])
            if _is_empty(node[key]):
                del node[key]
    elif isinstance(node, list):
        for item in node:
            remove_empty(item)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, dict, list)) and not value)


def _source_name(source: str | dict[str, Any]) -> str:
    return source if isinstance(source, str) else "<inline>"


class SpecWriter:
    """Builds canonical documents and persists them into a collection.

    Attributes:
        store: Collection file store.
        converter: Loads sources in their own dialect.
        validator: Validates canonical documents.
        autofixer: Remediates validation errors.
        config: Active configuration.
    """

    def __init__(
        self,
        store: SpecStore,
        converter: DialectConverter | None = None,
        validator: BaseValidator | None = None,
        autofixer: AutoFixer | None = None,
        config: CurateConfig | None = None,
    ) -> None:
        self.store = store
        self.config = config or store.config
        self.converter = converter or DialectConverter(
            command=self.config.converter_command,
            timeout=self.config.request_timeout,
        )
        self.validator = validator or SwaggerValidator()
        self.autofixer = autofixer or AutoFixer()

    def write_spec(
        self,
        source: str | dict[str, Any],
        type_name: str,
        extra_patch: dict[str, Any] | None = None,
    ) -> WriteResult:
        """Build, validate and persist the document for ``source``.

        Args:
            source: URL, path or parsed document.
            type_name: Converter type of the source (e.g., "swagger_2").
            extra_patch: Patch applied under the persisted patch layers.

        Returns:
            WriteResult; Done results were written to ``result.path``.

        Raises:
            PatchError: If a curated patch conflicts with the document.
            MetadataError: If the document's identity is unusable.
        """
        result = WriteResult(state=WriteState.FAILED, source=_source_name(source))
        logger.info("Processing %s", result.source)

        try:
            result.spec = self.converter.get_spec(source, type_name)
            result.source = result.spec.source
            doc = self.convert(result.spec)
        except ConversionError as e:
            logger.debug("Conversion of %s failed: %s", result.source, e)
            result.errors = e
            result.reason = REASON_CONVERSION
            return result

        try:
            doc = self.patch(doc, extra_patch)
        except FixupConflictError as e:
            logger.warning("%s: %s", result.source, e)
            # The patched document without the fixup, for re-editing
            result.swagger = doc
            result.errors = e
            result.reason = REASON_FIXUP
            return result
        result.swagger = doc
        return self._validate_and_fix(doc, result)

    def convert(self, spec: SourceSpec) -> dict[str, Any]:
        """Convert ``spec`` into a canonical document and stamp provenance.

        Raises:
            ConversionError: If conversion fails or the result has no host.
        """
        wrapper = spec.convert_to(CANONICAL_FORMAT)
        doc = wrapper.spec

        info = doc.setdefault("info", {})
        if not isinstance(info, dict):
            raise ConversionError(f"Converted spec has no info object: {spec.source}")

        info["x-providerName"] = provider_name(doc.get("host"))
        info["x-origin"] = {
            "format": spec.format_name,
            "version": spec.get_format_version(),
            "url": spec.source,
        }
        return doc

    def patch(self, doc: dict[str, Any], extra_patch: dict[str, Any] | None = None) -> dict[str, Any]:
        """Apply the curated patch layers and the fixup to ``doc``.

        Returns:
            The patched document (a new object if a fixup was replayed).

        Raises:
            FixupConflictError: If the recorded fixup no longer applies. ``doc``
                has the patch layers applied at that point.
        """
        remove_empty(doc["info"])

        components = self._layer_components(compose_patch(doc, extra_patch))
        patch = collect_patch(self.store, components, extra_patch)

        # Converters default a missing title to the host; let the patch supply it
        info = doc["info"]
        if info.get("title") == doc.get("host") and get_dotted(patch, "info.title") is not None:
            del info["title"]

        merge(doc, patch)

        try:
            fixup_path = artifact_path(doc, self.config.fixup_filename)
        except MissingMetadataError:
            return doc
        return apply_fixup(doc, self.store.read_json(fixup_path))

    def _layer_components(self, preview: dict[str, Any]) -> list[str]:
        try:
            return identity(preview).components()
        except MissingMetadataError as e:
            # No version yet (autofix may add one); only the provider and
            # service layers can apply
            info = preview.get("info") or {}
            if "x-providerName" not in info:
                raise
            logger.debug("Partial patch lookup: %s", e)
            components = [info["x-providerName"]]
            if info.get("x-serviceName"):
                components.append(info["x-serviceName"])
            return components

    def _validate_and_fix(self, doc: dict[str, Any], result: WriteResult) -> WriteResult:
        fix_steps = 0

        while True:
            report = self.validator.validate(doc)
            result.passes += 1
            logger.debug("Validation pass %d: %d errors", result.passes, len(report.errors or []))

            if report.valid:
                return self._done(doc, report.warnings, result)

            if fix_steps >= self.config.max_fix_passes:
                logger.warning("Autofix gave up on %s after %d fix passes", result.source, fix_steps)
                return self._failed(result, report.errors, report.warnings, REASON_FIX_CAP)

            fix_steps += 1
            if not self.autofixer.attempt_fix(doc, report.errors or []):
                break

        final = self.validator.validate(doc)
        result.passes += 1
        if final.valid:
            return self._done(doc, final.warnings, result)
        return self._failed(result, final.errors, final.warnings, REASON_VALIDATION)

    def _done(
        self,
        doc: dict[str, Any],
        warnings: list[ValidationError] | None,
        result: WriteResult,
    ) -> WriteResult:
        for warning in warnings or []:
            logger.warning("%s: %s (%s)", warning.code, warning.message, warning.pointer or "/")

        path = artifact_path(doc, self.config.spec_filename)
        self.store.write_json(path, doc)

        result.state = WriteState.DONE
        result.swagger = doc
        result.warnings = warnings
        result.path = path
        return result

    @staticmethod
    def _failed(
        result: WriteResult,
        errors: list[ValidationError] | None,
        warnings: list[ValidationError] | None,
        reason: str,
    ) -> WriteResult:
        result.state = WriteState.FAILED
        result.errors = errors
        result.warnings = warnings
        result.reason = reason
        return result
