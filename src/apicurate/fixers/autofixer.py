"""Error-driven remediation of canonical documents."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from apicurate.fixers.base import UNSET, FixContext
from apicurate.fixers.registry import FixerRegistry, get_global_registry
from apicurate.pointer import resolve, set_value
from apicurate.validators.base import ValidationError

logger = logging.getLogger(__name__)


class AutoFixer:
    """Applies one pass of known remediations to a document.

    Attributes:
        registry: Maps error codes to fixers.
    """

    def __init__(self, registry: FixerRegistry | None = None) -> None:
        self.registry = registry or get_global_registry()

    def attempt_fix(self, doc: dict[str, Any], errors: Iterable[ValidationError]) -> bool:
        """Try to remediate every error once, mutating ``doc`` in place.

        Errors with unknown codes, or whose path no longer resolves because
        an earlier fix in the same pass changed the document, are skipped.

        Returns:
            True if any fix changed the document.
        """
        fixed = False

        for error in errors:
            fixer = self.registry.get_fixer(error.code)
            if fixer is None:
                logger.debug("No fixer for %s at %s", error.code, error.pointer)
                continue

            try:
                value = resolve(doc, error.path)
                parent = resolve(doc, error.path[:-1]) if error.path else None
            except LookupError:
                logger.debug("Skipping %s, %s no longer resolves", error.code, error.pointer)
                continue

            result = fixer.fix(FixContext(doc=doc, error=error, parent=parent, value=value))
            if not result.applied:
                continue

            if result.new_value is not UNSET:
                set_value(doc, error.path, result.new_value)

            logger.debug("Fixed %s at %s: %s", error.code, error.pointer or "/", result.message)
            fixed = True

        return fixed
