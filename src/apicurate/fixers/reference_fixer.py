"""Fixers for references and operation identifiers."""

from __future__ import annotations

from apicurate.fixers.base import BaseFixer, FixContext, FixResult
from apicurate.validators.base import ErrorCode
from apicurate.validators.swagger_validator import iter_operations

DEFINITIONS_PREFIX = "#/definitions/"


class ReferenceFixer(BaseFixer):
    """Points bare references at the definition of the same name.

    Converters often emit ``{"$ref": "Pet"}`` where ``#/definitions/Pet``
    is meant.
    """

    codes = (ErrorCode.UNRESOLVABLE_REFERENCE.value,)

    def fix(self, context: FixContext) -> FixResult:
        ref = context.value
        definitions = context.doc.get("definitions")
        if not isinstance(ref, str) or not isinstance(definitions, dict):
            return FixResult.skipped("No definitions to point at")
        if ref not in definitions:
            return FixResult.skipped(f"No definition named {ref}")

        return FixResult.replace(DEFINITIONS_PREFIX + ref, f"Rewrote reference {ref}")


class OperationIdFixer(BaseFixer):
    """Strips every ``operationId`` in the document.

    Coarse, but the only way to guarantee uniqueness without inventing
    identifiers.
    """

    codes = (ErrorCode.DUPLICATE_OPERATIONID.value,)

    def fix(self, context: FixContext) -> FixResult:
        stripped = 0
        for _path, _method, _item, operation in iter_operations(context.doc):
            if "operationId" in operation:
                del operation["operationId"]
                stripped += 1

        if not stripped:
            return FixResult.skipped("No operationId left to strip")
        return FixResult(applied=True, message=f"Stripped {stripped} operationId fields")
