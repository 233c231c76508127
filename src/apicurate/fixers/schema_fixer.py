"""Fixers for schema object and default value errors."""

from __future__ import annotations

import copy
import json
import logging

from apicurate.fixers.base import BaseFixer, FixContext, FixResult
from apicurate.validators.base import ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"

_MISSING_VERSION = "Missing required property: version"


class RequiredDefinitionFixer(BaseFixer):
    """Prunes ``required`` down to the properties that are defined.

    Drops the ``required`` list entirely when nothing is left.
    """

    codes = (ErrorCode.OBJECT_MISSING_REQUIRED_PROPERTY_DEFINITION.value,)

    def fix(self, context: FixContext) -> FixResult:
        schema = context.value
        if not isinstance(schema, dict) or not isinstance(schema.get("required"), list):
            return FixResult.skipped("Schema has no required list")

        properties = schema.get("properties")
        if not isinstance(properties, dict):
            properties = {}

        kept = [name for name in schema["required"] if name in properties]
        if kept == schema["required"]:
            return FixResult.skipped("All required properties are defined")

        updated = copy.copy(schema)
        if kept:
            updated["required"] = kept
        else:
            del updated["required"]
        return FixResult.replace(updated, f"Pruned required list to {kept}")


class MissingRequiredPropertyFixer(BaseFixer):
    """Fills in two required properties converters commonly leave out.

    * ``version`` gets a default version string.
    * ``items`` on an array schema becomes an unconstrained schema.
    """

    codes = (ErrorCode.OBJECT_MISSING_REQUIRED_PROPERTY.value,)

    def fix(self, context: FixContext) -> FixResult:
        node = context.value
        if not isinstance(node, dict):
            return FixResult.skipped("Error does not point at an object")

        if context.error.message == _MISSING_VERSION:
            if "version" in node:
                return FixResult.skipped("Version already present")
            updated = copy.copy(node)
            updated["version"] = DEFAULT_VERSION
            return FixResult.replace(updated, f"Set default version {DEFAULT_VERSION}")

        if node.get("type") == "array" and "items" not in node:
            updated = copy.copy(node)
            updated["items"] = {}
            return FixResult.replace(updated, "Added unconstrained items schema")

        return FixResult.skipped("No remediation for missing property")


class DefaultValueFixer(BaseFixer):
    """Repairs or drops a ``default`` that does not match its schema.

    A string default on a non-string type is parsed as a JSON literal and
    installed when that succeeds (``"5"`` becomes ``5``). Otherwise the
    default is removed.
    """

    codes = (
        ErrorCode.ENUM_MISMATCH.value,
        ErrorCode.INVALID_FORMAT.value,
        ErrorCode.INVALID_TYPE.value,
    )

    def fix(self, context: FixContext) -> FixResult:
        holder = context.parent
        if context.key != "default" or not isinstance(holder, dict) or "default" not in holder:
            return FixResult.skipped("Error is not about a default value")

        value = holder["default"]
        declared = holder.get("type")

        if isinstance(value, str) and declared is not None and declared != "string":
            try:
                parsed = json.loads(value)
            except ValueError:
                logger.debug("Default %r is not a %s literal", value, declared)
            else:
                if parsed != value:
                    return FixResult.replace(parsed, f"Parsed default {value!r} as {declared}")

        del holder["default"]
        return FixResult(applied=True, message=f"Removed invalid default {value!r}")
