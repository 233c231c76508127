"""Fixers for operation parameter errors."""

from __future__ import annotations

import copy
import re

from apicurate.fixers.base import BaseFixer, FixContext, FixResult
from apicurate.validators.base import ErrorCode

_UNDECLARED_NAME = re.compile(r": (.+)$")


class MissingPathParameterFixer(BaseFixer):
    """Declares path template variables the operation never declared.

    The error points at the operation; its message ends with the missing
    parameter name. A required string path parameter is appended.
    """

    codes = (ErrorCode.MISSING_PATH_PARAMETER_DEFINITION.value,)

    def fix(self, context: FixContext) -> FixResult:
        operation = context.value
        match = _UNDECLARED_NAME.search(context.error.message)
        if not isinstance(operation, dict) or match is None:
            return FixResult.skipped("Error does not point at an operation")

        name = match.group(1)
        parameters = operation.get("parameters")
        if not isinstance(parameters, list):
            parameters = []

        declared = any(
            isinstance(p, dict) and p.get("in") == "path" and p.get("name") == name
            for p in parameters
        )
        if declared:
            return FixResult.skipped(f"Path parameter already declared: {name}")

        updated = copy.copy(operation)
        updated["parameters"] = [
            *parameters,
            {"name": name, "type": "string", "in": "path", "required": True},
        ]
        return FixResult.replace(updated, f"Declared path parameter: {name}")


class PathParameterRequiredFixer(BaseFixer):
    """Marks path parameters as required.

    Path parameters without ``required: true`` match none of the parameter
    alternatives, which surfaces as a one-of failure on the parameter.
    """

    codes = (ErrorCode.ONE_OF_MISSING.value,)

    def fix(self, context: FixContext) -> FixResult:
        parameter = context.value
        if not isinstance(parameter, dict) or parameter.get("in") != "path":
            return FixResult.skipped("Not a path parameter")
        if parameter.get("required"):
            return FixResult.skipped("Path parameter already required")

        updated = copy.copy(parameter)
        updated["required"] = True
        return FixResult.replace(updated, f"Marked path parameter required: {parameter.get('name')}")
