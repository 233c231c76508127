"""Validator for canonical Swagger 2.0 documents.

Runs two passes:

1. A structural pass with ``jsonschema`` against the bundled schema.
2. A semantic pass for rules a JSON schema can not express (path
   parameters, operation id uniqueness, references, required property
   definitions, default values).

Error codes follow ``ErrorCode`` so the autofixer can act on them.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from functools import lru_cache
from importlib import resources
from typing import Any

import yaml
from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import ValidationError as SchemaError

from apicurate.pointer import Segment, resolve
from apicurate.validators.base import (
    BaseValidator,
    ErrorCode,
    ValidationError,
    ValidationReport,
)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")

_PATH_TEMPLATE = re.compile(r"{([^{}]+)}")
_REQUIRED_MESSAGE = re.compile(r"^'(.+)' is a required property$")

_VALIDATOR_CODES: dict[str, ErrorCode] = {
    "required": ErrorCode.OBJECT_MISSING_REQUIRED_PROPERTY,
    "type": ErrorCode.INVALID_TYPE,
    "enum": ErrorCode.ENUM_MISMATCH,
    "const": ErrorCode.ENUM_MISMATCH,
    "format": ErrorCode.INVALID_FORMAT,
    "pattern": ErrorCode.PATTERN,
    "oneOf": ErrorCode.ONE_OF_MISSING,
    "anyOf": ErrorCode.ANY_OF_MISSING,
    "additionalProperties": ErrorCode.OBJECT_ADDITIONAL_PROPERTIES,
}

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


@lru_cache(maxsize=1)
def load_schema() -> dict[str, Any]:
    """Load the bundled Swagger 2.0 schema from package resources.

    Raises:
        FileNotFoundError: If the schema is missing from the installation.
    """
    text = resources.files("apicurate.data").joinpath("swagger-2.0.yaml").read_text(encoding="utf-8")
    schema: dict[str, Any] = yaml.safe_load(text)
    return schema


def json_type(value: Any) -> str:
    """Name the JSON type of ``value``."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _matches_type(value: Any, declared: str) -> bool:
    expected = _JSON_TYPES.get(declared)
    if expected is None:
        return True
    if isinstance(value, bool) and declared != "boolean":
        return False
    if declared == "integer" and isinstance(value, float):
        return value.is_integer()
    return isinstance(value, expected)


def _is_extension(key: Any) -> bool:
    return isinstance(key, str) and key.startswith("x-")


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _resolve_local(doc: dict[str, Any], ref: str) -> bool:
    fragment = ref[1:]
    if fragment in ("", "/"):
        return True
    if not fragment.startswith("/"):
        return False
    try:
        resolve(doc, [_unescape(token) for token in fragment[1:].split("/")])
    except LookupError:
        return False
    return True


def iter_operations(doc: dict[str, Any]) -> Iterator[tuple[str, str, dict[str, Any], dict[str, Any]]]:
    """Yield ``(path, method, path_item, operation)`` for every operation."""
    paths = doc.get("paths")
    if not isinstance(paths, dict):
        return
    for path, item in paths.items():
        if _is_extension(path) or not isinstance(item, dict):
            continue
        for method in HTTP_METHODS:
            operation = item.get(method)
            if isinstance(operation, dict):
                yield path, method, item, operation


def _iter_refs(node: Any, path: list[Segment]) -> Iterator[tuple[list[Segment], str]]:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            yield [*path, "$ref"], ref
        for key, value in node.items():
            if key == "$ref" or _is_extension(key):
                continue
            yield from _iter_refs(value, [*path, key])
    elif isinstance(node, list):
        for index, value in enumerate(node):
            yield from _iter_refs(value, [*path, index])


def _iter_schemas(schema: Any, path: list[Segment]) -> Iterator[tuple[list[Segment], dict[str, Any]]]:
    if not isinstance(schema, dict):
        return
    yield path, schema

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for name, child in properties.items():
            yield from _iter_schemas(child, [*path, "properties", name])

    items = schema.get("items")
    if isinstance(items, list):
        for index, child in enumerate(items):
            yield from _iter_schemas(child, [*path, "items", index])
    else:
        yield from _iter_schemas(items, [*path, "items"])

    for keyword in ("allOf", "anyOf", "oneOf"):
        children = schema.get(keyword)
        if isinstance(children, list):
            for index, child in enumerate(children):
                yield from _iter_schemas(child, [*path, keyword, index])

    yield from _iter_schemas(schema.get("additionalProperties"), [*path, "additionalProperties"])


def _iter_parameters(doc: dict[str, Any]) -> Iterator[tuple[list[Segment], dict[str, Any]]]:
    shared = doc.get("parameters")
    if isinstance(shared, dict):
        for name, parameter in shared.items():
            if isinstance(parameter, dict):
                yield ["parameters", name], parameter

    paths = doc.get("paths")
    if not isinstance(paths, dict):
        return
    for path, item in paths.items():
        if _is_extension(path) or not isinstance(item, dict):
            continue
        owners: list[tuple[list[Segment], Any]] = [(["paths", path], item)]
        owners += [(["paths", path, m], item[m]) for m in HTTP_METHODS if isinstance(item.get(m), dict)]
        for owner_path, owner in owners:
            parameters = owner.get("parameters")
            if not isinstance(parameters, list):
                continue
            for index, parameter in enumerate(parameters):
                if isinstance(parameter, dict):
                    yield [*owner_path, "parameters", index], parameter


def iter_schema_nodes(doc: dict[str, Any]) -> Iterator[tuple[list[Segment], dict[str, Any]]]:
    """Yield ``(path, schema)`` for every schema object in the document."""
    definitions = doc.get("definitions")
    if isinstance(definitions, dict):
        for name, schema in definitions.items():
            yield from _iter_schemas(schema, ["definitions", name])

    for path, parameter in _iter_parameters(doc):
        if parameter.get("in") == "body":
            yield from _iter_schemas(parameter.get("schema"), [*path, "schema"])

    shared = doc.get("responses")
    if isinstance(shared, dict):
        for code, response in shared.items():
            if isinstance(response, dict):
                yield from _iter_schemas(response.get("schema"), ["responses", code, "schema"])

    for path, method, _item, operation in iter_operations(doc):
        responses = operation.get("responses")
        if not isinstance(responses, dict):
            continue
        for code, response in responses.items():
            if isinstance(response, dict):
                yield from _iter_schemas(
                    response.get("schema"),
                    ["paths", path, method, "responses", code, "schema"],
                )


class SwaggerValidator(BaseValidator):
    """Validates canonical documents against Swagger 2.0 rules.

    Attributes:
        schema: Structural JSON schema in use.
    """

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        self.schema = schema or load_schema()
        self._validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, doc: dict[str, Any]) -> ValidationReport:
        errors: list[ValidationError] = []
        seen: set[tuple[str, tuple[Segment, ...]]] = set()

        def add(error: ValidationError) -> None:
            key = (error.code, tuple(error.path))
            if key not in seen:
                seen.add(key)
                errors.append(error)

        for error in self._structural_errors(doc):
            add(error)

        for check in (
            self._check_path_parameters,
            self._check_operation_ids,
            self._check_references,
            self._check_required_definitions,
            self._check_defaults,
        ):
            for error in check(doc):
                add(error)

        return ValidationReport(errors=errors, warnings=list(self._unused_definitions(doc)))

    # -------------------------------------------------------------------------
    # Structural pass
    # -------------------------------------------------------------------------

    def _structural_errors(self, doc: dict[str, Any]) -> list[ValidationError]:
        found = sorted(
            self._validator.iter_errors(doc),
            key=lambda e: [str(segment) for segment in e.absolute_path],
        )
        return [self._convert(error) for error in found]

    @staticmethod
    def _convert(error: SchemaError) -> ValidationError:
        path = list(error.absolute_path)
        code = _VALIDATOR_CODES.get(str(error.validator), ErrorCode.SCHEMA_VALIDATION_FAILED)

        if code is ErrorCode.OBJECT_MISSING_REQUIRED_PROPERTY:
            match = _REQUIRED_MESSAGE.match(error.message)
            if match:
                name = match.group(1)
            else:
                instance = error.instance if isinstance(error.instance, dict) else {}
                missing = [p for p in error.validator_value if p not in instance]
                name = missing[0] if missing else "?"
            return ValidationError(code.value, f"Missing required property: {name}", path)

        if code is ErrorCode.ONE_OF_MISSING:
            return ValidationError(code.value, "Data does not match any schemas from 'oneOf'", path)

        return ValidationError(code.value, error.message, path)

    # -------------------------------------------------------------------------
    # Semantic pass
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_path_parameters(doc: dict[str, Any]) -> Iterator[ValidationError]:
        for path, method, item, operation in iter_operations(doc):
            required = set(_PATH_TEMPLATE.findall(path))
            if not required:
                continue

            declared: set[str] = set()
            for owner in (item, operation):
                parameters = owner.get("parameters")
                if not isinstance(parameters, list):
                    continue
                for parameter in parameters:
                    if isinstance(parameter, dict) and isinstance(parameter.get("$ref"), str):
                        ref = parameter["$ref"]
                        if not ref.startswith("#/"):
                            continue
                        try:
                            parameter = resolve(doc, [_unescape(t) for t in ref[2:].split("/")])
                        except LookupError:
                            continue
                    if isinstance(parameter, dict) and parameter.get("in") == "path":
                        declared.add(parameter.get("name"))

            for name in sorted(required - declared):
                yield ValidationError(
                    ErrorCode.MISSING_PATH_PARAMETER_DEFINITION.value,
                    f"API requires path parameter but it is not defined: {name}",
                    ["paths", path, method],
                )

    @staticmethod
    def _check_operation_ids(doc: dict[str, Any]) -> Iterator[ValidationError]:
        seen: set[str] = set()
        for path, method, _item, operation in iter_operations(doc):
            operation_id = operation.get("operationId")
            if not isinstance(operation_id, str):
                continue
            if operation_id in seen:
                yield ValidationError(
                    ErrorCode.DUPLICATE_OPERATIONID.value,
                    f"Cannot have multiple operations with the same operationId: {operation_id}",
                    ["paths", path, method, "operationId"],
                )
            seen.add(operation_id)

    @staticmethod
    def _check_references(doc: dict[str, Any]) -> Iterator[ValidationError]:
        for path, ref in _iter_refs(doc, []):
            if "://" in ref:
                continue
            if ref.startswith("#") and _resolve_local(doc, ref):
                continue
            yield ValidationError(
                ErrorCode.UNRESOLVABLE_REFERENCE.value,
                f"Reference could not be resolved: {ref}",
                path,
            )

    @staticmethod
    def _check_required_definitions(doc: dict[str, Any]) -> Iterator[ValidationError]:
        for path, schema in iter_schema_nodes(doc):
            required = schema.get("required")
            if not isinstance(required, list) or "$ref" in schema or "allOf" in schema:
                continue
            if schema.get("additionalProperties"):
                continue
            properties = schema.get("properties")
            if not isinstance(properties, dict):
                properties = {}
            for name in required:
                if name not in properties:
                    yield ValidationError(
                        ErrorCode.OBJECT_MISSING_REQUIRED_PROPERTY_DEFINITION.value,
                        f"Missing required property definition: {name}",
                        path,
                    )

    @staticmethod
    def _check_defaults(doc: dict[str, Any]) -> Iterator[ValidationError]:
        nodes = list(iter_schema_nodes(doc))
        nodes += [(p, n) for p, n in _iter_parameters(doc) if n.get("in") != "body"]

        for path, node in nodes:
            if "default" not in node or "$ref" in node:
                continue
            default = node["default"]
            declared = node.get("type")

            if isinstance(declared, str) and not _matches_type(default, declared):
                yield ValidationError(
                    ErrorCode.INVALID_TYPE.value,
                    f"Expected type {declared} but found type {json_type(default)}",
                    [*path, "default"],
                )
                continue

            enum = node.get("enum")
            if isinstance(enum, list) and default not in enum:
                yield ValidationError(
                    ErrorCode.ENUM_MISMATCH.value,
                    f"No enum match for: {default!r}",
                    [*path, "default"],
                )

    @staticmethod
    def _unused_definitions(doc: dict[str, Any]) -> Iterator[ValidationError]:
        definitions = doc.get("definitions")
        if not isinstance(definitions, dict):
            return

        used: set[str] = set()
        for _path, ref in _iter_refs(doc, []):
            if ref.startswith("#/definitions/"):
                used.add(_unescape(ref[len("#/definitions/"):].split("/", 1)[0]))

        for name in definitions:
            if name not in used:
                yield ValidationError(
                    ErrorCode.UNUSED_DEFINITION.value,
                    f"Definition is not used: {name}",
                    ["definitions", name],
                )
