"""Base validator classes and models.

Provides the records validators report and the interface every validator
implementation offers to the convergence loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from apicurate.pointer import Segment, to_pointer


class ErrorCode(str, Enum):
    """Error codes reported by validators.

    The first group are the codes the autofixer knows remediations for.
    """

    MISSING_PATH_PARAMETER_DEFINITION = "MISSING_PATH_PARAMETER_DEFINITION"
    OBJECT_MISSING_REQUIRED_PROPERTY_DEFINITION = "OBJECT_MISSING_REQUIRED_PROPERTY_DEFINITION"
    ONE_OF_MISSING = "ONE_OF_MISSING"
    UNRESOLVABLE_REFERENCE = "UNRESOLVABLE_REFERENCE"
    DUPLICATE_OPERATIONID = "DUPLICATE_OPERATIONID"
    OBJECT_MISSING_REQUIRED_PROPERTY = "OBJECT_MISSING_REQUIRED_PROPERTY"
    ENUM_MISMATCH = "ENUM_MISMATCH"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_TYPE = "INVALID_TYPE"

    ANY_OF_MISSING = "ANY_OF_MISSING"
    OBJECT_ADDITIONAL_PROPERTIES = "OBJECT_ADDITIONAL_PROPERTIES"
    PATTERN = "PATTERN"
    SCHEMA_VALIDATION_FAILED = "SCHEMA_VALIDATION_FAILED"
    UNUSED_DEFINITION = "UNUSED_DEFINITION"


@dataclass
class ValidationError:
    """A single schema non-conformance found in a document.

    Not an exception: validators return these, the autofixer consumes them.

    Attributes:
        code: Error code (usually an ``ErrorCode`` value).
        message: Human-readable description of the problem.
        path: Location of the offending node as a list of segments.
    """

    code: str
    message: str
    path: list[Segment] = field(default_factory=list)

    @property
    def pointer(self) -> str:
        """The error location as a JSON pointer."""
        return to_pointer(self.path)

    def to_dict(self) -> dict[str, Any]:
        code = self.code.value if isinstance(self.code, Enum) else self.code
        return {"code": code, "message": self.message, "path": list(self.path)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidationError:
        return cls(
            code=data["code"],
            message=data.get("message", ""),
            path=list(data.get("path", [])),
        )


@dataclass
class ValidationReport:
    """Outcome of validating one document.

    ``None`` means "nothing reported", never an empty list.

    Attributes:
        errors: Errors found, or None.
        warnings: Warnings found, or None.
    """

    errors: list[ValidationError] | None = None
    warnings: list[ValidationError] | None = None

    def __post_init__(self) -> None:
        self.errors = self.errors or None
        self.warnings = self.warnings or None

    @property
    def valid(self) -> bool:
        return not self.errors


class BaseValidator(ABC):
    """Abstract base class for canonical document validators."""

    @abstractmethod
    def validate(self, doc: dict[str, Any]) -> ValidationReport:
        """Validate ``doc`` without modifying it.

        Returns:
            ValidationReport with the errors and warnings found.
        """
