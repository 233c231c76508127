"""Base classes for autofix remediations.

A fixer handles one or more validator error codes. The autofixer resolves
the node an error points at, hands it to the fixer together with its
parent, and installs whatever replacement value the fixer returns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from apicurate.pointer import Segment
from apicurate.validators.base import ValidationError


class _Unset:
    """Marker for "no replacement value"; ``None`` is a valid JSON value."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass
class FixContext:
    """Everything a fixer may look at or modify for one error.

    Attributes:
        doc: The whole canonical document.
        error: The error being remediated.
        parent: Node containing ``value`` (None for the document root).
        value: Node at the error's path.
    """

    doc: dict[str, Any]
    error: ValidationError
    parent: Any
    value: Any

    @property
    def path(self) -> list[Segment]:
        return self.error.path

    @property
    def key(self) -> Segment | None:
        """Last segment of the error path, if any."""
        return self.error.path[-1] if self.error.path else None


@dataclass
class FixResult:
    """Result of a fixer execution.

    Attributes:
        applied: Whether the document was changed.
        message: Human-readable description of what happened.
        new_value: Replacement for the node at the error's path. ``UNSET``
            when the fixer changed the document itself (or nothing).
    """

    applied: bool
    message: str
    new_value: Any = UNSET

    @classmethod
    def skipped(cls, message: str) -> FixResult:
        return cls(applied=False, message=message)

    @classmethod
    def replace(cls, new_value: Any, message: str) -> FixResult:
        return cls(applied=True, message=message, new_value=new_value)


class BaseFixer(ABC):
    """Abstract base class for all fixers.

    Fixers should be idempotent: once the condition they remediate is gone
    they report no change.
    """

    # Error codes this fixer handles (must be set by subclasses)
    codes: tuple[str, ...] = ()

    @abstractmethod
    def fix(self, context: FixContext) -> FixResult:
        """Remediate the error described by ``context``.

        Args:
            context: The error and the nodes it points at.

        Returns:
            FixResult describing the change, if any.
        """

    def can_fix(self, error: ValidationError) -> bool:
        """Check if this fixer handles the error's code."""
        return error.code in self.codes
