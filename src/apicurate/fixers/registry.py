"""Fixer registry for mapping error codes to fixers.

The registry is the dispatch table of the autofixer. Codes with no
registered fixer resolve to ``None``, which the autofixer treats as a
no-op.
"""

from __future__ import annotations

from apicurate.fixers.base import BaseFixer


class FixerRegistry:
    """Registry that maps error codes to fixer instances.

    Example:
        >>> registry = FixerRegistry()
        >>> registry.register(ReferenceFixer())
        >>> registry.get_fixer("UNRESOLVABLE_REFERENCE")
        <...ReferenceFixer object at ...>
    """

    def __init__(self) -> None:
        self._fixers: dict[str, BaseFixer] = {}

    def register(self, fixer: BaseFixer) -> None:
        """Register a fixer for each of its codes.

        Raises:
            ValueError: If the fixer has no codes or a code is already taken.
        """
        if not fixer.codes:
            raise ValueError(f"Fixer class {type(fixer).__name__} has no codes defined")
        for code in fixer.codes:
            if code in self._fixers:
                raise ValueError(
                    f"Fixer for code '{code}' already registered: "
                    f"{type(self._fixers[code]).__name__}"
                )
        for code in fixer.codes:
            self._fixers[code] = fixer

    def get_fixer(self, code: str) -> BaseFixer | None:
        return self._fixers.get(code)

    def has_fixer(self, code: str) -> bool:
        return code in self._fixers

    def list_codes(self) -> list[str]:
        """List all registered codes, sorted."""
        return sorted(self._fixers)


# Global registry instance, built on first use
_global_registry: FixerRegistry | None = None


def get_global_registry() -> FixerRegistry:
    """Get the registry populated with all built-in fixers."""
    global _global_registry
    if _global_registry is None:
        _global_registry = _create_default_registry()
    return _global_registry


def _create_default_registry() -> FixerRegistry:
    from apicurate.fixers.parameter_fixer import (
        MissingPathParameterFixer,
        PathParameterRequiredFixer,
    )
    from apicurate.fixers.reference_fixer import OperationIdFixer, ReferenceFixer
    from apicurate.fixers.schema_fixer import (
        DefaultValueFixer,
        MissingRequiredPropertyFixer,
        RequiredDefinitionFixer,
    )

    registry = FixerRegistry()
    registry.register(MissingPathParameterFixer())
    registry.register(RequiredDefinitionFixer())
    registry.register(PathParameterRequiredFixer())
    registry.register(ReferenceFixer())
    registry.register(OperationIdFixer())
    registry.register(MissingRequiredPropertyFixer())
    registry.register(DefaultValueFixer())
    return registry
