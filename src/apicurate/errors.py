"""Exception taxonomy for apicurate.

Per-document failures (``ConversionError`` and its subclasses, and
``FixupConflictError``) are caught by the convergence loop and reported.
Patch and metadata errors signal corrupted durable state and abort the
whole batch.
"""

from __future__ import annotations


class CurateError(Exception):
    """Base class for all apicurate errors."""


class ConversionError(CurateError):
    """Raised when a source cannot be fetched, parsed or converted."""


class FetchError(ConversionError):
    """Raised when a remote resource cannot be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f'Can not GET "{url}": {reason}')


class PatchError(CurateError):
    """Base class for strict merge-patch violations."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(message)


class TypeKindError(PatchError):
    """Raised when a patch is merged into something that is not a mapping."""

    def __init__(self, key: str, kind: str) -> None:
        self.kind = kind
        super().__init__(key, f"Patch target must be a mapping, got {kind} at: {key or '<root>'}")


class ProtectedFieldError(PatchError):
    """Raised when a patch tries to delete a property."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Patch tried to delete property: {key}")


class OverwriteError(PatchError):
    """Raised when a patch tries to override an existing property."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Patch tried to override property: {key}")


class MetadataError(CurateError):
    """Base class for canonical metadata invariant violations."""


class MissingMetadataError(MetadataError):
    """Raised when a required metadata field is absent."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing required metadata: {field}")


class InvalidMetadataError(MetadataError):
    """Raised when a metadata field holds a value that breaks path layout."""


class IndexInvariantError(CurateError):
    """Raised when index generation finds an ambiguous collection state."""


class SpecMovedError(CurateError):
    """Raised when a refreshed document resolves to a different location."""

    def __init__(self, old_path: str, new_path: str) -> None:
        self.old_path = old_path
        self.new_path = new_path
        super().__init__(f"Spec was moved to new location: {old_path} -> {new_path}")


class EditorAbortedError(CurateError):
    """Raised when a manual fixup editing session produced nothing usable."""


class FixupConflictError(CurateError):
    """Raised when a recorded fixup no longer applies to the rebuilt document."""
