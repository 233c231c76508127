"""Autofix remediations for validator errors."""

from __future__ import annotations

from apicurate.fixers.autofixer import AutoFixer
from apicurate.fixers.base import UNSET, BaseFixer, FixContext, FixResult
from apicurate.fixers.registry import FixerRegistry, get_global_registry

__all__ = [
    "UNSET",
    "AutoFixer",
    "BaseFixer",
    "FixContext",
    "FixResult",
    "FixerRegistry",
    "get_global_registry",
]
