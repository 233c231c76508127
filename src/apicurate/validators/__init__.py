"""Validators for canonical documents."""

from __future__ import annotations

from apicurate.validators.base import BaseValidator, ErrorCode, ValidationError, ValidationReport
from apicurate.validators.swagger_validator import SwaggerValidator

__all__ = [
    "BaseValidator",
    "ErrorCode",
    "SwaggerValidator",
    "ValidationError",
    "ValidationReport",
]
