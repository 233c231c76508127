"""Pytest configuration and fixtures for apicurate tests."""

from __future__ import annotations

import copy
import os
from typing import Any

import pytest

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")

MINIMAL_SWAGGER: dict[str, Any] = {
    "swagger": "2.0",
    "info": {"title": "Pet Store", "version": "1.0"},
    "host": "api.example.com",
    "basePath": "/v1",
    "schemes": ["https"],
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "responses": {"200": {"description": "OK"}},
            }
        }
    },
}


@pytest.fixture
def swagger() -> dict[str, Any]:
    """A small valid Swagger 2.0 source document."""
    return copy.deepcopy(MINIMAL_SWAGGER)


@pytest.fixture
def canonical(swagger: dict[str, Any]) -> dict[str, Any]:
    """A canonical document as conversion leaves it (provenance stamped)."""
    swagger["info"]["x-providerName"] = "example.com"
    swagger["info"]["x-origin"] = {
        "format": "swagger",
        "version": "2.0",
        "url": "https://api.example.com/swagger.json",
    }
    return swagger

