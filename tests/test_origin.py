"""Tests for apicurate.origin module."""

from __future__ import annotations

from typing import Any

import pytest

from apicurate.errors import ConversionError, InvalidMetadataError, MissingMetadataError
from apicurate.origin import (
    Identity,
    artifact_path,
    identity,
    origin_format,
    origin_type,
    origin_url,
    path_components,
    provider_name,
)


class TestIdentity:
    """Tests for identity derivation."""

    def test_provider_and_version(self, canonical: dict[str, Any]) -> None:
        """Test identity of a document without service."""
        assert identity(canonical) == Identity("example.com", None, "1.0")

    def test_with_service(self, canonical: dict[str, Any]) -> None:
        """Test that the service name becomes part of the identity."""
        canonical["info"]["x-serviceName"] = "storage"
        ident = identity(canonical)
        assert ident.key == "example.com:storage"
        assert ident.components() == ["example.com", "storage", "1.0"]

    def test_missing_provider(self, swagger: dict[str, Any]) -> None:
        """Test that an unstamped document fails."""
        with pytest.raises(MissingMetadataError, match="x-providerName"):
            identity(swagger)

    def test_missing_version(self, canonical: dict[str, Any]) -> None:
        """Test that a document without version fails."""
        del canonical["info"]["version"]
        with pytest.raises(MissingMetadataError, match="info.version"):
            identity(canonical)

    def test_missing_info(self) -> None:
        """Test that a document without info fails."""
        with pytest.raises(MissingMetadataError):
            identity({"swagger": "2.0"})

    @pytest.mark.parametrize("name", ["a:b", "a/b"])
    def test_delimiters_rejected(self, canonical: dict[str, Any], name: str) -> None:
        """Test that provider and service names can not hold delimiters."""
        canonical["info"]["x-serviceName"] = name
        with pytest.raises(InvalidMetadataError):
            identity(canonical)

    def test_numeric_version_rendered(self, canonical: dict[str, Any]) -> None:
        """Test that a non-string version is rendered as text."""
        canonical["info"]["version"] = 2
        assert identity(canonical).version == "2"


class TestPaths:
    """Tests for path derivation."""

    def test_path_components(self, canonical: dict[str, Any]) -> None:
        """Test components without service."""
        assert path_components(canonical) == ["example.com", "1.0"]

    def test_artifact_path_default(self, canonical: dict[str, Any]) -> None:
        """Test the canonical artifact path."""
        assert artifact_path(canonical) == "example.com/1.0/swagger.json"

    def test_artifact_path_with_service(self, canonical: dict[str, Any]) -> None:
        """Test the artifact path of a service document."""
        canonical["info"]["x-serviceName"] = "storage"
        assert artifact_path(canonical, "patch.json") == "example.com/storage/1.0/patch.json"


class TestOrigin:
    """Tests for provenance accessors."""

    def test_accessors(self, canonical: dict[str, Any]) -> None:
        """Test the read-through accessors."""
        assert origin_url(canonical) == "https://api.example.com/swagger.json"
        assert origin_format(canonical) == "swagger"
        assert origin_type(canonical) == "swagger_2"

    def test_swagger_1_type(self, canonical: dict[str, Any]) -> None:
        """Test that any swagger 1.x maps to swagger_1."""
        canonical["info"]["x-origin"]["version"] = "1.1"
        assert origin_type(canonical) == "swagger_1"

    def test_missing_origin(self, swagger: dict[str, Any]) -> None:
        """Test that a missing provenance record is an invariant violation."""
        with pytest.raises(MissingMetadataError, match="x-origin"):
            origin_url(swagger)


class TestProviderName:
    """Tests for provider name derivation from hosts."""

    @pytest.mark.parametrize(
        ("host", "expected"),
        [
            ("api.example.com", "example.com"),
            ("www.example.com", "example.com"),
            ("example.com:8443", "example.com"),
            ("API.Example.COM", "example.com"),
            ("api.example.co.uk", "example.co.uk"),
            ("www.googleapis.com", "googleapis.com"),
            ("storage.googleapis.com", "googleapis.com"),
            ("localhost", "localhost"),
        ],
    )
    def test_hosts(self, host: str, expected: str) -> None:
        """Test registrable domain extraction."""
        assert provider_name(host) == expected

    @pytest.mark.parametrize("host", [None, ""])
    def test_missing_host(self, host: str | None) -> None:
        """Test that a missing host is a conversion failure."""
        with pytest.raises(ConversionError):
            provider_name(host)
