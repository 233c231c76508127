"""Tests for apicurate.indexes module."""

from __future__ import annotations

import copy
import csv
import io
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest

from apicurate.config import CurateConfig
from apicurate.errors import IndexInvariantError
from apicurate.indexes import (
    CSV_HEADER,
    ApiVersions,
    base_url,
    generate_api,
    generate_apis_json,
    generate_csv,
    generate_list,
    to_iso,
)

ROOT_URL = "https://api.example.org/v2/specs/"

ADDED = datetime(2016, 3, 1, 12, 0, tzinfo=timezone.utc)
UPDATED = datetime(2017, 5, 2, 8, 30, tzinfo=timezone.utc)


def _version(canonical: dict[str, Any], version: str, **info: Any) -> dict[str, Any]:
    doc = copy.deepcopy(canonical)
    doc["info"]["version"] = version
    doc["info"].update(info)
    return doc


@pytest.fixture
def two_versions(canonical: dict[str, Any]) -> dict[str, dict[str, Any]]:
    return {
        "example.com/1.0/swagger.json": _version(canonical, "1.0"),
        "example.com/2.0/swagger.json": _version(canonical, "2.0", **{"x-preferred": True}),
    }


# -----------------------------------------------------------------------------
# Grouping
# -----------------------------------------------------------------------------


class TestGenerateList:
    """Tests for grouping and preferred-version selection."""

    def test_single_version_preferred(self, canonical: dict[str, Any]) -> None:
        """Test that a lone version is preferred without a flag."""
        apis = generate_list({"example.com/1.0/swagger.json": canonical})
        assert apis["example.com"].preferred == "1.0"

    def test_flagged_version_preferred(self, two_versions: dict[str, dict[str, Any]]) -> None:
        """Test that the flagged version wins."""
        api = generate_list(two_versions)["example.com"]
        assert api.preferred == "2.0"
        assert api.filenames["1.0"] == "example.com/1.0/swagger.json"
        assert api.preferred_spec["info"]["version"] == "2.0"

    def test_preferred_spec_before_selection(self, canonical: dict[str, Any]) -> None:
        """Test that asking for the preferred document before selection is an invariant error."""
        api = ApiVersions(versions={"1.0": canonical})
        with pytest.raises(IndexInvariantError, match="No preferred version"):
            api.preferred_spec

    def test_no_preferred_flag(self, canonical: dict[str, Any]) -> None:
        """Test that several unflagged versions are ambiguous."""
        specs = {
            "example.com/1.0/swagger.json": _version(canonical, "1.0"),
            "example.com/2.0/swagger.json": _version(canonical, "2.0"),
        }
        with pytest.raises(IndexInvariantError, match="found: none"):
            generate_list(specs)

    def test_two_preferred_flags(self, canonical: dict[str, Any]) -> None:
        """Test that two flagged versions are ambiguous."""
        specs = {
            "example.com/1.0/swagger.json": _version(canonical, "1.0", **{"x-preferred": True}),
            "example.com/2.0/swagger.json": _version(canonical, "2.0", **{"x-preferred": True}),
        }
        with pytest.raises(IndexInvariantError, match="1.0, 2.0"):
            generate_list(specs)

    def test_non_boolean_flag(self, canonical: dict[str, Any]) -> None:
        """Test that the flag must be a boolean."""
        specs = {
            "example.com/1.0/swagger.json": _version(canonical, "1.0", **{"x-preferred": "yes"}),
            "example.com/2.0/swagger.json": _version(canonical, "2.0"),
        }
        with pytest.raises(IndexInvariantError, match="must be a boolean"):
            generate_list(specs)

    def test_duplicate_version(self, canonical: dict[str, Any]) -> None:
        """Test that one id and version stored twice is rejected."""
        specs = {
            "a/swagger.json": _version(canonical, "1.0"),
            "b/swagger.json": _version(canonical, "1.0"),
        }
        with pytest.raises(IndexInvariantError, match="stored twice"):
            generate_list(specs)

    def test_services_are_separate_apis(self, canonical: dict[str, Any]) -> None:
        """Test that each service is its own id, sorted."""
        specs = {
            "example.com/b/1.0/swagger.json": _version(canonical, "1.0", **{"x-serviceName": "b"}),
            "example.com/a/1.0/swagger.json": _version(canonical, "1.0", **{"x-serviceName": "a"}),
        }
        assert list(generate_list(specs)) == ["example.com:a", "example.com:b"]


# -----------------------------------------------------------------------------
# list.json
# -----------------------------------------------------------------------------


class TestGenerateApi:
    """Tests for the version-list index."""

    def test_entries(self, two_versions: dict[str, dict[str, Any]]) -> None:
        """Test the shape of the index with injected dates."""
        index = generate_api(
            two_versions,
            ROOT_URL,
            added=lambda filename: ADDED,
            updated=lambda filename: UPDATED,
        )

        api = index["example.com"]
        assert api["preferred"] == "2.0"
        assert api["added"] == "2016-03-01T12:00:00Z"
        assert set(api["versions"]) == {"1.0", "2.0"}

        entry = api["versions"]["1.0"]
        assert entry["swaggerUrl"] == ROOT_URL + "example.com/1.0/swagger.json"
        assert entry["info"]["version"] == "1.0"
        assert entry["updated"] == "2017-05-02T08:30:00Z"
        assert "externalDocs" not in entry

    def test_earliest_added(self, two_versions: dict[str, dict[str, Any]]) -> None:
        """Test that the id was added when its first version was."""
        dates = {
            "example.com/1.0/swagger.json": ADDED + timedelta(days=10),
            "example.com/2.0/swagger.json": ADDED,
        }
        index = generate_api(two_versions, ROOT_URL, added=dates.get, updated=lambda f: None)
        assert index["example.com"]["added"] == to_iso(ADDED)

    def test_untracked_files(self, canonical: dict[str, Any]) -> None:
        """Test that files unknown to version control have no dates."""
        index = generate_api(
            {"example.com/1.0/swagger.json": canonical},
            ROOT_URL,
            added=lambda f: None,
            updated=lambda f: None,
        )
        api = index["example.com"]
        assert api["added"] is None
        assert api["versions"]["1.0"]["added"] is None

    def test_external_docs_copied(self, canonical: dict[str, Any]) -> None:
        """Test that external docs are carried into the entry."""
        canonical["externalDocs"] = {"url": "https://docs.example.com"}
        index = generate_api(
            {"example.com/1.0/swagger.json": canonical},
            ROOT_URL,
            added=lambda f: None,
            updated=lambda f: None,
        )
        assert index["example.com"]["versions"]["1.0"]["externalDocs"] == {"url": "https://docs.example.com"}


class TestToIso:
    """Tests for to_iso."""

    def test_converts_to_utc(self) -> None:
        """Test that offsets are normalized to Z."""
        value = datetime(2020, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso(value) == "2020-01-01T08:00:00Z"

    def test_none(self) -> None:
        """Test that a missing date stays missing."""
        assert to_iso(None) is None


# -----------------------------------------------------------------------------
# CSV
# -----------------------------------------------------------------------------


class TestGenerateCsv:
    """Tests for the tabular export."""

    def test_one_row_per_preferred_version(self, two_versions: dict[str, dict[str, Any]]) -> None:
        """Test the header and that only preferred versions are listed."""
        two_versions["example.com/2.0/swagger.json"]["info"]["x-logo"] = {"url": "https://x/logo.png"}

        rows = list(csv.reader(io.StringIO(generate_csv(two_versions))))

        assert rows[0] == CSV_HEADER
        assert len(rows) == 2
        row = dict(zip(CSV_HEADER, rows[1]))
        assert row["id"] == "example.com"
        assert row["info_title"] == "Pet Store"
        assert row["info_x-logo_url"] == "https://x/logo.png"
        assert row["info_description"] == ""

    def test_quotes_values(self, canonical: dict[str, Any]) -> None:
        """Test that commas and newlines survive."""
        canonical["info"]["description"] = "Pets, cats\nand dogs"
        text = generate_csv({"example.com/1.0/swagger.json": canonical})
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[1][2] == "Pets, cats\nand dogs"


# -----------------------------------------------------------------------------
# apis.json
# -----------------------------------------------------------------------------


class TestGenerateApisJson:
    """Tests for the APIs.json directory document."""

    def test_document(self, canonical: dict[str, Any]) -> None:
        """Test top-level fields and one API entry."""
        config = CurateConfig(collection_name="Pets", collection_image="https://x/i.png")
        doc = generate_apis_json(
            {"example.com/1.0/swagger.json": canonical},
            ROOT_URL,
            config=config,
            today=date(2020, 2, 3),
        )

        assert doc["name"] == "Pets"
        assert doc["modified"] == "2020-02-03"
        assert doc["url"] == ROOT_URL + "apis.json"
        assert doc["specificationVersion"] == "0.15"
        assert doc["maintainers"] == [{"FN": "Pets", "photo": "https://x/i.png"}]

        (api,) = doc["apis"]
        assert api["name"] == "Pet Store"
        assert api["baseUrl"] == "https://api.example.com/v1"
        assert api["properties"] == [
            {"type": "Swagger", "url": ROOT_URL + "example.com/1.0/swagger.json"}
        ]

    def test_unset_image_left_out(self, canonical: dict[str, Any]) -> None:
        """Test that no empty image or photo is published."""
        doc = generate_apis_json({"example.com/1.0/swagger.json": canonical}, ROOT_URL)

        assert "image" not in doc
        assert doc["maintainers"] == [{"FN": CurateConfig().collection_name}]


class TestBaseUrl:
    """Tests for base_url."""

    def test_first_scheme(self) -> None:
        """Test that the first listed scheme is used."""
        doc = {"schemes": ["http", "https"], "host": "h.com", "basePath": "/api"}
        assert base_url(doc) == "http://h.com/api"

    def test_defaults(self) -> None:
        """Test https and an empty base path by default."""
        assert base_url({"host": "h.com"}) == "https://h.com"
