"""Aggregate index artifacts built from the whole collection.

All generators take the mapping returned by ``SpecStore.discover`` (path to
document) and return the artifact content; writing it is up to the caller.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from apicurate.config import CurateConfig
from apicurate.errors import IndexInvariantError
from apicurate.git_helper import date_added, date_updated
from apicurate.origin import artifact_path, identity
from apicurate.pointer import get_dotted

Specs = Mapping[str, dict[str, Any]]
DateLookup = Callable[[str], "datetime | None"]

CSV_HEADER = [
    "id",
    "info_title",
    "info_description",
    "info_termsOfService",
    "info_contact_name",
    "info_contact_url",
    "info_contact_email",
    "info_license_name",
    "info_license_url",
    "info_x-website",
    "info_x-logo_url",
    "info_x-logo_background",
    "info_x-apiClientRegistration_url",
    "info_x-pricing_type",
    "info_x-pricing_url",
    "externalDocs_description",
    "externalDocs_url",
]

APIS_JSON_VERSION = "0.15"


@dataclass
class ApiVersions:
    """All versions of one ``provider[:service]`` and the preferred one.

    Attributes:
        versions: Version string to canonical document.
        filenames: Version string to collection-relative path.
        preferred: The preferred version.
    """

    versions: dict[str, dict[str, Any]] = field(default_factory=dict)
    filenames: dict[str, str] = field(default_factory=dict)
    preferred: str | None = None

    @property
    def preferred_spec(self) -> dict[str, Any]:
        if self.preferred is None:
            raise IndexInvariantError("No preferred version selected yet")
        return self.versions[self.preferred]


def _select_preferred(api_id: str, api: ApiVersions) -> str:
    if len(api.versions) == 1:
        return next(iter(api.versions))

    preferred: list[str] = []
    for version, doc in api.versions.items():
        flag = doc["info"].get("x-preferred", False)
        if not isinstance(flag, bool):
            raise IndexInvariantError(f"{api_id} {version}: x-preferred must be a boolean, got {flag!r}")
        if flag:
            preferred.append(version)

    if len(preferred) != 1:
        found = ", ".join(preferred) or "none"
        raise IndexInvariantError(
            f"{api_id} has {len(api.versions)} versions and needs exactly one "
            f"x-preferred version, found: {found}"
        )
    return preferred[0]


def generate_list(specs: Specs) -> dict[str, ApiVersions]:
    """Group documents by ``provider[:service]`` and select preferred versions.

    A lone version is preferred automatically. With several versions exactly
    one must carry ``info.x-preferred: true``.

    Raises:
        IndexInvariantError: On a duplicate id and version, or when the
            preferred version is ambiguous.
    """
    apis: dict[str, ApiVersions] = {}

    for filename, doc in specs.items():
        ident = identity(doc)
        api = apis.setdefault(ident.key, ApiVersions())
        if ident.version in api.versions:
            raise IndexInvariantError(
                f"{ident.key} version {ident.version} is stored twice: "
                f"{api.filenames[ident.version]} and {filename}"
            )
        api.versions[ident.version] = doc
        api.filenames[ident.version] = filename

    for api_id, api in apis.items():
        api.preferred = _select_preferred(api_id, api)

    return dict(sorted(apis.items()))


def to_iso(value: datetime | None) -> str | None:
    """Render a datetime as an ISO-8601 UTC timestamp."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def generate_api(
    specs: Specs,
    spec_root_url: str,
    root: Path | None = None,
    added: DateLookup | None = None,
    updated: DateLookup | None = None,
) -> dict[str, Any]:
    """Build the version-list index (``list.json``).

    Args:
        specs: Collection documents keyed by relative path.
        spec_root_url: Public URL prefix the collection is served under.
        root: Collection root, the working directory for git.
        added: Lookup of the date a file was added (defaults to git).
        updated: Lookup of the date a file was last changed (defaults to git).
    """
    added = added or (lambda filename: date_added(Path(filename), cwd=root))
    updated = updated or (lambda filename: date_updated(Path(filename), cwd=root))

    result: dict[str, Any] = {}
    for api_id, api in generate_list(specs).items():
        versions: dict[str, Any] = {}
        added_dates: list[datetime] = []

        for version, doc in api.versions.items():
            filename = api.filenames[version]
            version_added = added(filename)
            if version_added is not None:
                added_dates.append(version_added)

            entry: dict[str, Any] = {
                "swaggerUrl": spec_root_url + artifact_path(doc),
                "info": doc["info"],
                "added": to_iso(version_added),
                "updated": to_iso(updated(filename)),
            }
            if doc.get("externalDocs"):
                entry["externalDocs"] = doc["externalDocs"]
            versions[version] = entry

        # Deleted versions are not tracked
        result[api_id] = {
            "preferred": api.preferred,
            "added": to_iso(min(added_dates)) if added_dates else None,
            "versions": versions,
        }

    return result


def generate_csv(specs: Specs) -> str:
    """Build the tabular export, one row per preferred version."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for api_id, api in generate_list(specs).items():
        doc = api.preferred_spec
        row: list[Any] = [api_id]
        for column in CSV_HEADER[1:]:
            value = get_dotted(doc, column.replace("_", "."))
            row.append("" if value is None else value)
        writer.writerow(row)

    return output.getvalue()


def base_url(doc: dict[str, Any]) -> str:
    """``scheme://host/basePath`` of a document (first scheme wins)."""
    schemes = doc.get("schemes") or ["https"]
    return f"{schemes[0]}://{doc.get('host', '')}{doc.get('basePath', '')}"


def generate_apis_json(
    specs: Specs,
    spec_root_url: str,
    config: CurateConfig | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Build the APIs.json directory document."""
    config = config or CurateConfig()
    today = today or date.today()

    apis: list[dict[str, Any]] = []
    for doc in specs.values():
        info = doc["info"]
        logo = info.get("x-logo") or {}
        external_docs = doc.get("externalDocs") or {}
        apis.append(
            {
                "name": info.get("title"),
                "description": info.get("description"),
                "image": logo.get("url"),
                "humanUrl": external_docs.get("url"),
                "baseUrl": base_url(doc),
                "version": info.get("version"),
                "properties": [
                    {"type": "Swagger", "url": spec_root_url + artifact_path(doc)},
                ],
            }
        )

    maintainer = {"FN": config.collection_name}
    document: dict[str, Any] = {
        "name": config.collection_name,
        "description": config.collection_description,
        "modified": today.isoformat(),
        "url": spec_root_url + config.apis_json_path,
        "specificationVersion": APIS_JSON_VERSION,
        "apis": apis,
        "maintainers": [maintainer],
    }
    # An unset image is left out rather than published empty
    if config.collection_image:
        document["image"] = config.collection_image
        maintainer["photo"] = config.collection_image
    return document
