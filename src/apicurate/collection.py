"""Batch operations over the whole collection.

Documents are processed one at a time. A document that fails to build is
reported on the error console and recorded in the ``BatchReport``; the
batch goes on. Patch conflicts, metadata violations and moved documents
raise and end the batch.
"""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from rich.console import Console

from apicurate.config import CurateConfig
from apicurate.convergence import REASON_FIXUP, SpecWriter, WriteResult
from apicurate.errors import (
    ConversionError,
    EditorAbortedError,
    FetchError,
    InvalidMetadataError,
    SpecMovedError,
)
from apicurate.fetch import get_resource
from apicurate.fixup import edit_text, extract_edited_swagger, record_fixup
from apicurate.indexes import generate_api, generate_apis_json, generate_csv
from apicurate.origin import artifact_path, origin_type, origin_url, service_name
from apicurate.patching import update_patch_file
from apicurate.reporting import error_to_string, file_banner, records_to_string
from apicurate.store import SpecStore
from apicurate.validators import BaseValidator, SwaggerValidator

logger = logging.getLogger(__name__)

GOOGLE_DISCOVERY_URL = "https://www.googleapis.com/discovery/v1/apis"

# Google APIs that can not be converted
GOOGLE_BLACKLIST = frozenset(
    {
        # missing API description
        "cloudlatencytest:v2",
        # asterisk in path
        "admin:directory_v1",
        # plus in path
        "pubsub:v1",
        "pubsub:v1beta1",
        "pubsub:v1beta1a",
        "pubsub:v1beta2",
        "genomics:v1",
        "appengine:v1beta4",
        "storagetransfer:v1",
        "cloudbilling:v1",
        "proximitybeacon:v1beta1",
        "youtubereporting:v1",
        # circular reference in MapFolder/MapItem
        "mapsengine:exp2",
        "mapsengine:v1",
    }
)


@dataclass
class BatchReport:
    """Accumulated outcome of a batch operation.

    Attributes:
        processed: Number of documents handled.
        failures: Sources (or files) that failed.
    """

    processed: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.failures)

    def exit_code(self, error_exit_code: int) -> int:
        """Process exit status for this batch."""
        return error_exit_code if self.has_errors else 0


class Collection:
    """A collection of canonical documents on disk.

    Attributes:
        store: File store for the collection tree.
        config: Active configuration.
        writer: Builds documents from their sources.
        validator: Validator used by ``validate``.
        err_console: Console diagnostics are written to.
        editor: Opens text for manual editing and returns the result.
    """

    def __init__(
        self,
        root: Path,
        config: CurateConfig | None = None,
        writer: SpecWriter | None = None,
        validator: BaseValidator | None = None,
        err_console: Console | None = None,
        editor: Callable[[str], str] = edit_text,
    ) -> None:
        self.config = config or CurateConfig()
        self.store = SpecStore(root, self.config)
        self.validator = validator or SwaggerValidator()
        self.writer = writer or SpecWriter(self.store, validator=self.validator, config=self.config)
        self.err_console = err_console or Console(stderr=True)
        self.editor = editor

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def _emit(self, text: str) -> None:
        self.err_console.print(text, end="", markup=False, highlight=False, emoji=False, soft_wrap=True)

    def _report_failure(self, result: WriteResult, report: BatchReport) -> None:
        self._emit(error_to_string(result))
        report.failures.append(result.source)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def urls(self) -> list[str]:
        """Origin URL of every document, in path order."""
        return [origin_url(doc) for doc in self.store.discover().values()]

    def update(self, directory: str | None = None) -> BatchReport:
        """Rebuild every document (below ``directory``) from its origin.

        Raises:
            SpecMovedError: If a rebuilt document lands at another path.
        """
        report = BatchReport()

        for filename, doc in self.store.discover(directory).items():
            type_name = origin_type(doc)
            extra_patch: dict[str, Any] = {"info": {}}
            service = service_name(doc)
            # Google services derive their name from the discovery document
            if type_name != "google" and service:
                extra_patch["info"]["x-serviceName"] = service

            result = self.writer.write_spec(origin_url(doc), type_name, extra_patch)
            report.processed += 1

            if not result.ok:
                self._report_failure(result, report)
                continue

            if result.path != filename:
                raise SpecMovedError(filename, str(result.path))

        return report

    def validate(self) -> BatchReport:
        """Validate every persisted document without changing it."""
        report = BatchReport()

        for filename, doc in self.store.discover().items():
            self._emit(file_banner(filename))
            result = self.validator.validate(doc)
            report.processed += 1

            if result.errors:
                self._emit(records_to_string(result.errors))
                report.failures.append(filename)
            if result.warnings:
                self._emit(records_to_string(result.warnings))

        return report

    def add(
        self,
        type_name: str,
        url: str,
        service: str | None = None,
        fixup: bool = False,
    ) -> BatchReport:
        """Add one new document to the collection.

        With ``fixup`` the diagnostic dump is opened in the editor and the
        edited document is recorded as the document's fixup.
        """
        report = BatchReport(processed=1)
        extra_patch: dict[str, Any] = {"info": {}}
        if service:
            extra_patch["info"]["x-serviceName"] = service

        result = self.writer.write_spec(url, type_name, extra_patch)
        if result.ok and not fixup:
            return report

        if not fixup or result.swagger is None:
            self._report_failure(result, report)
            return report

        try:
            edited = extract_edited_swagger(self.editor(error_to_string(result)))
        except EditorAbortedError as e:
            self._emit(f"{e}\n")
            report.failures.append(result.source)
            return report

        record_fixup(self.store, result.swagger, edited, replace=result.reason == REASON_FIXUP)
        return report

    def update_google(self) -> BatchReport:
        """Add new Google APIs and refresh the preferred flags of known ones.

        Raises:
            FetchError: If the discovery directory can not be fetched.
            ConversionError: If the directory is not in the expected format.
        """
        report = BatchReport()
        known = {origin_url(doc): doc for doc in self.store.discover().values()}

        directory = get_resource(GOOGLE_DISCOVERY_URL, timeout=self.config.request_timeout).json()
        if directory.get("kind") != "discovery#directoryList" or directory.get("discoveryVersion") != "v1":
            raise ConversionError(f"Unexpected discovery directory at {GOOGLE_DISCOVERY_URL}")

        for api in directory.get("items", []):
            if api.get("id") in GOOGLE_BLACKLIST:
                continue

            preferred = api.get("preferred")
            if not isinstance(preferred, bool):
                raise InvalidMetadataError(f"{api.get('id')}: preferred must be a boolean")
            add_patch = {"info": {"x-preferred": preferred}}

            url = api["discoveryRestUrl"]
            doc = known.get(url)
            if doc is None:
                result = self.writer.write_spec(url, "google")
                report.processed += 1
                if not result.ok:
                    self._report_failure(result, report)
                    continue
                doc = result.swagger

            update_patch_file(self.store, artifact_path(doc, self.config.patch_filename), add_patch)

        return report

    def cache_resources(self, spec_root_url: str) -> BatchReport:
        """Download logos into the cache and point documents at the copies."""
        report = BatchReport()

        for filename, doc in self.store.discover().items():
            logo = doc["info"].get("x-logo")
            if not isinstance(logo, dict) or not logo.get("url"):
                continue

            report.processed += 1
            url = logo["url"]
            try:
                logo_file = self._cache_logo(filename, url)
            except (FetchError, ConversionError) as e:
                self._emit(f"{e}\n")
                report.failures.append(filename)
                continue

            fragment = urlsplit(url).fragment
            logo["url"] = spec_root_url + logo_file + (f"#{fragment}" if fragment else "")
            self.store.write_json(filename, doc)

        return report

    def _cache_logo(self, filename: str, url: str) -> str:
        response = get_resource(url, timeout=self.config.request_timeout)

        mime = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
        if not mime.startswith("image/"):
            raise ConversionError(f"Logo is not an image ({mime or 'no content type'}): {url}")

        extension = mimetypes.guess_extension(mime)
        if not extension:
            raise ConversionError(f"Unknown image type {mime}: {url}")

        directory = filename[: -len(self.config.spec_filename)]
        logo_file = f"{self.config.cache_dir}/{directory}logo{extension}"
        self.store.save_file(logo_file, response.content)
        return logo_file

    # -------------------------------------------------------------------------
    # Index artifacts
    # -------------------------------------------------------------------------

    def write_list(self, spec_root_url: str) -> int:
        """Write the version-list index; returns the number of APIs listed."""
        index = generate_api(self.store.discover(), spec_root_url, root=self.store.root)
        self.store.write_json(self.config.list_path, index)
        logger.info("Generated list for %d API specs", len(index))
        return len(index)

    def write_csv(self) -> None:
        self.store.save_file(self.config.csv_path, generate_csv(self.store.discover()))

    def write_apis_json(self, spec_root_url: str) -> None:
        document = generate_apis_json(self.store.discover(), spec_root_url, self.config)
        self.store.write_json(self.config.apis_json_path, document)
