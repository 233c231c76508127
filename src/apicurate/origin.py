"""Identity and provenance of canonical documents.

Everything here is a pure read of the ``info`` subtree of a canonical
document. The identity decides where a document and its curated
companions (patch, fixup) live: ``provider[/service]/version/<file>``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import tldextract

from apicurate.converters.base import get_type_name
from apicurate.errors import ConversionError, InvalidMetadataError, MissingMetadataError

SPEC_FILENAME = "swagger.json"

# Characters that would break the on-disk layout or the "provider:service" id
_FORBIDDEN_NAME_CHARS = (":", "/")

# Hosts under this suffix all belong to one provider
_GOOGLE_APIS = "googleapis.com"


@dataclass(frozen=True)
class Identity:
    """Where a canonical document belongs in the collection.

    Attributes:
        provider_name: Registrable domain of the API host (e.g., "example.com").
        service_name: Optional service inside the provider (e.g., "storage").
        version: API version from ``info.version``.
    """

    provider_name: str
    service_name: str | None
    version: str

    @property
    def key(self) -> str:
        """Index key, ``provider`` or ``provider:service``."""
        if self.service_name:
            return f"{self.provider_name}:{self.service_name}"
        return self.provider_name

    def components(self) -> list[str]:
        """Directory components, ``[provider, service?, version]``."""
        parts = [self.provider_name]
        if self.service_name:
            parts.append(self.service_name)
        parts.append(self.version)
        return parts


def _info(doc: dict[str, Any]) -> dict[str, Any]:
    info = doc.get("info") if isinstance(doc, dict) else None
    if not isinstance(info, dict):
        raise MissingMetadataError("info")
    return info


def _check_name(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidMetadataError(f"{field} must be a non-empty string, got {value!r}")
    for char in _FORBIDDEN_NAME_CHARS:
        if char in value:
            raise InvalidMetadataError(f"{field} must not contain {char!r}: {value}")
    return value


def identity(doc: dict[str, Any]) -> Identity:
    """Derive the identity of a canonical document.

    Raises:
        MissingMetadataError: If provider name or version is absent.
        InvalidMetadataError: If provider or service name contains a path
            delimiter.
    """
    info = _info(doc)

    provider = info.get("x-providerName")
    if provider is None:
        raise MissingMetadataError("info.x-providerName")
    version = info.get("version")
    if version is None or version == "":
        raise MissingMetadataError("info.version")

    service = info.get("x-serviceName")
    return Identity(
        provider_name=_check_name("info.x-providerName", provider),
        service_name=_check_name("info.x-serviceName", service) if service else None,
        version=str(version),
    )


def path_components(doc: dict[str, Any]) -> list[str]:
    """Return ``[provider, service?, version]`` for ``doc``."""
    return identity(doc).components()


def artifact_path(doc: dict[str, Any], filename: str = SPEC_FILENAME) -> str:
    """Return the collection-relative path of one of ``doc``'s artifacts."""
    return "/".join([*path_components(doc), filename])


def origin(doc: dict[str, Any]) -> dict[str, Any]:
    """Return the provenance record ``{format, version, url}``.

    Raises:
        MissingMetadataError: If the document was never stamped by conversion.
    """
    record = _info(doc).get("x-origin")
    if not isinstance(record, dict):
        raise MissingMetadataError("info.x-origin")
    return record


def origin_url(doc: dict[str, Any]) -> str:
    url = origin(doc).get("url")
    if url is None:
        raise MissingMetadataError("info.x-origin.url")
    return url


def origin_format(doc: dict[str, Any]) -> str:
    fmt = origin(doc).get("format")
    if fmt is None:
        raise MissingMetadataError("info.x-origin.format")
    return fmt


def origin_type(doc: dict[str, Any]) -> str:
    """Return the converter type name the document was originally built from."""
    record = origin(doc)
    return get_type_name(origin_format(doc), str(record.get("version", "")))


def service_name(doc: dict[str, Any]) -> str | None:
    return _info(doc).get("x-serviceName")


@lru_cache(maxsize=1)
def _extractor() -> tldextract.TLDExtract:
    # Bundled public suffix snapshot only, never hit the network
    return tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())


def provider_name(host: str | None) -> str:
    """Derive a provider name from an API host.

    Uses the registrable domain, so ``api.example.co.uk`` becomes
    ``example.co.uk``. Everything under ``googleapis.com`` maps to
    ``googleapis.com``.

    Raises:
        ConversionError: If ``host`` is empty.
    """
    if not host:
        raise ConversionError("Spec has no host, can not derive provider name")

    hostname = host.strip().lower().split(":", 1)[0]
    parts = _extractor()(hostname)

    domain = parts.domain
    if domain == "www":
        domain = ""

    if not parts.suffix:
        return domain or hostname

    registered = f"{domain}.{parts.suffix}" if domain else parts.suffix
    if registered == _GOOGLE_APIS or registered.endswith("." + _GOOGLE_APIS):
        return _GOOGLE_APIS
    return registered
