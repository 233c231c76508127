"""apicurate - curated collection of canonical API descriptions.

Normalizes source API descriptions into Swagger 2.0, validates them,
repairs known validation failures, merges curated patches and publishes
derived indexes.
"""

from __future__ import annotations

__version__ = "0.1.0"
