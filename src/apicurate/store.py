"""File store for the collection tree.

All paths handed to the store are relative to the collection root and use
``/`` separators, the same form identities render to.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from apicurate.config import CurateConfig

logger = logging.getLogger(__name__)


def json_to_string(data: Any) -> str:
    """Serialize ``data`` the way every artifact is written.

    Keys are sorted so regenerated artifacts produce stable diffs.
    """
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


class SpecStore:
    """Reads and writes collection artifacts below a root directory.

    Attributes:
        root: Collection root directory.
        config: Active configuration.
    """

    def __init__(self, root: Path, config: CurateConfig | None = None) -> None:
        self.config = config or CurateConfig()
        self.root = self.config.get_specs_path(root)

    def resolve(self, relative_path: str) -> Path:
        """Resolve a collection-relative path to an absolute path."""
        return self.root / relative_path

    def read_json(self, relative_path: str) -> Any:
        """Read a JSON artifact.

        Returns:
            The parsed content, or None if the file does not exist.

        Raises:
            json.JSONDecodeError: If the file exists but is not valid JSON.
        """
        path = self.resolve(relative_path)
        if not path.is_file():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def write_json(self, relative_path: str, data: Any) -> Path:
        """Write ``data`` as pretty-printed, key-sorted JSON."""
        return self.save_file(relative_path, json_to_string(data))

    def save_file(self, relative_path: str, data: str | bytes) -> Path:
        """Write a file, creating parent directories as needed."""
        path = self.resolve(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data, encoding="utf-8")
        logger.info("Wrote %s", relative_path)
        return path

    def exists(self, relative_path: str) -> bool:
        return self.resolve(relative_path).is_file()

    def discover(self, directory: str | None = None) -> dict[str, dict[str, Any]]:
        """Load every canonical document below ``directory``.

        Args:
            directory: Collection-relative directory to search. Defaults to
                the whole collection.

        Returns:
            Mapping of collection-relative path to document, sorted by path.
        """
        base = self.resolve(directory) if directory else self.root
        if not base.is_dir():
            return {}

        specs: dict[str, dict[str, Any]] = {}
        for path in sorted(base.rglob(self.config.spec_filename)):
            if not path.is_file():
                continue
            relative = path.relative_to(self.root).as_posix()
            specs[relative] = json.loads(path.read_text(encoding="utf-8"))
        return specs
