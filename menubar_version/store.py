"""
JSON-backed persistence for the suppression threshold.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from .config import DATA_PATH, data_home
from .errors import StoreError
from .versioning import SemVer, optional_version


logger = logging.getLogger(__name__)

THRESHOLD_KEY = "hideUntilHomebrewGt"


class JsonSuppressionStore:
    """Store ``{"hideUntilHomebrewGt": "<version>"}`` in the user data directory."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or data_home() / DATA_PATH

    def _load(self) -> Dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"{self.path} must contain a JSON object")
        return data

    def get(self) -> Optional[SemVer]:
        threshold = optional_version(self._load().get(THRESHOLD_KEY))
        logger.debug("Suppression threshold: %s", threshold)
        return threshold

    def set(self, version: SemVer) -> None:
        data = self._load()
        data[THRESHOLD_KEY] = str(version)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StoreError(f"could not write {self.path}: {e}") from e
        logger.info("Hiding app updates until Homebrew has a version above %s", version)
