"""Client settings persisted as JSON (``~/.assetshelf/config.json``)."""

import json
import os
from pathlib import Path
from typing import Any, Dict

from common.constants import CHUNK_SIZE_BYTES, CHUNK_THRESHOLD_BYTES, MAX_CLIENT_FILE_SIZE_BYTES
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """
    Settings file with defaults. Keys missing from the file fall back to
    ``DEFAULT_CONFIG``; a missing file is created holding the defaults.
    """

    DEFAULT_CONFIG: Dict[str, Any] = {
        "server_url": os.environ.get("SHELF_SERVER_URL", "http://localhost:8000"),
        "timeout": int(os.environ.get("SHELF_CLIENT_TIMEOUT", "60")),
        "chunk_threshold_bytes": CHUNK_THRESHOLD_BYTES,
        "chunk_size_bytes": CHUNK_SIZE_BYTES,
        "max_file_size_bytes": MAX_CLIENT_FILE_SIZE_BYTES,
    }

    def __init__(self, config_path: Path):
        self.config_path = Path(config_path)
        self.data = self._load()

    def _load(self) -> Dict[str, Any]:
        settings = dict(self.DEFAULT_CONFIG)

        if not self.config_path.exists():
            self._write(settings)
            return settings

        try:
            stored = json.loads(self.config_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
            return settings

        if isinstance(stored, dict):
            settings.update(stored)
        return settings

    def _write(self, settings: Dict[str, Any]) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(json.dumps(settings, indent=2))
        except OSError as e:
            logger.warning(f"Could not write config to {self.config_path}: {e}")

    def save(self) -> None:
        self._write(self.data)

    def get_base_url(self) -> str:
        return str(self.data["server_url"]).rstrip('/')

    def get_timeout(self) -> int:
        """Per-request timeout in seconds."""
        return self.data["timeout"]

    def get_chunk_threshold(self) -> int:
        """Files at or above this size are sent in chunks."""
        return int(self.data["chunk_threshold_bytes"])

    def get_chunk_size(self) -> int:
        return int(self.data["chunk_size_bytes"])

    def get_max_file_size(self) -> int:
        return int(self.data["max_file_size_bytes"])
