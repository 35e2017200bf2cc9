# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reader for offline assets bundled with the SDK.

Bundled channel configurations live under the configured assets root,
e.g. ``assets/data/channel/channel-01.json``. Files are read in a worker
thread so the event loop never blocks on disk.
"""

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class AssetNotFoundError(Exception):
    """Raised when a bundled asset does not exist.

    Attributes:
        path: The resolved path that was looked up.
    """

    def __init__(self, path: Path) -> None:
        super().__init__(f"Asset not found: {path}")
        self.path = path


class AssetFileService:
    """Reads text assets relative to an assets root directory.

    Attributes:
        assets_root: Directory all asset paths are resolved against.
    """

    def __init__(self, assets_root: str | Path) -> None:
        self.assets_root = Path(assets_root)

    def resolve(self, relative_path: str) -> Path:
        """Resolve an asset path, ignoring leading slashes."""
        return self.assets_root / relative_path.lstrip("/")

    async def read_file_from_assets(self, relative_path: str) -> str:
        """Read an asset as UTF-8 text.

        Args:
            relative_path: Path below the assets root.

        Returns:
            File contents.

        Raises:
            AssetNotFoundError: If the file does not exist.
        """
        path = self.resolve(relative_path)
        if not path.is_file():
            raise AssetNotFoundError(path)
        logger.debug("Reading bundled asset %s", path)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
