"""Image Store — filesystem storage under the external images directory.

Invariants:
    - Every write and read stays inside root (resolved path containment check)
    - Public URLs have the form /api/external-images/<folder>/<filename>
    - Writes create the target folder on demand
    - Disk writes run in a worker thread, off the event loop
"""

import asyncio
import logging
from pathlib import Path

from aixchange.core.filenames import is_safe_relative_path

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/api/external-images"


class ImageStore:
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def public_url(self, folder: str, filename: str) -> str:
        return f"{PUBLIC_PREFIX}/{folder}/{filename}"

    async def save(self, folder: str, filename: str, data: bytes) -> str:
        """Write data to <root>/<folder>/<filename>; return its public URL."""
        target = self._resolve(f"{folder}/{filename}")
        if target is None:
            raise ValueError(f"Refusing to write outside image root: {folder}/{filename}")
        await asyncio.to_thread(_write, target, data)
        logger.info(f"Stored image {folder}/{filename} ({len(data)} bytes)")
        return self.public_url(folder, filename)

    def locate(self, relative_path: str) -> Path | None:
        """Existing regular file for relative_path, or None."""
        target = self._resolve(relative_path)
        if target is None or not target.is_file():
            return None
        return target

    def _resolve(self, relative_path: str) -> Path | None:
        if not is_safe_relative_path(relative_path):
            return None
        root = self.root.resolve()
        target = (root / relative_path).resolve()
        if target != root and root not in target.parents:
            return None
        return target


def _write(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
