"""Upload retention worker for sweeping stale staged upload directories."""

import shutil
import time
from pathlib import Path

from loguru import logger

from app.core.config import get_settings

settings = get_settings()


class UploadRetentionWorker:
    """Worker removing staging directories left behind by aborted requests.

    Requests clean up after themselves; this only catches directories
    orphaned by a crashed or killed process.
    """

    def __init__(
        self,
        upload_dir: str | Path | None = None,
        retention_minutes: int | None = None,
    ):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.retention_minutes = retention_minutes or settings.upload_retention_minutes

    async def run(self) -> int:
        """Run the staging sweep. Returns the number of removed entries."""
        if not self.upload_dir.exists():
            return 0

        cutoff = time.time() - self.retention_minutes * 60
        removed = 0

        for entry in self.upload_dir.iterdir():
            try:
                if entry.stat().st_mtime >= cutoff:
                    continue
                if entry.is_dir():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Failed to remove stale upload {entry}: {e}")

        if removed:
            logger.info(f"Upload retention: removed {removed} stale staging entries")
        return removed
