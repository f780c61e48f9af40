"""Media upload service and local staging of multipart files."""

import hashlib
import time
from contextlib import asynccontextmanager
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import AsyncIterator

import httpx
from fastapi import UploadFile
from loguru import logger

from app.core.config import get_settings

settings = get_settings()


class MediaService:
    """
    Client for a Cloudinary-compatible signed upload API.

    Each upload POSTs one local file and returns the durable ``secure_url``
    from the JSON reply, or None when the upload fails.
    """

    def __init__(
        self,
        upload_url: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        folder: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.upload_url = upload_url or settings.media_upload_url
        self.api_key = api_key if api_key is not None else settings.media_api_key
        self.api_secret = api_secret if api_secret is not None else settings.media_api_secret
        self.folder = folder if folder is not None else settings.media_upload_folder
        self.timeout = timeout or settings.media_upload_timeout
        self.transport = transport

    def sign(self, params: dict[str, str]) -> str:
        """SHA-1 signature over the sorted parameters plus the API secret."""
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    async def upload(self, path: Path) -> str | None:
        """Upload a local file and return its public URL."""
        params = {"timestamp": str(int(time.time()))}
        if self.folder:
            params["folder"] = self.folder

        data = {
            **params,
            "api_key": self.api_key,
            "signature": self.sign(params),
        }

        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error(f"Cannot read staged upload {path}: {e}")
            return None

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            try:
                response = await client.post(
                    self.upload_url,
                    data=data,
                    files={"file": (path.name, content)},
                )
            except httpx.RequestError as e:
                logger.error(f"Media upload failed for {path.name}: {e}")
                return None

        if response.status_code != 200:
            logger.warning(
                f"Media upload rejected for {path.name}: "
                f"{response.status_code} {response.text[:200]}"
            )
            return None

        try:
            url = response.json().get("secure_url")
        except ValueError:
            url = None
        if not url:
            logger.warning(f"Media upload for {path.name} returned no secure_url")
        return url


@asynccontextmanager
async def staged_uploads(
    fields: dict[str, list[UploadFile]],
    root: str | Path | None = None,
) -> AsyncIterator[dict[str, list[Path]]]:
    """
    Write multipart files to a per-request directory and remove it on exit.

    Yields a mapping of form field name to staged file paths. Empty file
    parts (no filename) are skipped. The directory is removed whether the
    body succeeds or raises.
    """
    upload_root = Path(root or settings.upload_dir)
    upload_root.mkdir(parents=True, exist_ok=True)

    with TemporaryDirectory(dir=upload_root, prefix="upload-", ignore_cleanup_errors=True) as tmp:
        staging_dir = Path(tmp)
        staged: dict[str, list[Path]] = {}
        for field, files in fields.items():
            paths = []
            for index, upload in enumerate(files):
                if not upload.filename:
                    continue
                path = staging_dir / f"{field}-{index}-{Path(upload.filename).name}"
                path.write_bytes(await upload.read())
                paths.append(path)
            staged[field] = paths
        yield staged
