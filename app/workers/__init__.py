"""Background workers."""

from app.workers.relevance_refresh import RelevanceRefreshWorker
from app.workers.upload_retention import UploadRetentionWorker

__all__ = [
    "RelevanceRefreshWorker",
    "UploadRetentionWorker",
]
