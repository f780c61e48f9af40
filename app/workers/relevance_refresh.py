"""Relevance refresh worker for the stored relevance score snapshot."""

from loguru import logger

from app.db.session import async_session_maker
from app.services.app_service import AppService


class RelevanceRefreshWorker:
    """Recomputes ``relevance_score`` for every app.

    Listings rank with a live score; the stored value only keeps the
    ``sortMetrics.relevanceScore`` field in responses from going stale.
    """

    def __init__(self, session_maker=None):
        self.session_maker = session_maker or async_session_maker

    async def run(self) -> None:
        """Run the relevance refresh."""
        async with self.session_maker() as db:
            try:
                count = await AppService(db).refresh_relevance_scores()
                logger.info(f"Relevance refresh: updated {count} apps")
            except Exception as e:
                logger.error(f"Relevance refresh error: {e}")
                await db.rollback()
