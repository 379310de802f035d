import asyncio
import logging
from typing import Callable, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from billmate.core.config import settings
from billmate.schemas.alert_schema import AlertBadge
from billmate.services.alerts.alert_service import AlertService, summarize_badge
from billmate.services.alerts.dismissal_service import AlertDismissalService

logger = logging.getLogger(__name__)


class AlertBadgeRefresher:
    """
    Periodically recounts visible alerts for the notification badge.

    Owned by the application lifespan: `start()` when the app comes up and
    `stop()` on shutdown, which cancels the loop so no timer outlives the app.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        interval: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.interval = settings.ALERT_BADGE_REFRESH_SECONDS if interval is None else interval
        self.latest: Optional[AlertBadge] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh_once(self) -> AlertBadge:
        alerts = await AlertService(self.session_factory).generate_alerts()
        async with self.session_factory() as session:
            visible = await AlertDismissalService(session).filter_visible(alerts)
        self.latest = summarize_badge(visible)
        return self.latest

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error refreshing alert badge: {str(e)}")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="alert-badge-refresher")
        logger.info(f"🔔 Alert badge refresher started (every {self.interval:g}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Alert badge refresher stopped")
