import logging
from typing import Iterable, List, Set
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from billmate.models.dismissed_alert import DismissedAlert
from billmate.schemas.alert_schema import Alert

logger = logging.getLogger(__name__)

class AlertDismissalService:
    """Persisted set of alert ids the shopkeeper has dismissed"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_dismissed_ids(self) -> Set[str]:
        result = await self.db.execute(select(DismissedAlert.alert_id))
        return set(result.scalars().all())

    async def dismiss(self, alert_id: str) -> bool:
        """Returns False when the id was already dismissed"""
        existing = await self.db.execute(
            select(DismissedAlert).where(DismissedAlert.alert_id == alert_id)
        )
        if existing.scalar_one_or_none():
            return False

        self.db.add(DismissedAlert(alert_id=alert_id))
        await self.db.commit()
        logger.info(f"Alert dismissed: {alert_id}")
        return True

    async def dismiss_many(self, alert_ids: Iterable[str]) -> List[str]:
        """Dismiss several ids in one commit; returns the ids that were newly dismissed"""
        dismissed = await self.get_dismissed_ids()
        added = []
        for alert_id in alert_ids:
            if alert_id in dismissed or alert_id in added:
                continue
            self.db.add(DismissedAlert(alert_id=alert_id))
            added.append(alert_id)

        if added:
            await self.db.commit()
            logger.info(f"Alerts dismissed: {', '.join(added)}")
        return added

    async def undismiss(self, alert_id: str) -> bool:
        result = await self.db.execute(
            delete(DismissedAlert).where(DismissedAlert.alert_id == alert_id)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def clear(self) -> int:
        result = await self.db.execute(delete(DismissedAlert))
        await self.db.commit()
        logger.info(f"Cleared {result.rowcount} dismissed alerts")
        return result.rowcount

    async def filter_visible(self, alerts: Iterable[Alert]) -> List[Alert]:
        dismissed = await self.get_dismissed_ids()
        return [alert for alert in alerts if alert.id not in dismissed]
