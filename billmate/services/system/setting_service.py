import logging
import re
from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from billmate.core.config import settings
from billmate.models.setting import Setting

logger = logging.getLogger(__name__)

# Leading integer, the way the billing screen reads numeric settings ("3 items" -> 3)
LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "shop_name": settings.DEFAULT_SHOP_NAME,
    "currency": settings.DEFAULT_CURRENCY,
    "low_stock_threshold": settings.DEFAULT_LOW_STOCK_THRESHOLD,
    "receipt_template": settings.DEFAULT_RECEIPT_TEMPLATE,
}


class SettingService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_record(self, key: str) -> Optional[Setting]:
        result = await self.db.execute(select(Setting).where(Setting.key == key))
        return result.scalar_one_or_none()

    async def initialize_settings(self) -> bool:
        """Seed defaults on first run. Returns True when seeding happened."""
        existing = await self._get_record("shop_name")
        if existing:
            return False

        for key, value in DEFAULT_SETTINGS.items():
            if await self._get_record(key) is None:
                self.db.add(Setting(key=key, value=str(value)))
        await self.db.commit()
        logger.info("⚙️ Default settings initialized")
        return True

    async def get_setting(self, key: str) -> Any:
        record = await self._get_record(key)
        return record.value if record else DEFAULT_SETTINGS.get(key)

    async def set_setting(self, key: str, value: Any) -> Setting:
        record = await self._get_record(key)
        if record:
            record.value = str(value)
        else:
            record = Setting(key=key, value=str(value))
            self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        logger.info(f"Setting '{key}' updated")
        return record

    async def get_all_settings(self) -> Dict[str, Any]:
        result = await self.db.execute(select(Setting))
        stored = {record.key: record.value for record in result.scalars().all()}
        return {**DEFAULT_SETTINGS, **stored}

    async def get_currency(self) -> str:
        return (await self.get_setting("currency")) or settings.DEFAULT_CURRENCY

    async def get_low_stock_threshold(self) -> int:
        """Stored threshold as an int; absent, unparseable and zero fall back to the default."""
        value = await self.get_setting("low_stock_threshold")
        match = LEADING_INT.match(str(value))
        if not match:
            return settings.DEFAULT_LOW_STOCK_THRESHOLD
        return int(match.group(1)) or settings.DEFAULT_LOW_STOCK_THRESHOLD
