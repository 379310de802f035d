from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from billmate.core.database import get_async_session
from billmate.services.system.setting_service import SettingService
from billmate.schemas.setting_schema import SettingUpdate, SettingValue, SettingsResponse

router = APIRouter()

@router.get("/", response_model=SettingsResponse)
async def get_all_settings(
    db: AsyncSession = Depends(get_async_session)
):
    """All settings with defaults filled in"""
    service = SettingService(db)
    return SettingsResponse(settings=await service.get_all_settings())

@router.get("/{key}", response_model=SettingValue)
async def get_setting(
    key: str,
    db: AsyncSession = Depends(get_async_session)
):
    service = SettingService(db)
    return SettingValue(key=key, value=await service.get_setting(key))

@router.put("/{key}", response_model=SettingValue)
async def set_setting(
    key: str,
    setting_data: SettingUpdate,
    db: AsyncSession = Depends(get_async_session)
):
    service = SettingService(db)
    record = await service.set_setting(key, setting_data.value)
    return SettingValue(key=record.key, value=record.value)
