from pydantic import BaseModel
from typing import Any, Dict, Union

class SettingValue(BaseModel):
    key: str
    value: Any

class SettingUpdate(BaseModel):
    value: Union[str, int, float, bool]

class SettingsResponse(BaseModel):
    settings: Dict[str, Any]
