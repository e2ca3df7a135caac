from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from quotes_api.api.schemas.common import PaginationMeta
from quotes_api.utils.enums import ActivityAction


class ActivityResponse(BaseModel):
    id: int
    user_id: int
    action: ActivityAction
    details: Dict[str, Any] = Field(default_factory=dict)
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: datetime
    model_config = ConfigDict(from_attributes=True)


class ActivityListResponse(BaseModel):
    activities: List[ActivityResponse]
    pagination: PaginationMeta
