from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class SessionCreate(BaseModel):
    type: Literal["roleplay", "rate"] = "roleplay"
    scenario_id: Optional[str] = None
    scenario_title: Optional[str] = None


class SessionResponse(BaseModel):
    id: str
    type: str
    scenario_id: Optional[str]
    scenario_title: Optional[str]
    phase: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionListItem(SessionResponse):
    message_count: int = 0


class MessageCreate(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: str = Field(min_length=1)


class MessageResponse(BaseModel):
    id: str
    role: str
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}
