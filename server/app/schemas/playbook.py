from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PlaybookCreate(BaseModel):
    title: str
    content: str = ""
    type: Optional[str] = None


class PlaybookUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    type: Optional[str] = None


class PlaybookImport(BaseModel):
    text: str
    type: Optional[str] = None


class PlaybookResponse(BaseModel):
    id: str
    title: str
    content: str
    type: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
