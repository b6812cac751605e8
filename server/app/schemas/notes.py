from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class NotesIngestRequest(BaseModel):
    source_title: str = Field(min_length=1)
    text: str = ""


class NotesIngestResponse(BaseModel):
    count: int


class NoteChunkResponse(BaseModel):
    id: str
    source_title: str
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class NoteChunkUpdate(BaseModel):
    source_title: Optional[str] = None
    content: Optional[str] = None


class AskRequest(BaseModel):
    question: str = Field(min_length=1)
    mode: Optional[Literal["mock", "ai", "openai"]] = None


class AskSource(BaseModel):
    source_title: str
    snippet: str


class ChunkPreview(BaseModel):
    source_title: str
    content: str


class AskResponse(BaseModel):
    answer: str
    sources: list[AskSource]
    matched_chunks_preview: Optional[list[ChunkPreview]] = None
