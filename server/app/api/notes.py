import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_user_id
from app.config import settings
from app.models.base import get_db
from app.models.note_chunk import NoteChunk
from app.schemas.notes import (
    AskRequest,
    AskResponse,
    AskSource,
    ChunkPreview,
    NoteChunkResponse,
    NoteChunkUpdate,
    NotesIngestRequest,
    NotesIngestResponse,
)
from app.services.coaching_service import answer_question
from app.services.notes import chunk_text, get_top_chunks, snippet

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_chunk(db: AsyncSession, chunk_id: str, user_id: str) -> NoteChunk:
    result = await db.execute(
        select(NoteChunk).where(NoteChunk.id == chunk_id, NoteChunk.user_id == user_id)
    )
    chunk = result.scalar_one_or_none()
    if not chunk:
        raise HTTPException(status_code=404, detail="Note chunk not found")
    return chunk


@router.post("/notes/ingest", response_model=NotesIngestResponse)
async def ingest_notes(
    payload: NotesIngestRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    source_title = payload.source_title.strip()
    if not source_title:
        raise HTTPException(status_code=400, detail="source_title is required")

    chunks = chunk_text(payload.text)
    if not chunks:
        raise HTTPException(status_code=400, detail="No content to ingest")

    for i, content in enumerate(chunks):
        db.add(NoteChunk(user_id=user_id, source_title=source_title, chunk_index=i, content=content))
    await db.flush()

    logger.info(f"Ingested {len(chunks)} note chunks from '{source_title}' for user {user_id}")
    return NotesIngestResponse(count=len(chunks))


@router.get("/notes", response_model=list[NoteChunkResponse])
async def list_notes(
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(NoteChunk)
        .where(NoteChunk.user_id == user_id)
        .order_by(NoteChunk.created_at.desc(), NoteChunk.chunk_index)
    )
    return result.scalars().all()


@router.patch("/notes/{chunk_id}", response_model=NoteChunkResponse)
async def update_note(
    chunk_id: str,
    payload: NoteChunkUpdate,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    chunk = await _get_owned_chunk(db, chunk_id, user_id)
    if payload.source_title is not None:
        if not payload.source_title.strip():
            raise HTTPException(status_code=400, detail="source_title cannot be empty")
        chunk.source_title = payload.source_title.strip()
    if payload.content is not None:
        if not payload.content.strip():
            raise HTTPException(status_code=400, detail="content cannot be empty")
        chunk.content = payload.content.strip()

    await db.flush()
    await db.refresh(chunk)
    return chunk


@router.delete("/notes/{chunk_id}", status_code=204)
async def delete_note(
    chunk_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    chunk = await _get_owned_chunk(db, chunk_id, user_id)
    await db.delete(chunk)


@router.post("/ask", response_model=AskResponse, response_model_exclude_none=True)
async def ask_notes(
    payload: AskRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    question = payload.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="question is required")

    top_chunks = await get_top_chunks(db, question, user_id, limit=settings.ask_top_k)
    answer, answered_by_ai = await answer_question(payload.mode, question, top_chunks)

    sources = [AskSource(source_title=c.source_title, snippet=snippet(c.content, 200)) for c in top_chunks]
    preview = None
    if not answered_by_ai:
        preview = [ChunkPreview(source_title=c.source_title, content=snippet(c.content, 300)) for c in top_chunks]
    return AskResponse(answer=answer, sources=sources, matched_chunks_preview=preview)
