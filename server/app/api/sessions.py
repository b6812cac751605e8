from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_user_id
from app.models.base import get_db
from app.models.message import Message
from app.models.practice_session import PracticeSession
from app.schemas.session import (
    MessageCreate,
    MessageResponse,
    SessionCreate,
    SessionListItem,
    SessionResponse,
)

router = APIRouter()


async def get_owned_session(db: AsyncSession, session_id: str, user_id: str) -> PracticeSession:
    result = await db.execute(
        select(PracticeSession).where(
            PracticeSession.id == session_id,
            PracticeSession.user_id == user_id,
        )
    )
    session = result.scalar_one_or_none()
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.get("/", response_model=list[SessionListItem])
async def list_sessions(
    type: str | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    message_count = (
        select(func.count(Message.id))
        .where(Message.session_id == PracticeSession.id)
        .correlate(PracticeSession)
        .scalar_subquery()
    )
    query = (
        select(PracticeSession, message_count)
        .where(PracticeSession.user_id == user_id)
        .order_by(PracticeSession.updated_at.desc())
        .limit(limit)
    )
    if type:
        query = query.where(PracticeSession.type == type)

    result = await db.execute(query)
    return [
        SessionListItem(
            **SessionResponse.model_validate(session).model_dump(),
            message_count=count,
        )
        for session, count in result.all()
    ]


@router.post("/", response_model=SessionResponse, status_code=201)
async def create_session(
    payload: SessionCreate,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    session = PracticeSession(
        user_id=user_id,
        type=payload.type,
        scenario_id=payload.scenario_id or None,
        scenario_title=(payload.scenario_title or "").strip() or None,
    )
    db.add(session)
    await db.flush()
    await db.refresh(session)
    return session


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_owned_session(db, session_id, user_id)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    session = await get_owned_session(db, session_id, user_id)
    await db.delete(session)


@router.get("/{session_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    session_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_session(db, session_id, user_id)
    result = await db.execute(
        select(Message)
        .where(Message.session_id == session_id)
        .order_by(Message.created_at)
    )
    return result.scalars().all()


@router.post("/{session_id}/messages", response_model=MessageResponse, status_code=201)
async def create_message(
    session_id: str,
    payload: MessageCreate,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_session(db, session_id, user_id)
    content = payload.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="content is required")

    message = Message(session_id=session_id, role=payload.role, content=content)
    db.add(message)
    await db.flush()
    await db.refresh(message)
    return message
