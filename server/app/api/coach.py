import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_user_id
from app.api.sessions import get_owned_session
from app.config import settings
from app.models.base import get_db
from app.models.message import Message, MessageRole
from app.models.playbook import Playbook
from app.models.practice_session import SessionType
from app.models.scenario import ScenarioPreset
from app.schemas.coach import CoachRequest, CoachResponse, NoteSource
from app.schemas.session import MessageResponse
from app.services.coaching_service import get_coach_reply
from app.services.notes import get_top_chunks, snippet
from app.services.playbooks import group_bullets_by_type
from app.services.roleplay_coach import parse_phases

logger = logging.getLogger(__name__)

router = APIRouter()

RECENT_MESSAGES = 20


@router.post("/coach", response_model=CoachResponse)
async def coach_turn(
    payload: CoachRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    content = payload.content.strip()
    if len(content) < 2:
        raise HTTPException(status_code=400, detail="Message must be at least 2 characters")

    session = await get_owned_session(db, payload.session_id, user_id)
    if session.type != SessionType.ROLEPLAY.value:
        raise HTTPException(status_code=400, detail="Session is not a roleplay session")

    history_result = await db.execute(
        select(Message)
        .where(Message.session_id == session.id)
        .order_by(Message.created_at)
        .limit(RECENT_MESSAGES)
    )
    recent_messages = [{"role": m.role, "content": m.content} for m in history_result.scalars().all()]

    db.add(Message(session_id=session.id, role=MessageRole.USER.value, content=content))

    phases_raw = None
    if session.scenario_id:
        preset = await db.get(ScenarioPreset, session.scenario_id)
        phases_raw = preset.phases if preset else None
    phases = parse_phases(phases_raw)

    playbook_result = await db.execute(select(Playbook).where(Playbook.user_id == user_id))
    playbooks_by_type = group_bullets_by_type(playbook_result.scalars().all())

    query = " | ".join(p for p in (session.scenario_title, session.phase, content) if p)
    note_chunks = await get_top_chunks(db, query, user_id, limit=settings.coach_notes_top_k)

    result, used_fallback = await get_coach_reply(
        mode=payload.mode,
        current_phase=session.phase,
        phases=phases,
        playbooks_by_type=playbooks_by_type,
        user_message=content,
        recent_messages=recent_messages,
        note_snippets=note_chunks,
    )

    assistant_message = Message(
        session_id=session.id,
        role=MessageRole.ASSISTANT.value,
        content=result.assistant_reply,
    )
    db.add(assistant_message)
    if result.next_phase:
        session.phase = result.next_phase
    await db.flush()
    await db.refresh(assistant_message)

    logger.info(
        f"Coach turn for session {session.id}: next_phase={result.next_phase}, "
        f"fallback={used_fallback}"
    )
    return CoachResponse(
        assistant_message=MessageResponse.model_validate(assistant_message),
        next_phase=result.next_phase,
        suggested_next_user_message=result.suggested_next_user_message,
        one_thing_to_fix=result.one_thing_to_fix,
        drill=result.drill,
        phase_rationale=result.phase_rationale,
        note_sources=[
            NoteSource(source_title=c.source_title, snippet=snippet(c.content, 200), score=c.score)
            for c in note_chunks
        ],
        used_fallback=used_fallback,
    )
