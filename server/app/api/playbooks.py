import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_user_id
from app.models.base import get_db
from app.models.playbook import Playbook
from app.schemas.playbook import PlaybookCreate, PlaybookImport, PlaybookResponse, PlaybookUpdate
from app.services.playbooks import normalize_playbook_type, parse_bulk_playbooks

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_playbook(db: AsyncSession, playbook_id: str, user_id: str) -> Playbook:
    result = await db.execute(
        select(Playbook).where(Playbook.id == playbook_id, Playbook.user_id == user_id)
    )
    playbook = result.scalar_one_or_none()
    if not playbook:
        raise HTTPException(status_code=404, detail="Playbook not found")
    return playbook


@router.get("/", response_model=list[PlaybookResponse])
async def list_playbooks(
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Playbook)
        .where(Playbook.user_id == user_id)
        .order_by(Playbook.updated_at.desc())
    )
    return result.scalars().all()


@router.post("/", response_model=PlaybookResponse, status_code=201)
async def create_playbook(
    payload: PlaybookCreate,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    title = payload.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")

    playbook = Playbook(
        user_id=user_id,
        title=title,
        content=payload.content,
        type=normalize_playbook_type(payload.type).value,
    )
    db.add(playbook)
    await db.flush()
    await db.refresh(playbook)
    return playbook


@router.post("/import", response_model=list[PlaybookResponse], status_code=201)
async def import_playbooks(
    payload: PlaybookImport,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    parsed = parse_bulk_playbooks(payload.text)
    if not parsed:
        raise HTTPException(status_code=400, detail="No playbooks found in text")

    playbook_type = normalize_playbook_type(payload.type).value
    playbooks = [
        Playbook(user_id=user_id, title=p.title, content=p.content, type=playbook_type)
        for p in parsed
    ]
    db.add_all(playbooks)
    await db.flush()
    for playbook in playbooks:
        await db.refresh(playbook)

    logger.info(f"Imported {len(playbooks)} playbooks for user {user_id}")
    return playbooks


@router.get("/{playbook_id}", response_model=PlaybookResponse)
async def get_playbook(
    playbook_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await _get_owned_playbook(db, playbook_id, user_id)


@router.patch("/{playbook_id}", response_model=PlaybookResponse)
async def update_playbook(
    playbook_id: str,
    payload: PlaybookUpdate,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    playbook = await _get_owned_playbook(db, playbook_id, user_id)
    if payload.title is not None:
        if not payload.title.strip():
            raise HTTPException(status_code=400, detail="Title cannot be empty")
        playbook.title = payload.title.strip()
    if payload.content is not None:
        playbook.content = payload.content
    if payload.type is not None:
        playbook.type = normalize_playbook_type(payload.type).value

    await db.flush()
    await db.refresh(playbook)
    return playbook


@router.delete("/{playbook_id}", status_code=204)
async def delete_playbook(
    playbook_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    playbook = await _get_owned_playbook(db, playbook_id, user_id)
    await db.delete(playbook)
