"""Notes retrieval: paragraph chunking and keyword ranking.

There is no index. Every query re-ranks the user's full chunk set by term
frequency, which is plenty for a personal notes library.
"""

import logging
import re
from dataclasses import asdict, dataclass
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.note_chunk import NoteChunk

logger = logging.getLogger(__name__)

TARGET_CHUNK_CHARS = 3000
MAX_CHUNK_CHARS = 4000

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
# ASCII word characters only, so accented letters split a term
_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)


@dataclass
class RankedChunk:
    id: Optional[str]
    source_title: str
    content: str
    score: int

    def to_dict(self) -> dict:
        return asdict(self)


def chunk_text(text: str) -> list[str]:
    """Split *text* into ~3k character chunks without breaking paragraphs.

    Paragraphs are packed greedily. A buffer is flushed before a paragraph
    that would push it past MAX_CHUNK_CHARS, or right after the paragraph
    that brings it to TARGET_CHUNK_CHARS. A single paragraph longer than
    MAX_CHUNK_CHARS becomes its own oversized chunk.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return []

    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(trimmed)]
    paragraphs = [p for p in paragraphs if p]
    if not paragraphs:
        return [trimmed]

    chunks: list[str] = []
    current: list[str] = []
    current_len = 0

    for p in paragraphs:
        # +2 for the blank line that joins paragraphs
        p_len = len(p) + 2
        if current_len + p_len > MAX_CHUNK_CHARS and current:
            chunks.append("\n\n".join(current))
            current = [p]
            current_len = p_len
        elif current_len + p_len >= TARGET_CHUNK_CHARS and current:
            current.append(p)
            chunks.append("\n\n".join(current))
            current = []
            current_len = 0
        else:
            current.append(p)
            current_len += p_len

    if current:
        chunks.append("\n\n".join(current))
    return chunks


def query_terms(query: str) -> list[str]:
    cleaned = _NON_WORD.sub(" ", (query or "").lower())
    return [w for w in cleaned.split() if len(w) > 1]


def _chunk_fields(chunk) -> tuple[Optional[str], str, str]:
    if isinstance(chunk, dict):
        return chunk.get("id"), chunk.get("source_title", ""), chunk.get("content", "")
    return chunk.id, chunk.source_title, chunk.content


def rank_chunks(query: str, chunks: Iterable) -> list[RankedChunk]:
    """Score chunks by substring term frequency and sort best first.

    A term matches anywhere inside the lowercased content, including inside
    longer words. Ties keep their input order.
    """
    rows = [_chunk_fields(c) for c in chunks]
    terms = query_terms(query)
    if not terms:
        return [RankedChunk(id=i, source_title=t, content=c, score=0) for i, t, c in rows]

    ranked = []
    for chunk_id, title, content in rows:
        lower = content.lower()
        score = sum(lower.count(t) for t in terms)
        ranked.append(RankedChunk(id=chunk_id, source_title=title, content=content, score=score))
    ranked.sort(key=lambda r: r.score, reverse=True)
    return ranked


def snippet(text: str, limit: int) -> str:
    return text[:limit] + ("…" if len(text) > limit else "")


async def get_top_chunks(
    db: AsyncSession,
    query: str,
    user_id: str,
    limit: int = 5,
) -> list[RankedChunk]:
    """Load all of a user's chunks and return the best *limit* matches."""
    result = await db.execute(
        select(NoteChunk)
        .where(NoteChunk.user_id == user_id)
        .order_by(NoteChunk.created_at, NoteChunk.chunk_index)
    )
    chunks = result.scalars().all()
    ranked = rank_chunks(query, chunks)
    logger.debug(f"Ranked {len(chunks)} note chunks for user {user_id}")
    return ranked[:limit]
