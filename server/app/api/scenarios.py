from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_user_id
from app.models.base import get_db
from app.models.scenario import ScenarioPreset
from app.schemas.scenario import ScenarioResponse

router = APIRouter()


@router.get("/", response_model=list[ScenarioResponse])
async def list_scenarios(
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(ScenarioPreset)
        .where(ScenarioPreset.is_active.is_(True))
        .order_by(ScenarioPreset.created_at)
    )
    return result.scalars().all()
