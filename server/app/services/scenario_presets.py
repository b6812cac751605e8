import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.scenario import ScenarioPreset
from app.services.phases import PHASE_ORDER

logger = logging.getLogger(__name__)

DEFAULT_SCENARIOS = [
    {
        "title": "Cold outreach",
        "description": "First touch with a prospect who doesn't know you.",
    },
    {
        "title": "Demo follow-up",
        "description": "Follow up after a product demo to address concerns and move to next step.",
    },
    {
        "title": "Pricing objection",
        "description": "Handle pushback on price and justify value.",
    },
    {
        "title": "Closing negotiation",
        "description": "Negotiate terms and get to yes.",
    },
    {
        "title": "Discovery call",
        "description": "Ask questions to uncover needs and qualify the opportunity.",
    },
]


async def seed_scenarios(db: AsyncSession) -> int:
    """Insert the default presets into an empty table. Returns rows added."""
    count = await db.scalar(select(func.count()).select_from(ScenarioPreset))
    if count:
        return 0
    for preset in DEFAULT_SCENARIOS:
        db.add(ScenarioPreset(phases=list(PHASE_ORDER), is_active=True, **preset))
    await db.commit()
    logger.info(f"Seeded {len(DEFAULT_SCENARIOS)} scenario presets")
    return len(DEFAULT_SCENARIOS)
