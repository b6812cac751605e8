import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api import coach, feedback, notes, playbooks, scenarios, sessions

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

# Suppress noisy third-party loggers
logging.getLogger("google_genai").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Auto-create tables on startup (SQLite, no migration step)
    from app.models.base import async_session_factory, init_db
    await init_db()
    logger.info("Database tables created / verified")

    if settings.seed_scenarios:
        from app.services.scenario_presets import seed_scenarios
        async with async_session_factory() as db:
            await seed_scenarios(db)

    mode = "ai available" if settings.gemini_api_key else "mock only"
    logger.info(f"Coach mode: default={settings.default_coach_mode} ({mode})")
    yield


app = FastAPI(
    title="SalesDojo API",
    description="Sales roleplay, transcript rating and notes Q&A backend",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount REST routes
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
app.include_router(playbooks.router, prefix="/api/playbooks", tags=["playbooks"])
app.include_router(scenarios.router, prefix="/api/scenarios", tags=["scenarios"])
app.include_router(coach.router, prefix="/api", tags=["coach"])
app.include_router(feedback.router, prefix="/api", tags=["feedback"])
app.include_router(notes.router, prefix="/api", tags=["notes"])


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": VERSION}
