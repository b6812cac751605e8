from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database (SQLite by default, nothing to install)
    database_url: str = "sqlite+aiosqlite:///./salesdojo.db"

    # Gemini API (optional AI coaching path; mock mode works without it)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # "mock" or "ai", used when a request does not specify a mode
    default_coach_mode: str = "mock"

    # Notes retrieval
    ask_top_k: int = 5
    coach_notes_top_k: int = 3

    # App
    cors_origins: list[str] = ["http://localhost:3000"]
    debug: bool = True

    # Seed default scenario presets into an empty database on startup
    seed_scenarios: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
