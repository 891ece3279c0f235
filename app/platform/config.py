from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "Page Audit"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # ── Storage ─────────────────────────────────
    STORAGE_BACKEND: Literal["memory", "database"] = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./page_audit.db"

    # ── Browser ─────────────────────────────────
    BROWSER_HEADLESS: bool = True
    BROWSER_ARGS: List[str] = ["--no-sandbox", "--disable-setuid-sandbox"]
    BROWSER_USER_AGENT: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )
    DESKTOP_VIEWPORT_WIDTH: int = 1920
    DESKTOP_VIEWPORT_HEIGHT: int = 1080
    MOBILE_VIEWPORT_WIDTH: int = 375
    MOBILE_VIEWPORT_HEIGHT: int = 667
    DEFAULT_TIMEOUT_MS: int = 30000
    BODY_WAIT_TIMEOUT_MS: int = 10000

    # ── Deep analysis ───────────────────────────
    # Generative path stays off unless explicitly enabled; heuristic analysis is the default.
    GENERATIVE_ANALYSIS_ENABLED: bool = False
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    DEEP_ANALYSIS_MODEL: str = "z-ai/glm-4.5-air:free"
    DEEP_ANALYSIS_TIMEOUT_SECONDS: float = 60.0
    DEEP_ANALYSIS_MAX_TOKENS: int = 4000
    PAGE_CONTENT_SAMPLE_CHARS: int = 2000

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
