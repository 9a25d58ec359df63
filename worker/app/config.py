# worker/app/config.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve repo root: repo/ (since this file is repo/worker/app/config.py)
REPO_ENV = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """
    Central config for the analyze worker. Uses Pydantic v2 + pydantic-settings.

    - Loads env from the repo root .env if present
    - Ignores unknown env vars (prevents CI/local crashes)
    - Case-insensitive env keys
    - OPENAI_API_KEY defaults to empty so imports never fail; startup refuses
      to serve without it (see worker.app.main)
    """

    model_config = SettingsConfigDict(
        env_file=str(REPO_ENV),
        extra="ignore",
        case_sensitive=False,
    )

    # --- Remote vision API ----------------------------------------------------
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_BASE_URL: Optional[str] = None  # None -> SDK default endpoint
    OPENAI_MAX_RETRIES: int = 3
    OPENAI_TIMEOUT_S: float = 60.0
    ANALYZE_MAX_TOKENS: int = 500

    # --- Uploads --------------------------------------------------------------
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024  # 5 MiB hard cap
    MULTIPART_OVERHEAD_BYTES: int = 64 * 1024  # boundary + part headers allowance
    UPLOAD_DIR: str = "uploads"

    # --- HTTP -----------------------------------------------------------------
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    CORS_ORIGINS: str = "*"  # comma separated, "*" for any

    # --- Startup --------------------------------------------------------------
    STARTUP_PROBE: int = 1  # 1 -> test the key against the API before serving

    # --- Logging / telemetry --------------------------------------------------
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "data/logs"
    MAX_LOG_MB: int = 16

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def api_key_hint(self) -> str:
        """First characters of the key, safe to log."""
        if not self.OPENAI_API_KEY:
            return "<unset>"
        return self.OPENAI_API_KEY[:10] + "..."


# Singleton-style instance used by the app/tests
settings = Settings()
