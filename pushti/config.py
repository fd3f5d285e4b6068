from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the Pushti backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("PUSHTI_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("PUSHTI_DB_PATH") or (self.data_root / "pushti.db")
        ).expanduser()

        # Generative AI backend (OpenAI-compatible chat completions).
        self.ai_api_key: str | None = (
            os.environ.get("PUSHTI_AI_API_KEY") or os.environ.get("GEMINI_API_KEY")
        )
        self.ai_base_url: str = os.environ.get(
            "PUSHTI_AI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai"
        )
        self.ai_model: str = os.environ.get("PUSHTI_AI_MODEL", "gemini-2.0-flash")
        self.ai_timeout: float = float(os.environ.get("PUSHTI_AI_TIMEOUT", "30"))
        self.ai_temperature: float = float(os.environ.get("PUSHTI_AI_TEMPERATURE", "0.4"))
        self.ai_max_tokens: int = int(os.environ.get("PUSHTI_AI_MAX_TOKENS", "1024"))

        self.locale: str = (os.environ.get("PUSHTI_LOCALE") or "bn").strip() or "bn"
        self.log_level: str = (os.environ.get("PUSHTI_LOG_LEVEL") or "INFO").upper()
        self.host: str = os.environ.get("PUSHTI_HOST") or os.environ.get("HOST") or "127.0.0.1"
        self.port_raw: str = os.environ.get("PUSHTI_PORT") or os.environ.get("PORT") or "8000"

        cors = os.environ.get("PUSHTI_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
