"""Application configuration via environment variables."""

import json
from typing import Dict, List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Backend (system of record)
    BACKEND_API_URL: str = "http://localhost:5000/api"
    BACKEND_TIMEOUT_SECONDS: float = 15.0

    # Auth: JWT_SECRET MUST be set via environment / .env (no default).
    # Shared with the backend that issues the tokens.
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "info"
    CORS_ORIGINS: str = '["http://localhost:3000"]'
    RATE_LIMIT_DEFAULT: str = "60/minute"

    # Leave rules
    BACKDATE_LIMIT_DAYS: int = 35
    MAX_LEAVE_SPAN_DAYS: int = 365

    # Terminal approver per campus, e.g. '{"engineering": "principal", "pharmacy": "hr"}'
    TERMINAL_APPROVERS: str = "{}"
    DEFAULT_TERMINAL_APPROVER: str = "principal"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS JSON string into a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except (json.JSONDecodeError, TypeError):
            return ["http://localhost:3000"]

    @property
    def terminal_approvers_map(self) -> Dict[str, str]:
        """Parse TERMINAL_APPROVERS into a lower-cased campus → role mapping."""
        try:
            raw = json.loads(self.TERMINAL_APPROVERS)
        except (json.JSONDecodeError, TypeError):
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k).lower(): str(v).lower() for k, v in raw.items()}

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
