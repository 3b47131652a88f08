"""Settings read from the environment (and a local ``.env`` file)."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Mapping of settings fields to environment variable names
ENV_VAR_KEYS = {
    "api_url": "TRIPPAL_API_URL",
    "db_path": "TRIPPAL_DB_PATH",
    "http_timeout": "TRIPPAL_HTTP_TIMEOUT",
    "history_limit": "TRIPPAL_HISTORY_LIMIT",
    "log_level": "TRIPPAL_LOG_LEVEL",
}


class Settings(BaseModel):
    api_url: str = "http://localhost:3001"
    db_path: Path = Path("db.json")
    http_timeout: float = Field(default=10.0, gt=0)
    history_limit: int = Field(default=20, ge=0)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from environment variables.

        Unset or empty variables keep their defaults.
        """
        if load_env_file:
            load_dotenv()
        values = {}
        for field_name, env_var in ENV_VAR_KEYS.items():
            value = os.getenv(env_var, "")
            if value:
                values[field_name] = value
        return cls.model_validate(values)
