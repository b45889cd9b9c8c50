"""
Process configuration for the Celestia service.

Values come from CELESTIA_* environment variables, optionally seeded
from a .env file at the project root. Only backend construction, the
worker pool and the HTTP listener consume them; the integrator and
simulator receive plain objects.

Usage:
    settings = Settings.from_env()
"""

import os
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from data.bodies import DEFAULT_BODIES_PATH
from storage import PersistenceTarget

ENV_PREFIX = "CELESTIA_"


def project_root() -> str:
    """Directory holding app.py and .env."""
    return os.path.dirname(os.path.abspath(__file__))


class Settings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    bodies_path: str = DEFAULT_BODIES_PATH
    cache_dir: str = os.path.join(project_root(), "data", "cache")
    persistence: PersistenceTarget = PersistenceTarget.CACHE
    mongo_uri: Optional[str] = None
    mongo_db: str = "celestia"
    mongo_collection: str = "celestia"
    mongo_timeout_ms: int = Field(default=2000, ge=1)
    workers: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)
    cache_resolution: Literal["day", "second"] = "day"
    log_level: str = "INFO"
    log_output: Literal["stdout", "json", "none"] = "stdout"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None,
                 dotenv_path: Optional[str] = None) -> "Settings":
        """
        Build settings from environment variables.

        Parameters
        ----------
        env : mapping, optional
            Variables to read instead of os.environ (.env is then skipped).
        dotenv_path : str, optional
            .env file to load into os.environ first. Defaults to
            <project_root>/.env; a missing file is ignored.

        Raises
        ------
        pydantic.ValidationError
            If a variable has an invalid value.
        """
        if env is None:
            load_dotenv(dotenv_path or os.path.join(project_root(), ".env"))
            env = os.environ
        raw = {}
        for field in cls.model_fields:
            value = env.get(ENV_PREFIX + field.upper())
            if value is not None and value != "":
                raw[field] = value
        return cls(**raw)
