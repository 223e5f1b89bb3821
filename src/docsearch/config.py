"""
Runtime configuration from environment variables.

Loads .env.local (local dev) or .env from the project root, then reads
DOCSEARCH_* variables with sensible defaults. Scoring constants are
deliberately not configurable here; they live next to the engine.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def load_environment(root: Path = PROJECT_ROOT) -> Optional[Path]:
    """
    Load environment variables from .env.local (highest priority) or .env.

    Returns:
        Path of the file that was loaded, or None if neither exists
    """
    env_local = root / ".env.local"
    env_file = root / ".env"

    for candidate in (env_local, env_file):
        if candidate.exists():
            load_dotenv(candidate, override=True)
            logger.debug(f"Loaded environment from {candidate}")
            return candidate
    return None


@dataclass(frozen=True)
class Settings:
    """Immutable application settings"""
    data_dir: Path
    public_dir: Path
    index_path: Path
    default_limit: int = 20
    max_limit: int = 50
    max_query_length: int = 200
    telemetry_capacity: int = 1000
    log_level: str = "INFO"
    log_file: str = "logs/docsearch.log"
    port: int = 8080

    @classmethod
    def from_env(cls) -> "Settings":
        data_dir = Path(os.getenv("DOCSEARCH_DATA_DIR", "data"))
        public_dir = Path(os.getenv("DOCSEARCH_PUBLIC_DIR", "public"))
        index_path = Path(
            os.getenv("DOCSEARCH_INDEX_PATH", str(data_dir / "combined-searchindex.json"))
        )
        return cls(
            data_dir=data_dir,
            public_dir=public_dir,
            index_path=index_path,
            default_limit=int(os.getenv("DOCSEARCH_DEFAULT_LIMIT", "20")),
            max_limit=int(os.getenv("DOCSEARCH_MAX_LIMIT", "50")),
            max_query_length=int(os.getenv("DOCSEARCH_MAX_QUERY_LENGTH", "200")),
            telemetry_capacity=int(os.getenv("DOCSEARCH_TELEMETRY_CAPACITY", "1000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE", "logs/docsearch.log"),
            port=int(os.getenv("PORT", "8080")),
        )


_settings: Optional[Settings] = None


def get_settings(force_reload: bool = False) -> Settings:
    """Return cached settings, reading the environment on first use"""
    global _settings
    if _settings is None or force_reload:
        load_environment()
        _settings = Settings.from_env()
    return _settings
