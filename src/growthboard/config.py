"""Runtime settings for Growthboard.

Read from environment variables:
- GROWTHBOARD_MODE: "mock" (in-memory guest mode, default) or "live"
- GROWTHBOARD_DB_PATH: SQLite path or database URL for live mode
- GROWTHBOARD_REQUIRE_RESULT: reject completing experiments with no result
- GROWTHBOARD_CORS_ORIGINS: comma-separated UI origins
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal, Mapping

from growthboard.db.session import DEFAULT_DB_PATH

Mode = Literal["mock", "live"]

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",  # Vite/Next dev server
    "http://127.0.0.1:3000",
)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Application settings."""

    mode: Mode = "mock"
    db_path: str = str(DEFAULT_DB_PATH)
    require_result_on_complete: bool = False
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @property
    def is_mock(self) -> bool:
        return self.mode == "mock"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ (tests).

    Returns:
        Settings with defaults for anything unset.

    Raises:
        ValueError: If GROWTHBOARD_MODE is not "mock" or "live".
    """
    env = os.environ if environ is None else environ

    mode = env.get("GROWTHBOARD_MODE", "mock").strip().lower()
    if mode not in ("mock", "live"):
        raise ValueError(f"GROWTHBOARD_MODE must be 'mock' or 'live', got {mode!r}")

    origins_raw = env.get("GROWTHBOARD_CORS_ORIGINS")
    origins = (
        [o.strip() for o in origins_raw.split(",") if o.strip()]
        if origins_raw
        else list(DEFAULT_CORS_ORIGINS)
    )

    return Settings(
        mode=mode,  # type: ignore[arg-type]
        db_path=env.get("GROWTHBOARD_DB_PATH", str(DEFAULT_DB_PATH)),
        require_result_on_complete=env.get("GROWTHBOARD_REQUIRE_RESULT", "").strip().lower()
        in _TRUTHY,
        cors_origins=origins,
    )
