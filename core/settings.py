"""Runtime configuration for the advising dashboard."""

from __future__ import annotations

import os
from typing import List

DEFAULT_SOURCE_URL = (
    "https://script.google.com/macros/s/"
    "AKfycbwQBV_TvoJBiUbhTG5zxxwPu3mGDG-gAf4fWrqJWtUtEu6R6hGDVpZVvayYlAiRSbeY/exec"
)

SOURCE_URL = os.getenv("ADVISING_SOURCE_URL", DEFAULT_SOURCE_URL)
SOURCE_TIMEOUT = float(os.getenv("ADVISING_SOURCE_TIMEOUT", "30"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def cors_origins() -> List[str]:
    raw = os.getenv("ADVISING_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    return [o.strip() for o in raw.split(",") if o.strip()]
