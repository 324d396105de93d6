from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


# Gemini's OpenAI-compatible endpoint; any chat-completions provider works.
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class Settings:
    """
    Central configuration for Arena Copilot.

    Values are loaded once from environment variables (with sensible defaults)
    and then exposed via typed properties. Model choice is static per use
    case; there is no routing logic.
    """

    def __init__(self) -> None:
        # Provider / model configuration
        self._api_key = os.getenv("COPILOT_API_KEY") or os.getenv("GEMINI_API_KEY")
        self._base_url = os.getenv("COPILOT_BASE_URL") or DEFAULT_BASE_URL
        self._analysis_model = os.getenv("COPILOT_ANALYSIS_MODEL", "gemini-2.5-flash")
        self._chat_model = os.getenv("COPILOT_CHAT_MODEL", "gemini-3-pro-preview")
        # The OpenAI-compatible images endpoint only serves Imagen models.
        self._image_model = os.getenv(
            "COPILOT_IMAGE_MODEL",
            "imagen-4.0-generate-001",
        )

        # Reasoning budgets per use case
        self._interview_budget = _int_env("COPILOT_INTERVIEW_BUDGET", 1024)
        self._mentor_budget = _int_env("COPILOT_MENTOR_BUDGET", 2048)
        self._review_budget = _int_env("COPILOT_REVIEW_BUDGET", 2048)

        # Transport
        self._request_timeout = float(os.getenv("COPILOT_REQUEST_TIMEOUT", "120"))

        # Logging
        self._log_dir = Path(os.getenv("COPILOT_LOG_DIR", "runtime/data/logs"))
        self._log_level = os.getenv("COPILOT_LOG_LEVEL", "INFO").upper()

    # ------------------------------------------------------------------
    # Provider / model settings
    # ------------------------------------------------------------------

    @property
    def api_key(self) -> str:
        if not self._api_key:
            raise RuntimeError(
                "COPILOT_API_KEY (or GEMINI_API_KEY) is not set. Please export it "
                "in your environment or define it in a .env file."
            )
        return self._api_key

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    @property
    def analysis_model(self) -> str:
        return self._analysis_model

    @property
    def chat_model(self) -> str:
        return self._chat_model

    @property
    def image_model(self) -> str:
        return self._image_model

    # ------------------------------------------------------------------
    # Reasoning budgets
    # ------------------------------------------------------------------

    @property
    def interview_budget(self) -> int:
        return self._interview_budget

    @property
    def mentor_budget(self) -> int:
        return self._mentor_budget

    @property
    def review_budget(self) -> int:
        return self._review_budget

    # ------------------------------------------------------------------
    # Transport + logging
    # ------------------------------------------------------------------

    @property
    def request_timeout(self) -> float:
        return self._request_timeout

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    @property
    def log_level(self) -> str:
        return self._log_level


settings = Settings()
