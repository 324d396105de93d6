"""
Session-related models for the Arena Copilot runtime.

These describe:
- SessionState enum (UNINITIALIZED, ACTIVE, TERMINATED)
- SessionConfig (model + system instruction + reasoning budget)
- Turn entries (user / model)
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class SessionState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"
    TERMINATED = "TERMINATED"


class SessionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    system_instruction: str
    reasoning_budget: int = Field(default=0, ge=0)


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str          # "user" or "model"
    message: str       # raw text
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_message(self) -> Dict[str, str]:
        """Chat-completions message for this turn."""
        return {
            "role": "assistant" if self.role == "model" else "user",
            "content": self.message,
        }
