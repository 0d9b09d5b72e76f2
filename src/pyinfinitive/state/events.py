"""Mirror change notifications."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyinfinitive.models.message import MessageSource


class UpdateOrigin(StrEnum):
    CHANNEL = "channel"
    HTTP = "http"


class MirrorChange(BaseModel):
    """Emitted after a mirror has been replaced."""

    model_config = ConfigDict(frozen=True)

    section: MessageSource
    origin: UpdateOrigin
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    data: dict[str, Any] = Field(default_factory=dict, description="New mirror contents")
