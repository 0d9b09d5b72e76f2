"""Live channel message envelope."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class MessageSource(StrEnum):
    """``source`` tags the backend is known to push."""

    TSTAT = "tstat"
    BLOWER = "blower"
    HEATPUMP = "heatpump"


class InboundMessage(BaseModel):
    """Decoded ``{"source": ..., "data": {...}}`` frame.

    ``source`` stays a plain string so unknown tags survive validation
    and can be ignored by the dispatcher.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    source: str
    data: dict[str, Any]

    @property
    def known_source(self) -> MessageSource | None:
        try:
            return MessageSource(self.source)
        except ValueError:
            return None
