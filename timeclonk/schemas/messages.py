"""Message envelopes for the ``what``/``data`` JSON interface."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class UserMessage(BaseModel):
    what: str
    data: Any = None


class PublicMessage(BaseModel):
    what: str
    data: Any = None


class ServerResponse(BaseModel):
    what: str
    content: Any = None
