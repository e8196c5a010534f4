"""Chat request schemas."""

from typing import Literal

from pydantic import Field

from ..records import WireModel


class ChatMessage(WireModel):
    role: Literal["user", "assistant", "model"] = "user"
    content: str = Field("", max_length=20000)
    image_url: str | None = None


class ChatRequest(WireModel):
    messages: list[ChatMessage] = Field(..., min_length=1, max_length=100)
