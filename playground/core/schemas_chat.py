"""Request/response models for the chat endpoint."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ChatTurn(BaseModel):
    """A single prior chat message."""

    role: Literal["user", "assistant"]
    content: str


class ChatAttachment(BaseModel):
    """An image sent along with the chat text."""

    kind: Literal["image"] = "image"
    data: str = Field(..., description="Base64 image data or a data: URL")
    mime_type: str = Field(default="image/png", description="MIME type when data is bare base64")

    @field_validator("data")
    @classmethod
    def data_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("attachment data is empty")
        return value.strip()

    def as_data_url(self) -> str:
        if self.data.startswith("data:"):
            return self.data
        return f"data:{self.mime_type};base64,{self.data}"


class ChatRequest(BaseModel):
    """Inbound chat turn."""

    text: str = ""
    history: list[ChatTurn] = Field(default_factory=list)
    attachment: ChatAttachment | None = None

    @property
    def is_empty(self) -> bool:
        return not self.text.strip() and self.attachment is None


class ChatDebug(BaseModel):
    """Routing details returned alongside the reply."""

    detected_project: str | None = None
    detected_component: str | None = None
    intent: str
    mode: str
    kb_mode: Literal["deterministic", "generative"] = Field(serialization_alias="kbMode")


class ChatResult(BaseModel):
    """Outbound chat response."""

    text: str
    debug: ChatDebug
