"""
Type definitions for the provider wire shape.
All types are Pydantic models.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from core.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
)


# ----- Content blocks -----

class TextBlock(BaseModel):
    """Plain text content."""
    type: Literal["text"] = "text"
    text: str


class ImageSource(BaseModel):
    """Inline base64 image payload."""
    type: Literal["base64"] = "base64"
    media_type: str
    data: str


class ImageBlock(BaseModel):
    """Image content."""
    type: Literal["image"] = "image"
    source: ImageSource


ContentBlock = Annotated[Union[TextBlock, ImageBlock], Field(discriminator="type")]


# ----- Turns -----

class Turn(BaseModel):
    """One role-tagged message sent to the provider."""
    role: Literal["user", "assistant"]
    content: list[ContentBlock] = Field(default_factory=list)


# ----- Generation -----

class GenerationParams(BaseModel):
    """Sampling parameters sourced from settings."""
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, alias="maxTokens", gt=0)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=1.0)
    top_p: float = Field(default=DEFAULT_TOP_P, alias="topP", ge=0.0, le=1.0)
    model: str = DEFAULT_MODEL

    class Config:
        populate_by_name = True


class Completion(BaseModel):
    """Normalized provider reply."""
    content: str
    model_id: str = Field(alias="modelId")
    stop_reason: Optional[str] = Field(default=None, alias="stopReason")
    usage: dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True
