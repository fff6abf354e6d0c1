"""
Cel - A layer's content in one frame.

The payload is a tagged variant:

- InlinePixels: the cel owns its (decompressed, depth-native) pixel bytes
- LinkedCel: the cel reuses the pixels of the cel on the same layer in an
  earlier frame; resolved through Document.resolve_cel, never copied
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .user_data import UserData


class InlinePixels(BaseModel):
    """Pixel data stored in the cel chunk itself (raw or zlib-compressed)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline"] = "inline"
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    compressed: bool = Field(default=False)
    data: bytes = Field(default=b'', repr=False)


class LinkedCel(BaseModel):
    """Reference to the cel of the same layer in an earlier frame."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["linked"] = "linked"
    frame_index: int = Field(ge=0)


CelPayload = Annotated[Union[InlinePixels, LinkedCel], Field(discriminator='kind')]


class CelExtra(BaseModel):
    """Precise cel bounds from a 0x2006 chunk."""

    model_config = ConfigDict(frozen=True)

    flags: int = Field(default=0)
    x: float = Field(default=0.0)
    y: float = Field(default=0.0)
    width: float = Field(default=0.0)
    height: float = Field(default=0.0)

    @property
    def has_precise_bounds(self) -> bool:
        return bool(self.flags & 0x1)


class Cel(BaseModel):
    """A cel placed on the canvas at (x, y)."""

    model_config = ConfigDict(frozen=True)

    frame_index: int = Field(ge=0)
    layer_index: int = Field(ge=0)

    # Offset from canvas origin (can be negative)
    x: int = Field(default=0)
    y: int = Field(default=0)

    opacity: int = Field(default=255, ge=0, le=255)
    payload: CelPayload

    extra: Optional[CelExtra] = Field(default=None)
    user_data: Optional[UserData] = Field(default=None)

    @property
    def is_linked(self) -> bool:
        return isinstance(self.payload, LinkedCel)

    @property
    def width(self) -> Optional[int]:
        """Pixel width, or None for a linked cel (see Document.resolve_cel)."""
        if isinstance(self.payload, InlinePixels):
            return self.payload.width
        return None

    @property
    def height(self) -> Optional[int]:
        """Pixel height, or None for a linked cel (see Document.resolve_cel)."""
        if isinstance(self.payload, InlinePixels):
            return self.payload.height
        return None
