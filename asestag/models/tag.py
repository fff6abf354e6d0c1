"""
Tag - A named frame range played as one animation clip.

Serialized by the 0x2018 chunk as an inclusive [from, to] range plus a loop
direction. Playback over a tag lives in asestag.animation.
"""

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .palette import Color
from .user_data import UserData


class AnimationDirection(IntEnum):
    """Loop direction, valued as stored in the tags chunk."""
    FORWARD = 0
    REVERSE = 1
    PING_PONG = 2
    PING_PONG_REVERSE = 3


class Tag(BaseModel):
    """An animation tag."""

    model_config = ConfigDict(frozen=True)

    name: str
    from_frame: int = Field(ge=0)
    to_frame: int = Field(ge=0)
    direction: AnimationDirection = Field(default=AnimationDirection.FORWARD)
    repeat: int = Field(default=0, ge=0)  # 0 = loop forever
    color: Optional[Color] = Field(default=None)
    user_data: Optional[UserData] = Field(default=None)

    @model_validator(mode='after')
    def _check_range(self) -> 'Tag':
        if self.from_frame > self.to_frame:
            raise ValueError(f"Tag '{self.name}' starts after it ends")
        return self

    @property
    def frames(self) -> range:
        """Frame indices covered by the tag, in ascending order."""
        return range(self.from_frame, self.to_frame + 1)

    @property
    def frame_count(self) -> int:
        return self.to_frame - self.from_frame + 1

    def contains(self, frame_index: int) -> bool:
        return self.from_frame <= frame_index <= self.to_frame
