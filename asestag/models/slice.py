"""
Slice - A named canvas rectangle that can change over time.

Each key applies from its frame index until the next key (or the end of the
animation). Keys may carry a 9-patch center rectangle, relative to the key's
bounds, and a pivot point, relative to the key's origin.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .user_data import UserData


SLICE_FLAG_NINE_PATCH = 0x1
SLICE_FLAG_PIVOT = 0x2


class SliceCenter(BaseModel):
    """9-patch center rectangle, relative to the slice bounds."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(default=0)
    y: int = Field(default=0)
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)


class Pivot(BaseModel):
    """Pivot point, relative to the slice origin."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(default=0)
    y: int = Field(default=0)


class SliceKey(BaseModel):
    """Slice bounds valid from `frame_index` onwards."""

    model_config = ConfigDict(frozen=True)

    frame_index: int = Field(ge=0)
    x: int = Field(default=0)
    y: int = Field(default=0)
    width: int = Field(default=0, ge=0)  # 0 when hidden from this frame on
    height: int = Field(default=0, ge=0)
    center: Optional[SliceCenter] = Field(default=None)
    pivot: Optional[Pivot] = Field(default=None)


class Slice(BaseModel):
    """A named slice with its per-frame keys."""

    model_config = ConfigDict(frozen=True)

    name: str
    flags: int = Field(default=0)
    keys: tuple[SliceKey, ...] = Field(default_factory=tuple)
    user_data: Optional[UserData] = Field(default=None)

    @property
    def has_nine_patch(self) -> bool:
        return bool(self.flags & SLICE_FLAG_NINE_PATCH)

    @property
    def has_pivot(self) -> bool:
        return bool(self.flags & SLICE_FLAG_PIVOT)

    def key_for_frame(self, frame_index: int) -> Optional[SliceKey]:
        """
        Get the key in effect at a frame.

        Args:
            frame_index: Frame index

        Returns:
            The last key starting at or before the frame, or None if the
            slice has no key yet at that frame
        """
        current = None
        for key in self.keys:
            if key.frame_index > frame_index:
                break
            current = key
        return current
