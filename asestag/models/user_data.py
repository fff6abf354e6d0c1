"""UserData - Free-form text and color attached to a layer, cel, tag or slice."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .palette import Color


class UserData(BaseModel):
    """User data from a 0x2020 chunk."""

    model_config = ConfigDict(frozen=True)

    text: Optional[str] = Field(default=None)
    color: Optional[Color] = Field(default=None)
