"""
Palette - Indexed color table of a document.

A file may emit several palette chunks (old 0x0004/0x0011 packets or the newer
0x2019 ranges); each one overwrites part of the table while parsing. The
palette a Document exposes is the sealed result of all of them.
"""

from typing import NamedTuple, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class Color(NamedTuple):
    """An RGBA8 color."""
    red: int
    green: int
    blue: int
    alpha: int = 255


TRANSPARENT = Color(0, 0, 0, 0)


class PaletteEntry(BaseModel):
    """A single palette slot."""

    model_config = ConfigDict(frozen=True)

    color: Color
    name: Optional[str] = Field(default=None)


class Palette(BaseModel):
    """
    Ordered palette entries.

    Index i of `entries` is the color an indexed pixel with value i resolves
    to.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[PaletteEntry, ...] = Field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> Color:
        return self.entries[index].color

    @property
    def colors(self) -> list[Color]:
        """All colors in index order."""
        return [entry.color for entry in self.entries]

    def to_array(self) -> np.ndarray:
        """
        Convert to a lookup table.

        Returns:
            Array of shape (N, 4), dtype uint8
        """
        if not self.entries:
            return np.zeros((0, 4), dtype=np.uint8)
        return np.array([tuple(entry.color) for entry in self.entries], dtype=np.uint8)
