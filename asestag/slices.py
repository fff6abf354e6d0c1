"""
Slice images.

Cuts a slice's rectangle out of a composited frame. Slices with 9-patch
data also yield the nine sub-images around and including the center:

    +----------+--------------+-----------+
    | TOP_LEFT |  TOP_CENTER  | TOP_RIGHT |
    +----------+--------------+-----------+
    | LEFT     |    CENTER    |   RIGHT   |
    | _CENTER  |              |  _CENTER  |
    +----------+--------------+-----------+
    | BOTTOM   |    BOTTOM    |  BOTTOM   |
    | _LEFT    |    _CENTER   |  _RIGHT   |
    +----------+--------------+-----------+

Rectangles are clipped to the canvas, so parts of a slice lying outside it
come back smaller (or empty).
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from asestag.compositor import CompositeImage, composite_frame
from asestag.models.slice import SliceKey

if TYPE_CHECKING:
    from asestag.models import Document


class NineSlice(str, Enum):
    """The nine regions of a 9-patch slice."""
    TOP_LEFT = "top_left"
    TOP_CENTER = "top_center"
    TOP_RIGHT = "top_right"
    LEFT_CENTER = "left_center"
    CENTER = "center"
    RIGHT_CENTER = "right_center"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_CENTER = "bottom_center"
    BOTTOM_RIGHT = "bottom_right"


_GRID = (
    (NineSlice.TOP_LEFT, NineSlice.TOP_CENTER, NineSlice.TOP_RIGHT),
    (NineSlice.LEFT_CENTER, NineSlice.CENTER, NineSlice.RIGHT_CENTER),
    (NineSlice.BOTTOM_LEFT, NineSlice.BOTTOM_CENTER, NineSlice.BOTTOM_RIGHT),
)


@dataclass
class SliceImage:
    """The image of a slice at one frame."""
    name: str
    frame_index: int
    key: SliceKey
    image: CompositeImage
    nine_slices: Optional[dict[NineSlice, CompositeImage]] = None


def _nine_slices(frame: CompositeImage, key: SliceKey) -> dict[NineSlice, CompositeImage]:
    center = key.center
    # Column and row edges relative to the slice origin
    xs = (0, center.x, center.x + center.width, key.width)
    ys = (0, center.y, center.y + center.height, key.height)

    regions = {}
    for row, names in enumerate(_GRID):
        for col, region in enumerate(names):
            regions[region] = frame.crop(
                key.x + xs[col],
                key.y + ys[row],
                xs[col + 1] - xs[col],
                ys[row + 1] - ys[row],
            )
    return regions


def slice_image(document: 'Document', name: str, frame: int = 0) -> Optional[SliceImage]:
    """
    Composite a frame and cut out a slice.

    Args:
        document: Parsed document
        name: Slice name
        frame: Frame index

    Returns:
        SliceImage, or None if the slice does not exist or has no key at
        or before the frame
    """
    slice_ = document.get_slice(name)
    if slice_ is None:
        return None
    key = slice_.key_for_frame(frame)
    if key is None:
        return None

    composite = composite_frame(document, frame)
    nine = _nine_slices(composite, key) if key.center is not None else None
    return SliceImage(
        name=name,
        frame_index=frame,
        key=key,
        image=composite.crop(key.x, key.y, key.width, key.height),
        nine_slices=nine,
    )
