"""
Frame compositing.

Flattens the visible layers of one frame into a single RGBA8 image of the
canvas size:

1. Start from a fully transparent canvas
2. Walk layers bottom to top, skipping groups, reference layers and any
   layer hidden by its own flag or by a parent group
3. Resolve the layer's cel in the frame (following links to earlier frames)
4. Convert the cel pixels to RGBA and blend them at the cel offset, clipped
   to the canvas, with opacity = layer opacity * cel opacity

Compositing only reads the Document, so frames can be composited in
parallel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional

import numpy as np
from PIL import Image

from .blend import composite_over, to_float, to_uint8
from .color import resolve_pixels

if TYPE_CHECKING:
    from asestag.models import Document


@dataclass
class CompositeImage:
    """A composited frame.

    :ivar frame_index: Frame the image was composited from
    :ivar width: Image width (canvas width)
    :ivar height: Image height (canvas height)
    :ivar pixels: RGBA8 pixels of shape (height, width, 4)
    """
    frame_index: int
    width: int
    height: int
    pixels: np.ndarray = field(repr=False)

    def to_pil(self) -> Image.Image:
        """Convert to a PIL image in RGBA mode."""
        return Image.fromarray(self.pixels)

    def to_bytes(self) -> bytes:
        """Raw RGBA bytes, row-major."""
        return self.pixels.tobytes()

    def crop(self, x: int, y: int, width: int, height: int) -> CompositeImage:
        """Cut out a rectangle, clipped to the image bounds."""
        x0 = min(max(x, 0), self.width)
        y0 = min(max(y, 0), self.height)
        x1 = min(max(x + width, x0), self.width)
        y1 = min(max(y + height, y0), self.height)
        return CompositeImage(
            frame_index=self.frame_index,
            width=x1 - x0,
            height=y1 - y0,
            pixels=self.pixels[y0:y1, x0:x1].copy(),
        )


def composite_frame(document: Document, frame_index: int) -> CompositeImage:
    """
    Composite one frame.

    :param document: Parsed document
    :param frame_index: Frame to composite
    :returns: Image of exactly document.width x document.height
    :raises IndexError: If the frame index is out of range
    """
    if not 0 <= frame_index < document.frame_count:
        raise IndexError(
            f"Frame {frame_index} out of range (document has {document.frame_count} frames)"
        )

    canvas_w, canvas_h = document.width, document.height
    canvas = np.zeros((canvas_h, canvas_w, 4), dtype=np.float64)
    frame = document.frames[frame_index]
    depth = document.header.color_depth
    transparent_index = document.header.transparent_color_index

    for layer in document.layers:
        if not layer.has_content() or not document.is_layer_visible(layer.index):
            continue
        cel = frame.get_cel(layer.index)
        if cel is None:
            continue

        pixels = document.cel_pixels(cel)
        if pixels.width == 0 or pixels.height == 0:
            continue

        # Clip the cel rectangle to the canvas
        x0, y0 = max(cel.x, 0), max(cel.y, 0)
        x1 = min(cel.x + pixels.width, canvas_w)
        y1 = min(cel.y + pixels.height, canvas_h)
        if x1 <= x0 or y1 <= y0:
            continue

        rgba = resolve_pixels(
            pixels.data,
            pixels.width,
            pixels.height,
            depth,
            palette=document.palette,
            transparent_index=transparent_index,
        )
        source = rgba[y0 - cel.y:y1 - cel.y, x0 - cel.x:x1 - cel.x]
        opacity = (layer.opacity / 255.0) * (cel.opacity / 255.0)

        canvas[y0:y1, x0:x1] = composite_over(
            canvas[y0:y1, x0:x1],
            to_float(source),
            layer.blend_mode,
            opacity,
        )

    return CompositeImage(
        frame_index=frame_index,
        width=canvas_w,
        height=canvas_h,
        pixels=to_uint8(canvas),
    )


def composite_frames(
    document: Document,
    frames: Optional[Iterable[int]] = None,
) -> list[CompositeImage]:
    """
    Composite several frames.

    :param document: Parsed document
    :param frames: Frame indices (default: every frame)
    :returns: One image per requested frame, in request order
    """
    if frames is None:
        frames = range(document.frame_count)
    return [composite_frame(document, index) for index in frames]
