"""
Blend modes for compositing cels onto the canvas.

All math works on float64 arrays with values in 0.0-1.0:

- blend_channels(base, overlay, mode) implements the per-pixel blend
  function B(Cb, Cs) on RGB channels
- composite_over(canvas, cel, mode, opacity) mixes the blend result with
  the source according to the backdrop alpha, then applies premultiplied
  source-over and un-premultiplies the result

Separable blend modes use the W3C Compositing and Blending Level 1 formulas; hue,
saturation, color and luminosity use its Lum/Sat helpers. Addition,
subtract and divide follow Aseprite's own definitions.
"""

import numpy as np

from asestag.models.layer import BlendMode


# -----------------------------------------------------------------------------
# Non-separable helpers
# -----------------------------------------------------------------------------

def _lum(c: np.ndarray) -> np.ndarray:
    return 0.3 * c[..., 0:1] + 0.59 * c[..., 1:2] + 0.11 * c[..., 2:3]


def _clip_color(c: np.ndarray) -> np.ndarray:
    lum = _lum(c)
    c_min = c.min(axis=-1, keepdims=True)
    c_max = c.max(axis=-1, keepdims=True)

    with np.errstate(divide='ignore', invalid='ignore'):
        low = lum + (c - lum) * lum / (lum - c_min)
        high = lum + (c - lum) * (1 - lum) / (c_max - lum)

    c = np.where((c_min < 0) & (lum - c_min > 0), low, c)
    c = np.where((c_max > 1) & (c_max - lum > 0), high, c)
    return c


def _set_lum(c: np.ndarray, lum: np.ndarray) -> np.ndarray:
    return _clip_color(c + (lum - _lum(c)))


def _sat(c: np.ndarray) -> np.ndarray:
    return c.max(axis=-1, keepdims=True) - c.min(axis=-1, keepdims=True)


def _set_sat(c: np.ndarray, sat: np.ndarray) -> np.ndarray:
    c_min = c.min(axis=-1, keepdims=True)
    span = c.max(axis=-1, keepdims=True) - c_min
    with np.errstate(divide='ignore', invalid='ignore'):
        scaled = (c - c_min) * sat / span
    return np.where(span > 0, scaled, 0.0)


# -----------------------------------------------------------------------------
# Separable helpers
# -----------------------------------------------------------------------------

def _screen(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    return base + overlay - base * overlay


def _hard_light(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    return np.where(
        overlay <= 0.5,
        base * (2 * overlay),
        _screen(base, 2 * overlay - 1),
    )


def _color_dodge(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    with np.errstate(divide='ignore', invalid='ignore'):
        dodged = np.minimum(1.0, base / (1 - overlay))
    result = np.where(overlay >= 1, 1.0, dodged)
    return np.where(base <= 0, 0.0, result)


def _color_burn(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    with np.errstate(divide='ignore', invalid='ignore'):
        burned = 1 - np.minimum(1.0, (1 - base) / overlay)
    result = np.where(overlay <= 0, 0.0, burned)
    return np.where(base >= 1, 1.0, result)


def _soft_light(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    d = np.where(base <= 0.25, ((16 * base - 12) * base + 4) * base, np.sqrt(base))
    return np.where(
        overlay <= 0.5,
        base - (1 - 2 * overlay) * base * (1 - base),
        base + (2 * overlay - 1) * (d - base),
    )


def _divide(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    with np.errstate(divide='ignore', invalid='ignore'):
        divided = base / overlay
    result = np.where(base >= overlay, 1.0, divided)
    return np.where(base <= 0, 0.0, result)


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def blend_channels(base: np.ndarray, overlay: np.ndarray, mode: BlendMode) -> np.ndarray:
    """
    Apply a blend function to RGB values.

    Args:
        base: Backdrop colors, shape (..., 3), 0.0-1.0
        overlay: Source colors, same shape
        mode: Blend mode

    Returns:
        Blended colors, same shape, 0.0-1.0
    """
    mode = BlendMode(mode)

    if mode == BlendMode.NORMAL:
        return overlay
    elif mode == BlendMode.MULTIPLY:
        return base * overlay
    elif mode == BlendMode.SCREEN:
        return _screen(base, overlay)
    elif mode == BlendMode.OVERLAY:
        # Hard light with the layers swapped
        return _hard_light(overlay, base)
    elif mode == BlendMode.DARKEN:
        return np.minimum(base, overlay)
    elif mode == BlendMode.LIGHTEN:
        return np.maximum(base, overlay)
    elif mode == BlendMode.COLOR_DODGE:
        return _color_dodge(base, overlay)
    elif mode == BlendMode.COLOR_BURN:
        return _color_burn(base, overlay)
    elif mode == BlendMode.HARD_LIGHT:
        return _hard_light(base, overlay)
    elif mode == BlendMode.SOFT_LIGHT:
        return _soft_light(base, overlay)
    elif mode == BlendMode.DIFFERENCE:
        return np.abs(base - overlay)
    elif mode == BlendMode.EXCLUSION:
        return base + overlay - 2 * base * overlay
    elif mode == BlendMode.HUE:
        return _set_lum(_set_sat(overlay, _sat(base)), _lum(base))
    elif mode == BlendMode.SATURATION:
        return _set_lum(_set_sat(base, _sat(overlay)), _lum(base))
    elif mode == BlendMode.COLOR:
        return _set_lum(overlay, _lum(base))
    elif mode == BlendMode.LUMINOSITY:
        return _set_lum(base, _lum(overlay))
    elif mode == BlendMode.ADDITION:
        return np.minimum(base + overlay, 1.0)
    elif mode == BlendMode.SUBTRACT:
        return np.maximum(base - overlay, 0.0)
    elif mode == BlendMode.DIVIDE:
        return _divide(base, overlay)
    else:
        return overlay


def composite_over(
    canvas: np.ndarray,
    source: np.ndarray,
    mode: BlendMode = BlendMode.NORMAL,
    opacity: float = 1.0,
) -> np.ndarray:
    """
    Composite a source region over a canvas region of the same shape.

    Args:
        canvas: Backdrop RGBA, shape (h, w, 4), straight alpha, 0.0-1.0
        source: Source RGBA, shape (h, w, 4), straight alpha, 0.0-1.0
        mode: Blend mode
        opacity: Extra source opacity, 0.0-1.0

    Returns:
        New RGBA array, straight alpha, 0.0-1.0
    """
    cb = canvas[..., :3]
    ab = canvas[..., 3:4]
    cs = source[..., :3]
    a_s = source[..., 3:4] * opacity

    # Where the backdrop is transparent the source color shows unblended
    mixed = (1 - ab) * cs + ab * np.clip(blend_channels(cb, cs, mode), 0.0, 1.0)

    # Premultiplied source-over
    alpha = a_s + ab * (1 - a_s)
    premultiplied = a_s * mixed + ab * cb * (1 - a_s)

    result = np.zeros_like(canvas)
    with np.errstate(divide='ignore', invalid='ignore'):
        color = premultiplied / alpha
    result[..., :3] = np.where(alpha > 0, color, 0.0)
    result[..., 3:4] = alpha
    return result


def to_float(pixels: np.ndarray) -> np.ndarray:
    """uint8 RGBA to float64 0.0-1.0."""
    return pixels.astype(np.float64) / 255.0


def to_uint8(pixels: np.ndarray) -> np.ndarray:
    """float64 0.0-1.0 to uint8 RGBA, rounded."""
    return np.clip(np.rint(pixels * 255.0), 0, 255).astype(np.uint8)
