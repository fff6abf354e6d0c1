"""
Tag playback.

Pure functions that step through a tag's frame range according to its
direction. Nothing here holds state between calls; a caller drives playback
by feeding back the (frame, forward) pair from next_frame, or asks
frame_at_time for the frame shown after some elapsed time.

Example:
    walk = doc.get_tag('walk')
    list(frame_sequence(walk, 8))        # ping-pong [2,5]: 2,3,4,5,4,3,2,3
    frame_at_time(doc, walk, 450)        # frame shown 450 ms in
"""

from typing import TYPE_CHECKING, Iterator, Optional

from asestag.models.tag import AnimationDirection, Tag

if TYPE_CHECKING:
    from asestag.models import Document


_PING_PONG = (AnimationDirection.PING_PONG, AnimationDirection.PING_PONG_REVERSE)


def start_frame(tag: Tag) -> tuple[int, bool]:
    """
    First frame of a tag and the initial travel direction.

    Returns:
        (frame index, forward)
    """
    if tag.direction in (AnimationDirection.REVERSE, AnimationDirection.PING_PONG_REVERSE):
        return tag.to_frame, False
    return tag.from_frame, True


def next_frame(tag: Tag, current: int, forward: bool = True) -> tuple[int, bool]:
    """
    Step one frame through a tag.

    Args:
        tag: Tag being played
        current: Frame shown now
        forward: Travel direction (only meaningful for ping-pong tags)

    Returns:
        (next frame index, forward). A frame outside the tag restarts it.
    """
    if not tag.contains(current):
        return start_frame(tag)

    first, last = tag.from_frame, tag.to_frame

    if tag.direction == AnimationDirection.FORWARD:
        return (current + 1 if current < last else first), True

    if tag.direction == AnimationDirection.REVERSE:
        return (current - 1 if current > first else last), False

    # Ping-pong: bounce without showing the end frames twice
    if first == last:
        return first, forward
    if forward:
        if current < last:
            return current + 1, True
        return current - 1, False
    if current > first:
        return current - 1, False
    return current + 1, True


def frame_sequence(tag: Tag, steps: int, start: Optional[int] = None) -> Iterator[int]:
    """
    Yield the frames a tag shows, one per step.

    Args:
        tag: Tag to play
        steps: Number of frames to yield
        start: Frame to start on (default: the tag's first frame for its
            direction)
    """
    frame, forward = start_frame(tag)
    if start is not None:
        frame = start
    for _ in range(steps):
        yield frame
        frame, forward = next_frame(tag, frame, forward)


def cycle_length(tag: Tag) -> int:
    """Number of steps after which the tag's frame sequence repeats."""
    if tag.direction in _PING_PONG and tag.frame_count > 1:
        return 2 * (tag.frame_count - 1)
    return tag.frame_count


def total_steps(tag: Tag) -> Optional[int]:
    """
    Steps a tag plays before stopping, or None when it loops forever.

    One repetition is one pass over the frame range; for ping-pong tags each
    pass after the first skips the frame it bounced on.
    """
    if tag.repeat == 0:
        return None
    if tag.direction in _PING_PONG:
        return tag.frame_count + (tag.repeat - 1) * max(tag.frame_count - 1, 0)
    return tag.frame_count * tag.repeat


def frame_at_time(document: 'Document', tag: Tag, elapsed_ms: float) -> int:
    """
    Frame a tag shows after playing for some time.

    Args:
        document: Document the tag belongs to (for frame durations)
        tag: Tag to play
        elapsed_ms: Milliseconds since the tag started

    Returns:
        Frame index. A tag with a finite repeat count stays on its final
        frame once it has finished.
    """
    if elapsed_ms < 0:
        raise ValueError(f"Elapsed time must not be negative, got {elapsed_ms}")

    steps = total_steps(tag)
    looping = steps is None
    sequence = list(frame_sequence(tag, cycle_length(tag) if looping else steps))
    durations = [document.frames[frame].duration_ms for frame in sequence]
    total = sum(durations)

    if looping:
        elapsed_ms = elapsed_ms % total
    elif elapsed_ms >= total:
        return sequence[-1]

    for frame, duration in zip(sequence, durations):
        if elapsed_ms < duration:
            return frame
        elapsed_ms -= duration
    return sequence[-1]
