"""
Document - The decoded, immutable representation of an Aseprite file.

A Document is produced by asestag.formats.parse_document and owns every
nested entity. Nothing is mutated after parsing, so the same Document can
be composited from several threads at once.

Example usage:
    doc = parse_document(data)

    # Enumerate names without compositing
    doc.tag_names(), doc.slice_names()

    # Look up a clip
    walk = doc.get_tag('walk')

    # Composite frames
    image = doc.composite(0)
    images = doc.composite_tag('walk')
"""

from typing import TYPE_CHECKING, Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from asestag.errors import InvalidCelReference

from .cel import Cel, InlinePixels, LinkedCel
from .frame import Frame
from .header import Header
from .layer import Layer
from .palette import Palette
from .slice import Slice
from .tag import Tag
from .user_data import UserData

if TYPE_CHECKING:
    from asestag.compositor import CompositeImage


class Document(BaseModel):
    """
    Decoded Aseprite document.

    Layers are ordered bottom to top; `frames[i].index == i`.
    """

    model_config = ConfigDict(frozen=True)

    header: Header
    frames: tuple[Frame, ...] = Field(default_factory=tuple)
    layers: tuple[Layer, ...] = Field(default_factory=tuple)
    palette: Palette = Field(default_factory=Palette)
    tags: tuple[Tag, ...] = Field(default_factory=tuple)
    slices: tuple[Slice, ...] = Field(default_factory=tuple)

    # User data chunks with nothing to attach to, in stream order
    unattached_user_data: tuple[UserData, ...] = Field(default_factory=tuple)

    # --- Dimensions ---

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    # --- Names ---

    def tag_names(self) -> list[str]:
        """All tag names in declaration order."""
        return [tag.name for tag in self.tags]

    def slice_names(self) -> list[str]:
        """All slice names in declaration order."""
        return [slice_.name for slice_ in self.slices]

    def get_tag(self, name: str) -> Optional[Tag]:
        """
        Get a tag by name.

        Args:
            name: Tag name

        Returns:
            Tag or None if not found
        """
        for tag in self.tags:
            if tag.name == name:
                return tag
        return None

    def get_slice(self, name: str) -> Optional[Slice]:
        """
        Get a slice by name.

        Args:
            name: Slice name

        Returns:
            Slice or None if not found
        """
        for slice_ in self.slices:
            if slice_.name == name:
                return slice_
        return None

    # --- Layers ---

    def get_layer(self, name: str) -> Optional[Layer]:
        """Get the first layer with the given name, or None."""
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def children_of(self, layer_index: int) -> list[Layer]:
        """Direct children of a group layer, bottom to top."""
        return [layer for layer in self.layers if layer.parent_index == layer_index]

    def ancestors_of(self, layer_index: int) -> Iterator[Layer]:
        """Parent groups of a layer, innermost first."""
        parent = self.layers[layer_index].parent_index
        while parent is not None:
            group = self.layers[parent]
            yield group
            parent = group.parent_index

    def is_layer_visible(self, layer_index: int) -> bool:
        """Whether a layer and all of its parent groups are visible."""
        if not self.layers[layer_index].visible:
            return False
        return all(group.visible for group in self.ancestors_of(layer_index))

    # --- Cels ---

    def cel_at(self, frame_index: int, layer_index: int) -> Optional[Cel]:
        """Get the cel of a layer in a frame, or None if the layer is empty there."""
        return self.frames[frame_index].get_cel(layer_index)

    def resolve_cel(self, cel: Cel) -> Cel:
        """
        Follow a linked cel to the cel that owns the pixels.

        Links always point strictly backwards, so the walk terminates.

        Args:
            cel: Any cel of this document

        Returns:
            The cel whose payload is InlinePixels
        """
        current = cel
        while isinstance(current.payload, LinkedCel):
            target_frame = current.payload.frame_index
            if target_frame >= current.frame_index:
                raise InvalidCelReference(
                    f"Cel on layer {cel.layer_index} in frame {current.frame_index} "
                    f"links to frame {target_frame}"
                )
            target = self.frames[target_frame].get_cel(current.layer_index)
            if target is None:
                raise InvalidCelReference(
                    f"Cel on layer {cel.layer_index} in frame {current.frame_index} "
                    f"links to empty frame {target_frame}"
                )
            current = target
        return current

    def cel_pixels(self, cel: Cel) -> InlinePixels:
        """Get the pixel payload of a cel, resolving links."""
        return self.resolve_cel(cel).payload

    # --- Timing ---

    def frame_durations(self, tag_name: Optional[str] = None) -> list[int]:
        """
        Get frame durations in milliseconds.

        Args:
            tag_name: Restrict to a tag's frame range (ascending order)

        Returns:
            Durations, or an empty list if the tag is not found
        """
        if tag_name is None:
            return [frame.duration_ms for frame in self.frames]
        tag = self.get_tag(tag_name)
        if tag is None:
            return []
        return [self.frames[i].duration_ms for i in tag.frames]

    # --- Compositing ---

    def composite(self, frame_index: int) -> 'CompositeImage':
        """Composite all visible layers of a frame into one RGBA image."""
        from asestag.compositor import composite_frame

        return composite_frame(self, frame_index)

    def composite_all(self) -> list['CompositeImage']:
        """Composite every frame."""
        from asestag.compositor import composite_frames

        return composite_frames(self)

    def composite_tag(self, name: str) -> Optional[list['CompositeImage']]:
        """
        Composite the frames of a tag in ascending frame order.

        Returns:
            Images, or None if the tag is not found
        """
        from asestag.compositor import composite_frames

        tag = self.get_tag(name)
        if tag is None:
            return None
        return composite_frames(self, tag.frames)

    # --- Serialization ---

    def to_info_dict(self) -> dict[str, Any]:
        """
        Describe the document without any pixel data.

        Returns:
            JSON-compatible dict with dimensions, timing, layers, tags,
            slices and palette colors
        """
        return {
            'width': self.width,
            'height': self.height,
            'colorDepth': int(self.header.color_depth),
            'frameCount': self.frame_count,
            'frameDurations': self.frame_durations(),
            'layers': [layer.model_dump(mode='json') for layer in self.layers],
            'tags': [tag.model_dump(mode='json') for tag in self.tags],
            'slices': [slice_.model_dump(mode='json') for slice_ in self.slices],
            'palette': [list(color) for color in self.palette.colors],
        }
