"""Frame - One animation frame with its duration and cels."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .cel import Cel


class Frame(BaseModel):
    """A frame holding at most one cel per layer."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    duration_ms: int = Field(default=100, gt=0)
    cels: tuple[Cel, ...] = Field(default_factory=tuple)

    def get_cel(self, layer_index: int) -> Optional[Cel]:
        """
        Get the cel on a layer.

        Args:
            layer_index: Layer index

        Returns:
            Cel or None if the layer is empty in this frame
        """
        for cel in self.cels:
            if cel.layer_index == layer_index:
                return cel
        return None
