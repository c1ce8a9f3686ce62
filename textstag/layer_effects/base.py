"""
Base class for all text layers.

A layer is one visual effect applied to the text block. Each layer:
- Carries a typed params model (defaults, clamping and coercion live there)
- Reports how far its pixels can reach beyond the text block (get_expansion)
- Paints itself onto a raster surface at the shared glyph positions (paint)

Serialized form matches the layer documents written by the editor:
{
    "id": "uuid",
    "type": "dropShadow",
    "name": "Drop Shadow",
    "enabled": true,
    "params": {...}
}
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Tuple, Type
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..color import coerce_number, is_hex_color

if TYPE_CHECKING:
    from ..surface import Surface
    from ..text_layout import TextPlacement


@dataclass
class Expansion:
    """How far an effect reaches beyond the text block, per side (device pixels)."""
    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0

    @classmethod
    def uniform(cls, amount: float) -> 'Expansion':
        return cls(left=amount, top=amount, right=amount, bottom=amount)

    @classmethod
    def directional(cls, base: float, dx: float, dy: float) -> 'Expansion':
        """``base`` on every side, plus the offset on the side it travels towards."""
        return cls(
            left=base + max(0.0, -dx),
            top=base + max(0.0, -dy),
            right=base + max(0.0, dx),
            bottom=base + max(0.0, dy),
        )

    def merge(self, other: 'Expansion') -> 'Expansion':
        """Combine two expansions; overlapping effects share space (max, not sum)."""
        return Expansion(
            left=max(self.left, other.left),
            top=max(self.top, other.top),
            right=max(self.right, other.right),
            bottom=max(self.bottom, other.bottom),
        )


class EffectParams(BaseModel):
    """
    Base model for per-layer params.

    Numeric fields never fail validation: missing, non-numeric or non-finite
    input falls back to the field default, then clamps to ``value_ranges``.
    Color fields fall back to their default when not a ``#RRGGBB`` string.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        # Unknown params survive a load/save round trip
        extra='allow',
    )

    value_ranges: ClassVar[Dict[str, Tuple[float, float]]] = {}

    @model_validator(mode='before')
    @classmethod
    def _coerce_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, field in cls.model_fields.items():
            key = field.alias if field.alias in data else name
            if key not in data:
                continue
            default = field.get_default(call_default_factory=True)
            value = data[key]
            if field.annotation is float:
                lo, hi = cls.value_ranges.get(name, (-math.inf, math.inf))
                data[key] = min(hi, max(lo, coerce_number(value, default)))
            elif name == 'color' or name.endswith('_color'):
                data[key] = value.strip() if is_hex_color(value) else default
        return data


class LayerEffect(BaseModel):
    """
    Base class for all layer types.

    Subclasses must implement:
    - effect_type: Class variable with the layer type string
    - layer_type: Literal field pinned to effect_type
    - params: Typed params model
    - get_expansion(): Per-side reach of the effect
    - paint(): Draws the effect onto a surface
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
        arbitrary_types_allowed=True,
    )

    # Class variables (not serialized)
    effect_type: ClassVar[str] = "base"
    display_name: ClassVar[str] = "Layer"

    # Registry of layer classes by effect_type
    _registry: ClassVar[Dict[str, Type['LayerEffect']]] = {}

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    layer_type: str = Field(default="base", alias='type')
    name: str = Field(default='')
    enabled: bool = Field(default=True)
    params: Any = Field(default_factory=dict)

    def __init_subclass__(cls, **kwargs):
        """Register layer subclass in registry."""
        super().__init_subclass__(**kwargs)
        if cls.effect_type not in ("base", "unknown"):
            LayerEffect._registry[cls.effect_type] = cls

    def model_post_init(self, __context: Any) -> None:
        if not self.name:
            self.name = self.display_name

    @property
    def is_base_fill(self) -> bool:
        return self.layer_type in ('fill', 'gradientFill')

    @abstractmethod
    def get_expansion(self, scale: float, scale_x: float, scale_y: float) -> Expansion:
        """
        Get the margin this layer needs around the text block.

        Args:
            scale: Device/export scale multiplier
            scale_x: Horizontal text scale
            scale_y: Vertical text scale

        Returns:
            Expansion in device pixels
        """
        pass

    @abstractmethod
    def paint(self, surface: 'Surface', placement: 'TextPlacement') -> None:
        """Draw this layer onto ``surface`` at the glyph positions in ``placement``."""
        pass

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the editor's layer document format."""
        return self.model_dump(by_alias=True, mode='json', exclude_none=True)

    @classmethod
    def registered_types(cls) -> Tuple[str, ...]:
        return tuple(cls._registry)

    @classmethod
    def create(cls, effect_type: str) -> 'LayerEffect':
        """Create a layer of the given type with default params."""
        effect_class = cls._registry.get(effect_type)
        if effect_class is None:
            raise ValueError(f"Unknown layer type: {effect_type}")
        return effect_class()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayerEffect':
        """
        Reconstruct a layer from its document form.

        Unknown types are kept as UnknownLayer so they survive a save and are
        skipped when drawing.
        """
        data = dict(data)
        if not isinstance(data.get('params'), dict):
            data['params'] = {}
        effect_class = cls._registry.get(data.get('type'))
        if effect_class is None:
            data['type'] = str(data.get('type'))
            return UnknownLayer.model_validate(data)
        return effect_class.model_validate(data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, enabled={self.enabled})"


class UnknownLayer(LayerEffect):
    """A layer of a type this version does not know. Never draws, never expands."""

    effect_type: ClassVar[str] = "unknown"
    display_name: ClassVar[str] = "Unknown"

    params: Dict[str, Any] = Field(default_factory=dict)

    def get_expansion(self, scale: float, scale_x: float, scale_y: float) -> Expansion:
        return Expansion()

    def paint(self, surface: 'Surface', placement: 'TextPlacement') -> None:
        return None

