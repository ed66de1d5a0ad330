"""GlyphInstance - a placed, mutable occurrence of a glyph definition"""

import uuid as uuid_module
from typing import Dict, Any

from glyph_editor.constants import (
    SCALE_MIN, SCALE_MAX, DEFAULT_SCALE,
    DEFAULT_ROTATION, ROTATION_FULL_TURN, ROTATION_STEP,
    DEFAULT_OFFSET_X, DEFAULT_OFFSET_Y,
)
from glyph_editor.models.transform import Vec2


def new_instance_id() -> str:
    """Unique instance identifier"""
    return f"instance-{uuid_module.uuid4().hex}"


def clamp_scale(value: float) -> float:
    """Clamp a scale factor to [SCALE_MIN, SCALE_MAX]"""
    return max(SCALE_MIN, min(SCALE_MAX, float(value)))


def wrap_rotation(value: float) -> float:
    """Wrap degrees into [0, 360)"""
    wrapped = float(value) % ROTATION_FULL_TURN
    # -0.0 % 360 and values like -1e-14 % 360 can land on 360.0
    if wrapped >= ROTATION_FULL_TURN:
        wrapped = 0.0
    return wrapped + 0.0


class GlyphInstance:
    """Represents one placed glyph on the canvas.

    Holds the full transform state of the instance. The glyph is referenced
    by identifier only; an identifier missing from the catalog is a dangling
    reference and is skipped at render/export time.

    Properties:
        id: Unique instance identifier
        glyph_id: Catalog identifier of the glyph definition
        rotate: Rotation in degrees, wrapped into [0, 360)
        flip_x, flip_y: Mirror flags
        scale: Uniform (legacy) scale factor
        scale_x, scale_y: Independent horizontal/vertical factors
        offset_x, offset_y: Free offset in glyph-intrinsic (quadrat) units

    All scale factors are clamped to [SCALE_MIN, SCALE_MAX] on assignment.
    """

    def __init__(self, glyph_id: str, data: Dict[str, Any] = None, instance_id: str = None):
        """Create instance from data dictionary

        Args:
            glyph_id: Catalog identifier
            data: Dictionary with transform state, or None for defaults.
                Missing scale_x/scale_y default to the uniform scale.
            instance_id: Explicit identifier, generated when omitted
        """
        if data is None:
            data = {}

        self._id = instance_id or new_instance_id()
        self._glyph_id = str(glyph_id)
        self._rotate = wrap_rotation(data.get('rotate', DEFAULT_ROTATION))
        self._flip_x = bool(data.get('flip_x', False))
        self._flip_y = bool(data.get('flip_y', False))
        self._scale = clamp_scale(data.get('scale', DEFAULT_SCALE))
        scale_x = data.get('scale_x')
        scale_y = data.get('scale_y')
        self._scale_x = clamp_scale(self._scale if scale_x is None else scale_x)
        self._scale_y = clamp_scale(self._scale if scale_y is None else scale_y)
        self._offset = Vec2(
            float(data.get('offset_x', DEFAULT_OFFSET_X)),
            float(data.get('offset_y', DEFAULT_OFFSET_Y))
        )

    # ========================================
    # Identity
    # ========================================

    @property
    def id(self) -> str:
        return self._id

    @property
    def glyph_id(self) -> str:
        return self._glyph_id

    # ========================================
    # Transform state
    # ========================================

    @property
    def rotate(self) -> float:
        """Rotation in degrees [0, 360)"""
        return self._rotate

    @rotate.setter
    def rotate(self, value: float):
        self._rotate = wrap_rotation(value)

    @property
    def flip_x(self) -> bool:
        return self._flip_x

    @flip_x.setter
    def flip_x(self, value: bool):
        self._flip_x = bool(value)

    @property
    def flip_y(self) -> bool:
        return self._flip_y

    @flip_y.setter
    def flip_y(self, value: bool):
        self._flip_y = bool(value)

    @property
    def scale(self) -> float:
        """Uniform scale factor"""
        return self._scale

    @scale.setter
    def scale(self, value: float):
        self._scale = clamp_scale(value)

    @property
    def scale_x(self) -> float:
        return self._scale_x

    @scale_x.setter
    def scale_x(self, value: float):
        self._scale_x = clamp_scale(value)

    @property
    def scale_y(self) -> float:
        return self._scale_y

    @scale_y.setter
    def scale_y(self, value: float):
        self._scale_y = clamp_scale(value)

    @property
    def offset(self) -> Vec2:
        """Free offset in glyph-intrinsic units"""
        return self._offset

    @offset.setter
    def offset(self, value: Vec2):
        self._offset = Vec2(float(value.x), float(value.y))

    @property
    def offset_x(self) -> float:
        return self._offset.x

    @offset_x.setter
    def offset_x(self, value: float):
        self._offset = Vec2(float(value), self._offset.y)

    @property
    def offset_y(self) -> float:
        return self._offset.y

    @offset_y.setter
    def offset_y(self, value: float):
        self._offset = Vec2(self._offset.x, float(value))

    @property
    def max_scale(self) -> float:
        """Largest of the three scale factors (drives the cell step)"""
        return max(self._scale, self._scale_x, self._scale_y)

    # ========================================
    # Discrete commands
    # ========================================

    def rotate_by(self, degrees: float):
        self.rotate = self._rotate + degrees

    def rotate_90(self):
        self.rotate_by(ROTATION_STEP)

    def toggle_flip_x(self):
        self._flip_x = not self._flip_x

    def toggle_flip_y(self):
        self._flip_y = not self._flip_y

    def set_uniform_scale(self, value: float):
        """Set uniform scale and reset both axes to it"""
        self.scale = value
        self._scale_x = self._scale
        self._scale_y = self._scale

    def translate(self, dx: float, dy: float):
        """Add to the offset (glyph-intrinsic units)"""
        self._offset = Vec2(self._offset.x + float(dx), self._offset.y + float(dy))

    # ========================================
    # Serialization
    # ========================================

    def to_dict(self) -> Dict[str, Any]:
        """Transform state as a plain dict (no identifiers)"""
        return {
            'rotate': self._rotate,
            'flip_x': self._flip_x,
            'flip_y': self._flip_y,
            'scale': self._scale,
            'scale_x': self._scale_x,
            'scale_y': self._scale_y,
            'offset_x': self._offset.x,
            'offset_y': self._offset.y,
        }

    @classmethod
    def from_dict(cls, glyph_id: str, data: Dict[str, Any]) -> 'GlyphInstance':
        return cls(glyph_id, data)

    def copy(self, keep_id: bool = False) -> 'GlyphInstance':
        """Duplicate with a fresh identifier unless keep_id"""
        return GlyphInstance(self._glyph_id, self.to_dict(),
                             instance_id=self._id if keep_id else None)

    def __eq__(self, other):
        if not isinstance(other, GlyphInstance):
            return NotImplemented
        return (self._id == other._id and self._glyph_id == other._glyph_id
                and self.to_dict() == other.to_dict())

    __hash__ = None

    def __repr__(self):
        return (f"GlyphInstance(id={self._id!r}, glyph_id={self._glyph_id!r}, "
                f"rotate={self._rotate}, scale={self._scale}, "
                f"scale_x={self._scale_x}, scale_y={self._scale_y}, "
                f"flip=({self._flip_x}, {self._flip_y}), "
                f"offset=({self._offset.x}, {self._offset.y}))")
