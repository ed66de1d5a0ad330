"""Drag context dataclasses for the gesture state machine.

Everything a drag needs is captured once at pointer-down; every later
pointer-move is computed against this snapshot, never against the previous
frame, so there is no accumulated drift.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from glyph_editor.models.transform import Vec2


class DragMode(Enum):
	"""What a drag manipulates"""
	MOVE = 'move'
	ROTATE = 'rotate'
	SCALE_UNIFORM = 'scale_uniform'
	SCALE_X = 'scale_x'
	SCALE_Y = 'scale_y'


@dataclass(frozen=True)
class InstanceStart:
	"""Transform state of one instance at drag start"""
	offset_x: float
	offset_y: float
	rotate: float
	scale: float
	scale_x: float
	scale_y: float

	@classmethod
	def capture(cls, instance) -> 'InstanceStart':
		return cls(
			offset_x=instance.offset_x,
			offset_y=instance.offset_y,
			rotate=instance.rotate,
			scale=instance.scale,
			scale_x=instance.scale_x,
			scale_y=instance.scale_y,
		)


@dataclass
class DragContext:
	"""Unified drag state for one active drag.

	Coordinates are canvas units. Distances fall back to 1 when the pointer
	starts exactly on the pivot so ratios stay finite.
	"""
	mode: DragMode
	start_pointer: Vec2
	pivot: Vec2
	offset_scale: float  # canvas units per glyph-intrinsic unit
	starts: Dict[str, InstanceStart] = field(default_factory=dict)
	start_angle: float = 0.0
	start_distance: float = 1.0
	start_distance_x: float = 1.0
	start_distance_y: float = 1.0
	snap_step: Optional[float] = None  # glyph units, None = unsnapped
	is_multi_selection: bool = False
	modifiers: set = field(default_factory=set)  # {'ctrl', 'alt', 'shift'}
