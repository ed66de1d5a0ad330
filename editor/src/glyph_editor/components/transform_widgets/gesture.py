"""Gesture state machine - pointer drags to transform deltas.

States:
    idle
    dragging(mode)   mode in DragMode (move, rotate, scale_uniform, scale_x, scale_y)

idle -> dragging on press over a handle; dragging -> idle on release,
pointer leave or loss of pointer capture. Each move event is a complete,
independent mutation of the captured instances: there is no separate
commit step and no rollback of an in-progress drag.

All inputs are canvas units. The controller never touches Qt; the overlay
widget converts screen pixels before calling in.
"""

import logging
import math
from typing import List, Optional, Sequence

from glyph_editor.constants import (
	QUADRAT, MOVE_SNAP_DIVISIONS, SCALE_DECIMALS, WHEEL_SCALE_STEP,
)
from glyph_editor.models.instance import clamp_scale, wrap_rotation
from glyph_editor.models.transform import Vec2
from glyph_editor.utils.compositor import offset_scale as compute_offset_scale
from glyph_editor.utils.svg_numbers import round_half_up
from .drag_context import DragContext, DragMode, InstanceStart

logger = logging.getLogger(__name__)

STATE_IDLE = 'idle'
STATE_DRAGGING = 'dragging'

# Shift-rotate snaps to this many degrees
ROTATION_SNAP_DEGREES = 45


def snap(value: float, step: float) -> float:
	return round_half_up(value / step) * step


def scaled(start: float, ratio: float) -> float:
	"""Apply a drag ratio to a start scale: clamp, then round to 2 decimals"""
	return round_half_up(clamp_scale(start * ratio), SCALE_DECIMALS)


class GestureController:
	"""Interprets one pointer drag at a time into instance mutations.

	Usage:
		controller = GestureController()
		controller.begin(DragMode.ROTATE, pointer, instances, pivot, cell_step)
		controller.update(pointer)      # on every pointer move
		controller.end()                # release / leave / capture lost
	"""

	def __init__(self, snap_moves: bool = False):
		self.snap_moves = snap_moves
		self._context: Optional[DragContext] = None
		self._instances: List = []

	# ========================================
	# State
	# ========================================

	@property
	def state(self) -> str:
		return STATE_DRAGGING if self._context is not None else STATE_IDLE

	@property
	def is_dragging(self) -> bool:
		return self._context is not None

	@property
	def mode(self) -> Optional[DragMode]:
		return self._context.mode if self._context else None

	@property
	def context(self) -> Optional[DragContext]:
		return self._context

	@property
	def render_pivot(self) -> Optional[Vec2]:
		"""Shared pivot the compositor should use while a group drag is active.

		Only multi-instance rotate/scale drags share a pivot; moves and
		single-instance drags render about each instance's own cell.
		"""
		ctx = self._context
		if ctx is None or not ctx.is_multi_selection or ctx.mode == DragMode.MOVE:
			return None
		return ctx.pivot

	# ========================================
	# Transitions
	# ========================================

	def begin(self, mode: DragMode, pointer: Vec2, instances: Sequence, pivot: Vec2,
	          cell_step: float, modifiers=None) -> bool:
		"""idle -> dragging(mode). Captures every start value.

		Returns False (and changes nothing) when a drag is already active or
		there is nothing to manipulate.
		"""
		if self._context is not None:
			logger.debug("Ignoring press: a %s drag is already active", self._context.mode.value)
			return False
		if not instances:
			return False

		dx = pointer.x - pivot.x
		dy = pointer.y - pivot.y
		self._instances = list(instances)
		self._context = DragContext(
			mode=mode,
			start_pointer=Vec2(pointer.x, pointer.y),
			pivot=Vec2(pivot.x, pivot.y),
			offset_scale=compute_offset_scale(cell_step),
			starts={inst.id: InstanceStart.capture(inst) for inst in self._instances},
			start_angle=math.atan2(dy, dx),
			start_distance=math.hypot(dx, dy) or 1.0,
			start_distance_x=abs(dx) or 1.0,
			start_distance_y=abs(dy) or 1.0,
			snap_step=QUADRAT / MOVE_SNAP_DIVISIONS if self.snap_moves else None,
			is_multi_selection=len(self._instances) > 1,
			modifiers=set(modifiers or ()),
		)
		return True

	def update(self, pointer: Vec2) -> List:
		"""Apply the drag for the current pointer position.

		Returns the mutated instances (empty when idle).
		"""
		ctx = self._context
		if ctx is None:
			return []

		if ctx.mode == DragMode.MOVE:
			self._apply_move(ctx, pointer)
		elif ctx.mode == DragMode.ROTATE:
			self._apply_rotate(ctx, pointer)
		elif ctx.mode == DragMode.SCALE_UNIFORM:
			ratio = math.hypot(pointer.x - ctx.pivot.x, pointer.y - ctx.pivot.y) / ctx.start_distance
			for inst in self._instances:
				start = ctx.starts[inst.id]
				inst.scale = scaled(start.scale, ratio)
				inst.scale_x = scaled(start.scale_x, ratio)
				inst.scale_y = scaled(start.scale_y, ratio)
		elif ctx.mode == DragMode.SCALE_X:
			ratio = abs(pointer.x - ctx.pivot.x) / ctx.start_distance_x
			for inst in self._instances:
				inst.scale_x = scaled(ctx.starts[inst.id].scale_x, ratio)
		elif ctx.mode == DragMode.SCALE_Y:
			ratio = abs(pointer.y - ctx.pivot.y) / ctx.start_distance_y
			for inst in self._instances:
				inst.scale_y = scaled(ctx.starts[inst.id].scale_y, ratio)
		return list(self._instances)

	def end(self) -> bool:
		"""dragging -> idle. Returns whether a drag was active."""
		was_dragging = self._context is not None
		self._context = None
		self._instances = []
		return was_dragging

	# Pointer-event names
	press = begin
	move = update

	# Every way a drag can stop is the same transition
	release = end
	leave = end
	capture_lost = end

	# ========================================
	# Mode implementations
	# ========================================

	def _apply_move(self, ctx: DragContext, pointer: Vec2):
		delta_x = (pointer.x - ctx.start_pointer.x) / ctx.offset_scale
		delta_y = (pointer.y - ctx.start_pointer.y) / ctx.offset_scale
		for inst in self._instances:
			start = ctx.starts[inst.id]
			new_x = start.offset_x + delta_x
			new_y = start.offset_y + delta_y
			if ctx.snap_step:
				new_x = snap(new_x, ctx.snap_step)
				new_y = snap(new_y, ctx.snap_step)
			inst.offset_x = new_x
			inst.offset_y = new_y

	def _apply_rotate(self, ctx: DragContext, pointer: Vec2):
		angle = math.atan2(pointer.y - ctx.pivot.y, pointer.x - ctx.pivot.x)
		delta = math.degrees(angle - ctx.start_angle)
		for inst in self._instances:
			value = ctx.starts[inst.id].rotate + delta
			if 'shift' in ctx.modifiers:
				value = snap(value, ROTATION_SNAP_DEGREES)
			inst.rotate = wrap_rotation(round_half_up(value))

	# ========================================
	# Wheel (stage only)
	# ========================================

	@staticmethod
	def wheel(instances: Sequence, notches: int) -> List:
		"""Step the uniform scale by WHEEL_SCALE_STEP per notch (positive = larger)"""
		for inst in instances:
			inst.set_uniform_scale(round_half_up(clamp_scale(inst.scale + notches * WHEEL_SCALE_STEP),
			                                    SCALE_DECIMALS))
		return list(instances)
