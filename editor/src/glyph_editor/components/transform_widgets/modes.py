"""Transform widget modes - defines which handles are active for each mode."""

from glyph_editor.constants import (
	TRANSFORM_HANDLE_SIZE, TRANSFORM_ROTATION_HANDLE_OFFSET,
	TRANSFORM_HIT_TOLERANCE,
)
from .handles import CornerHandle, EdgeHandle, RotationHandle, BodyHandle


class TransformMode:
	"""Base class for transform modes."""

	# Handles checked first win
	check_order = ()
	# Stage snaps moves to the quarter grid, the canvas does not
	snap_moves = False
	# Whether more than one instance may be manipulated at once
	allows_multi_selection = True

	def __init__(self):
		self.handles = {}  # handle_type -> handle_object

	def get_handles(self):
		"""Return all handles for this mode."""
		return self.handles

	def get_handle_at_pos(self, mouse_x, mouse_y, center_x, center_y, half_w, half_h):
		"""Find which handle (if any) is at mouse position.

		Returns:
			Handle object or None
		"""
		for handle_type in self.check_order:
			handle = self.handles[handle_type]
			if handle.hit_test(mouse_x, mouse_y, center_x, center_y, half_w, half_h):
				return handle
		return None


class CanvasMode(TransformMode):
	"""Multi-select canvas - rotate handle, eight resize handles, body."""

	check_order = (
		'rotate',
		'tl', 'tr', 'bl', 'br',
		't', 'r', 'b', 'l',
		'body',
	)

	def __init__(self):
		super().__init__()
		self.handles = {
			# Corners (uniform scaling)
			'tl': CornerHandle('tl', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),
			'tr': CornerHandle('tr', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),
			'bl': CornerHandle('bl', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),
			'br': CornerHandle('br', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),

			# Edges (single-axis scaling)
			't': EdgeHandle('t', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),
			'r': EdgeHandle('r', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),
			'b': EdgeHandle('b', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),
			'l': EdgeHandle('l', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),

			'rotate': RotationHandle(TRANSFORM_ROTATION_HANDLE_OFFSET,
			                         TRANSFORM_HANDLE_SIZE,
			                         TRANSFORM_HIT_TOLERANCE),

			'body': BodyHandle(),
		}


class StageMode(TransformMode):
	"""Single-instance editor - rotate handle, one scale corner, body."""

	check_order = ('rotate', 'br', 'body')
	snap_moves = True
	allows_multi_selection = False

	def __init__(self):
		super().__init__()
		self.handles = {
			'rotate': RotationHandle(TRANSFORM_ROTATION_HANDLE_OFFSET,
			                         TRANSFORM_HANDLE_SIZE,
			                         TRANSFORM_HIT_TOLERANCE),
			'br': CornerHandle('br', TRANSFORM_HANDLE_SIZE, TRANSFORM_HIT_TOLERANCE),
			'body': BodyHandle(),
		}


# Mode registry
MODES = {
	'canvas': CanvasMode,
	'stage': StageMode,
}


def create_mode(mode_name):
	"""Factory function to create mode instances.

	Args:
		mode_name: 'canvas' or 'stage'

	Returns:
		TransformMode instance
	"""
	mode_class = MODES.get(mode_name, CanvasMode)
	return mode_class()
