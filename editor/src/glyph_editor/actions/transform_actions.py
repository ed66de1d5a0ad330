"""Discrete transform operations - insert, rotate, flip, scale, delete"""
from glyph_editor.constants import SCALE_DECIMALS
from glyph_editor.models.instance import clamp_scale
from glyph_editor.utils.logger import report_status
from glyph_editor.utils.svg_numbers import round_half_up


class TransformActions:
	"""Handles toolbar/keyboard transform commands on the scene selection"""

	def __init__(self, scene, on_changed=None):
		"""
		Args:
			scene: Scene to operate on
			on_changed: Optional callable invoked after every mutation
		"""
		self.scene = scene
		self.on_changed = on_changed

	def _done(self, message, count=1):
		if count and self.on_changed:
			self.on_changed()
		if message:
			report_status(message)
		return count

	def insert_glyph(self, glyph_id):
		"""Append a default instance to the active row"""
		instance = self.scene.insert(glyph_id)
		self._done(f"Inserted {glyph_id}")
		return instance

	def rotate_90(self):
		"""Rotate selected instances by 90 degrees"""
		return self._done("Rotate 90 deg", self.scene.rotate_selected_90())

	def flip_x(self):
		"""Flip selected instances horizontally"""
		return self._done("Flip horizontal", self.scene.flip_selected_x())

	def flip_y(self):
		"""Flip selected instances vertically"""
		return self._done("Flip vertical", self.scene.flip_selected_y())

	def set_scale(self, value):
		"""Set uniform scale (both axes follow) on the selection"""
		value = round_half_up(clamp_scale(value), SCALE_DECIMALS)
		count = self.scene.set_selected_scale(value)
		return self._done(None, count)

	def delete_selection(self):
		"""Remove selected instances"""
		if not self.scene.selected_ids:
			return 0
		return self._done("Deleted selection", self.scene.delete_selected())
