"""
Transform Overlay - Interactive transform controls for selected glyphs

Provides a transparent widget drawn over the canvas with:
- Dashed selection box (body drag moves the selection)
- 4 corner handles for uniform scaling
- 4 edge handles for single-axis scaling
- Rotation handle above the box

In 'stage' mode it edits the first selected instance alone in one cell,
with quarter-cell snapped moves and wheel scaling.
"""

from PyQt5.QtWidgets import QWidget
from PyQt5.QtCore import Qt, QEvent, pyqtSignal
from PyQt5.QtGui import QPainter

from glyph_editor.constants import DEFAULT_ZOOM
from glyph_editor.models.transform import Affine, Vec2
from glyph_editor.services.selection_bounds import bounds_or_fallback, estimate_instance_bounds
from glyph_editor.utils.compositor import offset_scale
from glyph_editor.utils.layout import cell_center, stage_item
from .transform_widgets import GestureController, create_mode


class TransformOverlay(QWidget):
	"""Interactive transform overlay for the selected instances of a Scene"""

	# Signals
	transformChanged = pyqtSignal()  # Emitted after every applied drag step
	transformEnded = pyqtSignal()  # Emitted when a drag stops

	def __init__(self, scene, parent=None, mode='canvas', zoom=DEFAULT_ZOOM, snap_moves=None):
		super().__init__(parent)
		self.setAttribute(Qt.WA_TranslucentBackground)
		self.setMouseTracking(True)

		self.scene = scene
		self.mode_name = mode
		self.mode = create_mode(mode)
		if snap_moves is None:
			snap_moves = self.mode.snap_moves
		self.controller = GestureController(snap_moves=snap_moves)

		# View (canvas units -> widget pixels)
		self.zoom = zoom
		self.pan_x = 0.0
		self.pan_y = 0.0

		if parent:
			self.setGeometry(0, 0, parent.width(), parent.height())
			parent.installEventFilter(self)

	def eventFilter(self, obj, event):
		"""Handle parent resize to keep widget covering parent"""
		if event.type() == QEvent.Resize and obj == self.parent():
			self.setGeometry(0, 0, obj.width(), obj.height())
		return super().eventFilter(obj, event)

	# ========================================
	# View
	# ========================================

	def set_view(self, zoom, pan_x=0.0, pan_y=0.0):
		self.zoom = zoom
		self.pan_x = pan_x
		self.pan_y = pan_y
		self.update()

	def display_transform(self) -> Affine:
		"""Canvas units -> widget pixels"""
		return Affine.translation(self.pan_x, self.pan_y).compose(Affine.scaling(self.zoom))

	def screen_to_canvas(self, x, y) -> Vec2:
		inverse = self.display_transform().inverted()
		if inverse is None:
			return Vec2(0.0, 0.0)
		return Vec2(*inverse.map_point(x, y))

	# ========================================
	# Selection geometry
	# ========================================

	def _targets(self):
		"""(layout items, instances, cell_step) currently manipulated"""
		cell_step = self.scene.cell_step
		if self.mode_name == 'stage':
			selected = self.scene.selected_instances()
			if not selected:
				return [], [], cell_step
			item = stage_item(selected[0])
			return [item], [selected[0]], cell_step
		items = self.scene.selected_layout()
		return items, [item.instance for item in items], cell_step

	def _measure(self, items, cell_step):
		"""Screen-space corners of the single painted instance"""
		if len(items) != 1:
			return None
		glyph = self.scene.catalog.get(items[0].instance.glyph_id)
		if glyph is None:
			return None
		box = estimate_instance_bounds(items[0], glyph, cell_step, self.controller.render_pivot)
		return self.display_transform().map_points(box.corners())

	def selection_bounds(self):
		"""Canvas-space selection box (cell-sized fallback before measurement)"""
		items, _, cell_step = self._targets()
		return bounds_or_fallback(items, self.scene.catalog, cell_step,
		                          self._measure(items, cell_step), self.display_transform(),
		                          self.controller.render_pivot)

	def _pivot(self, items, cell_step, bounds):
		"""Rotation/scale pivot: the selection center, or the instance's own
		cell center plus its offset in the stage"""
		if self.mode_name == 'stage':
			instance = items[0].instance
			center = cell_center(items[0], cell_step)
			factor = offset_scale(cell_step)
			return Vec2(center.x + instance.offset_x * factor,
			            center.y + instance.offset_y * factor)
		if bounds is None:
			return cell_center(items[0], cell_step)
		return bounds.center

	def _screen_box(self, bounds):
		"""(center_x, center_y, half_w, half_h) of a canvas box in widget pixels"""
		(x0, y0), (x1, y1) = self.display_transform().map_points(
			[(bounds.x, bounds.y), (bounds.right, bounds.bottom)])
		return (x0 + x1) / 2, (y0 + y1) / 2, abs(x1 - x0) / 2, abs(y1 - y0) / 2

	# ========================================
	# Painting
	# ========================================

	def paintEvent(self, event):
		bounds = self.selection_bounds()
		if bounds is None:
			return
		painter = QPainter(self)
		painter.setRenderHint(QPainter.Antialiasing)
		center_x, center_y, half_w, half_h = self._screen_box(bounds)
		for handle_type in reversed(self.mode.check_order):
			self.mode.handles[handle_type].draw(painter, center_x, center_y, half_w, half_h)
		painter.end()

	# ========================================
	# Pointer events
	# ========================================

	def handle_at(self, x, y):
		bounds = self.selection_bounds()
		if bounds is None:
			return None
		return self.mode.get_handle_at_pos(x, y, *self._screen_box(bounds))

	def mousePressEvent(self, event):
		if event.button() != Qt.LeftButton:
			super().mousePressEvent(event)
			return
		pos = event.localPos()
		handle = self.handle_at(pos.x(), pos.y())
		items, instances, cell_step = self._targets()
		if handle is None or not instances:
			event.ignore()
			return

		bounds = self.selection_bounds()
		modifiers = set()
		if event.modifiers() & Qt.ShiftModifier:
			modifiers.add('shift')
		started = self.controller.begin(
			handle.drag_mode,
			self.screen_to_canvas(pos.x(), pos.y()),
			instances,
			self._pivot(items, cell_step, bounds),
			cell_step,
			modifiers,
		)
		if started:
			event.accept()
		else:
			event.ignore()

	def mouseMoveEvent(self, event):
		pos = event.localPos()
		if self.controller.is_dragging:
			self.controller.update(self.screen_to_canvas(pos.x(), pos.y()))
			self.transformChanged.emit()
			self.update()
			event.accept()
			return

		handle = self.handle_at(pos.x(), pos.y())
		self.setCursor(handle.get_cursor() if handle else Qt.ArrowCursor)
		super().mouseMoveEvent(event)

	def mouseReleaseEvent(self, event):
		if event.button() == Qt.LeftButton and self._stop_drag():
			event.accept()
			return
		super().mouseReleaseEvent(event)

	def leaveEvent(self, event):
		self._stop_drag()
		super().leaveEvent(event)

	def event(self, event):
		# Losing the mouse grab ends the drag like a release
		if event.type() == QEvent.UngrabMouse:
			self._stop_drag()
		return super().event(event)

	def wheelEvent(self, event):
		if self.mode_name != 'stage':
			event.ignore()
			return
		_, instances, _ = self._targets()
		delta = event.angleDelta().y()
		if not instances or delta == 0:
			event.ignore()
			return
		self.controller.wheel(instances[:1], 1 if delta > 0 else -1)
		self.transformChanged.emit()
		self.update()
		event.accept()

	def _stop_drag(self) -> bool:
		if not self.controller.end():
			return False
		self.transformEnded.emit()
		self.update()
		return True
