"""Transform widget handle system - ABC-based handle architecture.

Each handle type is a class that knows:
- How to draw itself
- How to test if a mouse position hits it
- Which drag mode it starts

Handle geometry is evaluated in screen pixels from the selection box
mapped to the screen, so handles keep the same on-screen size at any zoom.
"""

from abc import ABC, abstractmethod
import math

from PyQt5.QtCore import QPointF, QRectF, Qt
from PyQt5.QtGui import QPen, QBrush, QColor

from .drag_context import DragMode

HANDLE_FILL = QColor(212, 160, 74)
HANDLE_OUTLINE = QColor(29, 59, 47)


class Handle(ABC):
	"""Abstract base class for transform handles."""

	drag_mode = DragMode.MOVE

	@abstractmethod
	def hit_test(self, mouse_x, mouse_y, center_x, center_y, half_w, half_h) -> bool:
		"""Test if mouse position hits this handle.

		Args:
			mouse_x, mouse_y: Mouse position in widget pixel coordinates
			center_x, center_y: Selection box center in widget pixels
			half_w, half_h: Selection box half-dimensions in pixels

		Returns:
			bool: True if mouse hits this handle
		"""
		pass

	@abstractmethod
	def draw(self, painter, center_x, center_y, half_w, half_h):
		"""Draw this handle with a QPainter (same arguments as hit_test)"""
		pass

	@abstractmethod
	def get_cursor(self):
		"""Qt cursor shape shown while hovering this handle"""
		pass


class _PointHandle(Handle):
	"""Handle drawn at a single point, hit within a radius"""

	def __init__(self, handle_size=8, hit_tolerance=4):
		self.handle_size = handle_size
		self.hit_tolerance = hit_tolerance

	@abstractmethod
	def pixel_pos(self, center_x, center_y, half_w, half_h):
		pass

	def hit_test(self, mouse_x, mouse_y, center_x, center_y, half_w, half_h):
		px, py = self.pixel_pos(center_x, center_y, half_w, half_h)
		return math.hypot(mouse_x - px, mouse_y - py) <= self.handle_size + self.hit_tolerance


class CornerHandle(_PointHandle):
	"""Corner handle for uniform scaling."""

	drag_mode = DragMode.SCALE_UNIFORM

	def __init__(self, corner_type, handle_size=8, hit_tolerance=4):
		"""
		Args:
			corner_type: 'tl', 'tr', 'bl', 'br'
			handle_size: Visual size of handle in pixels
			hit_tolerance: Extra pixels for hit detection
		"""
		super().__init__(handle_size, hit_tolerance)
		self.corner_type = corner_type
		self.norm_x, self.norm_y = {
			'tl': (-1, -1),
			'tr': (1, -1),
			'bl': (-1, 1),
			'br': (1, 1),
		}[corner_type]

	def pixel_pos(self, center_x, center_y, half_w, half_h):
		return center_x + self.norm_x * half_w, center_y + self.norm_y * half_h

	def draw(self, painter, center_x, center_y, half_w, half_h):
		px, py = self.pixel_pos(center_x, center_y, half_w, half_h)
		painter.setPen(QPen(HANDLE_OUTLINE, 1))
		painter.setBrush(QBrush(HANDLE_FILL))
		painter.drawRect(QRectF(px - self.handle_size / 2, py - self.handle_size / 2,
		                        self.handle_size, self.handle_size))

	def get_cursor(self):
		if self.corner_type in ('tl', 'br'):
			return Qt.SizeFDiagCursor
		return Qt.SizeBDiagCursor


class EdgeHandle(_PointHandle):
	"""Edge handle for single-axis scaling."""

	def __init__(self, edge_type, handle_size=8, hit_tolerance=4):
		"""
		Args:
			edge_type: 't', 'r', 'b', 'l'
		"""
		super().__init__(handle_size, hit_tolerance)
		self.edge_type = edge_type
		self.norm_x, self.norm_y = {
			't': (0, -1),
			'r': (1, 0),
			'b': (0, 1),
			'l': (-1, 0),
		}[edge_type]
		self.drag_mode = DragMode.SCALE_X if edge_type in ('l', 'r') else DragMode.SCALE_Y

	def pixel_pos(self, center_x, center_y, half_w, half_h):
		return center_x + self.norm_x * half_w, center_y + self.norm_y * half_h

	def draw(self, painter, center_x, center_y, half_w, half_h):
		px, py = self.pixel_pos(center_x, center_y, half_w, half_h)
		painter.setPen(QPen(HANDLE_OUTLINE, 1))
		painter.setBrush(QBrush(HANDLE_FILL))
		painter.drawEllipse(QPointF(px, py), self.handle_size / 2, self.handle_size / 2)

	def get_cursor(self):
		if self.edge_type in ('l', 'r'):
			return Qt.SizeHorCursor
		return Qt.SizeVerCursor


class RotationHandle(_PointHandle):
	"""Rotation handle (dot on an arm above the box)."""

	drag_mode = DragMode.ROTATE

	def __init__(self, offset=30, handle_size=8, hit_tolerance=4):
		"""
		Args:
			offset: Distance above top edge in pixels
		"""
		super().__init__(handle_size, hit_tolerance)
		self.offset = offset

	def pixel_pos(self, center_x, center_y, half_w, half_h):
		return center_x, center_y - half_h - self.offset

	def draw(self, painter, center_x, center_y, half_w, half_h):
		px, py = self.pixel_pos(center_x, center_y, half_w, half_h)
		painter.setPen(QPen(HANDLE_OUTLINE, 2))
		painter.drawLine(QPointF(center_x, center_y - half_h), QPointF(px, py))
		painter.setBrush(QBrush(HANDLE_FILL))
		painter.drawEllipse(QPointF(px, py), float(self.handle_size), float(self.handle_size))

	def get_cursor(self):
		return Qt.CrossCursor


class BodyHandle(Handle):
	"""The whole selection box; dragging it moves the selection."""

	drag_mode = DragMode.MOVE

	def hit_test(self, mouse_x, mouse_y, center_x, center_y, half_w, half_h):
		return abs(mouse_x - center_x) <= half_w and abs(mouse_y - center_y) <= half_h

	def draw(self, painter, center_x, center_y, half_w, half_h):
		pen = QPen(HANDLE_FILL, 1.5)
		pen.setStyle(Qt.DashLine)
		painter.setPen(pen)
		painter.setBrush(Qt.NoBrush)
		painter.drawRect(QRectF(center_x - half_w, center_y - half_h, half_w * 2, half_h * 2))

	def get_cursor(self):
		return Qt.SizeAllCursor
