"""Grid layout for rows of glyph instances.

Rows are laid out top to bottom, instances left to right in append order.
Every instance gets its own square cell of ``cell_step`` canvas units.
"""

from dataclasses import dataclass
from typing import List, Sequence

from glyph_editor.constants import QUADRAT, MIN_CANVAS_COLUMNS
from glyph_editor.models.transform import Vec2


@dataclass(frozen=True)
class LayoutItem:
	"""Resolved grid placement of one instance for one frame"""
	instance: object
	row: int
	col: int
	x: float
	y: float


def layout_rows(rows: Sequence[Sequence], cell_step: float) -> List[LayoutItem]:
	"""Flatten rows into layout items.

	Order is row-major and follows append order inside a row, so identities
	never reshuffle between frames. Empty rows produce no items.

	Args:
		rows: Ordered rows of GlyphInstance
		cell_step: Grid spacing (positive)

	Returns:
		List of LayoutItem with x = col * cell_step, y = row * cell_step
	"""
	items = []
	for row_index, row in enumerate(rows):
		for col_index, instance in enumerate(row):
			items.append(LayoutItem(
				instance=instance,
				row=row_index,
				col=col_index,
				x=col_index * cell_step,
				y=row_index * cell_step,
			))
	return items


def compute_cell_step(rows: Sequence[Sequence]) -> float:
	"""Grid spacing grown by the largest scale factor in the scene.

	Enlarged instances push the grid apart so neighbours never overlap.
	"""
	largest = 1.0
	for row in rows:
		for instance in row:
			largest = max(largest, instance.max_scale)
	return QUADRAT * largest


def canvas_extent(rows: Sequence[Sequence], cell_step: float,
                  min_columns: int = MIN_CANVAS_COLUMNS) -> Vec2:
	"""Canvas size in canvas units (never smaller than one cell)"""
	columns = max([len(row) for row in rows] + [min_columns, 1])
	row_count = max(len(rows), 1)
	return Vec2(columns * cell_step, row_count * cell_step)


def cell_center(item: LayoutItem, cell_step: float) -> Vec2:
	"""Geometric center of the item's own grid cell"""
	return Vec2(item.x + cell_step / 2.0, item.y + cell_step / 2.0)


def stage_item(instance) -> LayoutItem:
	"""Layout item placing an instance alone in cell (0, 0), used by previews"""
	return LayoutItem(instance=instance, row=0, col=0, x=0.0, y=0.0)
