"""Selection bounds calculator.

Computes the axis-aligned box, in canvas units, that encloses the rendered
extent of one or more selected instances. The box positions the manipulation
handles and doubles as the shared pivot while a multi-instance group is
being transformed.

Two strategies:
- Single instance with a measurement: the renderer's screen-space corner
  points are mapped back through the inverse of the canvas display
  transform, exact under any rotation.
- Multi-instance selection: union of each instance's estimated footprint,
  the content rectangle pushed through the compositor matrix. Always
  encloses the rendered glyph, may be looser than the painted pixels.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from glyph_editor.models.transform import Affine, Vec2
from glyph_editor.utils.compositor import build_matrix, content_corners
from glyph_editor.utils.layout import LayoutItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionBounds:
    """Axis-aligned box in canvas units (width/height never negative)"""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0:
            object.__setattr__(self, 'x', self.x + self.width)
            object.__setattr__(self, 'width', -self.width)
        if self.height < 0:
            object.__setattr__(self, 'y', self.y + self.height)
            object.__setattr__(self, 'height', -self.height)

    @classmethod
    def from_points(cls, points: Iterable) -> Optional['SelectionBounds']:
        pts = list(points)
        if not pts:
            return None
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    @property
    def center(self) -> Vec2:
        return Vec2(self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def half_size(self) -> Vec2:
        return Vec2(self.width / 2.0, self.height / 2.0)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def union(self, other: 'SelectionBounds') -> 'SelectionBounds':
        left = min(self.x, other.x)
        top = min(self.y, other.y)
        return SelectionBounds(left, top,
                               max(self.right, other.right) - left,
                               max(self.bottom, other.bottom) - top)

    def corners(self) -> List[tuple]:
        return [(self.x, self.y), (self.right, self.y),
                (self.right, self.bottom), (self.x, self.bottom)]


def union_bounds(boxes: Iterable[Optional[SelectionBounds]]) -> Optional[SelectionBounds]:
    result = None
    for box in boxes:
        if box is None:
            continue
        result = box if result is None else result.union(box)
    return result


def measure_rendered_bounds(screen_points: Optional[Sequence],
                            display_transform: Affine) -> Optional[SelectionBounds]:
    """Map rendered screen-space corners back into canvas units.

    Args:
        screen_points: Corner points of the painted geometry in screen pixels,
            None/empty when the instance has not been painted yet
        display_transform: Canvas -> screen transform of the view

    Returns:
        SelectionBounds, or None when unmeasured or the transform is singular
    """
    if not screen_points:
        return None
    inverse = display_transform.inverted()
    if inverse is None:
        logger.debug("Display transform is not invertible, no precise bounds")
        return None
    return SelectionBounds.from_points(inverse.map_points(screen_points))


def estimate_instance_bounds(item: LayoutItem, glyph, cell_step: float,
                             pivot: Optional[Vec2] = None) -> SelectionBounds:
    """Axis-aligned footprint of one instance from its transform state"""
    matrix = build_matrix(item, glyph, cell_step, pivot)
    return SelectionBounds.from_points(matrix.map_points(content_corners(glyph)))


def fallback_cell_bounds(item: LayoutItem, cell_step: float) -> SelectionBounds:
    """Cell-sized box on the item's own cell, used before first paint"""
    return SelectionBounds(item.x, item.y, cell_step, cell_step)


def compute_selection_bounds(items: Sequence[LayoutItem], catalog, cell_step: float,
                             measurement: Optional[Sequence] = None,
                             display_transform: Optional[Affine] = None,
                             pivot: Optional[Vec2] = None) -> Optional[SelectionBounds]:
    """Tightest known box around the selected items.

    Args:
        items: Layout items of the selected instances
        catalog: GlyphCatalog (dangling references are skipped)
        cell_step: Grid spacing
        measurement: Screen-space corners of the single selected instance
        display_transform: Canvas -> screen transform used for measurement
        pivot: Shared pivot currently applied to the group, if any

    Returns:
        SelectionBounds or None (empty selection, unmeasured single instance,
        or nothing resolvable). Callers fall back to fallback_cell_bounds().
    """
    if not items:
        return None

    if len(items) == 1:
        if measurement is None or display_transform is None:
            return None
        return measure_rendered_bounds(measurement, display_transform)

    boxes = []
    for item in items:
        glyph = catalog.get(item.instance.glyph_id)
        if glyph is None:
            continue
        boxes.append(estimate_instance_bounds(item, glyph, cell_step, pivot))
    return union_bounds(boxes)


def bounds_or_fallback(items: Sequence[LayoutItem], catalog, cell_step: float,
                       measurement: Optional[Sequence] = None,
                       display_transform: Optional[Affine] = None,
                       pivot: Optional[Vec2] = None) -> Optional[SelectionBounds]:
    """compute_selection_bounds() with the cell-sized fallback applied"""
    bounds = compute_selection_bounds(items, catalog, cell_step, measurement,
                                      display_transform, pivot)
    if bounds is not None or not items:
        return bounds
    return union_bounds(fallback_cell_bounds(item, cell_step) for item in items)
