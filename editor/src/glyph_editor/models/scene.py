"""
Glyph Editor - Scene Data Model

Owns the composition: ordered rows of glyph instances, the active row that
receives insertions, the current selection and the glyph catalog.

This class handles:
- Row bookkeeping (add, remove, active row)
- Instance insertion (catalog pick, paste, import) and deletion
- Selection (single, toggle multi-select, clear)
- Discrete transform commands on the selection (rotate 90, flip, scale)
- Derived geometry (cell step, layout, canvas extent)

The Scene model is independent of UI:
- No Qt imports
- No rendering logic
- Gesture deltas are applied by the gesture controller through the
  instances it receives from selected_instances()

Usage:
    scene = Scene(catalog)
    a = scene.insert('G17')
    scene.select(a.id)
    scene.rotate_selected_90()
    items = scene.layout()
"""

import logging
from typing import Callable, Iterable, List, Optional, Tuple

from glyph_editor.models.catalog import GlyphCatalog
from glyph_editor.models.instance import GlyphInstance
from glyph_editor.models.transform import Vec2
from glyph_editor.utils.layout import (
    LayoutItem, layout_rows, compute_cell_step, canvas_extent,
)


class Scene:
    """Rows of glyph instances plus selection state.

    Properties:
        catalog: GlyphCatalog used to resolve instance references
        rows: Snapshot of the rows (tuple of tuples)
        active_row_index: Row receiving inserted instances
        selected_ids: Selected instance ids in selection order
        cell_step: Grid spacing derived from the largest scale factor
    """

    def __init__(self, catalog: GlyphCatalog = None, row_count: int = 1):
        self._logger = logging.getLogger('Scene')
        self.catalog = catalog if catalog is not None else GlyphCatalog()
        self._rows: List[List[GlyphInstance]] = [[] for _ in range(max(1, row_count))]
        self._active_row = 0
        self._selected_ids: List[str] = []

    # ========================================
    # Rows
    # ========================================

    @property
    def rows(self) -> Tuple[Tuple[GlyphInstance, ...], ...]:
        return tuple(tuple(row) for row in self._rows)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def active_row_index(self) -> int:
        return self._active_row

    @active_row_index.setter
    def active_row_index(self, index: int):
        self._active_row = max(0, min(int(index), len(self._rows) - 1))

    def add_row(self) -> int:
        """Append an empty row, make it active and return its index"""
        self._rows.append([])
        self._active_row = len(self._rows) - 1
        return self._active_row

    def remove_row(self, index: int):
        """Remove a row together with its instances (at least one row remains)"""
        if not 0 <= index < len(self._rows):
            raise IndexError(f"Row {index} out of range")
        removed = self._rows.pop(index)
        removed_ids = {inst.id for inst in removed}
        self._selected_ids = [i for i in self._selected_ids if i not in removed_ids]
        if not self._rows:
            self._rows.append([])
        self._active_row = min(self._active_row, len(self._rows) - 1)
        self._logger.debug("Removed row %d with %d instances", index, len(removed))

    # ========================================
    # Instances
    # ========================================

    def insert(self, glyph: object, row: int = None) -> GlyphInstance:
        """Append an instance to a row (active row by default).

        Args:
            glyph: Glyph id (str) or a ready GlyphInstance
            row: Target row index, None for the active row
        """
        instance = glyph if isinstance(glyph, GlyphInstance) else GlyphInstance(glyph)
        target = self._active_row if row is None else row
        if not 0 <= target < len(self._rows):
            raise IndexError(f"Row {target} out of range")
        self._rows[target].append(instance)
        if not self.catalog.has(instance.glyph_id):
            self._logger.debug("Instance %s references unknown glyph %s",
                               instance.id, instance.glyph_id)
        return instance

    def insert_many(self, instances: Iterable[GlyphInstance], row: int = None) -> List[GlyphInstance]:
        return [self.insert(instance, row) for instance in instances]

    def all_instances(self) -> List[GlyphInstance]:
        return [inst for row in self._rows for inst in row]

    def find(self, instance_id: str) -> Optional[Tuple[int, int, GlyphInstance]]:
        """(row, col, instance) for an id, or None"""
        for row_index, row in enumerate(self._rows):
            for col_index, inst in enumerate(row):
                if inst.id == instance_id:
                    return row_index, col_index, inst
        return None

    def get_instance(self, instance_id: str) -> Optional[GlyphInstance]:
        found = self.find(instance_id)
        return found[2] if found else None

    def remove_instances(self, instance_ids: Iterable[str]) -> int:
        """Delete instances by id, returns the number removed"""
        ids = set(instance_ids)
        removed = 0
        for row in self._rows:
            before = len(row)
            row[:] = [inst for inst in row if inst.id not in ids]
            removed += before - len(row)
        self._selected_ids = [i for i in self._selected_ids if i not in ids]
        return removed

    @property
    def instance_count(self) -> int:
        return sum(len(row) for row in self._rows)

    # ========================================
    # Selection
    # ========================================

    @property
    def selected_ids(self) -> List[str]:
        return list(self._selected_ids)

    def select(self, instance_id: str, multi: bool = False):
        """Select an instance; with multi, toggle it in the current selection"""
        if self.find(instance_id) is None:
            return
        if multi:
            if instance_id in self._selected_ids:
                self._selected_ids.remove(instance_id)
            else:
                self._selected_ids.append(instance_id)
        else:
            self._selected_ids = [instance_id]

    def set_selection(self, instance_ids: Iterable[str]):
        known = {inst.id for inst in self.all_instances()}
        self._selected_ids = [i for i in dict.fromkeys(instance_ids) if i in known]

    def clear_selection(self):
        self._selected_ids = []

    def selected_instances(self) -> List[GlyphInstance]:
        """Selected instances in layout (row-major) order"""
        selected = set(self._selected_ids)
        return [inst for inst in self.all_instances() if inst.id in selected]

    def selected_layout(self) -> List[LayoutItem]:
        selected = set(self._selected_ids)
        return [item for item in self.layout() if item.instance.id in selected]

    def apply_to_selected(self, updater: Callable[[GlyphInstance], None]) -> int:
        """Run updater on every selected instance, returns how many"""
        targets = self.selected_instances()
        for inst in targets:
            updater(inst)
        return len(targets)

    # ========================================
    # Discrete transform commands
    # ========================================

    def rotate_selected_90(self) -> int:
        return self.apply_to_selected(lambda inst: inst.rotate_90())

    def flip_selected_x(self) -> int:
        return self.apply_to_selected(lambda inst: inst.toggle_flip_x())

    def flip_selected_y(self) -> int:
        return self.apply_to_selected(lambda inst: inst.toggle_flip_y())

    def set_selected_scale(self, value: float) -> int:
        return self.apply_to_selected(lambda inst: inst.set_uniform_scale(value))

    def delete_selected(self) -> int:
        return self.remove_instances(list(self._selected_ids))

    # ========================================
    # Derived geometry
    # ========================================

    @property
    def cell_step(self) -> float:
        return compute_cell_step(self._rows)

    def layout(self) -> List[LayoutItem]:
        return layout_rows(self._rows, self.cell_step)

    def canvas_size(self) -> Vec2:
        return canvas_extent(self._rows, self.cell_step)
