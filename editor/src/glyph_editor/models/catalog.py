"""Glyph catalog - ordered lookup of glyph definitions by identifier"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from glyph_editor.models.glyph import GlyphDefinition


class GlyphCatalog:
    """Read-only view (for the core) of every known glyph definition.

    Builtin definitions come from the catalog loader, imported ones from
    pasted foreign SVG. Insertion order is preserved; adding a definition
    with an existing id replaces it in place.
    """

    def __init__(self, glyphs: Iterable[GlyphDefinition] = ()):
        self._logger = logging.getLogger('GlyphCatalog')
        self._glyphs: Dict[str, GlyphDefinition] = {}
        self.extend(glyphs)

    def add(self, glyph: GlyphDefinition):
        if glyph.id in self._glyphs:
            self._logger.debug("Replacing glyph definition %s", glyph.id)
        self._glyphs[glyph.id] = glyph

    def extend(self, glyphs: Iterable[GlyphDefinition]):
        for glyph in glyphs:
            self.add(glyph)

    def get(self, glyph_id: str) -> Optional[GlyphDefinition]:
        """Definition for an id, None for a dangling reference"""
        return self._glyphs.get(glyph_id)

    def has(self, glyph_id: str) -> bool:
        return glyph_id in self._glyphs

    def ids(self) -> List[str]:
        return list(self._glyphs)

    def imported(self) -> List[GlyphDefinition]:
        return [g for g in self._glyphs.values() if g.is_imported]

    def __contains__(self, glyph_id) -> bool:
        return glyph_id in self._glyphs

    def __iter__(self) -> Iterator[GlyphDefinition]:
        return iter(list(self._glyphs.values()))

    def __len__(self) -> int:
        return len(self._glyphs)
