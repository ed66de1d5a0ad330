"""Glyph definitions - immutable catalog entries.

A GlyphDefinition describes a reusable symbolic shape: its identifier, its
intrinsic coordinate space (view box), the bounds of its visible content
inside that space, and an opaque renderable body (SVG markup without the
root element).
"""

import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple
from xml.sax.saxutils import quoteattr

from glyph_editor.constants import DEFAULT_VIEW_BOX, QUADRAT
from glyph_editor.models.transform import Vec2
from glyph_editor.utils.svg_numbers import format_number, parse_number

_VIEW_BOX_SEPARATORS = re.compile(r'[\s,]+')


@dataclass(frozen=True)
class ViewBox:
    """Rectangle in a glyph's own coordinate space (origin + size)"""
    min_x: float
    min_y: float
    width: float
    height: float

    @classmethod
    def default(cls) -> 'ViewBox':
        return cls(*DEFAULT_VIEW_BOX)

    @property
    def center(self) -> Vec2:
        return Vec2(self.min_x + self.width / 2.0, self.min_y + self.height / 2.0)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def to_attribute(self) -> str:
        """Format as an SVG viewBox attribute value"""
        return ' '.join(format_number(v) for v in (self.min_x, self.min_y, self.width, self.height))


def parse_view_box(raw) -> Optional[ViewBox]:
    """Parse a viewBox attribute.

    Returns None when the value is missing, does not hold exactly four
    finite numbers, or describes an empty area.
    """
    if raw is None:
        return None
    parts = [p for p in _VIEW_BOX_SEPARATORS.split(str(raw).strip()) if p]
    if len(parts) != 4:
        return None
    values = []
    for part in parts:
        try:
            value = float(part)
        except ValueError:
            return None
        if not math.isfinite(value):
            return None
        values.append(value)
    view_box = ViewBox(*values)
    if view_box.is_empty:
        return None
    return view_box


def normalize_view_box(raw_view_box, raw_width=None, raw_height=None) -> ViewBox:
    """Resolve a usable view box for a root <svg> element.

    Order of preference: a valid viewBox attribute, then numeric width/height
    attributes (origin 0,0), then the default quadrat square. Never fails.
    """
    view_box = parse_view_box(raw_view_box)
    if view_box is not None:
        return view_box

    width = parse_number(raw_width)
    height = parse_number(raw_height)
    width = width if width and width > 0 else float(QUADRAT)
    height = height if height and height > 0 else float(QUADRAT)
    return ViewBox(0.0, 0.0, width, height)


@dataclass(frozen=True)
class GlyphDefinition:
    """Immutable catalog entry.

    Attributes:
        id: Stable identifier (e.g. 'G17')
        name: Display name
        view_box: Intrinsic coordinate space of the body
        body: Opaque SVG markup rendered inside the view box
        content: Bounds of the visible content (defaults to the view box)
        source: 'builtin' for catalog glyphs, 'imported' for pasted SVG
        namespaces: (prefix, uri) pairs declared on the source root that the
            body may use (e.g. inkscape:, sodipodi:)
    """
    id: str
    name: str
    view_box: ViewBox
    body: str = ''
    content: Optional[ViewBox] = None
    source: str = 'builtin'
    namespaces: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        # Zero-size glyphs get the default footprint
        if self.view_box is None or self.view_box.is_empty:
            object.__setattr__(self, 'view_box', ViewBox.default())
        if self.content is None or self.content.is_empty:
            object.__setattr__(self, 'content', self.view_box)

    @property
    def width(self) -> float:
        return self.view_box.width

    @property
    def height(self) -> float:
        return self.view_box.height

    @property
    def content_center(self) -> Vec2:
        """Visual center of the content in body coordinates"""
        return self.content.center

    @property
    def is_imported(self) -> bool:
        return self.source == 'imported'

    def namespace_declarations(self) -> str:
        """xmlns:prefix attributes for the body, each with a leading space"""
        return ''.join(f' xmlns:{prefix}={quoteattr(uri)}' for prefix, uri in self.namespaces)

    def to_svg(self) -> str:
        """Standalone SVG document for this glyph"""
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg"'
            f'{self.namespace_declarations()} viewBox="{self.view_box.to_attribute()}" '
            f'width="{format_number(self.width)}" height="{format_number(self.height)}">'
            f'{self.body}</svg>'
        )
