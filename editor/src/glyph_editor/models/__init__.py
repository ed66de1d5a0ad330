"""Glyph Editor data models.

Usage:
    from glyph_editor.models import Scene, GlyphCatalog, GlyphInstance
"""

from .transform import Vec2, Affine
from .glyph import GlyphDefinition, ViewBox, parse_view_box, normalize_view_box
from .instance import GlyphInstance, clamp_scale, wrap_rotation, new_instance_id
from .catalog import GlyphCatalog
from .scene import Scene

__all__ = [
    'Vec2', 'Affine',
    'GlyphDefinition', 'ViewBox', 'parse_view_box', 'normalize_view_box',
    'GlyphInstance', 'clamp_scale', 'wrap_rotation', 'new_instance_id',
    'GlyphCatalog', 'Scene',
]
