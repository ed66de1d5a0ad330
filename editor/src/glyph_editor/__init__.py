"""Glyph Editor - place, arrange and transform glyphs on a row-based canvas
and exchange compositions through the clipboard as self-describing SVG."""

__version__ = '1.0.0'
