"""Content bounds probes for imported SVG documents.

A foreign document's declared view box says nothing reliable about where its
visible content sits. A probe takes the raw markup and returns the bounding
box of what it actually draws, in the document's user coordinates.

Two implementations:
- SvgGeometryProbe: headless; walks the element tree and measures shapes and
  paths (svgpathtools), honoring nested transform attributes.
- OffscreenRenderProbe: renders with QSvgRenderer into a transparent image
  and scans the alpha channel for painted pixels.
"""

import logging
import math
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np
from svgpathtools import Line, parse_path
from svgpathtools.parser import parse_transform

from glyph_editor.models.glyph import ViewBox, parse_view_box
from glyph_editor.models.transform import Affine
from glyph_editor.utils.svg_numbers import parse_number

logger = logging.getLogger(__name__)

# Subtrees that never paint directly
NON_RENDERED_TAGS = {
    'defs', 'clipPath', 'mask', 'symbol', 'marker', 'pattern',
    'linearGradient', 'radialGradient', 'filter', 'style', 'script',
    'title', 'desc', 'metadata',
}


def local_name(tag: str) -> str:
    """Tag without its '{namespace}' prefix"""
    return tag.rsplit('}', 1)[-1] if isinstance(tag, str) else ''


def _length(raw, reference: float, default: float) -> float:
    """Attribute length in user units, percentages taken of ``reference``"""
    if raw is None or not str(raw).strip():
        return default
    value = parse_number(raw)
    if value is None:
        return default
    if str(raw).strip().endswith('%'):
        return value * reference / 100.0
    return value


_ALIGN_FACTORS = {'Min': 0.0, 'Mid': 0.5, 'Max': 1.0}


class ContentBoundsProbe(ABC):
    """Given opaque markup, return its content bounding box"""

    @abstractmethod
    def measure(self, markup: str, view_box: ViewBox) -> Optional[ViewBox]:
        """Bounding box of the visible content in user units.

        Args:
            markup: Complete SVG document
            view_box: The document's normalized view box

        Returns:
            ViewBox, or None when nothing measurable is drawn
        """
        pass


class SvgGeometryProbe(ContentBoundsProbe):
    """Geometric bounds from the element tree (stroke width excluded)"""

    # Samples per curved segment when a transform is applied
    CURVE_SAMPLES = 32
    ELLIPSE_SAMPLES = 64

    def measure(self, markup, view_box):
        try:
            root = ET.fromstring(markup)
        except ET.ParseError as e:
            logger.debug("Geometry probe could not parse markup: %s", e)
            return None

        points: List[tuple] = []
        viewport = (view_box.width, view_box.height)
        for child in root:
            self._collect(child, Affine.identity(), viewport, points)
        if not points:
            return None

        arr = np.asarray(points, dtype=float)
        min_x, min_y = arr.min(axis=0)
        max_x, max_y = arr.max(axis=0)
        box = ViewBox(float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y))
        if box.is_empty:
            return None
        return box

    def _collect(self, element, parent: Affine, viewport: Tuple[float, float],
                 points: List[tuple]):
        name = local_name(element.tag)
        if name in NON_RENDERED_TAGS:
            return
        if element.get('display') == 'none':
            return

        matrix = parent
        raw_transform = element.get('transform')
        if raw_transform:
            matrix = parent.compose(Affine(parse_transform(raw_transform)))

        if name == 'svg':
            nested = self._nested_viewport(element, viewport)
            if nested is None:
                return
            matrix = matrix.compose(nested[0])
            viewport = nested[1]

        if name in ('g', 'a', 'svg', 'switch'):
            for child in element:
                self._collect(child, matrix, viewport, points)
            return

        local = self._shape_points(name, element, matrix)
        if local:
            points.extend(matrix.map_points(local))

    @staticmethod
    def _nested_viewport(element, viewport: Tuple[float, float]):
        """(mapping into the parent, own viewport size) for a nested <svg>.

        None when the viewport is empty and nothing inside renders.
        """
        x = _length(element.get('x'), viewport[0], 0.0)
        y = _length(element.get('y'), viewport[1], 0.0)
        width = _length(element.get('width'), viewport[0], viewport[0])
        height = _length(element.get('height'), viewport[1], viewport[1])
        if width <= 0 or height <= 0:
            return None

        view_box = parse_view_box(element.get('viewBox'))
        if view_box is None:
            return Affine.translation(x, y), (width, height)

        scale_x = width / view_box.width
        scale_y = height / view_box.height
        tokens = [t for t in (element.get('preserveAspectRatio') or '').split() if t != 'defer']
        align = tokens[0] if tokens else 'xMidYMid'
        if align != 'none':
            scale_x = scale_y = (max if 'slice' in tokens[1:] else min)(scale_x, scale_y)
            x += (width - view_box.width * scale_x) * _ALIGN_FACTORS.get(align[1:4], 0.5)
            y += (height - view_box.height * scale_y) * _ALIGN_FACTORS.get(align[5:8], 0.5)

        mapping = (Affine.translation(x, y)
                   .compose(Affine.scaling(scale_x, scale_y))
                   .compose(Affine.translation(-view_box.min_x, -view_box.min_y)))
        return mapping, (view_box.width, view_box.height)

    def _shape_points(self, name, element, matrix: Affine) -> List[tuple]:
        def num(attr, default=0.0):
            value = parse_number(element.get(attr))
            return default if value is None else value

        if name == 'rect':
            x, y, w, h = num('x'), num('y'), num('width'), num('height')
            if w <= 0 or h <= 0:
                return []
            return [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
        if name in ('circle', 'ellipse'):
            cx, cy = num('cx'), num('cy')
            if name == 'circle':
                rx = ry = num('r')
            else:
                rx, ry = num('rx'), num('ry')
            if rx <= 0 or ry <= 0:
                return []
            angles = np.linspace(0.0, 2 * math.pi, self.ELLIPSE_SAMPLES, endpoint=False)
            return list(zip(cx + rx * np.cos(angles), cy + ry * np.sin(angles)))
        if name == 'line':
            return [(num('x1'), num('y1')), (num('x2'), num('y2'))]
        if name in ('polyline', 'polygon'):
            values = [parse_number(v) for v in (element.get('points') or '').replace(',', ' ').split()]
            values = [v for v in values if v is not None]
            return list(zip(values[0::2], values[1::2]))
        if name == 'path':
            return self._path_points(element.get('d'), matrix)
        if name not in ('use', 'image', 'text', 'tspan'):
            logger.debug("Geometry probe ignores <%s>", name)
        return []

    def _path_points(self, d: Optional[str], matrix: Affine) -> List[tuple]:
        if not d:
            return []
        try:
            path = parse_path(d)
        except (ValueError, IndexError) as e:
            logger.debug("Skipping unparseable path data: %s", e)
            return []
        if len(path) == 0:
            return []

        if matrix.almost_equals(Affine.identity()):
            xmin, xmax, ymin, ymax = path.bbox()
            return [(xmin, ymin), (xmax, ymax)]

        # Extrema move under rotation/skew, discretize curves instead
        points = []
        for segment in path:
            if isinstance(segment, Line):
                samples = (segment.start, segment.end)
            else:
                samples = [segment.point(t) for t in np.linspace(0.0, 1.0, self.CURVE_SAMPLES)]
            points.extend((p.real, p.imag) for p in samples)
        return points


class OffscreenRenderProbe(ContentBoundsProbe):
    """Pixel bounds of a QSvgRenderer render into a transparent image.

    Requires a QGuiApplication. Accuracy is one pixel of the probe
    resolution.
    """

    def __init__(self, resolution: int = 512, alpha_threshold: int = 0):
        self.resolution = resolution
        self.alpha_threshold = alpha_threshold

    def measure(self, markup, view_box):
        from PyQt5.QtCore import QByteArray, QRectF, Qt
        from PyQt5.QtGui import QImage, QPainter
        from PyQt5.QtSvg import QSvgRenderer

        if view_box.is_empty:
            return None
        renderer = QSvgRenderer(QByteArray(markup.encode('utf-8')))
        if not renderer.isValid():
            logger.debug("Offscreen probe: renderer rejected markup")
            return None

        ratio = self.resolution / max(view_box.width, view_box.height)
        px_w = max(1, int(math.ceil(view_box.width * ratio)))
        px_h = max(1, int(math.ceil(view_box.height * ratio)))

        image = QImage(px_w, px_h, QImage.Format_ARGB32_Premultiplied)
        image.fill(Qt.transparent)
        painter = QPainter(image)
        painter.setRenderHint(QPainter.Antialiasing, True)
        renderer.setViewBox(QRectF(view_box.min_x, view_box.min_y, view_box.width, view_box.height))
        renderer.render(painter, QRectF(0, 0, px_w, px_h))
        painter.end()

        alpha = self._alpha_channel(image)
        rows = np.flatnonzero((alpha > self.alpha_threshold).any(axis=1))
        cols = np.flatnonzero((alpha > self.alpha_threshold).any(axis=0))
        if rows.size == 0 or cols.size == 0:
            return None

        scale_x = view_box.width / px_w
        scale_y = view_box.height / px_h
        return ViewBox(
            view_box.min_x + cols[0] * scale_x,
            view_box.min_y + rows[0] * scale_y,
            (cols[-1] + 1 - cols[0]) * scale_x,
            (rows[-1] + 1 - rows[0]) * scale_y,
        )

    @staticmethod
    def _alpha_channel(image) -> np.ndarray:
        """(height, width) uint8 alpha from a 32-bit QImage"""
        height, width = image.height(), image.width()
        stride = image.bytesPerLine()
        data = image.bits().asstring(stride * height)
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, stride // 4, 4)
        # 0xAARRGGBB stored little-endian: B, G, R, A
        return pixels[:, :width, 3]


def default_probe() -> ContentBoundsProbe:
    return SvgGeometryProbe()
