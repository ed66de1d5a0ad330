"""Transform data structures for coordinate and matrix representation."""
from dataclasses import dataclass
import math

import numpy as np


@dataclass
class Vec2:
    """2D vector for coordinate pairs.

    Used for any x/y coordinate pair across different spaces:
    - Canvas units (grid cells are cell_step wide)
    - Glyph-intrinsic units (offsets, quadrat based)
    - Screen pixels (pointer positions, handle hit tests)
    """
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))


class Affine:
    """2-D affine transform stored as a 3x3 homogeneous matrix.

    Composition follows SVG semantics: ``a.compose(b)`` applies ``b`` first,
    then ``a``, the same as writing ``"a b"`` in a transform attribute.
    """

    __slots__ = ('matrix',)

    def __init__(self, matrix=None):
        if matrix is None:
            matrix = np.identity(3)
        self.matrix = np.asarray(matrix, dtype=float)

    # ========================================
    # Builders
    # ========================================

    @classmethod
    def identity(cls) -> 'Affine':
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> 'Affine':
        return cls([[1.0, 0.0, tx],
                    [0.0, 1.0, ty],
                    [0.0, 0.0, 1.0]])

    @classmethod
    def rotation(cls, degrees: float) -> 'Affine':
        """Rotation in degrees, clockwise on a Y-down canvas (SVG rotate())"""
        rad = math.radians(degrees)
        c, s = math.cos(rad), math.sin(rad)
        return cls([[c, -s, 0.0],
                    [s, c, 0.0],
                    [0.0, 0.0, 1.0]])

    @classmethod
    def scaling(cls, sx: float, sy: float = None) -> 'Affine':
        if sy is None:
            sy = sx
        return cls([[sx, 0.0, 0.0],
                    [0.0, sy, 0.0],
                    [0.0, 0.0, 1.0]])

    @classmethod
    def from_qtransform(cls, qt_transform) -> 'Affine':
        """Build from a QTransform (Qt stores the transposed row-vector form)"""
        return cls([[qt_transform.m11(), qt_transform.m21(), qt_transform.dx()],
                    [qt_transform.m12(), qt_transform.m22(), qt_transform.dy()],
                    [0.0, 0.0, 1.0]])

    # ========================================
    # Operations
    # ========================================

    def compose(self, other: 'Affine') -> 'Affine':
        """Return self * other (other is applied first)"""
        return Affine(self.matrix @ other.matrix)

    def map_point(self, x: float, y: float):
        """Map a point, returns (x, y) tuple"""
        px, py, _ = self.matrix @ np.array([x, y, 1.0])
        return float(px), float(py)

    def map_points(self, points):
        """Map an iterable of (x, y) points, returns list of (x, y) tuples"""
        pts = np.asarray(list(points), dtype=float).reshape(-1, 2)
        if pts.size == 0:
            return []
        homogeneous = np.hstack([pts, np.ones((len(pts), 1))])
        mapped = homogeneous @ self.matrix.T
        return [(float(x), float(y)) for x, y in mapped[:, :2]]

    def inverted(self):
        """Inverse transform, or None when the matrix is singular"""
        det = float(np.linalg.det(self.matrix[:2, :2]))
        if abs(det) < 1e-12 or not math.isfinite(det):
            return None
        return Affine(np.linalg.inv(self.matrix))

    def almost_equals(self, other: 'Affine', tolerance: float = 1e-9) -> bool:
        return bool(np.allclose(self.matrix, other.matrix, atol=tolerance, rtol=0.0))

    # ========================================
    # Conversion
    # ========================================

    @property
    def coefficients(self):
        """SVG matrix coefficients (a, b, c, d, e, f)"""
        m = self.matrix
        return (float(m[0, 0]), float(m[1, 0]), float(m[0, 1]),
                float(m[1, 1]), float(m[0, 2]), float(m[1, 2]))

    def to_svg_matrix(self) -> str:
        from glyph_editor.utils.svg_numbers import format_number
        return 'matrix({})'.format(' '.join(format_number(v) for v in self.coefficients))

    def to_qtransform(self):
        from PyQt5.QtGui import QTransform
        a, b, c, d, e, f = self.coefficients
        return QTransform(a, b, c, d, e, f)

    def __repr__(self):
        return f"Affine({self.to_svg_matrix()})"
