"""Transform compositor - instance transform state to render transform.

Builds the 2-D affine transform that positions, fits, flips, scales, rotates
and offsets a glyph body. The same operation chain is rendered either as an
SVG transform attribute or as an Affine matrix, so the two never disagree.

Chain (outermost first, SVG order):
    translate(offset)          free offset, canvas units, unaffected by rotation/scale
    translate(pivot)           rotation and scale happen about the pivot
    rotate(rotation)
    scale(flip * scale)        independent x/y factors, sign carries the flip
    translate(cell - pivot)    only when a shared pivot overrides the cell center
    scale(fit)                 normalizes the glyph to the quadrat
    translate(-content center) glyph's visual center lands on the pivot

All functions are pure: same inputs, same output, no instance mutation.
"""

from typing import List, Optional, Tuple

from glyph_editor.constants import QUADRAT
from glyph_editor.models.transform import Affine, Vec2
from glyph_editor.utils.layout import LayoutItem, cell_center
from glyph_editor.utils.svg_numbers import format_number

Operation = Tuple  # ('translate', tx, ty) | ('rotate', deg) | ('scale', sx, sy)


def fit_scale(glyph) -> float:
    """Factor mapping the glyph's intrinsic size onto the quadrat"""
    largest = max(glyph.width, glyph.height)
    if largest <= 0:
        return 1.0
    return QUADRAT / largest


def offset_scale(cell_step: float) -> float:
    """Canvas units per glyph-intrinsic offset unit"""
    return cell_step / QUADRAT


def resolve_pivot(item: LayoutItem, cell_step: float, pivot: Optional[Vec2] = None) -> Vec2:
    """Pivot override when given, else the center of the item's own cell"""
    if pivot is not None:
        return Vec2(float(pivot.x), float(pivot.y))
    return cell_center(item, cell_step)


def transform_chain(item: LayoutItem, glyph, cell_step: float,
                    pivot: Optional[Vec2] = None) -> List[Operation]:
    """Elementary operations for one instance, outermost first"""
    instance = item.instance
    fit = fit_scale(glyph)
    content_center = glyph.content_center
    to_canvas = offset_scale(cell_step)
    flip_x = -1.0 if instance.flip_x else 1.0
    flip_y = -1.0 if instance.flip_y else 1.0

    cell = cell_center(item, cell_step)
    anchor = resolve_pivot(item, cell_step, pivot)

    chain = [
        ('translate', instance.offset_x * to_canvas, instance.offset_y * to_canvas),
        ('translate', anchor.x, anchor.y),
        ('rotate', instance.rotate),
        ('scale', flip_x * instance.scale_x, flip_y * instance.scale_y),
    ]
    if pivot is not None:
        chain.append(('translate', cell.x - anchor.x, cell.y - anchor.y))
    chain.extend([
        ('scale', fit, fit),
        ('translate', -content_center.x, -content_center.y),
    ])
    return chain


def chain_to_svg(chain: List[Operation]) -> str:
    parts = []
    for op in chain:
        name, args = op[0], op[1:]
        parts.append(f"{name}({' '.join(format_number(a) for a in args)})")
    return ' '.join(parts)


def chain_to_affine(chain: List[Operation]) -> Affine:
    result = Affine.identity()
    for op in chain:
        name = op[0]
        if name == 'translate':
            step = Affine.translation(op[1], op[2])
        elif name == 'rotate':
            step = Affine.rotation(op[1])
        elif name == 'scale':
            step = Affine.scaling(op[1], op[2])
        else:
            raise ValueError(f"Unknown transform operation: {name}")
        result = result.compose(step)
    return result


def build_transform(item: LayoutItem, glyph, cell_step: float,
                    pivot: Optional[Vec2] = None) -> str:
    """SVG transform attribute for one instance"""
    return chain_to_svg(transform_chain(item, glyph, cell_step, pivot))


def build_matrix(item: LayoutItem, glyph, cell_step: float,
                 pivot: Optional[Vec2] = None) -> Affine:
    """Render matrix (glyph body coordinates -> canvas units) for one instance"""
    return chain_to_affine(transform_chain(item, glyph, cell_step, pivot))


def content_corners(glyph):
    """Corners of the glyph's visible content in body coordinates"""
    c = glyph.content
    return [
        (c.min_x, c.min_y),
        (c.min_x + c.width, c.min_y),
        (c.min_x + c.width, c.min_y + c.height),
        (c.min_x, c.min_y + c.height),
    ]
