"""SVG interchange codec - scene <-> self-describing SVG.

Export writes one <g> per instance carrying both the render transform and
the full transform state as data-* attributes, so pasting the document back
restores exact instances rather than a picture of them:

    <svg viewBox="0 0 W H" width=.. height=..>
      <g transform="..." data-glyph-id="G17" data-rotate="180"
         data-flip-x="false" data-flip-y="false"
         data-scale="1" data-scale-x="1" data-scale-y="1"
         data-offset-x="0" data-offset-y="0">...glyph body...</g>
    </svg>

Import recognizes, in order: self-describing groups, a foreign SVG document
(becomes a new imported glyph), whitespace-separated glyph identifiers.
"""

import base64
import logging
import re
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import unquote
from xml.sax.saxutils import quoteattr

from glyph_editor.constants import (
    ATTR_FLIP_X, ATTR_FLIP_Y, ATTR_GLYPH_ID, ATTR_OFFSET_X, ATTR_OFFSET_Y,
    ATTR_ROTATE, ATTR_SCALE, ATTR_SCALE_X, ATTR_SCALE_Y,
    IMPORTED_GLYPH_NAME, IMPORTED_GLYPH_PREFIX, SVG_NAMESPACE,
)
from glyph_editor.models.glyph import GlyphDefinition, ViewBox, normalize_view_box
from glyph_editor.models.instance import GlyphInstance
from glyph_editor.services.content_probe import ContentBoundsProbe, local_name
from glyph_editor.utils.compositor import build_transform
from glyph_editor.utils.layout import LayoutItem, layout_rows
from glyph_editor.utils.svg_numbers import format_bool, format_number, parse_bool, parse_number

logger = logging.getLogger(__name__)

XLINK_NAMESPACE = 'http://www.w3.org/1999/xlink'

_SVG_TAG = re.compile(r'<(/?)svg(?=[\s/>])(?:[^>"\']|"[^"]*"|\'[^\']*\')*>', re.IGNORECASE)
_SVG_DATA_URI = re.compile(
    r'src\s*=\s*(["\'])data:image/svg\+xml(;base64)?,(.*?)\1',
    re.IGNORECASE | re.DOTALL,
)


class SvgParseError(ValueError):
    """Markup is not an SVG document (no parseable root <svg> element)"""
    pass


class PasteKind(Enum):
    GROUPS = 'groups'
    FOREIGN_SVG = 'foreign_svg'
    GLYPH_IDS = 'glyph_ids'
    NOTHING_RECOGNIZED = 'nothing_recognized'


@dataclass
class ParsedSvg:
    """A parsed SVG document and its raw inner markup"""
    root: ET.Element
    markup: str
    body: str
    namespaces: Tuple[Tuple[str, str], ...] = ()

    @property
    def view_box(self) -> ViewBox:
        return normalize_view_box(self.root.get('viewBox'),
                                  self.root.get('width'), self.root.get('height'))


@dataclass
class DecodedPaste:
    """What a clipboard payload turned into (nothing is inserted yet)"""
    kind: PasteKind
    instances: List[GlyphInstance] = field(default_factory=list)
    glyph: Optional[GlyphDefinition] = None
    skipped: List[str] = field(default_factory=list)


# ======================================================================
# EXPORT
# ======================================================================

def export_layout(rows: Sequence[Sequence], catalog, cell_step: float,
                  selected_ids: Optional[Iterable[str]] = None) -> List[LayoutItem]:
    """Included, resolvable items shifted so the first used row/column is 0.

    An empty or missing selection includes the whole scene.
    """
    wanted = set(selected_ids or ())
    items = []
    for item in layout_rows(rows, cell_step):
        if wanted and item.instance.id not in wanted:
            continue
        if catalog.get(item.instance.glyph_id) is None:
            logger.debug("Skipping dangling reference %s on export", item.instance.glyph_id)
            continue
        items.append(item)
    if not items:
        return []

    min_row = min(item.row for item in items)
    min_col = min(item.col for item in items)
    return [
        LayoutItem(instance=item.instance,
                   row=item.row - min_row,
                   col=item.col - min_col,
                   x=(item.col - min_col) * cell_step,
                   y=(item.row - min_row) * cell_step)
        for item in items
    ]


def state_attributes(instance: GlyphInstance) -> List[tuple]:
    """(name, value) pairs of the self-describing attributes"""
    return [
        (ATTR_GLYPH_ID, instance.glyph_id),
        (ATTR_ROTATE, format_number(instance.rotate)),
        (ATTR_FLIP_X, format_bool(instance.flip_x)),
        (ATTR_FLIP_Y, format_bool(instance.flip_y)),
        (ATTR_SCALE, format_number(instance.scale)),
        (ATTR_SCALE_X, format_number(instance.scale_x)),
        (ATTR_SCALE_Y, format_number(instance.scale_y)),
        (ATTR_OFFSET_X, format_number(instance.offset_x)),
        (ATTR_OFFSET_Y, format_number(instance.offset_y)),
    ]


def build_export_svg(rows: Sequence[Sequence], catalog, cell_step: float,
                     export_scale: float = 1.0,
                     selected_ids: Optional[Iterable[str]] = None) -> str:
    """Self-describing SVG for the selection (or whole scene).

    The viewport covers exactly the cells spanned by the included instances.
    Returns '' when nothing resolvable is included.
    """
    items = export_layout(rows, catalog, cell_step, selected_ids)
    if not items:
        return ''

    width = (max(item.col for item in items) + 1) * cell_step
    height = (max(item.row for item in items) + 1) * cell_step

    groups = []
    for item in items:
        glyph = catalog.get(item.instance.glyph_id)
        attributes = [('transform', build_transform(item, glyph, cell_step))]
        attributes.extend(state_attributes(item.instance))
        rendered = ' '.join(f'{name}={quoteattr(value)}' for name, value in attributes)
        groups.append(f'<g{glyph.namespace_declarations()} {rendered}>{glyph.body}</g>')

    return (
        f'<svg xmlns="{SVG_NAMESPACE}" xmlns:xlink="{XLINK_NAMESPACE}" '
        f'viewBox="0 0 {format_number(width)} {format_number(height)}" '
        f'width="{format_number(width * export_scale)}" '
        f'height="{format_number(height * export_scale)}">'
        + ''.join(groups)
        + '</svg>'
    )


def plain_text_ids(rows: Sequence[Sequence], catalog, cell_step: float,
                   selected_ids: Optional[Iterable[str]] = None) -> str:
    """Space-separated glyph identifiers of the exported instances"""
    return ' '.join(item.instance.glyph_id
                    for item in export_layout(rows, catalog, cell_step, selected_ids))


def svg_data_uri(svg_markup: str) -> str:
    encoded = base64.b64encode(svg_markup.encode('utf-8')).decode('ascii')
    return f'data:image/svg+xml;base64,{encoded}'


def build_html_payload(svg_markup: str) -> str:
    """HTML wrapper embedding the SVG as an image for image-aware consumers"""
    image = f'<img src={quoteattr(svg_data_uri(svg_markup))} alt="" />' if svg_markup else ''
    return f'<!doctype html><html><body>{image}</body></html>'


# ======================================================================
# IMPORT
# ======================================================================

def parse_svg_from_html(html: Optional[str]) -> Optional[str]:
    """Extract SVG markup from an HTML clipboard payload.

    Looks for the first inline <svg> element, then an <img> whose source is
    an SVG data URI. Returns None when neither is present.
    """
    if not html:
        return None

    span = first_svg_span(html)
    if span is not None:
        return html[span[0]:span[3]]

    match = _SVG_DATA_URI.search(html)
    if match:
        is_base64, payload = match.group(2), match.group(3)
        payload = payload.replace('&amp;', '&').strip()
        try:
            if is_base64:
                return base64.b64decode(payload).decode('utf-8')
            return unquote(payload)
        except (ValueError, UnicodeDecodeError) as e:
            logger.debug("Ignoring undecodable SVG data URI: %s", e)
    return None


def first_svg_span(markup: str) -> Optional[Tuple[int, int, int, int]]:
    """Offsets (start, inner_start, inner_end, end) of the first <svg> element.

    Nested <svg> elements are balanced against their own closing tags, so a
    sibling document or caption after the first element is left out.
    Returns None when there is no <svg> or it is never closed.
    """
    depth = 0
    start = inner_start = 0
    for tag in _SVG_TAG.finditer(markup):
        closing = tag.group(1) == '/'
        self_closing = tag.group(0).endswith('/>')
        if depth == 0:
            if closing:
                continue
            if self_closing:
                return tag.start(), tag.end(), tag.end(), tag.end()
            start, inner_start, depth = tag.start(), tag.end(), 1
        elif closing:
            depth -= 1
            if depth == 0:
                return start, inner_start, tag.start(), tag.end()
        elif not self_closing:
            depth += 1
    return None


def inner_markup(markup: str) -> str:
    """Raw text between the root <svg ...> and its closing tag"""
    span = first_svg_span(markup)
    if span is None:
        return ''
    return markup[span[1]:span[2]].strip()


def root_namespaces(markup: str) -> Tuple[Tuple[str, str], ...]:
    """Prefixed namespace declarations on the root element, as (prefix, uri) pairs.

    The stored body drops the root tag, so these travel with it.
    """
    parser = ET.XMLPullParser(events=('start-ns', 'start'))
    parser.feed(markup)
    declared = []
    for event, payload in parser.read_events():
        if event == 'start':
            break
        prefix, uri = payload
        if prefix:
            declared.append((prefix, uri))
    return tuple(declared)


def parse_svg_markup(markup: Optional[str]) -> ParsedSvg:
    """Parse an SVG document.

    Raises:
        SvgParseError: markup is empty, not well-formed, or its root is not <svg>
    """
    if not markup or not markup.strip():
        raise SvgParseError("Empty SVG markup")
    text = markup.strip()
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise SvgParseError(f"Malformed SVG: {e}") from e
    if local_name(root.tag) != 'svg':
        raise SvgParseError(f"Root element is <{local_name(root.tag)}>, expected <svg>")
    return ParsedSvg(root=root, markup=text, body=inner_markup(text),
                     namespaces=root_namespaces(text))


def _number(element, name: str, default=None):
    value = parse_number(element.get(name))
    return default if value is None else value


def parse_self_describing_groups(parsed: ParsedSvg) -> List[GlyphInstance]:
    """Instances rebuilt from groups carrying data-glyph-id (document order)"""
    instances = []
    for element in parsed.root.iter():
        if local_name(element.tag) != 'g':
            continue
        glyph_id = (element.get(ATTR_GLYPH_ID) or '').strip()
        if not glyph_id:
            continue
        instances.append(GlyphInstance(glyph_id, {
            'rotate': _number(element, ATTR_ROTATE, 0.0),
            'flip_x': parse_bool(element.get(ATTR_FLIP_X)),
            'flip_y': parse_bool(element.get(ATTR_FLIP_Y)),
            'scale': _number(element, ATTR_SCALE, 1.0),
            'scale_x': _number(element, ATTR_SCALE_X),
            'scale_y': _number(element, ATTR_SCALE_Y),
            'offset_x': _number(element, ATTR_OFFSET_X, 0.0),
            'offset_y': _number(element, ATTR_OFFSET_Y, 0.0),
        }))
    return instances


def new_imported_glyph_id() -> str:
    return f"{IMPORTED_GLYPH_PREFIX}{uuid.uuid4().hex}"


def import_foreign_svg(parsed: ParsedSvg, probe: Optional[ContentBoundsProbe] = None,
                       glyph_id: Optional[str] = None) -> GlyphDefinition:
    """Turn a foreign SVG document into a new imported glyph.

    The view box is normalized (viewBox, then width/height, then the default
    square). Content bounds come from the probe; the view box stands in when
    no probe is given or it measures nothing.
    """
    view_box = parsed.view_box
    content = None
    if probe is not None:
        content = probe.measure(parsed.markup, view_box)
    if content is None:
        logger.debug("No measured content bounds, using the view box")
        content = view_box
    return GlyphDefinition(
        id=glyph_id or new_imported_glyph_id(),
        name=IMPORTED_GLYPH_NAME,
        view_box=view_box,
        body=parsed.body,
        content=content,
        source='imported',
        namespaces=parsed.namespaces,
    )


def parse_glyph_ids(text: Optional[str], catalog) -> List[str]:
    """Known glyph identifiers from whitespace-separated text, in order"""
    if not text:
        return []
    return [token for token in text.split() if catalog.has(token)]


def decode_payload(html: Optional[str], svg: Optional[str], text: Optional[str],
                   catalog, probe: Optional[ContentBoundsProbe] = None) -> DecodedPaste:
    """Interpret a clipboard payload.

    Self-describing groups restore exact instances (unknown glyph ids are
    skipped and reported). A foreign SVG document becomes a new imported
    glyph with one default instance. Documents are looked for in the HTML,
    the SVG representation and then the text (a text-only copy carries the
    markup). Otherwise the text is read as glyph identifiers; anything else
    is NOTHING_RECOGNIZED.
    """
    skipped: List[str] = []
    for markup in (parse_svg_from_html(html), svg, parse_svg_from_html(text)):
        if not markup:
            continue
        try:
            parsed = parse_svg_markup(markup)
        except SvgParseError as e:
            logger.debug("Ignoring clipboard SVG: %s", e)
            continue

        restored = parse_self_describing_groups(parsed)
        if restored:
            known = [inst for inst in restored if catalog.has(inst.glyph_id)]
            skipped = [inst.glyph_id for inst in restored if not catalog.has(inst.glyph_id)]
            if skipped:
                logger.info("Skipped %d group(s) with unknown glyph ids: %s",
                            len(skipped), ' '.join(skipped))
            if known:
                return DecodedPaste(PasteKind.GROUPS, known, skipped=skipped)
            # Our own export, but nothing resolvable: the text ids are next
            break

        glyph = import_foreign_svg(parsed, probe)
        return DecodedPaste(PasteKind.FOREIGN_SVG, [GlyphInstance(glyph.id)], glyph=glyph)

    ids = parse_glyph_ids(text, catalog)
    if ids:
        return DecodedPaste(PasteKind.GLYPH_IDS, [GlyphInstance(glyph_id) for glyph_id in ids],
                            skipped=skipped)
    return DecodedPaste(PasteKind.NOTHING_RECOGNIZED, skipped=skipped)


def describe_instance(instance: GlyphInstance) -> str:
    """One-line summary used by the inspect command"""
    state = ' '.join(f'{name}={value}' for name, value in state_attributes(instance)[1:])
    return f'{instance.glyph_id}: {state}'
