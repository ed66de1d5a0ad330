"""
Tests for the SVG interchange codec.

Covers:
- Self-describing export (state attributes, tight viewport, namespaces)
- Bit-exact round trip of transform state through export and re-import
- Dangling references skipped on export, unknown ids skipped on import
- HTML payload extraction (first inline SVG, base64 and URL-encoded data URIs)
- Namespaced foreign SVG bodies stay well-formed through export and re-import
- Foreign SVG import as a new glyph with measured content bounds
- Glyph identifier text, nothing recognized, malformed markup
"""
import base64
import xml.etree.ElementTree as ET
from urllib.parse import quote

import pytest

from glyph_editor.constants import (
    IMPORTED_GLYPH_NAME, IMPORTED_GLYPH_PREFIX, QUADRAT, SAMPLE_EXTERNAL_SVG,
)
from glyph_editor.models import GlyphInstance, ViewBox
from glyph_editor.services.content_probe import SvgGeometryProbe
from glyph_editor.services.svg_codec import (
    PasteKind, SvgParseError, build_export_svg, build_html_payload, decode_payload,
    describe_instance, import_foreign_svg, inner_markup, parse_glyph_ids,
    parse_self_describing_groups, parse_svg_from_html, parse_svg_markup, plain_text_ids,
    root_namespaces,
)

SVG_NS = '{http://www.w3.org/2000/svg}'
INKSCAPE_NS = 'http://www.inkscape.org/namespaces/inkscape'

INKSCAPE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" '
    f'xmlns:inkscape="{INKSCAPE_NS}" '
    'xmlns:sodipodi="http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd" viewBox="0 0 64 64">'
    '<sodipodi:namedview id="base"/>'
    '<g inkscape:label="Layer 1" inkscape:groupmode="layer"><rect width="64" height="32"/></g>'
    '</svg>'
)


def _export(scene, **kwargs):
    return build_export_svg(scene.rows, scene.catalog, scene.cell_step, **kwargs)


def _groups(svg):
    return ET.fromstring(svg).findall(f'{SVG_NS}g')


# ══════════════════════════════════════════════════════════════════════════
# Export
# ══════════════════════════════════════════════════════════════════════════

class TestExport:

    def test_rotated_twice_is_written_as_180(self, scene):
        inst = scene.insert('G17')
        scene.select(inst.id)
        scene.rotate_selected_90()
        scene.rotate_selected_90()
        svg = _export(scene)
        assert 'data-glyph-id="G17"' in svg
        assert 'data-rotate="180"' in svg

    def test_default_state_attributes(self, scene):
        scene.insert('A1')
        group = _groups(_export(scene))[0]
        assert group.get('data-flip-x') == 'false'
        assert group.get('data-scale') == '1'
        assert group.get('data-offset-x') == '0'
        assert group.get('transform').startswith('translate(0 0) translate(900 900)')

    def test_group_contains_glyph_body(self, scene):
        scene.insert('A1')
        group = _groups(_export(scene))[0]
        assert group.find(f'{SVG_NS}rect') is not None

    def test_root_declares_namespaces(self, scene):
        scene.insert('A1')
        svg = _export(scene)
        assert 'xmlns="http://www.w3.org/2000/svg"' in svg
        assert 'xmlns:xlink="http://www.w3.org/1999/xlink"' in svg

    def test_viewport_and_export_scale(self, scene):
        scene.insert('A1')
        scene.insert('G17')
        root = ET.fromstring(_export(scene, export_scale=0.5))
        assert root.get('viewBox') == f'0 0 {2 * QUADRAT} {QUADRAT}'
        assert root.get('width') == str(QUADRAT)
        assert root.get('height') == str(QUADRAT // 2)

    def test_viewport_is_tight_around_selection(self, scene):
        scene.insert('A1')
        scene.add_row()
        scene.insert('A1')
        picked = scene.insert('G17')
        root = ET.fromstring(_export(scene, selected_ids=[picked.id]))
        assert root.get('viewBox') == f'0 0 {QUADRAT} {QUADRAT}'
        assert _groups(_export(scene, selected_ids=[picked.id]))[0].get('transform').startswith(
            'translate(0 0) translate(900 900)')

    def test_dangling_reference_is_skipped(self, scene):
        scene.insert('A1')
        scene.insert('ZZZ')
        scene.insert('G17')
        groups = _groups(_export(scene))
        assert [g.get('data-glyph-id') for g in groups] == ['A1', 'G17']

    def test_nothing_to_export(self, scene):
        assert _export(scene) == ''
        scene.insert('ZZZ')
        assert _export(scene) == ''

    def test_plain_text_ids(self, scene):
        for glyph_id in ('A1', 'ZZZ', 'N35'):
            scene.insert(glyph_id)
        assert plain_text_ids(scene.rows, scene.catalog, scene.cell_step) == 'A1 N35'

    def test_html_payload_embeds_data_uri(self):
        html = build_html_payload('<svg xmlns="http://www.w3.org/2000/svg"/>')
        assert html.startswith('<!doctype html><html><body><img src="data:image/svg+xml;base64,')
        assert html.endswith('" alt="" /></body></html>')

    def test_describe_instance(self):
        line = describe_instance(GlyphInstance('G17', {'rotate': 180}))
        assert line.startswith('G17: data-rotate=180 data-flip-x=false')


# ══════════════════════════════════════════════════════════════════════════
# Round trip
# ══════════════════════════════════════════════════════════════════════════

class TestRoundTrip:

    def test_rotate_180_restores_exact_instance(self, scene, catalog):
        inst = scene.insert('G17')
        inst.rotate_90()
        inst.rotate_90()
        decoded = decode_payload(None, _export(scene), None, catalog)
        assert decoded.kind == PasteKind.GROUPS
        restored = decoded.instances[0]
        assert restored.glyph_id == 'G17'
        assert restored.rotate == 180
        assert (restored.offset_x, restored.offset_y) == (0, 0)
        assert (restored.scale, restored.scale_x, restored.scale_y) == (1, 1, 1)
        assert restored.id != inst.id

    def test_odd_values_survive_bit_exact(self, scene, catalog):
        inst = scene.insert('N35')
        inst.rotate = 271
        inst.flip_y = True
        inst.scale = 1.2345678901234
        inst.scale_x = 0.51 + 0.2
        inst.scale_y = 1 / 3 + 1
        inst.offset_x = 0.1 + 0.2
        inst.offset_y = -123.456e-7
        restored = decode_payload(None, _export(scene), None, catalog).instances[0]
        assert restored.to_dict() == inst.to_dict()

    def test_order_is_preserved(self, scene, catalog):
        scene.insert('N35')
        scene.insert('A1')
        scene.add_row()
        scene.insert('G17')
        decoded = decode_payload(None, _export(scene), None, catalog)
        assert [i.glyph_id for i in decoded.instances] == ['N35', 'A1', 'G17']

    def test_through_html_payload(self, scene, catalog):
        scene.insert('A1').flip_x = True
        decoded = decode_payload(build_html_payload(_export(scene)), None, None, catalog)
        assert decoded.kind == PasteKind.GROUPS
        assert decoded.instances[0].flip_x is True

    def test_namespaced_foreign_glyph(self, scene, catalog):
        pasted = decode_payload(None, INKSCAPE_SVG, None, catalog)
        assert pasted.kind == PasteKind.FOREIGN_SVG
        catalog.add(pasted.glyph)
        inst = scene.insert(pasted.instances[0])
        inst.rotate = 90

        svg = _export(scene)
        group = _groups(svg)[0]
        assert group.find(f'{SVG_NS}g').get(f'{{{INKSCAPE_NS}}}label') == 'Layer 1'

        restored = decode_payload(None, svg, None, catalog)
        assert restored.kind == PasteKind.GROUPS
        assert restored.instances[0].glyph_id == pasted.glyph.id
        assert restored.instances[0].rotate == 90


# ══════════════════════════════════════════════════════════════════════════
# HTML extraction
# ══════════════════════════════════════════════════════════════════════════

class TestHtmlExtraction:

    SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><rect width="5" height="5"/></svg>'

    def test_inline_svg(self):
        html = f'<html><body><p>x</p>{self.SVG}<p>y</p></body></html>'
        assert parse_svg_from_html(html) == self.SVG

    def test_first_of_sibling_svgs(self):
        second = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 4 4"><circle r="2"/></svg>'
        html = f'<body>{self.SVG}<p>caption</p>{second}</body>'
        assert parse_svg_from_html(html) == self.SVG

    def test_nested_svg_is_balanced(self):
        nested = ('<svg viewBox="0 0 10 10"><svg x="1" viewBox="0 0 2 2"><rect width="2" height="2"/>'
                  '</svg><svg/><rect width="1" height="1"/></SVG >')
        assert parse_svg_from_html(f'<div>{nested}</div><svg viewBox="0 0 1 1"></svg>') == nested

    def test_unclosed_svg(self):
        assert parse_svg_from_html('<p><svg viewBox="0 0 1 1"><rect/></p>') is None

    def test_base64_data_uri(self):
        encoded = base64.b64encode(self.SVG.encode('utf-8')).decode('ascii')
        html = f"<img alt='' src='data:image/svg+xml;base64,{encoded}'>"
        assert parse_svg_from_html(html) == self.SVG

    def test_url_encoded_data_uri(self):
        html = f'<img src="data:image/svg+xml,{quote(self.SVG)}">'
        assert parse_svg_from_html(html) == self.SVG

    @pytest.mark.parametrize("html", [None, '', '<p>no svg here</p>', '<img src="photo.png">'])
    def test_nothing_found(self, html):
        assert parse_svg_from_html(html) is None

    def test_inner_markup(self):
        assert inner_markup(self.SVG) == '<rect width="5" height="5"/>'
        assert inner_markup('<svg/>') == ''

    def test_root_namespaces(self):
        assert dict(root_namespaces(INKSCAPE_SVG)) == {
            'inkscape': INKSCAPE_NS,
            'sodipodi': 'http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd',
        }
        assert root_namespaces(self.SVG) == ()


# ══════════════════════════════════════════════════════════════════════════
# Import
# ══════════════════════════════════════════════════════════════════════════

class TestImport:

    def test_first_svg_of_html_page(self, catalog):
        html = ('<body><svg viewBox="0 0 10 20"><rect width="10" height="20"/></svg>'
                '<p>caption</p><svg viewBox="0 0 4 4"><circle r="2"/></svg></body>')
        decoded = decode_payload(html, None, None, catalog)
        assert decoded.kind == PasteKind.FOREIGN_SVG
        assert decoded.glyph.view_box == ViewBox(0, 0, 10, 20)

    def test_foreign_namespaces_are_kept(self, catalog):
        glyph = decode_payload(None, INKSCAPE_SVG, None, catalog).glyph
        assert dict(glyph.namespaces)['inkscape'] == INKSCAPE_NS
        assert 'sodipodi:namedview' in glyph.body
        ET.fromstring(glyph.to_svg())

    def test_unknown_group_ids_are_skipped(self, catalog):
        svg = ('<svg xmlns="http://www.w3.org/2000/svg">'
               '<g data-glyph-id="ZZZ"/><g data-glyph-id="A1" data-rotate="90"/></svg>')
        decoded = decode_payload(None, svg, None, catalog)
        assert decoded.kind == PasteKind.GROUPS
        assert [i.glyph_id for i in decoded.instances] == ['A1']
        assert decoded.skipped == ['ZZZ']

    def test_all_unknown_groups_fall_back_to_text(self, catalog):
        svg = '<svg xmlns="http://www.w3.org/2000/svg"><g data-glyph-id="ZZZ"/></svg>'
        decoded = decode_payload(None, svg, 'G17', catalog)
        assert decoded.kind == PasteKind.GLYPH_IDS
        assert decoded.skipped == ['ZZZ']

    def test_missing_attributes_use_defaults(self):
        parsed = parse_svg_markup('<svg><g data-glyph-id="A1" data-scale="1.4"/></svg>')
        inst = parse_self_describing_groups(parsed)[0]
        assert inst.rotate == 0
        assert (inst.scale_x, inst.scale_y) == (1.4, 1.4)
        assert inst.flip_x is False

    def test_foreign_svg_becomes_imported_glyph(self, catalog):
        decoded = decode_payload(None, SAMPLE_EXTERNAL_SVG, None, catalog, probe=SvgGeometryProbe())
        assert decoded.kind == PasteKind.FOREIGN_SVG
        glyph = decoded.glyph
        assert glyph.id.startswith(IMPORTED_GLYPH_PREFIX)
        assert glyph.name == IMPORTED_GLYPH_NAME
        assert glyph.is_imported
        assert glyph.view_box == ViewBox(0, 0, 320, 200)
        assert glyph.content == ViewBox(8, 8, 304, 184)
        assert '<linearGradient' in glyph.body
        assert [i.glyph_id for i in decoded.instances] == [glyph.id]

    def test_imported_ids_are_unique(self):
        parsed = parse_svg_markup(SAMPLE_EXTERNAL_SVG)
        assert import_foreign_svg(parsed).id != import_foreign_svg(parsed).id

    def test_without_probe_content_is_view_box(self):
        glyph = import_foreign_svg(parse_svg_markup('<svg width="40px" height="30"><rect/></svg>'))
        assert glyph.view_box == ViewBox(0, 0, 40, 30)
        assert glyph.content == glyph.view_box

    def test_svg_in_text_only_clipboard(self, catalog):
        decoded = decode_payload(None, None, SAMPLE_EXTERNAL_SVG, catalog)
        assert decoded.kind == PasteKind.FOREIGN_SVG

    def test_glyph_ids_from_text(self, catalog):
        decoded = decode_payload(None, None, 'A1 D36 ZZZ G17', catalog)
        assert decoded.kind == PasteKind.GLYPH_IDS
        assert [i.glyph_id for i in decoded.instances] == ['A1', 'G17']

    def test_parse_glyph_ids_keeps_repeats(self, catalog):
        assert parse_glyph_ids('A1\nA1\tN35', catalog) == ['A1', 'A1', 'N35']
        assert parse_glyph_ids(None, catalog) == []

    @pytest.mark.parametrize("html,svg,text", [
        (None, None, None),
        ('<p>hello</p>', None, 'hello world'),
        (None, '<svg', 'D36'),
    ])
    def test_nothing_recognized(self, catalog, html, svg, text):
        decoded = decode_payload(html, svg, text, catalog)
        assert decoded.kind == PasteKind.NOTHING_RECOGNIZED
        assert decoded.instances == []

    @pytest.mark.parametrize("markup", [None, '   ', '<svg><g></svg>', '<html/>'])
    def test_malformed_markup_raises(self, markup):
        with pytest.raises(SvgParseError):
            parse_svg_markup(markup)
