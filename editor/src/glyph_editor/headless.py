#!/usr/bin/env python3
"""Headless glyph export / inspection.

Usage:
    python -m glyph_editor.headless export --catalog glyphs/ --ids "A1 G17" -o out.svg
    python -m glyph_editor.headless export --catalog glyphs/ --ids "A1 G17" -o out.svg --scale 0.78
    python -m glyph_editor.headless inspect out.svg

export lays the given glyph ids out in one row and writes the same
self-describing SVG the editor copies to the clipboard. inspect prints the
instance states recovered from such a file, or the view box and measured
content bounds of a foreign SVG.
"""

import argparse
import logging
import os
import sys

from glyph_editor.models.catalog import GlyphCatalog
from glyph_editor.models.scene import Scene
from glyph_editor.services.catalog_loader import GlyphParseError, discover_sources, load_glyph_definitions
from glyph_editor.services.content_probe import SvgGeometryProbe
from glyph_editor.services.svg_codec import (
    SvgParseError, build_export_svg, describe_instance, parse_glyph_ids,
    parse_self_describing_groups, parse_svg_markup,
)

logger = logging.getLogger(__name__)


def run_export(args) -> int:
    try:
        glyphs = load_glyph_definitions(discover_sources(args.catalog))
    except (OSError, GlyphParseError) as e:
        print(f"Error: could not load catalog: {e}")
        return 1

    catalog = GlyphCatalog(glyphs)
    requested = args.ids.split()
    ids = parse_glyph_ids(args.ids, catalog)
    unknown = [glyph_id for glyph_id in requested if not catalog.has(glyph_id)]
    if unknown:
        print(f"Skipping unknown glyph ids: {' '.join(unknown)}")
    if not ids:
        print("Nothing to export.")
        return 1

    scene = Scene(catalog)
    scene.insert_many(ids)
    svg = build_export_svg(scene.rows, catalog, scene.cell_step, args.scale)

    output_path = os.path.abspath(args.output)
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(svg)
    print(f"Exported {len(ids)} glyphs to {output_path}")
    return 0


def run_inspect(args) -> int:
    try:
        with open(args.input_file, 'r', encoding='utf-8') as f:
            parsed = parse_svg_markup(f.read())
    except OSError as e:
        print(f"Error: {e}")
        return 1
    except SvgParseError as e:
        print(f"Error: not an SVG document: {e}")
        return 1

    instances = parse_self_describing_groups(parsed)
    if instances:
        print(f"{len(instances)} self-describing group(s):")
        for instance in instances:
            print(f"  {describe_instance(instance)}")
        return 0

    view_box = parsed.view_box
    content = SvgGeometryProbe().measure(parsed.markup, view_box)
    print("Foreign SVG (no self-describing groups)")
    print(f"  viewBox: {view_box.to_attribute()}")
    print(f"  content: {content.to_attribute() if content else 'not measurable'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Export glyph rows as self-describing SVG, or inspect such files (headless).',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging.',
    )
    commands = parser.add_subparsers(dest='command', required=True)

    export = commands.add_parser('export', help='Write glyph ids as a self-describing SVG.')
    export.add_argument('--catalog', required=True, help='Directory of glyph SVG files.')
    export.add_argument('--ids', required=True, help='Whitespace-separated glyph ids.')
    export.add_argument('-o', '--output', default='./export.svg',
                        help='Output SVG path (default: ./export.svg).')
    export.add_argument('--scale', type=float, default=1.0,
                        help='Export scale applied to width/height (default: 1.0).')
    export.set_defaults(handler=run_export)

    inspect = commands.add_parser('inspect', help='Print the instance states stored in an SVG.')
    inspect.add_argument('input_file', help='SVG file to inspect.')
    inspect.set_defaults(handler=run_inspect)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # Logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    return args.handler(args)


if __name__ == '__main__':
    sys.exit(main())
