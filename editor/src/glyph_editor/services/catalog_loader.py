"""
Glyph catalog loading.

Discovers glyph SVG files, reads them in batches with bounded concurrency
and reports incremental progress. CatalogLoadWorker runs the load on a
QThread so the UI stays responsive.
"""

import logging
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from PyQt5.QtCore import QThread, pyqtSignal

from glyph_editor.constants import CATALOG_BATCH_SIZE, CATALOG_FILE_EXTENSION
from glyph_editor.models.glyph import GlyphDefinition, normalize_view_box
from glyph_editor.services.content_probe import local_name
from glyph_editor.services.svg_codec import inner_markup, root_namespaces

logger = logging.getLogger(__name__)


class GlyphParseError(ValueError):
    """Glyph markup has no root <svg> element"""
    pass


@dataclass(frozen=True)
class GlyphSource:
    """Catalog entry to fetch: identifier, display name, location"""
    id: str
    name: str
    url: str


def discover_sources(directory) -> List[GlyphSource]:
    """Every *.svg file in a directory (sorted, id = file stem)"""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Glyph directory not found: {directory}")
    sources = []
    for path in sorted(directory.iterdir()):
        if path.is_file() and path.suffix.lower() == CATALOG_FILE_EXTENSION:
            sources.append(GlyphSource(id=path.stem, name=path.stem, url=str(path)))
    return sources


def _source_path(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme == 'file':
        return unquote(parsed.path)
    return url


def read_source(source: GlyphSource) -> str:
    with open(_source_path(source.url), 'r', encoding='utf-8') as f:
        return f.read()


def parse_glyph_from_svg(markup: str, source: GlyphSource) -> GlyphDefinition:
    """Build a builtin GlyphDefinition from glyph SVG markup.

    Raises:
        GlyphParseError: markup is not well-formed or its root is not <svg>
    """
    try:
        root = ET.fromstring(markup.strip())
    except ET.ParseError as e:
        raise GlyphParseError(f"Malformed svg for {source.id}: {e}") from e
    if local_name(root.tag) != 'svg':
        raise GlyphParseError(f"Missing svg element for {source.id}")

    return GlyphDefinition(
        id=source.id,
        name=source.name or source.id,
        view_box=normalize_view_box(root.get('viewBox'), root.get('width'), root.get('height')),
        body=inner_markup(markup),
        namespaces=root_namespaces(markup.strip()),
        source='builtin',
    )


def load_glyph_definition(source: GlyphSource) -> GlyphDefinition:
    return parse_glyph_from_svg(read_source(source), source)


def load_glyph_definitions(sources: Sequence[GlyphSource],
                           batch_size: int = CATALOG_BATCH_SIZE,
                           on_progress: Optional[Callable[[int, int], None]] = None,
                           loader: Callable[[GlyphSource], GlyphDefinition] = load_glyph_definition
                           ) -> List[GlyphDefinition]:
    """Load every source, batch by batch.

    Each batch is read with at most batch_size concurrent reads. Results
    keep source order. on_progress(loaded, total) fires after every batch.
    The first failing source aborts the load with its exception.
    """
    batch_size = max(1, int(batch_size))
    total = len(sources)
    results: List[GlyphDefinition] = []

    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for index in range(0, total, batch_size):
            batch = sources[index:index + batch_size]
            results.extend(pool.map(loader, batch))
            logger.debug("Loaded %d/%d glyphs", len(results), total)
            if on_progress:
                on_progress(len(results), total)
    return results


class CatalogLoadWorker(QThread):
    """Worker thread for catalog loading to keep GUI responsive."""

    progress = pyqtSignal(int, int)   # loaded, total
    finished = pyqtSignal(bool, str)  # success, message

    def __init__(self, directory, batch_size: int = CATALOG_BATCH_SIZE):
        super().__init__()
        self.directory = directory
        self.batch_size = batch_size
        self.glyphs: List[GlyphDefinition] = []

    def run(self):
        """Load the catalog; results are left in self.glyphs"""
        try:
            sources = discover_sources(self.directory)
            self.glyphs = load_glyph_definitions(
                sources, self.batch_size,
                on_progress=lambda loaded, total: self.progress.emit(loaded, total),
            )
            self.finished.emit(True, f"Loaded {len(self.glyphs)} glyphs")
        except (OSError, GlyphParseError) as e:
            logger.error("Catalog load failed: %s", e)
            self.glyphs = []
            self.finished.emit(False, str(e))
