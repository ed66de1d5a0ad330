"""
Shared fixtures for Glyph Editor tests.

Provides a small glyph catalog, scenes, and a scriptable clipboard backend.
"""
import sys
import os
import pytest

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

# Widgets and the clipboard run without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from glyph_editor.models.catalog import GlyphCatalog
from glyph_editor.models.glyph import GlyphDefinition, ViewBox
from glyph_editor.models.scene import Scene
from glyph_editor.services.clipboard_service import (
    ClipboardBackend, ClipboardPayload, ClipboardUnavailableError,
)
from glyph_editor.utils import logger as logger_module


# ── Sample glyph markup ─────────────────────────────────────────────────

SQUARE_BODY = '<rect x="0" y="0" width="100" height="100" fill="#1d3b2f"/>'
WIDE_BODY = '<path d="M0 10 L200 10 L200 90 L0 90 Z"/>'


def make_glyph(glyph_id, view_box=(0, 0, 100, 100), body=SQUARE_BODY, content=None):
    return GlyphDefinition(
        id=glyph_id,
        name=glyph_id,
        view_box=ViewBox(*view_box),
        body=body,
        content=ViewBox(*content) if content else None,
    )


class FakeClipboard(ClipboardBackend):
    """In-memory clipboard with switchable capabilities"""

    def __init__(self, rich=True, fail_write=False, fail_read=False):
        self.rich = rich
        self.fail_write = fail_write
        self.fail_read = fail_read
        self.payload = ClipboardPayload()
        self.writes = []

    def supports_rich(self):
        return self.rich

    def write_rich(self, html, svg, text):
        if self.fail_write:
            raise ClipboardUnavailableError("write denied")
        self.writes.append('rich')
        self.payload = ClipboardPayload(html=html, svg=svg, text=text)

    def write_text(self, text):
        if self.fail_write:
            raise ClipboardUnavailableError("write denied")
        self.writes.append('text')
        self.payload = ClipboardPayload(text=text)

    def read(self):
        if self.fail_read:
            raise ClipboardUnavailableError("read denied")
        return self.payload


# ── Fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def catalog():
    """A1, G17 (square) and N35 (wide 200x100 with inset content)"""
    return GlyphCatalog([
        make_glyph('A1'),
        make_glyph('G17'),
        make_glyph('N35', view_box=(0, 0, 200, 100), body=WIDE_BODY, content=(0, 10, 200, 80)),
    ])


@pytest.fixture
def scene(catalog):
    return Scene(catalog)


@pytest.fixture
def fake_clipboard():
    return FakeClipboard()


@pytest.fixture
def status_messages():
    """Collects messages sent to the status sink"""
    messages = []
    logger_module.set_status_sink(messages.append)
    yield messages
    logger_module.set_status_sink(None)
