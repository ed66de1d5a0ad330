"""Clipboard operations - copy selection as SVG, paste instances or SVG"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from glyph_editor.constants import SAMPLE_EXTERNAL_SVG, SAMPLE_EXTERNAL_TEXT
from glyph_editor.models.glyph import GlyphDefinition
from glyph_editor.models.instance import GlyphInstance
from glyph_editor.services.clipboard_service import (
    ClipboardBackend, ClipboardUnavailableError, QtClipboardBackend, WriteMode,
    read_clipboard, write_clipboard,
)
from glyph_editor.services.content_probe import ContentBoundsProbe, default_probe
from glyph_editor.services.svg_codec import PasteKind, build_export_svg, decode_payload, plain_text_ids
from glyph_editor.utils.config import EditorSettings
from glyph_editor.utils.logger import loggerRaise, report_status

logger = logging.getLogger(__name__)


@dataclass
class CopyOutcome:
    success: bool
    message: str
    mode: Optional[WriteMode] = None
    count: int = 0


@dataclass
class PasteOutcome:
    success: bool
    message: str
    kind: Optional[PasteKind] = None
    instances: List[GlyphInstance] = field(default_factory=list)
    glyph: Optional[GlyphDefinition] = None
    skipped: List[str] = field(default_factory=list)


class ClipboardActions:
    """Handles clipboard operations for a Scene.

    Every operation returns an outcome and reports its status message;
    clipboard failures never propagate to the caller.
    """

    def __init__(self, scene, backend: ClipboardBackend = None,
                 settings: EditorSettings = None, probe: ContentBoundsProbe = None):
        """
        Args:
            scene: Scene to copy from and paste into
            backend: Clipboard backend (system clipboard by default)
            settings: EditorSettings providing zoom and copy preset
            probe: Content bounds probe for imported SVG
        """
        self.scene = scene
        self.backend = backend or QtClipboardBackend()
        self.settings = settings or EditorSettings()
        self.probe = probe or default_probe()

    def _report(self, outcome):
        report_status(outcome.message)
        return outcome

    def copy_selection(self, preset: str = None) -> CopyOutcome:
        """Copy the selection (or whole scene when nothing is selected)"""
        preset = preset or self.settings.copy_preset
        if preset != self.settings.copy_preset:
            settings = EditorSettings(**{**self.settings.to_dict(), 'copy_preset': preset})
        else:
            settings = self.settings

        scene = self.scene
        selected = scene.selected_ids
        try:
            svg = build_export_svg(scene.rows, scene.catalog, scene.cell_step,
                                   settings.export_scale(), selected)
            text = plain_text_ids(scene.rows, scene.catalog, scene.cell_step, selected)
        except Exception as e:
            loggerRaise(e, f"Failed to copy: {str(e)}")

        if not svg:
            return self._report(CopyOutcome(False, "Nothing to copy"))

        count = len(text.split())
        try:
            mode = write_clipboard(self.backend, svg, text)
        except ClipboardUnavailableError as e:
            logger.warning("Copy failed: %s", e)
            return self._report(CopyOutcome(False, "Copy failed: clipboard blocked or unavailable"))

        if mode == WriteMode.HTML:
            message = f"Copied {count} glyphs ({preset})"
        else:
            message = "Copied plain text only (clipboard does not allow SVG here)"
        return self._report(CopyOutcome(True, message, mode, count))

    def copy_sample(self) -> CopyOutcome:
        """Copy the built-in foreign SVG sample to exercise external import"""
        try:
            mode = write_clipboard(self.backend, SAMPLE_EXTERNAL_SVG, SAMPLE_EXTERNAL_TEXT)
        except ClipboardUnavailableError as e:
            logger.warning("Copy failed: %s", e)
            return self._report(CopyOutcome(False, "Copy failed: clipboard blocked or unavailable"))

        if mode == WriteMode.HTML:
            message = "Copied inline SVG sample to clipboard"
        else:
            message = "Copied sample as text only (clipboard does not allow SVG here)"
        return self._report(CopyOutcome(True, message, mode, 1))

    def paste(self) -> PasteOutcome:
        """Paste into the active row and select what was pasted"""
        try:
            payload = read_clipboard(self.backend)
        except ClipboardUnavailableError as e:
            logger.warning("Paste failed: %s", e)
            return self._report(PasteOutcome(False, "Paste failed: clipboard blocked"))

        scene = self.scene
        try:
            decoded = decode_payload(payload.html, payload.svg, payload.text, scene.catalog, self.probe)
        except Exception as e:
            loggerRaise(e, f"Failed to paste: {str(e)}")

        if decoded.kind == PasteKind.NOTHING_RECOGNIZED:
            return self._report(PasteOutcome(False, "Paste contained no recognized glyphs",
                                             decoded.kind, skipped=decoded.skipped))

        if decoded.glyph is not None:
            scene.catalog.add(decoded.glyph)
        inserted = scene.insert_many(decoded.instances)
        scene.set_selection(inst.id for inst in inserted)

        if decoded.kind == PasteKind.GROUPS:
            message = f"Pasted {len(inserted)} glyphs from SVG"
        elif decoded.kind == PasteKind.FOREIGN_SVG:
            message = "Imported external SVG as a glyph"
        else:
            message = f"Pasted {len(inserted)} glyph ids"
        return self._report(PasteOutcome(True, message, decoded.kind, inserted,
                                         decoded.glyph, decoded.skipped))
