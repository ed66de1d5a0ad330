"""Clipboard platform access.

Writes go out as three parallel representations (HTML wrapper, raw SVG,
plain text) when the backend supports rich data, else as a single text
write. Reads return whatever of HTML / SVG / text is present; an empty
clipboard is a valid, empty result.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from glyph_editor.constants import MIME_HTML, MIME_SVG, MIME_TEXT
from glyph_editor.services.svg_codec import build_html_payload

logger = logging.getLogger(__name__)


class ClipboardUnavailableError(RuntimeError):
    """Clipboard cannot be reached (no GUI session, permission denied)"""
    pass


class WriteMode(Enum):
    HTML = 'html'  # rich triple written
    TEXT = 'text'  # plain text only, rich data not preserved


@dataclass
class ClipboardPayload:
    html: Optional[str] = None
    svg: Optional[str] = None
    text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.html or self.svg or self.text)


class ClipboardBackend(ABC):
    """Platform clipboard capability"""

    @abstractmethod
    def supports_rich(self) -> bool:
        """Whether parallel MIME representations can be written"""
        pass

    @abstractmethod
    def write_rich(self, html: str, svg: str, text: str):
        pass

    @abstractmethod
    def write_text(self, text: str):
        pass

    @abstractmethod
    def read(self) -> ClipboardPayload:
        pass


class QtClipboardBackend(ClipboardBackend):
    """System clipboard through QGuiApplication.clipboard()"""

    def _clipboard(self):
        from PyQt5.QtGui import QGuiApplication

        if QGuiApplication.instance() is None:
            raise ClipboardUnavailableError("No QGuiApplication running")
        clipboard = QGuiApplication.clipboard()
        if clipboard is None:
            raise ClipboardUnavailableError("System clipboard unavailable")
        return clipboard

    def supports_rich(self):
        from PyQt5.QtGui import QGuiApplication

        return QGuiApplication.instance() is not None

    def write_rich(self, html, svg, text):
        from PyQt5.QtCore import QByteArray, QMimeData

        mime_data = QMimeData()
        mime_data.setHtml(html)
        mime_data.setData(MIME_SVG, QByteArray(svg.encode('utf-8')))
        mime_data.setText(text)
        self._clipboard().setMimeData(mime_data)

    def write_text(self, text):
        self._clipboard().setText(text)

    def read(self):
        mime_data = self._clipboard().mimeData()
        if mime_data is None:
            return ClipboardPayload()
        html = mime_data.html() if mime_data.hasFormat(MIME_HTML) else None
        svg = None
        if mime_data.hasFormat(MIME_SVG):
            svg = bytes(mime_data.data(MIME_SVG)).decode('utf-8', errors='replace')
        text = mime_data.text() if mime_data.hasFormat(MIME_TEXT) else None
        return ClipboardPayload(html=html or None, svg=svg or None, text=text or None)


def write_clipboard(backend: ClipboardBackend, svg_markup: str, plain_text: str) -> WriteMode:
    """Write an export to the clipboard.

    Returns:
        WriteMode.HTML when all three representations were written,
        WriteMode.TEXT when only text (the markup, or the ids when there is
        no markup) could be written

    Raises:
        ClipboardUnavailableError: the clipboard cannot be written at all
    """
    if backend.supports_rich():
        try:
            backend.write_rich(build_html_payload(svg_markup), svg_markup, plain_text)
            return WriteMode.HTML
        except ClipboardUnavailableError:
            raise
        except RuntimeError as e:
            logger.warning("Rich clipboard write failed, falling back to text: %s", e)

    backend.write_text(svg_markup or plain_text)
    return WriteMode.TEXT


def read_clipboard(backend: ClipboardBackend) -> ClipboardPayload:
    """Read all available representations.

    Raises:
        ClipboardUnavailableError: the clipboard cannot be read
    """
    return backend.read()
