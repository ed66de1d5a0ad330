"""Editor settings persisted as JSON in the user's config directory"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Optional

from glyph_editor.constants import (
	CATALOG_BATCH_SIZE, COPY_PRESET_SCALES, COPY_PRESET_WYSIWYG,
	DEFAULT_COPY_PRESET, DEFAULT_ZOOM,
)

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".glyph_editor"
CONFIG_FILE_NAME = "config.json"


def get_config_dir() -> str:
	"""~/.glyph_editor (overridable with GLYPH_EDITOR_CONFIG_DIR)"""
	override = os.environ.get('GLYPH_EDITOR_CONFIG_DIR')
	if override:
		return override
	return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)


@dataclass
class EditorSettings:
	"""User preferences that survive restarts"""
	zoom: float = DEFAULT_ZOOM
	copy_preset: str = DEFAULT_COPY_PRESET
	stage_snapping: bool = True
	catalog_batch_size: int = CATALOG_BATCH_SIZE
	catalog_dir: Optional[str] = None

	def export_scale(self) -> float:
		"""Scale applied to copied SVG for the current preset"""
		if self.copy_preset == COPY_PRESET_WYSIWYG:
			return self.zoom
		return COPY_PRESET_SCALES.get(self.copy_preset, self.zoom)

	@classmethod
	def from_dict(cls, data: dict) -> 'EditorSettings':
		known = {f.name for f in fields(cls)}
		settings = cls(**{k: v for k, v in data.items() if k in known})
		if settings.copy_preset != COPY_PRESET_WYSIWYG and settings.copy_preset not in COPY_PRESET_SCALES:
			logger.warning("Unknown copy preset %r, using %r", settings.copy_preset, DEFAULT_COPY_PRESET)
			settings.copy_preset = DEFAULT_COPY_PRESET
		if not isinstance(settings.catalog_batch_size, int) or settings.catalog_batch_size < 1:
			settings.catalog_batch_size = CATALOG_BATCH_SIZE
		return settings

	def to_dict(self) -> dict:
		return asdict(self)


def config_file_path(config_dir: Optional[str] = None) -> str:
	return os.path.join(config_dir or get_config_dir(), CONFIG_FILE_NAME)


def load_settings(config_dir: Optional[str] = None) -> EditorSettings:
	"""Load settings, falling back to defaults for a missing or malformed file"""
	path = config_file_path(config_dir)
	if not os.path.exists(path):
		return EditorSettings()
	try:
		with open(path, 'r', encoding='utf-8') as f:
			data = json.load(f)
	except (OSError, ValueError) as e:
		logger.warning("Error loading config %s: %s", path, e)
		return EditorSettings()
	if not isinstance(data, dict):
		logger.warning("Ignoring config %s: expected an object", path)
		return EditorSettings()
	try:
		return EditorSettings.from_dict(data)
	except TypeError as e:
		logger.warning("Ignoring config %s: %s", path, e)
		return EditorSettings()


def save_settings(settings: EditorSettings, config_dir: Optional[str] = None):
	"""Write settings, creating the config directory if needed"""
	directory = config_dir or get_config_dir()
	os.makedirs(directory, exist_ok=True)
	with open(config_file_path(directory), 'w', encoding='utf-8') as f:
		json.dump(settings.to_dict(), f, indent=2)
