"""
Glyph Editor - Constants and Configuration

This module contains all constant values used throughout the application:
- Canonical glyph geometry (quadrat, fit target)
- Transform constraints (scale bounds, rotation step)
- Gesture and handle settings
- Clipboard export presets and MIME types
- Catalog loading defaults
"""

# ======================================================================
# GLYPH GEOMETRY
# ======================================================================

# Canonical glyph edge length in canvas units. Every glyph body is fitted
# into a square of this size before user scale is applied.
QUADRAT = 1800

# Default view box used when an SVG has no usable viewBox/width/height
DEFAULT_VIEW_BOX = (0.0, 0.0, float(QUADRAT), float(QUADRAT))

# ======================================================================
# SCALE CONSTRAINTS
# ======================================================================

SCALE_MIN = 0.5
SCALE_MAX = 1.8
DEFAULT_SCALE = 1.0

# Scale values are stored rounded to this many decimals after a gesture
SCALE_DECIMALS = 2

# Step applied per wheel notch in the single-instance stage
WHEEL_SCALE_STEP = 0.05

# ======================================================================
# ROTATION
# ======================================================================

# Rotation in whole degrees [0, 359], wraps
ROTATION_FULL_TURN = 360
ROTATION_STEP = 90
DEFAULT_ROTATION = 0

# ======================================================================
# OFFSET / SNAPPING
# ======================================================================

DEFAULT_OFFSET_X = 0.0
DEFAULT_OFFSET_Y = 0.0

# Stage moves snap to QUADRAT / MOVE_SNAP_DIVISIONS (quarter cell)
MOVE_SNAP_DIVISIONS = 4

# ======================================================================
# TRANSFORM WIDGET CONSTANTS
# ======================================================================

# Handle visual appearance, in screen pixels (independent of zoom)
TRANSFORM_HANDLE_SIZE = 8
TRANSFORM_ROTATION_HANDLE_OFFSET = 30
TRANSFORM_HIT_TOLERANCE = 4

# ======================================================================
# LAYOUT
# ======================================================================

# Minimum number of columns the canvas reserves even for short rows
MIN_CANVAS_COLUMNS = 1

# ======================================================================
# CLIPBOARD
# ======================================================================

MIME_HTML = 'text/html'
MIME_SVG = 'image/svg+xml'
MIME_TEXT = 'text/plain'

SVG_NAMESPACE = 'http://www.w3.org/2000/svg'

# Export scale per copy preset; 'wysiwyg' uses the current canvas zoom
COPY_PRESET_SCALES = {
    'small': 0.78,
    'large': 1.15,
}
COPY_PRESET_WYSIWYG = 'wysiwyg'
DEFAULT_COPY_PRESET = 'wysiwyg'

# Self-describing attributes written on every exported group
ATTR_GLYPH_ID = 'data-glyph-id'
ATTR_ROTATE = 'data-rotate'
ATTR_FLIP_X = 'data-flip-x'
ATTR_FLIP_Y = 'data-flip-y'
ATTR_SCALE = 'data-scale'
ATTR_SCALE_X = 'data-scale-x'
ATTR_SCALE_Y = 'data-scale-y'
ATTR_OFFSET_X = 'data-offset-x'
ATTR_OFFSET_Y = 'data-offset-y'

IMPORTED_GLYPH_NAME = 'Imported SVG'
IMPORTED_GLYPH_PREFIX = 'IMPORTED_'

# ======================================================================
# CANVAS
# ======================================================================

DEFAULT_ZOOM = 0.75

# ======================================================================
# CATALOG
# ======================================================================

CATALOG_BATCH_SIZE = 24
CATALOG_FILE_EXTENSION = '.svg'

# ======================================================================
# SAMPLE EXTERNAL SVG
# ======================================================================

# Foreign document (no self-describing attributes) used by
# "Copy Sample Inline SVG" to exercise the external import path
SAMPLE_EXTERNAL_SVG = """\
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 320 200" width="320" height="200">
  <defs>
    <linearGradient id="river" x1="0" y1="0" x2="1" y2="1">
      <stop offset="0%" stop-color="#1d3b2f" />
      <stop offset="100%" stop-color="#d4a04a" />
    </linearGradient>
  </defs>
  <rect x="8" y="8" width="304" height="184" rx="18" fill="#f2efe7" stroke="#1d3b2f" stroke-width="6" />
  <path d="M26 130 C70 90 140 160 190 120 C230 90 270 120 294 100" fill="none" stroke="url(#river)" stroke-width="12" />
  <circle cx="88" cy="78" r="22" fill="#d4a04a" stroke="#1d3b2f" stroke-width="6" />
  <path d="M140 70 L170 40 L200 70" fill="none" stroke="#1d3b2f" stroke-width="10" />
</svg>"""
SAMPLE_EXTERNAL_TEXT = 'external-svg'
