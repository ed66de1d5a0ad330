"""
Glyph Editor - Transform Widget Components

This package contains the transform widget architecture:
- handles.py: ABC-based handle classes (CornerHandle, EdgeHandle, etc.)
- modes.py: Mode classes defining handle sets (CanvasMode, StageMode)
- drag_context.py: Unified drag state captured at pointer-down
- gesture.py: The idle/dragging state machine applying drag deltas
"""

from .handles import Handle, CornerHandle, EdgeHandle, RotationHandle, BodyHandle
from .modes import TransformMode, CanvasMode, StageMode, create_mode
from .drag_context import DragContext, DragMode, InstanceStart
from .gesture import GestureController, STATE_IDLE, STATE_DRAGGING

__all__ = [
	'Handle', 'CornerHandle', 'EdgeHandle', 'RotationHandle', 'BodyHandle',
	'TransformMode', 'CanvasMode', 'StageMode', 'create_mode',
	'DragContext', 'DragMode', 'InstanceStart',
	'GestureController', 'STATE_IDLE', 'STATE_DRAGGING',
]
