from .events import InputEvent, parse_pointer_event
from .window_matrix import FullRewrite, ReplaceRect, WindowMatrix, WriteBatch

__all__ = [
    "FullRewrite",
    "InputEvent",
    "ReplaceRect",
    "WindowMatrix",
    "WriteBatch",
    "parse_pointer_event",
]
