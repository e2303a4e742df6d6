from .strategy import Strategy, to_flags, to_strategy
from .lorebook import Entry, SelectiveLogic, DEFAULT_ENTRY_DATA
from .registry import EntryRegistry
from .reorder import DragSession, EntryBounds, resolve_drop_target
from .session import EditorSession

__all__ = [
    'DEFAULT_ENTRY_DATA',
    'DragSession',
    'EditorSession',
    'Entry',
    'EntryBounds',
    'EntryRegistry',
    'SelectiveLogic',
    'Strategy',
    'resolve_drop_target',
    'to_flags',
    'to_strategy',
]
