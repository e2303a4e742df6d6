from dataclasses import dataclass
from typing import Optional

from lorebook_editor.constants import DEFAULT_FILE_NAME
from .registry import EntryRegistry
from .reorder import DragSession


@dataclass
class EditorSession:
    """One loaded document: its registry, its display name and the drag gesture in progress, if any."""
    registry: EntryRegistry
    file_name: str = DEFAULT_FILE_NAME
    drag: Optional[DragSession] = None
