import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from lorebook_editor.events import RegistryEvent
    from lorebook_editor.models.session import EditorSession

@dataclass
class Context:
    session: Optional['EditorSession'] = None
    registry_listeners: List[Callable[['RegistryEvent'], None]] = field(default_factory=list)

    log_level: int = logging.INFO

context = Context()
