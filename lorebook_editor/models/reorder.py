from dataclasses import dataclass
from typing import Iterable, Optional

from lorebook_editor.context import context
from lorebook_editor.utils.utils import create_logger
from .registry import EntryRegistry

reorder_log = create_logger(__name__, entity_name='REORDER', level=context.log_level)


@dataclass(frozen=True)
class EntryBounds:
    """Vertical extent of a rendered entry, in the client's coordinates."""
    uid: int
    top: float
    height: float

    @property
    def midpoint(self) -> float:
        return self.top + self.height / 2


def resolve_drop_target(pointer_y: float, candidates: Iterable[EntryBounds]) -> Optional[int]:
    """
    Returns the uid of the entry the dragged entry should be placed before,
    or None to append at the end.

    Only candidates whose midpoint lies below the pointer qualify; of those
    the closest one wins, and on a tie the first one encountered.
    """
    closest_offset = float('-inf')
    closest_uid = None
    for candidate in candidates:
        offset = pointer_y - candidate.midpoint
        if offset < 0 and offset > closest_offset:
            closest_offset = offset
            closest_uid = candidate.uid
    return closest_uid

def target_index(registry: EntryRegistry, dragged_uid: int, before_uid: Optional[int]) -> int:
    """Final index of the dragged entry once it is placed before 'before_uid'."""
    remaining = [entry.uid for entry in registry if entry.uid != dragged_uid]
    if before_uid is None or before_uid not in remaining:
        return len(remaining)
    return remaining.index(before_uid)


@dataclass
class DragSession:
    """
    State of one pointer-drag gesture. Lives from drag start until a drop
    or a cancel; the registry is only touched by a drop over the surface.
    """
    dragged_uid: int
    over_surface: bool = False
    before_uid: Optional[int] = None
    finished: bool = False

    def _candidates(self, bounds: Iterable[EntryBounds]):
        return [candidate for candidate in bounds if candidate.uid != self.dragged_uid]

    def hover(self, pointer_y: float, bounds: Iterable[EntryBounds]) -> Optional[int]:
        """Tracks the placeholder while the pointer moves over the drop surface."""
        if self.finished:
            return None
        self.over_surface = True
        self.before_uid = resolve_drop_target(pointer_y, self._candidates(bounds))
        return self.before_uid

    def leave(self):
        """The pointer left the drop surface entirely."""
        self.over_surface = False
        self.before_uid = None

    def cancel(self):
        self.leave()
        self.finished = True
        reorder_log.debug(f"Drag of entry uid={self.dragged_uid} cancelled")

    def drop(self, registry: EntryRegistry, pointer_y: float, bounds: Iterable[EntryBounds]) -> bool:
        """
        Moves the dragged entry to the slot under the pointer.
        Returns False, leaving the registry untouched, if the gesture was
        already finished or the pointer is off the drop surface. Without
        bounds the slot tracked by the last hover is used.
        """
        if self.finished or not self.over_surface:
            self.cancel()
            return False
        self.finished = True
        if self.dragged_uid not in registry:
            reorder_log.warning(f"Dragged entry uid={self.dragged_uid} no longer exists")
            return False

        candidates = self._candidates(bounds)
        if candidates:
            before_uid = resolve_drop_target(pointer_y, candidates)
        else:
            before_uid = self.before_uid
        index = target_index(registry, self.dragged_uid, before_uid)
        moved = registry.move_to(self.dragged_uid, index)
        registry.refresh_display_indices()
        reorder_log.debug(f"Dropped entry uid={self.dragged_uid} before {before_uid} (index {index})")
        return moved
