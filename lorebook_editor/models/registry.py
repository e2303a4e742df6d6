from typing import Callable, Iterable, Iterator, List, Optional, Set

from lorebook_editor.constants import Placement
from lorebook_editor.context import context
from lorebook_editor.events import RegistryEvent, RegistryEventType
from lorebook_editor.utils.uid_allocator import next_uid
from lorebook_editor.utils.utils import create_logger
from .lorebook import Entry
from .strategy import Strategy

registry_log = create_logger(__name__, entity_name='ENTRY_REGISTRY', level=context.log_level)

RegistryListener = Callable[[RegistryEvent], None]


class EntryRegistry:
    """
    Ordered collection of entries. The list order is the only source of
    truth for position; display indices are refreshed from it after every
    structural mutation. Misses (unknown uid, boundary moves) are no-ops.
    """

    def __init__(self, entries: Optional[Iterable[Entry]] = None):
        self._entries: List[Entry] = []
        self._listeners: List[RegistryListener] = []
        for entry in entries or []:
            self._check_uid_free(entry.uid)
            self._entries.append(entry)
        self.refresh_display_indices()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self._entries))

    def __contains__(self, uid: int) -> bool:
        return self.index_of(uid) is not None

    @property
    def entries(self) -> List[Entry]:
        """The entries in current visual order."""
        return list(self._entries)

    def uids(self) -> Set[int]:
        return {entry.uid for entry in self._entries}

    def index_of(self, uid: int) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.uid == uid:
                return index
        return None

    def get(self, uid: int) -> Optional[Entry]:
        index = self.index_of(uid)
        return self._entries[index] if index is not None else None

    # --- Listeners ---

    def subscribe(self, listener: RegistryListener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: RegistryListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event_type: RegistryEventType, uid: int):
        event = RegistryEvent(type=event_type, uid=uid, index=self.index_of(uid))
        for listener in list(self._listeners):
            listener(event)

    # --- Identity ---

    def allocate_uid(self) -> int:
        """Smallest uid not used by a live entry, computed from the current entries."""
        return next_uid(self.uids())

    def _check_uid_free(self, uid: int):
        if any(entry.uid == uid for entry in self._entries):
            raise ValueError(f"Entry uid {uid} is already in use")

    # --- Structural mutations ---

    def insert(self, entry: Entry, position: int) -> Entry:
        """Inserts an entry at 'position' (0 = front, len = end)."""
        self._check_uid_free(entry.uid)
        position = max(0, min(position, len(self._entries)))
        self._entries.insert(position, entry)
        self.refresh_display_indices()
        registry_log.debug(f"Inserted entry uid={entry.uid} at {position}")
        self._notify(RegistryEventType.ENTRY_INSERTED, entry.uid)
        return entry

    def add_entry(self, reference_uid: Optional[int] = None, placement: str = Placement.BOTTOM) -> Entry:
        """Creates a default entry above/below a reference entry, or at the bottom."""
        position = len(self._entries)
        reference_index = self.index_of(reference_uid) if reference_uid is not None else None
        if reference_index is not None:
            if placement == Placement.ABOVE:
                position = reference_index
            elif placement == Placement.BELOW:
                position = reference_index + 1
        elif placement != Placement.BOTTOM:
            registry_log.warning(f"Reference entry {reference_uid} not found, adding at the bottom")
        return self.insert(Entry.new(self.allocate_uid()), position)

    def remove(self, uid: int) -> bool:
        index = self.index_of(uid)
        if index is None:
            registry_log.debug(f"Remove ignored, no entry with uid={uid}")
            return False
        del self._entries[index]
        self.refresh_display_indices()
        registry_log.debug(f"Removed entry uid={uid} from {index}")
        self._notify(RegistryEventType.ENTRY_REMOVED, uid)
        return True

    def move_up(self, uid: int) -> bool:
        index = self.index_of(uid)
        if index is None or index == 0:
            return False
        return self._relocate(index, index - 1)

    def move_down(self, uid: int) -> bool:
        index = self.index_of(uid)
        if index is None or index == len(self._entries) - 1:
            return False
        return self._relocate(index, index + 1)

    def move_to(self, uid: int, target_index: int) -> bool:
        """Relocates an entry so that it ends up at target_index."""
        index = self.index_of(uid)
        if index is None:
            return False
        target_index = max(0, min(target_index, len(self._entries) - 1))
        if target_index == index:
            return False
        return self._relocate(index, target_index)

    def _relocate(self, index: int, target_index: int) -> bool:
        entry = self._entries.pop(index)
        self._entries.insert(target_index, entry)
        self.refresh_display_indices()
        registry_log.debug(f"Moved entry uid={entry.uid} from {index} to {target_index}")
        self._notify(RegistryEventType.ENTRY_MOVED, entry.uid)
        return True

    def duplicate(self, uid: int) -> Optional[Entry]:
        """Copies the live entry under a fresh uid and inserts the copy right after it."""
        index = self.index_of(uid)
        if index is None:
            return None
        duplicate = self._entries[index].copy_with(self.allocate_uid())
        return self.insert(duplicate, index + 1)

    # --- Field edits ---

    def update_entry(self, uid: int, **changes) -> bool:
        entry = self.get(uid)
        if entry is None:
            registry_log.debug(f"Update ignored, no entry with uid={uid}")
            return False
        entry.update(**changes)
        self._notify(RegistryEventType.ENTRY_UPDATED, uid)
        return True

    def set_strategy(self, uid: int, strategy: Strategy) -> bool:
        return self.update_entry(uid, strategy=Strategy(strategy))

    def toggle_enabled(self, uid: int) -> bool:
        entry = self.get(uid)
        if entry is None:
            return False
        return self.update_entry(uid, disabled=not entry.disabled)

    # --- Positions ---

    def refresh_display_indices(self):
        for index, entry in enumerate(self._entries):
            entry.display_index = index

    def can_move_up(self, uid: int) -> bool:
        index = self.index_of(uid)
        return index is not None and index > 0

    def can_move_down(self, uid: int) -> bool:
        index = self.index_of(uid)
        return index is not None and index < len(self._entries) - 1
