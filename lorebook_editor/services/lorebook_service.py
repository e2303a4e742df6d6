import os
from typing import IO, Callable, Iterable, List, Optional, Union

from lorebook_editor.constants import DEFAULT_FILE_NAME, EXPORT_FILE_PREFIX, JSON_EXTENSION, Placement
from lorebook_editor.context import context
from lorebook_editor.dto.lorebook_dto import EntryDTO, EntryUpdateDTO, LorebookDTO, ExportDTO
from lorebook_editor.events import RegistryEvent, RegistryEventType
from lorebook_editor.models.lorebook import Entry
from lorebook_editor.models.registry import EntryRegistry
from lorebook_editor.models.reorder import DragSession, EntryBounds
from lorebook_editor.models.session import EditorSession
from lorebook_editor.models.strategy import Strategy
from lorebook_editor.utils import document_codec
from lorebook_editor.utils.document_codec import DocumentError, ParseError, FormatError
from lorebook_editor.utils.utils import create_logger

lorebook_service_log = create_logger(__name__, entity_name='LOREBOOK_SERVICE', level=context.log_level)

class LorebookServiceError(Exception):
    """Custom exception for lorebook service errors."""
    pass

class NoLorebookLoadedError(LorebookServiceError):
    """Exception raised when an operation needs a loaded lorebook and there is none."""
    pass

class InvalidFileTypeError(LorebookServiceError):
    """Exception raised when the uploaded file is not a .json file."""
    pass

class FileReadError(LorebookServiceError):
    """Exception raised when the uploaded file cannot be read."""
    pass

class ExportError(LorebookServiceError):
    """Exception raised when the lorebook cannot be exported."""
    pass

ConfirmGate = Callable[[EntryDTO], bool]

# --- Helper Functions ---

def _get_session() -> EditorSession:
    if context.session is None:
        raise NoLorebookLoadedError("No lorebook is loaded.")
    return context.session

def _get_registry() -> EntryRegistry:
    return _get_session().registry

def _map_entry_to_dto(entry: Entry, registry: EntryRegistry) -> EntryDTO:
    """Maps an Entry to an EntryDTO, including its move affordances."""
    return EntryDTO(
        uid=entry.uid,
        display_index=entry.display_index,
        keys=list(entry.keys),
        secondary_keys=list(entry.secondary_keys),
        comment=entry.comment,
        content=entry.content,
        disabled=entry.disabled,
        selective=entry.selective,
        selective_logic=entry.selective_logic,
        strategy=entry.strategy,
        constant=entry.constant,
        vectorized=entry.vectorized,
        attributes=dict(entry.attributes),
        can_move_up=registry.can_move_up(entry.uid),
        can_move_down=registry.can_move_down(entry.uid)
    )

def _map_entry_by_uid(uid: int) -> Optional[EntryDTO]:
    registry = _get_registry()
    entry = registry.get(uid)
    return _map_entry_to_dto(entry, registry) if entry else None

def _notify_listeners(event: RegistryEvent):
    for listener in list(context.registry_listeners):
        try:
            listener(event)
        except Exception as e:
            lorebook_service_log.error(f"Service: Error notifying {listener} of {event}: {e}")

def export_file_name(loaded_file_name: Optional[str]) -> str:
    """'edited_<name without extension>.json', falling back to the default lorebook name."""
    base_name = os.path.splitext(os.path.basename(loaded_file_name or ''))[0]
    if not base_name:
        base_name = os.path.splitext(DEFAULT_FILE_NAME)[0]
    return f"{EXPORT_FILE_PREFIX}{base_name}{JSON_EXTENSION}"

# --- Listener Functions ---

def register_registry_listener(listener: Callable[[RegistryEvent], None]):
    """Registers a listener for mutations of the current and every future registry."""
    if listener not in context.registry_listeners:
        context.registry_listeners.append(listener)

def unregister_registry_listener(listener: Callable[[RegistryEvent], None]):
    if listener in context.registry_listeners:
        context.registry_listeners.remove(listener)

# --- Load / Export Functions ---

def load_document(raw: Union[str, bytes], file_name: Optional[str] = None) -> LorebookDTO:
    """
    Replaces the current lorebook with the one in raw.
    Raises ParseError or FormatError, leaving the current lorebook untouched.
    """
    display_name = file_name or DEFAULT_FILE_NAME
    lorebook_service_log.info(f"Service: Loading lorebook '{display_name}'")
    try:
        entries = document_codec.decode(raw)
    except ParseError as e:
        lorebook_service_log.warning(f"Service: Could not parse '{display_name}': {e}")
        raise ParseError(f"Error decoding JSON file ({display_name}): {e}") from e
    except FormatError as e:
        lorebook_service_log.warning(f"Service: '{display_name}' is not a lorebook: {e}")
        raise

    registry = EntryRegistry(entries)
    registry.subscribe(_notify_listeners)
    if context.session is not None:
        context.session.registry.unsubscribe(_notify_listeners)
    context.session = EditorSession(registry=registry, file_name=display_name)
    lorebook_service_log.info(f"Service: Loaded {len(registry)} entries from '{display_name}'")
    _notify_listeners(RegistryEvent(type=RegistryEventType.LOREBOOK_LOADED))
    return get_state()

def load_uploaded_file(file_name: Optional[str], stream: IO[bytes]) -> LorebookDTO:
    """Validates and loads a file handed over by the upload form."""
    file_name = os.path.basename(file_name or '')
    if not file_name:
        raise FileReadError("Error: No file was selected for upload.")
    if os.path.splitext(file_name)[1].lower() != JSON_EXTENSION:
        raise InvalidFileTypeError("Invalid file type. Please upload a .json file.")
    try:
        raw = stream.read()
    except OSError as e:
        lorebook_service_log.error(f"Service: Error reading uploaded file '{file_name}': {e}")
        raise FileReadError(f"Error reading uploaded file: {file_name}") from e
    return load_document(raw, file_name)

def export_document() -> ExportDTO:
    """
    Serializes the entries in their current order.
    Raises ExportError if there is nothing to export or serialization fails.
    """
    session = _get_session()
    registry = session.registry
    if len(registry) == 0:
        lorebook_service_log.warning("Service: Export refused, the lorebook has no entries")
        raise ExportError("Nothing to export!")

    registry.refresh_display_indices()
    try:
        text = document_codec.dumps(registry.entries)
    except (TypeError, ValueError) as e:
        lorebook_service_log.error(f"Service: Error during JSON export: {e}", exc_info=True)
        raise ExportError("An error occurred while exporting the JSON file.") from e

    file_name = export_file_name(session.file_name)
    lorebook_service_log.info(f"Service: Exported {len(registry)} entries as '{file_name}'")
    return ExportDTO(file_name=file_name, text=text)

def is_loaded() -> bool:
    return context.session is not None

def get_state() -> LorebookDTO:
    """Returns the loaded file name and the entries in current order."""
    session = _get_session()
    return LorebookDTO(file_name=session.file_name, entries=get_entries())

def get_entries() -> List[EntryDTO]:
    registry = _get_registry()
    registry.refresh_display_indices()
    return [_map_entry_to_dto(entry, registry) for entry in registry]

def get_entry(uid: int) -> Optional[EntryDTO]:
    return _map_entry_by_uid(uid)

# --- Entry Mutation Functions ---

def add_entry(reference_uid: Optional[int] = None, placement: str = Placement.BOTTOM) -> EntryDTO:
    """Adds a default entry above/below the reference entry or at the bottom."""
    if placement not in (Placement.ABOVE, Placement.BELOW, Placement.BOTTOM):
        raise ValueError(f"Unknown placement '{placement}'")
    entry = _get_registry().add_entry(reference_uid=reference_uid, placement=placement)
    lorebook_service_log.info(f"Service: Added entry uid={entry.uid} ({placement} {reference_uid})")
    return _map_entry_by_uid(entry.uid)

def duplicate_entry(uid: int) -> Optional[EntryDTO]:
    entry = _get_registry().duplicate(uid)
    if entry is None:
        lorebook_service_log.warning(f"Service: Duplicate ignored, entry uid={uid} not found")
        return None
    lorebook_service_log.info(f"Service: Duplicated entry uid={uid} as uid={entry.uid}")
    return _map_entry_by_uid(entry.uid)

def delete_prompt(entry: EntryDTO) -> str:
    """The question the confirmation gate asks before an entry is deleted."""
    name = entry.comment.strip() or "this entry"
    return f'Are you sure you want to delete "{name}"? This cannot be undone.'

def delete_entry(uid: int, confirm: ConfirmGate) -> bool:
    """
    Deletes an entry once confirm() accepts it. Returns False without
    touching the lorebook if the entry is unknown or the deletion is declined.
    """
    entry_dto = _map_entry_by_uid(uid)
    if entry_dto is None:
        lorebook_service_log.warning(f"Service: Delete ignored, entry uid={uid} not found")
        return False
    if not confirm(entry_dto):
        lorebook_service_log.info(f"Service: Delete of entry uid={uid} declined")
        return False
    removed = _get_registry().remove(uid)
    if removed:
        lorebook_service_log.info(f"Service: Deleted entry uid={uid}")
    return removed

def move_entry_up(uid: int) -> bool:
    return _get_registry().move_up(uid)

def move_entry_down(uid: int) -> bool:
    return _get_registry().move_down(uid)

def move_entry_to(uid: int, index: int) -> bool:
    return _get_registry().move_to(uid, index)

def toggle_entry_enabled(uid: int) -> Optional[EntryDTO]:
    if not _get_registry().toggle_enabled(uid):
        lorebook_service_log.warning(f"Service: Toggle ignored, entry uid={uid} not found")
        return None
    return _map_entry_by_uid(uid)

def set_entry_strategy(uid: int, strategy: Union[Strategy, str]) -> Optional[EntryDTO]:
    strategy = Strategy(strategy)
    if not _get_registry().set_strategy(uid, strategy):
        lorebook_service_log.warning(f"Service: Strategy change ignored, entry uid={uid} not found")
        return None
    return _map_entry_by_uid(uid)

def update_entry(uid: int, update_data: EntryUpdateDTO) -> Optional[EntryDTO]:
    """Applies field edits to the live entry."""
    changes = update_data.changes()
    if not _get_registry().update_entry(uid, **changes):
        lorebook_service_log.warning(f"Service: Update ignored, entry uid={uid} not found")
        return None
    lorebook_service_log.debug(f"Service: Updated entry uid={uid}: {sorted(changes)}")
    return _map_entry_by_uid(uid)

# --- Drag Functions ---

def start_drag(uid: int) -> bool:
    """Begins a drag gesture for an entry, replacing any unfinished one."""
    session = _get_session()
    if uid not in session.registry:
        lorebook_service_log.warning(f"Service: Drag ignored, entry uid={uid} not found")
        session.drag = None
        return False
    if session.drag is not None:
        session.drag.cancel()
    session.drag = DragSession(dragged_uid=uid)
    return True

def drag_over(pointer_y: float, bounds: Iterable[EntryBounds]) -> Optional[int]:
    """Returns the uid the dragged entry would be placed before (None = end)."""
    drag = _get_session().drag
    if drag is None:
        return None
    return drag.hover(pointer_y, bounds)

def drag_leave():
    drag = _get_session().drag
    if drag is not None:
        drag.leave()

def drop(pointer_y: float, bounds: Iterable[EntryBounds]) -> bool:
    session = _get_session()
    drag = session.drag
    session.drag = None
    if drag is None:
        return False
    return drag.drop(session.registry, pointer_y, bounds)

def cancel_drag():
    session = _get_session()
    if session.drag is not None:
        session.drag.cancel()
    session.drag = None

def reset():
    """Forgets the loaded lorebook."""
    if context.session is not None:
        context.session.registry.unsubscribe(_notify_listeners)
    context.session = None
