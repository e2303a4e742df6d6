from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RegistryEventType(Enum):
    """
    Enumeration for the mutations an entry registry reports to its listeners.
    """
    ENTRY_INSERTED = 'entry_inserted'
    ENTRY_REMOVED = 'entry_removed'
    ENTRY_MOVED = 'entry_moved'
    ENTRY_UPDATED = 'entry_updated'
    LOREBOOK_LOADED = 'lorebook_loaded'


@dataclass(frozen=True)
class RegistryEvent:
    """
    A single registry mutation.

    Args:
        type (RegistryEventType): What happened.
        uid (Optional[int]): The entry the mutation applied to.
        index (Optional[int]): The entry's position after the mutation, if it is still live.
    """
    type: RegistryEventType
    uid: Optional[int] = None
    index: Optional[int] = None


class SocketIOEventType:
    # receivable events
    CONNECT = 'connect'
    PING = 'ping'
    ERROR = 'error'

    LOREBOOK_STATE_REQUEST = 'lorebook_state_request'
    LOREBOOK_LOAD_REQUEST = 'lorebook_load_request'
    LOREBOOK_EXPORT_REQUEST = 'lorebook_export_request'

    ENTRY_ADD_REQUEST = 'entry_add_request'
    ENTRY_DUPLICATE_REQUEST = 'entry_duplicate_request'
    ENTRY_DELETE_REQUEST = 'entry_delete_request'
    ENTRY_MOVE_UP_REQUEST = 'entry_move_up_request'
    ENTRY_MOVE_DOWN_REQUEST = 'entry_move_down_request'
    ENTRY_MOVE_TO_REQUEST = 'entry_move_to_request'
    ENTRY_TOGGLE_REQUEST = 'entry_toggle_request'
    ENTRY_STRATEGY_REQUEST = 'entry_strategy_request'
    ENTRY_UPDATE_REQUEST = 'entry_update_request'

    ENTRY_DRAG_START_REQUEST = 'entry_drag_start_request'
    ENTRY_DRAG_OVER_REQUEST = 'entry_drag_over_request'
    ENTRY_DRAG_LEAVE_REQUEST = 'entry_drag_leave_request'
    ENTRY_DROP_REQUEST = 'entry_drop_request'
    ENTRY_DRAG_CANCEL_REQUEST = 'entry_drag_cancel_request'

    # sendable events
    PONG = 'pong'

    LOREBOOK_STATE = 'lorebook_state'
    LOREBOOK_LOAD = 'lorebook_load'
    LOREBOOK_EXPORT = 'lorebook_export'

    ENTRY_ADD = 'entry_add'
    ENTRY_DUPLICATE = 'entry_duplicate'
    ENTRY_DELETE = 'entry_delete'
    ENTRY_MOVE = 'entry_move'
    ENTRY_TOGGLE = 'entry_toggle'
    ENTRY_STRATEGY = 'entry_strategy'
    ENTRY_UPDATE = 'entry_update'
    ENTRY_DRAG = 'entry_drag'

    SHOW_TOASTR = 'show_toastr'
