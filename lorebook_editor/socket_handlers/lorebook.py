from pydantic import ValidationError

from lorebook_editor.constants import Placement
from lorebook_editor.extensions import socketio, log
from lorebook_editor.events import SocketIOEventType
from lorebook_editor.helpers.toastr_helper import show_toastr_message, show_blocking_error
from .common import socketio_unicast
from lorebook_editor.services import lorebook_service
from lorebook_editor.services.lorebook_service import (LorebookServiceError, NoLorebookLoadedError,
                                                       ExportError, DocumentError)
from lorebook_editor.dto.lorebook_dto import EntryUpdateDTO, DragPointerDTO

@socketio.on(SocketIOEventType.LOREBOOK_STATE_REQUEST)
def handle_lorebook_state_request():
    """Handles request for the loaded lorebook and its entries."""
    try:
        state = lorebook_service.get_state()
        socketio_unicast(SocketIOEventType.LOREBOOK_STATE, {
            'status': 'success',
            'lorebook': state.model_dump(mode='json')
        })
    except NoLorebookLoadedError as e:
        socketio_unicast(SocketIOEventType.LOREBOOK_STATE, {'status': 'error', 'error': str(e)})
    except Exception as e:
        log.exception(f"Unexpected error handling lorebook state request: {e}")
        socketio_unicast(SocketIOEventType.LOREBOOK_STATE, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.LOREBOOK_LOAD_REQUEST)
def handle_lorebook_load_request(req_json):
    """Handles a lorebook document sent as raw text."""
    try:
        file_name = req_json.get('file_name')
        state = lorebook_service.load_document(req_json['raw'], file_name)
        socketio_unicast(SocketIOEventType.LOREBOOK_LOAD, {
            'status': 'success',
            'message': f"Successfully loaded: {state.file_name}",
            'lorebook': state.model_dump(mode='json')
        })
    except (LorebookServiceError, DocumentError) as e:
        log.warning(f"Handler: Lorebook load rejected: {e}")
        show_toastr_message(str(e), title='Load failed', level='error')
        socketio_unicast(SocketIOEventType.LOREBOOK_LOAD, {'status': 'error', 'error': str(e)})
    except KeyError as ke:
        log.error(f"Missing key in lorebook load request: {ke}")
        socketio_unicast(SocketIOEventType.LOREBOOK_LOAD, {'status': 'error', 'error': f"Missing required field: {ke}"})
    except Exception as e:
        log.exception(f"Unexpected error handling lorebook load request: {e}")
        socketio_unicast(SocketIOEventType.LOREBOOK_LOAD, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.LOREBOOK_EXPORT_REQUEST)
def handle_lorebook_export_request():
    """Handles request for the serialized lorebook."""
    try:
        export_dto = lorebook_service.export_document()
        socketio_unicast(SocketIOEventType.LOREBOOK_EXPORT, {
            'status': 'success',
            'file_name': export_dto.file_name,
            'text': export_dto.text
        })
    except ExportError as e:
        log.warning(f"Handler: Export refused: {e}")
        show_blocking_error(str(e), title='Export failed')
        socketio_unicast(SocketIOEventType.LOREBOOK_EXPORT, {'status': 'error', 'error': str(e)})
    except NoLorebookLoadedError as e:
        socketio_unicast(SocketIOEventType.LOREBOOK_EXPORT, {'status': 'error', 'error': str(e)})
    except Exception as e:
        log.exception(f"Unexpected error handling lorebook export request: {e}")
        socketio_unicast(SocketIOEventType.LOREBOOK_EXPORT, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.ENTRY_ADD_REQUEST)
def handle_entry_add_request(req_json=None):
    """Adds a default entry above/below a reference entry or at the bottom."""
    req_json = req_json or {}
    try:
        entry_dto = lorebook_service.add_entry(
            reference_uid=req_json.get('reference_uid'),
            placement=req_json.get('placement', Placement.BOTTOM)
        )
        socketio_unicast(SocketIOEventType.ENTRY_ADD, {'status': 'success', 'entry': entry_dto.model_dump(mode='json')})
    except (LorebookServiceError, ValueError) as e:
        log.error(f"Service/Validation error adding entry: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_ADD, {'status': 'error', 'error': str(e)})
    except Exception as e:
        log.exception(f"Unexpected error handling entry add request: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_ADD, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.ENTRY_DUPLICATE_REQUEST)
def handle_entry_duplicate_request(req_json):
    try:
        entry_dto = lorebook_service.duplicate_entry(req_json['uid'])
        if entry_dto is None:
            socketio_unicast(SocketIOEventType.ENTRY_DUPLICATE, {'status': 'error', 'error': f"Entry {req_json['uid']} not found"})
            return
        socketio_unicast(SocketIOEventType.ENTRY_DUPLICATE, {'status': 'success', 'entry': entry_dto.model_dump(mode='json')})
    except LorebookServiceError as e:
        socketio_unicast(SocketIOEventType.ENTRY_DUPLICATE, {'status': 'error', 'error': str(e)})
    except KeyError as ke:
        log.error(f"Missing key in entry duplicate request: {ke}")
        socketio_unicast(SocketIOEventType.ENTRY_DUPLICATE, {'status': 'error', 'error': f"Missing required field: {ke}"})
    except Exception as e:
        log.exception(f"Unexpected error handling entry duplicate request: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_DUPLICATE, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.ENTRY_DELETE_REQUEST)
def handle_entry_delete_request(req_json):
    """
    Deletes an entry in two steps: without a 'confirmed' field the client is
    sent the confirmation question, and the answer comes back as 'confirmed'.
    """
    try:
        uid = req_json['uid']
        if 'confirmed' not in req_json:
            entry_dto = lorebook_service.get_entry(uid)
            if entry_dto is None:
                socketio_unicast(SocketIOEventType.ENTRY_DELETE, {'status': 'error', 'error': f"Entry {uid} not found"})
                return
            socketio_unicast(SocketIOEventType.ENTRY_DELETE, {
                'status': 'confirm',
                'uid': uid,
                'prompt': lorebook_service.delete_prompt(entry_dto)
            })
            return

        confirmed = bool(req_json['confirmed'])
        deleted = lorebook_service.delete_entry(uid, lambda entry: confirmed)
        socketio_unicast(SocketIOEventType.ENTRY_DELETE, {'status': 'success', 'uid': uid, 'deleted': deleted})
    except LorebookServiceError as e:
        socketio_unicast(SocketIOEventType.ENTRY_DELETE, {'status': 'error', 'error': str(e)})
    except KeyError as ke:
        log.error(f"Missing key in entry delete request: {ke}")
        socketio_unicast(SocketIOEventType.ENTRY_DELETE, {'status': 'error', 'error': f"Missing required field: {ke}"})
    except Exception as e:
        log.exception(f"Unexpected error handling entry delete request: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_DELETE, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


def _handle_move(move, req_json, *args):
    try:
        uid = req_json['uid']
        moved = move(uid, *[req_json[name] for name in args])
        socketio_unicast(SocketIOEventType.ENTRY_MOVE, {'status': 'success', 'uid': uid, 'moved': moved})
    except (LorebookServiceError, TypeError) as e:
        socketio_unicast(SocketIOEventType.ENTRY_MOVE, {'status': 'error', 'error': str(e)})
    except KeyError as ke:
        log.error(f"Missing key in entry move request: {ke}")
        socketio_unicast(SocketIOEventType.ENTRY_MOVE, {'status': 'error', 'error': f"Missing required field: {ke}"})
    except Exception as e:
        log.exception(f"Unexpected error handling entry move request: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_MOVE, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})

@socketio.on(SocketIOEventType.ENTRY_MOVE_UP_REQUEST)
def handle_entry_move_up_request(req_json):
    _handle_move(lorebook_service.move_entry_up, req_json)

@socketio.on(SocketIOEventType.ENTRY_MOVE_DOWN_REQUEST)
def handle_entry_move_down_request(req_json):
    _handle_move(lorebook_service.move_entry_down, req_json)

@socketio.on(SocketIOEventType.ENTRY_MOVE_TO_REQUEST)
def handle_entry_move_to_request(req_json):
    _handle_move(lorebook_service.move_entry_to, req_json, 'index')


@socketio.on(SocketIOEventType.ENTRY_TOGGLE_REQUEST)
def handle_entry_toggle_request(req_json):
    try:
        entry_dto = lorebook_service.toggle_entry_enabled(req_json['uid'])
        if entry_dto is None:
            socketio_unicast(SocketIOEventType.ENTRY_TOGGLE, {'status': 'error', 'error': f"Entry {req_json['uid']} not found"})
            return
        socketio_unicast(SocketIOEventType.ENTRY_TOGGLE, {'status': 'success', 'entry': entry_dto.model_dump(mode='json')})
    except LorebookServiceError as e:
        socketio_unicast(SocketIOEventType.ENTRY_TOGGLE, {'status': 'error', 'error': str(e)})
    except KeyError as ke:
        log.error(f"Missing key in entry toggle request: {ke}")
        socketio_unicast(SocketIOEventType.ENTRY_TOGGLE, {'status': 'error', 'error': f"Missing required field: {ke}"})
    except Exception as e:
        log.exception(f"Unexpected error handling entry toggle request: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_TOGGLE, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.ENTRY_STRATEGY_REQUEST)
def handle_entry_strategy_request(req_json):
    """Switches an entry between Normal, Constant and Vectorized."""
    try:
        entry_dto = lorebook_service.set_entry_strategy(req_json['uid'], req_json['strategy'])
        if entry_dto is None:
            socketio_unicast(SocketIOEventType.ENTRY_STRATEGY, {'status': 'error', 'error': f"Entry {req_json['uid']} not found"})
            return
        socketio_unicast(SocketIOEventType.ENTRY_STRATEGY, {'status': 'success', 'entry': entry_dto.model_dump(mode='json')})
    except (LorebookServiceError, ValueError) as e:
        log.error(f"Service/Validation error changing entry strategy: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_STRATEGY, {'status': 'error', 'error': str(e)})
    except KeyError as ke:
        log.error(f"Missing key in entry strategy request: {ke}")
        socketio_unicast(SocketIOEventType.ENTRY_STRATEGY, {'status': 'error', 'error': f"Missing required field: {ke}"})
    except Exception as e:
        log.exception(f"Unexpected error handling entry strategy request: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_STRATEGY, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.ENTRY_UPDATE_REQUEST)
def handle_entry_update_request(req_json):
    """Applies field edits to an entry. Everything but 'uid' goes into the update."""
    try:
        uid = req_json['uid']
        update_dto = EntryUpdateDTO(**{k: v for k, v in req_json.items() if k != 'uid'})
        entry_dto = lorebook_service.update_entry(uid, update_dto)
        if entry_dto is None:
            socketio_unicast(SocketIOEventType.ENTRY_UPDATE, {'status': 'error', 'error': f"Entry {uid} not found"})
            return
        socketio_unicast(SocketIOEventType.ENTRY_UPDATE, {'status': 'success', 'entry': entry_dto.model_dump(mode='json')})
    except ValidationError as e:
        log.error(f"Validation error updating entry: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_UPDATE, {'status': 'error', 'error': f"Invalid data: {e.errors()}"})
    except (LorebookServiceError, ValueError) as e:
        log.error(f"Service/Validation error updating entry: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_UPDATE, {'status': 'error', 'error': str(e)})
    except KeyError as ke:
        log.error(f"Missing key in entry update request: {ke}")
        socketio_unicast(SocketIOEventType.ENTRY_UPDATE, {'status': 'error', 'error': f"Missing required field: {ke}"})
    except Exception as e:
        log.exception(f"Unexpected error handling entry update request: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_UPDATE, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


# --- Drag and drop ---

@socketio.on(SocketIOEventType.ENTRY_DRAG_START_REQUEST)
def handle_entry_drag_start_request(req_json):
    try:
        started = lorebook_service.start_drag(req_json['uid'])
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'success', 'phase': 'start', 'started': started})
    except LorebookServiceError as e:
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': str(e)})
    except KeyError as ke:
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': f"Missing required field: {ke}"})
    except Exception as e:
        log.exception(f"Unexpected error handling drag start: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.ENTRY_DRAG_OVER_REQUEST)
def handle_entry_drag_over_request(req_json):
    """Reports which entry the dragged one would be placed before (None = end of list)."""
    try:
        pointer = DragPointerDTO(**req_json)
        before_uid = lorebook_service.drag_over(pointer.y, pointer.entry_bounds())
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'success', 'phase': 'over', 'before_uid': before_uid})
    except ValidationError as e:
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': f"Invalid data: {e.errors()}"})
    except LorebookServiceError as e:
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': str(e)})
    except Exception as e:
        log.exception(f"Unexpected error handling drag over: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.ENTRY_DRAG_LEAVE_REQUEST)
def handle_entry_drag_leave_request():
    try:
        lorebook_service.drag_leave()
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'success', 'phase': 'leave'})
    except LorebookServiceError as e:
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': str(e)})


@socketio.on(SocketIOEventType.ENTRY_DROP_REQUEST)
def handle_entry_drop_request(req_json):
    try:
        pointer = DragPointerDTO(**req_json)
        moved = lorebook_service.drop(pointer.y, pointer.entry_bounds())
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'success', 'phase': 'drop', 'moved': moved})
    except ValidationError as e:
        if lorebook_service.is_loaded():
            lorebook_service.cancel_drag()
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': f"Invalid data: {e.errors()}"})
    except LorebookServiceError as e:
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': str(e)})
    except Exception as e:
        log.exception(f"Unexpected error handling drop: {e}")
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': f"An unexpected error occurred: {str(e)}"})


@socketio.on(SocketIOEventType.ENTRY_DRAG_CANCEL_REQUEST)
def handle_entry_drag_cancel_request():
    try:
        lorebook_service.cancel_drag()
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'success', 'phase': 'cancel'})
    except LorebookServiceError as e:
        socketio_unicast(SocketIOEventType.ENTRY_DRAG, {'status': 'error', 'error': str(e)})
