from lorebook_editor.events import SocketIOEventType, RegistryEvent
from lorebook_editor.extensions import socketio, log
from lorebook_editor.services import lorebook_service
from .common import socketio_unicast, socketio_broadcast
from .lorebook import *

def broadcast_lorebook_state(event: RegistryEvent):
    """Pushes the current entries to every client after each registry change."""
    if not lorebook_service.is_loaded():
        return
    log.debug(f"Broadcasting lorebook state after {event.type.value} (uid={event.uid})")
    socketio_broadcast(SocketIOEventType.LOREBOOK_STATE, {
        'status': 'success',
        'event': event.type.value,
        'uid': event.uid,
        'lorebook': lorebook_service.get_state().model_dump(mode='json')
    })

def init_app(app):
    lorebook_service.register_registry_listener(broadcast_lorebook_state)

@socketio.on(SocketIOEventType.CONNECT)
def handle_connect():
    pass

@socketio.on(SocketIOEventType.PING)
def handle_ping():
    socketio_unicast(SocketIOEventType.PONG)
