from typing import Optional
from lorebook_editor.constants import STICKY_TOASTR_OPTIONS
from lorebook_editor.extensions import socketio
from lorebook_editor.events import SocketIOEventType

def show_toastr_message(
    message: str,
    title: Optional[str] = None,
    level: str = 'info',
    options: Optional[dict] = None
):
    """
    Emits a Socket.IO event to trigger the display of a toastr message on the frontend.

    Args:
        message (str): The main message content for the toastr.
        title (Optional[str]): The title for the toastr. Defaults to None.
        level (str): The level of the toastr (e.g., 'info', 'success', 'warning', 'error').
                     Defaults to 'info'.
        options (Optional[dict]): Additional toastr options (see toastr.js documentation).
                                  Defaults to None.
    """
    toastr_data = {
        'message': message,
        'title': title,
        'level': level,
        'options': options or {}
    }
    socketio.emit(SocketIOEventType.SHOW_TOASTR, toastr_data)

def show_blocking_error(message: str, title: Optional[str] = None):
    """Shows an error the user has to dismiss."""
    show_toastr_message(message, title=title, level='error', options=dict(STICKY_TOASTR_OPTIONS))
