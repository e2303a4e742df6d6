import logging
from flask_socketio import SocketIO

socketio = SocketIO()
log = logging.getLogger('werkzeug')
