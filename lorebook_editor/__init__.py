import os
import logging
from flask import Flask
from config import FlaskConfig
from lorebook_editor.context import context
from lorebook_editor.extensions import socketio, log

def create_app(config=FlaskConfig):
    app = Flask(__name__)
    app.config.from_object(config)
    socketio.init_app(app)

    app_log_level_str = os.getenv("APP_LOG_LEVEL", "INFO").upper()
    flask_log_level_str = os.getenv("FLASK_LOG_LEVEL", "WARNING").upper()
    log_level_map = logging.getLevelNamesMapping()

    context.log_level = log_level_map.get(app_log_level_str, logging.INFO)
    log.setLevel(log_level_map.get(flask_log_level_str, logging.WARNING))

    from . import services, socket_handlers
    services.init_app(app, context)
    socket_handlers.init_app(app)

    from .routes import main_bp
    app.register_blueprint(main_bp)

    return app
