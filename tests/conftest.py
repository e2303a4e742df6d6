import json
import pytest
from lorebook_editor import create_app
from lorebook_editor.extensions import socketio
from lorebook_editor.services import lorebook_service
from config import FlaskTestingConfig

@pytest.fixture(scope='session')
def app():
    flask_app = create_app(FlaskTestingConfig)

    with flask_app.app_context():
        yield flask_app

@pytest.fixture(scope='module')
def test_client(app):
    return app.test_client()

@pytest.fixture(scope='module')
def socketio_client(app, test_client):
    return socketio.test_client(app, flask_test_client=test_client)

@pytest.fixture(autouse=True)
def reset_session():
    lorebook_service.reset()
    yield
    lorebook_service.reset()

@pytest.fixture
def make_document():
    def _make_document(*entries, **extra):
        document = {'entries': {str(index): entry for index, entry in enumerate(entries)}}
        document.update(extra)
        return json.dumps(document)
    return _make_document
