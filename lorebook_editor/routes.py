import io
from flask import render_template, Blueprint, jsonify, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

from lorebook_editor.constants import UPLOAD_FIELD, EXPORT_MIMETYPE
from lorebook_editor.extensions import log
from lorebook_editor.services import lorebook_service
from lorebook_editor.services.lorebook_service import (LorebookServiceError, NoLorebookLoadedError,
                                                       ExportError, DocumentError)

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    state = lorebook_service.get_state() if lorebook_service.is_loaded() else None
    return render_template('index.html', state=state)

@main_bp.route('/lorebook/upload', methods=['POST'])
def upload_lorebook():
    uploaded = request.files.get(UPLOAD_FIELD)
    if uploaded is None or not uploaded.filename:
        return jsonify({'error': 'Error: No file was selected for upload.'}), 400
    try:
        state = lorebook_service.load_uploaded_file(uploaded.filename, uploaded.stream)
        return jsonify({'message': f"Successfully loaded: {state.file_name}", 'lorebook': state.model_dump(mode='json')})
    except (LorebookServiceError, DocumentError) as e:
        log.warning(f"Rejected lorebook upload '{uploaded.filename}': {e}")
        return jsonify({'error': str(e)}), 400

@main_bp.route('/lorebook/entries')
def get_entries():
    try:
        return jsonify(lorebook_service.get_state().model_dump(mode='json'))
    except NoLorebookLoadedError as e:
        return jsonify({'error': str(e)}), 404

@main_bp.route('/lorebook/export')
def export_lorebook():
    try:
        export_dto = lorebook_service.export_document()
    except NoLorebookLoadedError as e:
        return jsonify({'error': str(e)}), 404
    except ExportError as e:
        return jsonify({'error': str(e)}), 400

    return send_file(
        io.BytesIO(export_dto.text.encode('utf-8')),
        mimetype=EXPORT_MIMETYPE,
        as_attachment=True,
        download_name=export_dto.file_name
    )

@main_bp.app_errorhandler(RequestEntityTooLarge)
def handle_upload_too_large(e):
    return jsonify({'error': 'Error: The uploaded file exceeds the maximum allowed size.'}), 413
