import io
import json

def upload(test_client, content, file_name='book.json'):
    return test_client.post(
        '/lorebook/upload',
        data={'lorebookFile': (io.BytesIO(content), file_name)},
        content_type='multipart/form-data'
    )

def test_index_without_lorebook(test_client):
    response = test_client.get('/')
    assert response.status_code == 200
    assert b'Load Lorebook' in response.data

def test_upload_and_list_entries(test_client, make_document):
    response = upload(test_client, make_document({'comment': 'Dragon'}, {'comment': 'Castle'}).encode('utf-8'))
    assert response.status_code == 200
    payload = response.get_json()
    assert payload['message'] == 'Successfully loaded: book.json'
    assert [entry['comment'] for entry in payload['lorebook']['entries']] == ['Dragon', 'Castle']

    response = test_client.get('/lorebook/entries')
    assert response.status_code == 200
    assert len(response.get_json()['entries']) == 2

    response = test_client.get('/')
    assert b'Dragon' in response.data

def test_upload_without_file(test_client):
    response = test_client.post('/lorebook/upload', data={}, content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Error: No file was selected for upload.'

def test_upload_wrong_extension(test_client):
    response = upload(test_client, b'{}', 'book.txt')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid file type. Please upload a .json file.'

def test_upload_invalid_json(test_client):
    response = upload(test_client, b'{broken')
    assert response.status_code == 400
    assert response.get_json()['error'].startswith('Error decoding JSON file (book.json):')

def test_upload_invalid_structure(test_client):
    response = upload(test_client, b'{"pages": []}')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'JSON structure is invalid: Missing or invalid "entries" key.'

def test_upload_too_large(test_client):
    response = upload(test_client, b' ' * (128 * 1024))
    assert response.status_code == 413

def test_entries_without_lorebook(test_client):
    assert test_client.get('/lorebook/entries').status_code == 404

def test_export(test_client, make_document):
    upload(test_client, make_document({'uid': 3, 'comment': 'Dragon'}).encode('utf-8'), 'world.json')
    response = test_client.get('/lorebook/export')
    assert response.status_code == 200
    assert response.mimetype == 'application/json'
    assert 'edited_world.json' in response.headers['Content-Disposition']
    entries = json.loads(response.data.decode('utf-8'))['entries']
    assert entries['0']['uid'] == 3
    assert entries['0']['displayIndex'] == 0

def test_export_without_lorebook(test_client):
    assert test_client.get('/lorebook/export').status_code == 404

def test_export_empty_lorebook(test_client):
    upload(test_client, b'{"entries": {}}')
    response = test_client.get('/lorebook/export')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Nothing to export!'
