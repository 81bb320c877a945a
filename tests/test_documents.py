import io

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from phr import get_storage
from phr.extensions import db
from phr.models.document import MedicalDocument
from phr.services.documents import DocumentNotFound, DocumentService
from phr.services.schemas import DocumentUpload, ValidationError
from phr.services.storage import StorageService
from tests.conftest import PDF_BYTES

BUCKET = 'medical-documents'


def make_upload(data=PDF_BYTES, content_type='application/pdf', filename='report.pdf',
                title='Blood panel', category='Lab Reports', notes=None):
    return DocumentUpload(title=title, category=category, notes=notes, filename=filename,
                          content_type=content_type, data=data)


@pytest.fixture
def no_upload(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError('storage upload must not be called')
    monkeypatch.setattr(StorageService, 'upload', fail)


def test_oversized_file_never_reaches_storage(user, no_upload):
    big = b'%PDF' + b'0' * (10 * 1024 * 1024)

    with pytest.raises(ValidationError) as exc:
        DocumentService.create_document(user.id, make_upload(data=big))

    assert 'less than 5MB' in exc.value.message
    assert MedicalDocument.query.count() == 0


@pytest.mark.parametrize('content_type, filename', [
    ('text/plain', 'notes.txt'),
    ('application/msword', 'letter.doc'),
    ('image/gif', 'scan.gif'),
])
def test_unsupported_type_never_reaches_storage(user, no_upload, content_type, filename):
    with pytest.raises(ValidationError) as exc:
        DocumentService.create_document(user.id, make_upload(content_type=content_type, filename=filename))

    assert exc.value.message == 'Only PDF, JPEG, and PNG files are allowed'


def test_content_must_match_type(user, no_upload, png_bytes):
    with pytest.raises(ValidationError):
        DocumentService.create_document(user.id, make_upload(data=b'not a pdf'))
    with pytest.raises(ValidationError):
        DocumentService.create_document(user.id, make_upload(data=PDF_BYTES, content_type='image/png'))
    with pytest.raises(ValidationError):
        DocumentService.create_document(user.id, make_upload(data=png_bytes, content_type='image/jpeg'))


def test_unknown_category_rejected(user, no_upload):
    with pytest.raises(ValidationError) as exc:
        DocumentService.create_document(user.id, {
            'title': 'x', 'category': 'Scans', 'filename': 'x.pdf',
            'content_type': 'application/pdf', 'data': PDF_BYTES,
        })
    assert exc.value.fields == ['category']


def test_created_document_downloads_original_bytes(user, png_bytes):
    document = DocumentService.create_document(
        user.id, make_upload(data=png_bytes, content_type='image/png', filename='xray.png', title='X-ray'))

    assert document.document_path.startswith(f"{user.id}/")
    assert document.file_size == len(png_bytes)
    data, name, mime_type = DocumentService.download_document(user.id, document.id)
    assert data == png_bytes
    assert name == 'X-ray.png'
    assert mime_type == 'image/png'


def test_list_documents_filters_and_scopes(user):
    DocumentService.create_document(user.id, make_upload(title='Panel', category='Lab Reports'))
    DocumentService.create_document(user.id, make_upload(title='Invoice', category='Bills'))
    DocumentService.create_document('another-user', make_upload(title='Not mine'))

    titles = {d.title for d in DocumentService.list_documents(user.id)}
    bills = DocumentService.list_documents(user.id, 'Bills')

    assert titles == {'Panel', 'Invoice'}
    assert [d.title for d in bills] == ['Invoice']
    assert len(DocumentService.list_documents(user.id, 'all')) == 2


def test_delete_removes_object_and_row(user):
    document = DocumentService.create_document(user.id, make_upload())
    path = document.document_path

    DocumentService.delete_document(user.id, document.id)

    assert not get_storage().exists(path, BUCKET)
    assert DocumentService.list_documents(user.id) == []


def test_delete_other_users_document_not_found(user):
    document = DocumentService.create_document('another-user', make_upload())

    with pytest.raises(DocumentNotFound):
        DocumentService.delete_document(user.id, document.id)
    assert get_storage().exists(document.document_path, BUCKET)


def test_failed_metadata_insert_removes_uploaded_object(user, monkeypatch, tmp_path):
    real_upload = StorageService.upload

    def upload_without_url(self, *args, **kwargs):
        # A NULL document_url makes the metadata insert fail after the upload
        path, _ = real_upload(self, *args, **kwargs)
        return path, None

    monkeypatch.setattr(StorageService, 'upload', upload_without_url)

    with pytest.raises(IntegrityError):
        DocumentService.create_document(user.id, make_upload())

    owner_dir = tmp_path / 'storage' / BUCKET / user.id
    assert not owner_dir.exists() or not any(owner_dir.iterdir())
    assert MedicalDocument.query.count() == 0


def test_failed_row_delete_flags_for_reconciliation(user, monkeypatch):
    document = DocumentService.create_document(user.id, make_upload())
    document_id = document.id

    def broken_delete(self, instance):
        raise OperationalError('DELETE', {}, Exception('database is locked'))

    monkeypatch.setattr(type(db.session()), 'delete', broken_delete)
    with pytest.raises(OperationalError):
        DocumentService.delete_document(user.id, document_id)
    monkeypatch.undo()

    flagged = db.session.get(MedicalDocument, document_id)
    assert flagged.needs_reconciliation is True
    assert not get_storage().exists(flagged.document_path, BUCKET)

    assert DocumentService.reconcile() == {'flagged': 1, 'missing': 0}
    assert MedicalDocument.query.count() == 0


def test_reconcile_drops_rows_with_missing_objects(user):
    kept = DocumentService.create_document(user.id, make_upload(title='kept'))
    lost = DocumentService.create_document(user.id, make_upload(title='lost'))
    get_storage().remove(lost.document_path, BUCKET)

    assert DocumentService.reconcile(user.id) == {'flagged': 0, 'missing': 1}
    assert [d.id for d in DocumentService.list_documents(user.id)] == [kept.id]


def upload_via_client(client, data, filename, content_type, **fields):
    form = {'file': (io.BytesIO(data), filename, content_type), 'category': 'Prescriptions'}
    form.update(fields)
    return client.post('/documents/upload', data=form, content_type='multipart/form-data')


def test_upload_ten_mib_pdf_rejected_by_route(client, app, signed_in, no_upload):
    response = upload_via_client(client, b'%PDF' + b'0' * (10 * 1024 * 1024), 'big.pdf', 'application/pdf')

    assert response.status_code == 302
    page = client.get('/documents')
    assert b'File size must be less than 5MB' in page.data
    with app.app_context():
        assert MedicalDocument.query.count() == 0


def test_upload_over_request_limit_redirects_with_message(client, app, signed_in, no_upload):
    too_big = app.config['MAX_CONTENT_LENGTH'] + 1024 * 1024
    response = upload_via_client(client, b'%PDF' + b'0' * too_big, 'huge.pdf', 'application/pdf')

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/documents/')
    page = client.get('/documents')
    assert page.status_code == 200
    assert b'File size must be less than 5MB' in page.data
    with app.app_context():
        assert MedicalDocument.query.count() == 0


def test_document_routes_end_to_end(client, app, signed_in):
    response = upload_via_client(client, PDF_BYTES, 'rx.pdf', 'application/pdf', notes='Dr. Rao')
    assert response.status_code == 302

    page = client.get('/documents?category=Prescriptions')
    assert b'rx.pdf' in page.data
    assert b'Dr. Rao' in page.data
    assert b'No documents found' in client.get('/documents?category=Bills').data

    with app.app_context():
        document = MedicalDocument.query.filter_by(user_id=signed_in).one()
        document_id = document.id

    download = client.get(f'/documents/{document_id}/download')
    assert download.status_code == 200
    assert download.data == PDF_BYTES
    assert 'attachment' in download.headers['Content-Disposition']

    view = client.get(f'/documents/{document_id}/view')
    assert view.status_code == 302
    assert client.get(view.headers['Location']).data == PDF_BYTES

    assert client.post(f'/documents/{document_id}/delete').status_code == 302
    assert b'No documents found' in client.get('/documents').data
    assert client.get(f'/documents/{document_id}/download').status_code == 404
