import re

import jwt
import pytest

from phr import get_storage
from phr.services.storage import StorageService, TransferError

BUCKET = 'medical-documents'


def test_upload_path_layout_and_signed_url(ctx):
    storage = get_storage()

    path, url = storage.upload('owner-1', b'hello', 'Scan.PDF', BUCKET)

    assert re.fullmatch(r'owner-1/[a-z0-9]{11}_\d{13}\.pdf', path)
    assert '/storage/object/' in url
    assert storage.read(path, BUCKET) == b'hello'


def test_upload_without_extension(ctx):
    path, _ = get_storage().upload('owner-1', b'x', 'README', BUCKET)
    assert re.fullmatch(r'owner-1/[a-z0-9]{11}_\d{13}', path)


def test_upload_requires_owner(ctx):
    with pytest.raises(TransferError):
        get_storage().upload('', b'x', 'a.pdf', BUCKET)


def test_download_round_trip_and_remove(ctx):
    storage = get_storage()
    path, _ = storage.upload('owner-1', b'%PDF-1.4 body', 'a.pdf', BUCKET)

    assert storage.download(path, BUCKET) == b'%PDF-1.4 body'

    storage.remove(path, BUCKET)
    assert not storage.exists(path, BUCKET)
    with pytest.raises(TransferError):
        storage.download(path, BUCKET)
    with pytest.raises(TransferError):
        storage.remove(path, BUCKET)


@pytest.mark.parametrize('path', ['../secret.txt', '/etc/passwd', 'owner/../../x', ''])
def test_rejects_paths_outside_bucket(ctx, path):
    with pytest.raises(TransferError):
        get_storage().read(path, BUCKET)


def test_signed_token_expiry(tmp_path):
    storage = StorageService(str(tmp_path), 'key')
    token = storage.create_signed_token('owner/a.pdf', BUCKET, expires_in=-10)

    with pytest.raises(TransferError, match='expired'):
        storage.resolve_signed_token(token)


def test_signed_token_from_other_key_rejected(tmp_path):
    token = StorageService(str(tmp_path), 'other-key').create_signed_token('owner/a.pdf', BUCKET, 60)

    with pytest.raises(TransferError, match='Invalid'):
        StorageService(str(tmp_path), 'key').resolve_signed_token(token)


def test_signed_url_route(app, client):
    with app.test_request_context():
        storage = get_storage()
        path, url = storage.upload('owner-1', b'%PDF-1.4 served', 'a.pdf', BUCKET)
        expired = storage.create_signed_url(path, BUCKET, expires_in=-5)

    served = client.get(url)
    assert served.status_code == 200
    assert served.data == b'%PDF-1.4 served'

    assert client.get(expired).status_code == 403
    assert client.get('/storage/object/not-a-token').status_code == 403

    with app.test_request_context():
        get_storage().remove(path, BUCKET)
    assert client.get(url).status_code == 404


@pytest.mark.parametrize('bucket', ['/tmp', '../other', ''])
def test_rejects_buckets_outside_storage_root(ctx, bucket):
    storage = get_storage()
    with pytest.raises(TransferError, match='Invalid bucket'):
        storage.upload('owner-1', b'x', 'a.pdf', bucket)
    assert not storage.exists('owner-1/a.pdf', bucket)


def test_zero_lifetime_signed_url_is_not_extended(ctx):
    storage = get_storage()
    path, _ = storage.upload('owner-1', b'%PDF-1.4', 'a.pdf', BUCKET)
    url = storage.create_signed_url(path, BUCKET, expires_in=0)
    token = url.rsplit('/', 1)[-1]

    payload = jwt.decode(token, options={'verify_signature': False})
    assert payload['exp'] - payload['iat'] == 0
