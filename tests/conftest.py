import io

import pytest
from PIL import Image

from phr import create_app
from phr.extensions import db
from phr.models.user import User

PDF_BYTES = b'%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n'


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', UPLOAD_FOLDER=str(tmp_path / 'storage'))
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.test_request_context():
        yield


@pytest.fixture
def user(ctx):
    user = User(email='jane.doe@example.com', phone_number='9876543210')
    user.set_password('secret1')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    Image.new('RGB', (4, 4), color=(200, 30, 30)).save(buffer, 'PNG')
    return buffer.getvalue()


def sign_up(client, email='user@example.com', password='secret1', phone='9876543210'):
    return client.post('/auth/signup', data={
        'email': email,
        'password': password,
        'phone_number': phone,
    })


@pytest.fixture
def signed_in(client, app):
    sign_up(client)
    with app.app_context():
        return User.query.filter_by(email='user@example.com').one().id
