# phr/routes/storage.py
import io
import logging

from flask import Blueprint, abort, current_app, send_file

from phr import get_storage
from phr.services.storage import TransferError

logger = logging.getLogger(__name__)

storage_bp = Blueprint('storage', __name__)


@storage_bp.route('/object/<token>')
def signed_object(token):
    """Serve an object to whoever holds a valid signed URL"""
    storage = get_storage()
    try:
        bucket, path = storage.resolve_signed_token(token)
    except TransferError as e:
        logger.info(f"Rejected signed URL: {e}")
        abort(403)

    if bucket != current_app.config['DOCUMENTS_BUCKET'] or not storage.exists(path, bucket):
        abort(404)

    data = storage.read(path, bucket)
    return send_file(io.BytesIO(data), download_name=path.rsplit('/', 1)[-1])
