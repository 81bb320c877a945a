"""
Document object storage
Objects live under <base_dir>/<bucket>/<owner id>/ and are only ever handed
out through short-lived signed URLs
"""
import logging
import secrets
import string
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path, PurePosixPath
from typing import Optional, Tuple

import jwt
from flask import url_for

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = 'HS256'
_ALPHABET = string.ascii_lowercase + string.digits


class TransferError(Exception):
    pass


def random_name(length: int = 11) -> str:
    """Random base-36 token used as the object file-name prefix"""
    return ''.join(secrets.choice(_ALPHABET) for _ in range(length))


class StorageService:
    def __init__(self, base_dir: str, secret_key: str,
                 signed_url_ttl: int = 60 * 60 * 24 * 7,
                 download_url_ttl: int = 60 * 60):
        self.base_dir = Path(base_dir)
        self.secret_key = secret_key
        self.signed_url_ttl = signed_url_ttl
        self.download_url_ttl = download_url_ttl

        # Ensure base directory exists
        self.base_dir.mkdir(parents=True, exist_ok=True)

    # -- paths ---------------------------------------------------------------

    def object_path(self, owner_id: str, filename: Optional[str]) -> str:
        """Build ``<ownerId>/<randomId>_<timestamp>.<ext>`` for a new upload"""
        extension = ''
        if filename and '.' in filename:
            extension = filename.rsplit('.', 1)[-1].lower()
        name = f"{random_name()}_{int(time.time() * 1000)}"
        if extension:
            name = f"{name}.{extension}"
        return f"{owner_id}/{name}"

    def _resolve(self, path: str, bucket: str) -> Path:
        parts = PurePosixPath(path).parts
        if not path or path.startswith('/') or '..' in parts:
            raise TransferError(f"Invalid storage path: {path}")
        if not bucket or bucket.startswith('/') or '..' in PurePosixPath(bucket).parts:
            raise TransferError(f"Invalid bucket: {bucket}")
        return self.base_dir / bucket / Path(*parts)

    def exists(self, path: str, bucket: str) -> bool:
        try:
            return self._resolve(path, bucket).is_file()
        except TransferError:
            return False

    # -- transfer ------------------------------------------------------------

    def upload(self, owner_id: str, file_data: bytes, filename: Optional[str],
               bucket: str, content_type: Optional[str] = None) -> Tuple[str, str]:
        """Store bytes under the owner's prefix, return (path, signed url)"""
        if not owner_id:
            raise TransferError('No authenticated user')

        path = self.object_path(owner_id, filename)
        target = self._resolve(path, bucket)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # Overwrites an existing object at the same path
            with open(target, 'wb') as f:
                f.write(file_data)
        except OSError as e:
            logger.error(f"Upload error for {bucket}/{path}: {e}")
            raise TransferError(f"Failed to upload file: {e}") from e

        logger.info(f"Stored {bucket}/{path} ({len(file_data)} bytes, {content_type or 'unknown type'})")
        url = self.create_signed_url(path, bucket, self.signed_url_ttl)
        return path, url

    def read(self, path: str, bucket: str) -> bytes:
        target = self._resolve(path, bucket)
        try:
            with open(target, 'rb') as f:
                return f.read()
        except FileNotFoundError as e:
            raise TransferError(f"Object not found: {path}") from e
        except OSError as e:
            logger.error(f"Read error for {bucket}/{path}: {e}")
            raise TransferError(f"Failed to read file: {e}") from e

    def download(self, path: str, bucket: str) -> bytes:
        """Issue a short-lived signed URL and fetch the object through it"""
        token = self.create_signed_token(path, bucket, self.download_url_ttl)
        signed_bucket, signed_path = self.resolve_signed_token(token)
        try:
            return self.read(signed_path, signed_bucket)
        except TransferError as e:
            logger.error(f"Download error: {e}")
            raise TransferError('Failed to download file') from e

    def remove(self, path: str, bucket: str) -> None:
        target = self._resolve(path, bucket)
        try:
            target.unlink()
        except FileNotFoundError as e:
            raise TransferError(f"Object not found: {path}") from e
        except OSError as e:
            logger.error(f"Delete error for {bucket}/{path}: {e}")
            raise TransferError(f"Failed to delete file: {e}") from e
        logger.info(f"Removed {bucket}/{path}")

    # -- signed urls ---------------------------------------------------------

    def create_signed_token(self, path: str, bucket: str, expires_in: int) -> str:
        self._resolve(path, bucket)
        now = datetime.now(timezone.utc)
        payload = {
            'bucket': bucket,
            'path': path,
            'iat': now,
            'exp': now + timedelta(seconds=expires_in),
        }
        return jwt.encode(payload, self.secret_key, algorithm=TOKEN_ALGORITHM)

    def create_signed_url(self, path: str, bucket: str, expires_in: Optional[int] = None) -> str:
        if expires_in is None:
            expires_in = self.signed_url_ttl
        token = self.create_signed_token(path, bucket, expires_in)
        return url_for('storage.signed_object', token=token, _external=True)

    def resolve_signed_token(self, token: str) -> Tuple[str, str]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[TOKEN_ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise TransferError('Signed URL has expired') from e
        except jwt.InvalidTokenError as e:
            raise TransferError('Invalid signed URL') from e

        bucket, path = payload.get('bucket'), payload.get('path')
        if not bucket or not path:
            raise TransferError('Invalid signed URL')
        return bucket, path
