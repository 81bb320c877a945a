"""
Medical document records
A document is two things kept in step: an object in the documents bucket and
a metadata row pointing at it. Create and delete touch both, storage first,
and compensate when the second step fails.
"""
import io
import logging
from typing import Dict, Optional

from flask import current_app
from PIL import Image, UnidentifiedImageError

from phr import get_storage
from phr.extensions import db
from phr.models.document import MedicalDocument
from phr.services.schemas import DocumentUpload, ValidationError, parse_form
from phr.services.storage import TransferError

logger = logging.getLogger(__name__)

# Pillow format names for the image MIME types we accept
IMAGE_FORMATS = {
    'image/jpeg': 'JPEG',
    'image/png': 'PNG',
}


class DocumentNotFound(Exception):
    pass


class DocumentService:
    @staticmethod
    def _bucket():
        return current_app.config['DOCUMENTS_BUCKET']

    @staticmethod
    def list_documents(owner_id, category=None):
        """Documents for the owner, newest upload first"""
        query = MedicalDocument.query.filter_by(user_id=owner_id)
        if category and category != 'all':
            query = query.filter_by(category=category)
        return query.order_by(MedicalDocument.uploaded_at.desc()).all()

    @staticmethod
    def get_document(owner_id, document_id):
        document = MedicalDocument.query.filter_by(id=document_id, user_id=owner_id).first()
        if not document:
            raise DocumentNotFound(f"Document not found: {document_id}")
        return document

    @staticmethod
    def validate_upload(upload):
        """Size and type checks; nothing here touches storage"""
        max_size = current_app.config['MAX_DOCUMENT_SIZE']
        allowed = current_app.config['ALLOWED_DOCUMENT_TYPES']

        if upload.size == 0:
            raise ValidationError('Please select a file to upload', ['file'])
        if upload.size > max_size:
            raise ValidationError(f"File size must be less than {max_size // (1024 * 1024)}MB", ['file'])
        if upload.content_type not in allowed:
            raise ValidationError('Only PDF, JPEG, and PNG files are allowed', ['file'])

        image_format = IMAGE_FORMATS.get(upload.content_type)
        if image_format:
            try:
                with Image.open(io.BytesIO(upload.data)) as img:
                    actual = img.format
                    img.verify()
            except (UnidentifiedImageError, OSError, SyntaxError) as e:
                raise ValidationError('The uploaded image could not be read', ['file']) from e
            if actual != image_format:
                raise ValidationError('File content does not match its type', ['file'])
        elif not upload.data.startswith(b'%PDF'):
            raise ValidationError('File content does not match its type', ['file'])

    @staticmethod
    def create_document(owner_id, upload):
        if not isinstance(upload, DocumentUpload):
            upload = parse_form(DocumentUpload, upload)
        DocumentService.validate_upload(upload)

        storage = get_storage()
        bucket = DocumentService._bucket()
        path, url = storage.upload(owner_id, upload.data, upload.filename, bucket,
                                   content_type=upload.content_type)

        document = MedicalDocument(
            user_id=owner_id,
            title=upload.title,
            category=upload.category,
            document_path=path,
            document_url=url,
            mime_type=upload.content_type,
            file_size=upload.size,
            notes=upload.notes,
        )
        try:
            db.session.add(document)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.error(f"Metadata insert failed for {path}, removing stored object")
            try:
                storage.remove(path, bucket)
            except TransferError as cleanup_error:
                logger.error(f"Could not remove orphaned object {path}: {cleanup_error}")
            raise

        logger.info(f"Document {document.id} created for {owner_id}")
        return document

    @staticmethod
    def delete_document(owner_id, document_id):
        """Remove the stored object, then the row.

        A row whose object is already gone but which could not be deleted is
        flagged for reconciliation before the error is re-raised.
        """
        document = DocumentService.get_document(owner_id, document_id)
        storage = get_storage()
        bucket = DocumentService._bucket()

        if storage.exists(document.document_path, bucket):
            storage.remove(document.document_path, bucket)
        else:
            logger.warning(f"Object {document.document_path} already missing, deleting row only")

        try:
            db.session.delete(document)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.error(f"Row delete failed for document {document_id} after object removal")
            DocumentService._flag_for_reconciliation(document_id)
            raise

        logger.info(f"Document {document_id} deleted for {owner_id}")

    @staticmethod
    def _flag_for_reconciliation(document_id):
        try:
            MedicalDocument.query.filter_by(id=document_id).update({'needs_reconciliation': True})
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Could not flag document {document_id} for reconciliation: {e}")

    @staticmethod
    def download_document(owner_id, document_id):
        """Return (bytes, download name, mime type)"""
        document = DocumentService.get_document(owner_id, document_id)
        data = get_storage().download(document.document_path, DocumentService._bucket())
        return data, document.download_name, document.mime_type or 'application/octet-stream'

    @staticmethod
    def fresh_url(owner_id, document_id):
        """A new short-lived signed URL for viewing the document"""
        document = DocumentService.get_document(owner_id, document_id)
        storage = get_storage()
        bucket = DocumentService._bucket()
        if not storage.exists(document.document_path, bucket):
            raise TransferError('Document file is missing')
        return storage.create_signed_url(document.document_path, bucket, storage.download_url_ttl)

    @staticmethod
    def reconcile(owner_id: Optional[str] = None) -> Dict[str, int]:
        """Drop rows that were flagged or whose object no longer exists"""
        storage = get_storage()
        bucket = DocumentService._bucket()
        query = MedicalDocument.query
        if owner_id:
            query = query.filter_by(user_id=owner_id)

        flagged = 0
        missing = 0
        for document in query.all():
            if document.needs_reconciliation:
                flagged += 1
            elif not storage.exists(document.document_path, bucket):
                missing += 1
            else:
                continue
            if storage.exists(document.document_path, bucket):
                storage.remove(document.document_path, bucket)
            db.session.delete(document)

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Reconciliation removed {flagged} flagged and {missing} dangling documents")
        return {'flagged': flagged, 'missing': missing}
