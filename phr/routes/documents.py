# phr/routes/documents.py
import io
import logging

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, send_file, url_for
from werkzeug.exceptions import RequestEntityTooLarge

from phr.decorators.auth import session_required
from phr.models.document import DOCUMENT_CATEGORIES, DEFAULT_CATEGORY
from phr.services.auth import AuthService
from phr.services.documents import DocumentNotFound, DocumentService
from phr.services.schemas import DocumentUpload, ValidationError, parse_form
from phr.services.storage import TransferError

logger = logging.getLogger(__name__)

documents_bp = Blueprint('documents', __name__)


@documents_bp.route('/', strict_slashes=False)
@session_required
def documents():
    user = AuthService.get_current_user()
    selected = request.args.get('category', 'all')
    if selected != 'all' and selected not in DOCUMENT_CATEGORIES:
        selected = 'all'

    items = []
    try:
        items = DocumentService.list_documents(user.id, None if selected == 'all' else selected)
    except Exception:
        logger.exception(f"Error fetching documents for {user.id}")
        flash('Failed to load documents', 'error')

    return render_template(
        'documents.html',
        documents=items,
        categories=DOCUMENT_CATEGORIES,
        default_category=DEFAULT_CATEGORY,
        selected_category=selected,
    )


@documents_bp.route('/upload', methods=['POST'])
@session_required
def upload():
    user = AuthService.get_current_user()
    file = request.files.get('file')

    try:
        if not file or not file.filename:
            raise ValidationError('Please select a file to upload', ['file'])
        form = parse_form(DocumentUpload, {
            'title': request.form.get('title') or file.filename,
            'category': request.form.get('category') or DEFAULT_CATEGORY,
            'notes': request.form.get('notes'),
            'filename': file.filename,
            'content_type': file.mimetype or '',
            'data': file.read(),
        })
        DocumentService.create_document(user.id, form)
        flash('Document uploaded', 'success')
    except ValidationError as e:
        flash(e.message, 'error')
    except TransferError as e:
        logger.error(f"Error uploading document for {user.id}: {e}")
        flash(str(e), 'error')
    except Exception:
        logger.exception(f"Error uploading document for {user.id}")
        flash('Failed to upload document. Please try again.', 'error')

    return redirect(url_for('documents.documents'))


@documents_bp.errorhandler(RequestEntityTooLarge)
def upload_too_large(e):
    max_size = current_app.config['MAX_DOCUMENT_SIZE']
    logger.warning(f"Rejected oversized upload on {request.path}")
    flash(f"File size must be less than {max_size // (1024 * 1024)}MB", 'error')
    return redirect(url_for('documents.documents'))


@documents_bp.route('/<document_id>/delete', methods=['POST'])
@session_required
def delete(document_id):
    user = AuthService.get_current_user()
    try:
        DocumentService.delete_document(user.id, document_id)
        flash('Document deleted', 'success')
    except DocumentNotFound:
        abort(404)
    except TransferError as e:
        logger.error(f"Error deleting document {document_id}: {e}")
        flash(str(e), 'error')
    except Exception:
        logger.exception(f"Error deleting document {document_id}")
        flash('Failed to delete document. Please try again.', 'error')

    return redirect(url_for('documents.documents', category=request.form.get('category', 'all')))


@documents_bp.route('/<document_id>/download')
@session_required
def download(document_id):
    user = AuthService.get_current_user()
    try:
        data, filename, mime_type = DocumentService.download_document(user.id, document_id)
    except DocumentNotFound:
        abort(404)
    except TransferError as e:
        logger.error(f"Error downloading document {document_id}: {e}")
        flash('Failed to download document. Please try again.', 'error')
        return redirect(url_for('documents.documents'))

    return send_file(io.BytesIO(data), mimetype=mime_type, as_attachment=True, download_name=filename)


@documents_bp.route('/<document_id>/view')
@session_required
def view(document_id):
    user = AuthService.get_current_user()
    try:
        url = DocumentService.fresh_url(user.id, document_id)
    except DocumentNotFound:
        abort(404)
    except TransferError as e:
        flash(str(e), 'error')
        return redirect(url_for('documents.documents'))
    return redirect(url)
