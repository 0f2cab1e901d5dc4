"""
API Namespaces - Organized endpoint groups
"""

from datetime import datetime

from flask import current_app, request
from flask_restx import Namespace, Resource
from werkzeug.exceptions import RequestEntityTooLarge

from sealdrop.api.health import get_health_status
from sealdrop.api.request_context import current_actor, public_base_url
from sealdrop.api.v1.models import (
    access_log_response,
    download_request,
    download_response,
    error_response,
    file_info_response,
    file_list_response,
    health_response,
    owner_stats_response,
    sweep_response,
    upload_parser,
    upload_response,
)
from sealdrop.application.share_service import ShareService
from sealdrop.domain.errors import (
    DomainError,
    ErrorCategory,
    create_error_response,
    domain_error_response,
)
from sealdrop.domain.file_sharing.validation import UploadRequest
from sealdrop.domain.file_sharing.value_objects import ShareId


def _share_service():
    container = getattr(current_app, "container", None)
    if container is None:
        return None
    return container.resolve(ShareService)


def _service_unavailable():
    return create_error_response(
        ErrorCategory.STORAGE_UNAVAILABLE,
        "Share service not initialized",
        status_code=503,
    )


def _not_found(file_id: str):
    return create_error_response(
        ErrorCategory.FILE_NOT_FOUND, f"File {file_id[:8]} not found", status_code=404
    )


def _unexpected(context: str, e: Exception):
    current_app.logger.exception(f"Unexpected error in {context}: {e}")
    return create_error_response(
        ErrorCategory.SYSTEM_ERROR, f"Unexpected error: {e}", status_code=500
    )


# =============================================================================
# Files Namespace - Upload, view, download and owner management
# =============================================================================

files_ns = Namespace("files", description="Encrypted file sharing operations")


@files_ns.route("/upload")
class FileUpload(Resource):
    """Upload an encrypted file"""

    @files_ns.doc("upload_file")
    @files_ns.expect(upload_parser)
    @files_ns.response(201, "Created", upload_response)
    @files_ns.response(400, "Invalid Upload", error_response)
    @files_ns.response(413, "Payload Too Large", error_response)
    @files_ns.response(503, "Storage Unavailable", error_response)
    def post(self):
        """
        Upload ciphertext with its sharing parameters

        The file part must already be encrypted on the client. The exported
        key and nonce are stored verbatim and returned only on download.
        """
        service = _share_service()
        if service is None:
            return _service_unavailable()

        try:
            upload = request.files.get("file")
            form = request.form
        except RequestEntityTooLarge:
            return create_error_response(
                ErrorCategory.VALIDATION_FAILED,
                "Request body exceeds the upload limit",
                context={"field": "ciphertext"},
                status_code=413,
            )

        if upload is None:
            return create_error_response(
                ErrorCategory.VALIDATION_FAILED,
                "Missing 'file' part",
                context={"field": "ciphertext"},
                status_code=400,
            )

        upload_request = UploadRequest(
            original_name=form.get("originalName"),
            size_bytes=form.get("fileSize"),
            mime_type=form.get("mimeType"),
            exported_key=form.get("exportedKey"),
            nonce=form.get("nonce"),
            max_downloads=form.get("maxDownloads", 1),
            expiry_hours=form.get("expiryHours", 24),
            password=form.get("password") or None,
        )

        try:
            result = service.upload(
                upload_request,
                upload.read(),
                actor=current_actor(),
                base_url=public_base_url(),
            )
            current_app.logger.info(f"[FILES_V1] Stored upload {result.file_id[:8]}")
            return result.to_dict(), 201

        except DomainError as e:
            current_app.logger.warning(f"[FILES_V1] Upload rejected: {e.category.value}")
            return domain_error_response(e)
        except Exception as e:
            return _unexpected("/files/upload", e)


@files_ns.route("/<string:file_id>/info")
@files_ns.param("file_id", "The share id")
class FileInfo(Resource):
    """Public metadata of a shared file"""

    @files_ns.doc("get_file_info")
    @files_ns.response(200, "Success", file_info_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "File Expired", error_response)
    def get(self, file_id):
        """
        Get file metadata

        Records a view in the access log. Does not consume a download.
        """
        service = _share_service()
        if service is None:
            return _service_unavailable()
        if not ShareId.is_well_formed(file_id):
            return _not_found(file_id)

        try:
            now = datetime.utcnow()
            record = service.get_info(file_id, actor=current_actor(), now=now)
            return {"success": True, "file": record.to_public_dict(now)}, 200

        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return _unexpected("/files/<id>/info", e)


@files_ns.route("/<string:file_id>/download")
@files_ns.param("file_id", "The share id")
class FileDownload(Resource):
    """Consume one download of a shared file"""

    @files_ns.doc("download_file")
    @files_ns.expect(download_request, validate=False)
    @files_ns.response(200, "Success", download_response)
    @files_ns.response(401, "Password Required", error_response)
    @files_ns.response(403, "Incorrect Password", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(409, "Download Limit Reached", error_response)
    @files_ns.response(410, "File Expired", error_response)
    @files_ns.response(503, "Storage Unavailable", error_response)
    def post(self, file_id):
        """
        Download the ciphertext with its key and nonce

        Checks existence, expiry, the download limit and the password in that
        order, then atomically consumes one download.
        """
        service = _share_service()
        if service is None:
            return _service_unavailable()
        if not ShareId.is_well_formed(file_id):
            return _not_found(file_id)

        data = request.get_json(silent=True) or {}
        password = data.get("password") if isinstance(data, dict) else None
        if password is not None and not isinstance(password, str):
            return create_error_response(
                ErrorCategory.INVALID_REQUEST,
                "'password' must be a string",
                status_code=400,
            )

        try:
            result = service.download(file_id, password or None, actor=current_actor())
            current_app.logger.info(
                f"[FILES_V1] Served download {result.record.download_count}/"
                f"{result.record.max_downloads} of {file_id[:8]}"
            )
            return result.to_dict(), 200

        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return _unexpected("/files/<id>/download", e)


@files_ns.route("/<string:file_id>")
@files_ns.param("file_id", "The share id")
class File(Resource):
    """Owner management of a shared file"""

    @files_ns.doc("delete_file")
    @files_ns.response(200, "Deleted")
    @files_ns.response(401, "Sign-in Required", error_response)
    @files_ns.response(403, "Not Allowed", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    def delete(self, file_id):
        """
        Delete a file

        Removes the ciphertext, the record and its access log together.
        Only the uploader may delete.
        """
        service = _share_service()
        if service is None:
            return _service_unavailable()
        if not ShareId.is_well_formed(file_id):
            return _not_found(file_id)

        try:
            service.delete(file_id, current_actor().owner_id)
            return {"success": True}, 200

        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return _unexpected("DELETE /files/<id>", e)


@files_ns.route("/<string:file_id>/logs")
@files_ns.param("file_id", "The share id")
class FileAccessLogs(Resource):
    """Audit trail of a shared file"""

    @files_ns.doc("get_file_logs")
    @files_ns.response(200, "Success", access_log_response)
    @files_ns.response(401, "Sign-in Required", error_response)
    @files_ns.response(403, "Not Allowed", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    def get(self, file_id):
        """List uploads, views and downloads of a file, oldest first (owner only)"""
        service = _share_service()
        if service is None:
            return _service_unavailable()
        if not ShareId.is_well_formed(file_id):
            return _not_found(file_id)

        try:
            entries = service.get_access_logs(file_id, current_actor().owner_id)
            return {"success": True, "logs": [e.to_public_dict() for e in entries]}, 200

        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return _unexpected("/files/<id>/logs", e)


@files_ns.route("")
class FileList(Resource):
    """Files of the calling owner"""

    @files_ns.doc("list_files")
    @files_ns.response(200, "Success", file_list_response)
    @files_ns.response(401, "Sign-in Required", error_response)
    def get(self):
        """List the caller's uploads, newest first"""
        service = _share_service()
        if service is None:
            return _service_unavailable()

        try:
            now = datetime.utcnow()
            records = service.list_owner_files(current_actor().owner_id)
            return {"success": True, "files": [r.to_public_dict(now) for r in records]}, 200

        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return _unexpected("/files", e)


@files_ns.route("/stats")
class FileStats(Resource):
    """Aggregates over the caller's uploads"""

    @files_ns.doc("get_file_stats")
    @files_ns.response(200, "Success", owner_stats_response)
    @files_ns.response(401, "Sign-in Required", error_response)
    def get(self):
        """Count files, downloads, bytes and still-active shares"""
        service = _share_service()
        if service is None:
            return _service_unavailable()

        try:
            stats = service.get_owner_stats(current_actor().owner_id)
            return {"success": True, "stats": stats.to_dict()}, 200

        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return _unexpected("/files/stats", e)


# =============================================================================
# System Namespace - Health and maintenance
# =============================================================================

system_ns = Namespace("system", description="Health and maintenance operations")


@system_ns.route("/health")
class Health(Resource):
    """Service health"""

    @system_ns.doc("get_health")
    @system_ns.response(200, "Healthy", health_response)
    @system_ns.response(503, "Degraded", health_response)
    def get(self):
        """Report record backend and background task availability"""
        return get_health_status(current_app._get_current_object())


@system_ns.route("/sweep")
class Sweep(Resource):
    """On-demand expiration sweep"""

    @system_ns.doc("run_sweep")
    @system_ns.response(200, "Sweep completed", sweep_response)
    @system_ns.response(409, "Sweep already running", error_response)
    @system_ns.response(503, "Sweep lock unreachable", error_response)
    def post(self):
        """
        Reclaim the ciphertext of expired files now

        Returns immediately with 409 if a sweep is already in progress.
        """
        service = _share_service()
        if service is None:
            return _service_unavailable()

        try:
            report = service.run_sweep()
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return _unexpected("/system/sweep", e)

        if report.skipped:
            return create_error_response(
                ErrorCategory.SWEEP_IN_PROGRESS,
                "Sweep already running",
                context={"report": report.to_dict()},
                status_code=409,
            )
        return {"success": True, "report": report.to_dict()}, 200
