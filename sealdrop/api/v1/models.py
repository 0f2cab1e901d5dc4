"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields
from werkzeug.datastructures import FileStorage

from sealdrop.api.v1 import api

# =============================================================================
# Request Models
# =============================================================================

upload_parser = api.parser()
upload_parser.add_argument(
    "file", location="files", type=FileStorage, required=True,
    help="Ciphertext produced by AES-256-GCM on the client",
)
upload_parser.add_argument("originalName", location="form", required=True)
upload_parser.add_argument("fileSize", location="form", type=int, required=True,
                           help="Size of the plaintext in bytes")
upload_parser.add_argument("mimeType", location="form", required=True)
upload_parser.add_argument("exportedKey", location="form", required=True,
                           help="JSON Web Key of the file key")
upload_parser.add_argument("nonce", location="form", required=True,
                           help="Base64 encoded 12-byte nonce")
upload_parser.add_argument("maxDownloads", location="form", type=int, default=1)
upload_parser.add_argument("expiryHours", location="form", type=int, default=24)
upload_parser.add_argument("password", location="form", required=False)

download_request = api.model(
    "DownloadRequest",
    {
        "password": fields.String(
            required=False, description="Password for protected files"
        ),
    },
)

# =============================================================================
# Response Models
# =============================================================================

upload_response = api.model(
    "UploadResponse",
    {
        "success": fields.Boolean(),
        "fileId": fields.String(description="Share id of the file"),
        "expiresAt": fields.String(description="Deadline (ISO timestamp, UTC)"),
        "shareUrl": fields.String(description="Link for the recipient"),
        "downloadUrl": fields.String(description="Direct download link"),
    },
)

file_info = api.model(
    "FileInfo",
    {
        "id": fields.String(),
        "originalName": fields.String(),
        "fileSize": fields.Integer(description="Plaintext size in bytes"),
        "mimeType": fields.String(),
        "uploadDate": fields.String(description="ISO timestamp, UTC"),
        "expiryDate": fields.String(description="ISO timestamp, UTC"),
        "downloadCount": fields.Integer(),
        "maxDownloads": fields.Integer(),
        "isExpired": fields.Boolean(),
        "requiresPassword": fields.Boolean(),
    },
)

file_info_response = api.model(
    "FileInfoResponse",
    {
        "success": fields.Boolean(),
        "file": fields.Nested(file_info),
    },
)

file_list_response = api.model(
    "FileListResponse",
    {
        "success": fields.Boolean(),
        "files": fields.List(fields.Nested(file_info)),
    },
)

download_file = api.model(
    "DownloadFile",
    {
        "id": fields.String(),
        "originalName": fields.String(),
        "fileSize": fields.Integer(),
        "mimeType": fields.String(),
        "exportedKey": fields.String(description="JSON Web Key of the file key"),
        "nonce": fields.String(description="Base64 encoded nonce"),
        "downloadCount": fields.Integer(description="Counter after this download"),
        "maxDownloads": fields.Integer(),
    },
)

download_response = api.model(
    "DownloadResponse",
    {
        "success": fields.Boolean(),
        "file": fields.Nested(download_file),
        "encryptedData": fields.String(description="Base64 encoded ciphertext"),
    },
)

owner_stats = api.model(
    "OwnerStats",
    {
        "totalFiles": fields.Integer(),
        "totalDownloads": fields.Integer(),
        "totalSize": fields.Integer(),
        "activeFiles": fields.Integer(),
    },
)

owner_stats_response = api.model(
    "OwnerStatsResponse",
    {
        "success": fields.Boolean(),
        "stats": fields.Nested(owner_stats),
    },
)

access_log_entry = api.model(
    "AccessLogEntry",
    {
        "id": fields.String(),
        "accessType": fields.String(enum=["upload", "view", "download"]),
        "ipAddress": fields.String(),
        "userAgent": fields.String(),
        "accessedAt": fields.String(description="ISO timestamp, UTC"),
    },
)

access_log_response = api.model(
    "AccessLogResponse",
    {
        "success": fields.Boolean(),
        "logs": fields.List(fields.Nested(access_log_entry)),
    },
)

sweep_report = api.model(
    "SweepReport",
    {
        "started_at": fields.String(),
        "finished_at": fields.String(allow_null=True),
        "skipped": fields.Boolean(),
        "examined": fields.Integer(),
        "reclaimed": fields.Integer(),
        "reclaimed_ids": fields.List(fields.String()),
        "failures": fields.Raw(description="File id to failure message"),
    },
)

sweep_response = api.model(
    "SweepResponse",
    {
        "success": fields.Boolean(),
        "report": fields.Nested(sweep_report),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short user-facing title"),
        "message": fields.String(description="User-facing explanation"),
        "action": fields.String(description="Suggested next step"),
        "field": fields.String(description="First failing upload field", allow_null=True),
    },
)

health_response = api.model(
    "HealthResponse",
    {
        "status": fields.String(
            description="Overall health status", enum=["ok", "degraded"]
        ),
        "message": fields.String(description="Health message"),
        "backend": fields.String(description="Record backend in use"),
        "redis": fields.String(description="Redis connection status"),
        "celery": fields.String(description="Celery availability status"),
    },
)
