"""
API v1 - SealDrop REST API

Versioned endpoints for encrypted file sharing with OpenAPI/Swagger
documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

# Get API version from environment
API_VERSION = os.getenv("API_VERSION", "v1")

# Create blueprint for API v1
api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

# Initialize Flask-RESTX API with Swagger documentation
api = Api(
    api_v1_bp,
    version="1.0",
    title="SealDrop API",
    description="Share client-side encrypted files with expiry, download limits and optional passwords",
    doc="/docs",  # Swagger UI will be available at /api/v1/docs
    contact="SealDrop Team",
    license="MIT",
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import files_ns, system_ns

# Register namespaces
api.add_namespace(files_ns, path="/files")
api.add_namespace(system_ns, path="/system")
