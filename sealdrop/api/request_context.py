"""
Request Context Helpers

Derive caller identity and public URLs from the current Flask request.
"""

from flask import current_app, request

from sealdrop.domain.file_sharing.value_objects import Actor


def current_actor() -> Actor:
    """
    Build the Actor of the current request.

    The owner id comes from the header set by the identity proxy in front of
    the server (OWNER_HEADER); an absent header means an anonymous caller.
    """
    owner_header = current_app.share_config.owner_header
    owner_id = (request.headers.get(owner_header) or "").strip() or None

    forwarded = request.headers.get("X-Forwarded-For", "")
    address = forwarded.split(",")[0].strip() if forwarded else (request.remote_addr or "")

    return Actor(
        address=address,
        agent=request.headers.get("User-Agent", ""),
        owner_id=owner_id,
    )


def public_base_url() -> str:
    """Configured PUBLIC_BASE_URL, else the scheme and host of the request."""
    configured = current_app.share_config.public_base_url
    if configured:
        return configured.rstrip("/")
    return request.host_url.rstrip("/")
