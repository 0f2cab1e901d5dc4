"""HTTP API of the share server."""
