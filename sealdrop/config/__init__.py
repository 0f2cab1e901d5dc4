"""Environment-driven configuration for the server, Redis and Celery."""
