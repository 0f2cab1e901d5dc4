"""Celery tasks. Modules are imported by name from celery_app.conf.imports."""
