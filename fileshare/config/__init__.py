"""Environment-driven configuration for storage, Redis, Celery and logging."""
