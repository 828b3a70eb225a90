"""API route modules."""

from dramacast.api.routes import health, releases, transfer_logs

__all__ = ["health", "releases", "transfer_logs"]
