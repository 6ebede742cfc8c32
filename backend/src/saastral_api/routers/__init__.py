"""API routers package."""

from saastral_api.routers import employees, integrations

__all__ = ["employees", "integrations"]
