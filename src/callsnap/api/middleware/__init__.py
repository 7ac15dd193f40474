"""API middleware package."""

from src.callsnap.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
