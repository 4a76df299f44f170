"""Middleware package for request/response processing."""

from .logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
