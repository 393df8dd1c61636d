"""
Middleware package for the rental marketplace API.
"""

from .request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
