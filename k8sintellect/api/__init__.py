"""REST API layer for k8sintellect.

Exposes:
    create_app -- FastAPI application factory.
    build_app  -- Alias for create_app (used by k8sintellect.app bootstrap).
"""

from k8sintellect.api.app import create_app

build_app = create_app

__all__ = ["build_app", "create_app"]
