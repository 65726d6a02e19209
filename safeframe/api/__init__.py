"""Safeframe HTTP API layer.

This package provides the Falcon ASGI application that receives push
deliveries and serves health probes.

Usage
-----
Create and run the application::

    from safeframe.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # with event push endpoints

"""

from safeframe.api.app import create_app

__all__ = ["create_app"]
