"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  ``core`` holds configuration, logging, the database and
the error taxonomy; ``services`` holds the document store and the
business logic; ``schemas`` the request and response models; and
``api`` the versioned routers.

Import :func:`create_app` from ``pages_api.app.main`` to build an
application with custom settings.
"""
