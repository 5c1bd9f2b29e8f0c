"""
Top‑level package for the Pages API.

This file makes ``pages_api`` a Python package so that modules within
``app`` can be imported using fully qualified names like
``pages_api.app.main``.  Tests and ``run.py`` rely on this when they
are executed from the repository root.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
