"""
API package containing versioned routes.

Versions live in subpackages such as ``v1``, each exposing a
top‑level ``router``.  ``deps`` holds the dependencies shared by all
versions (application context, services, list parameters).
"""
