"""
Pydantic schema definitions for API payloads.

Each entity (pages, tracks, playlists) defines its own Pydantic
models for request and response bodies.  Schemas are separated from
the stored documents to decouple the API representation (camelCase)
from persistence (snake_case columns).
"""
